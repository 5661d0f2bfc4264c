"""Application service: Find Product use case (query).

Resolves either a product ID or an exact (case-insensitive) name, which
lets the CLI accept whichever the operator has at hand.
"""

from __future__ import annotations

from stockledger.application.dto import ProductDTO
from stockledger.application.mapping import product_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.unit_of_work import UnitOfWork


class FindProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, id_or_name: str) -> ProductDTO:
        with self._uow:
            product = self._uow.products.get_by_id(id_or_name)
            if product is None:
                product = self._uow.products.get_by_name(id_or_name)
        if product is None:
            raise EntityNotFoundError("Product", id_or_name)
        return product_to_dto(product)
