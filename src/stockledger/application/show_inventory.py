"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.application.dto import ProductDTO
from stockledger.application.mapping import product_to_dto
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class InventoryReportDTO:
    products: list[ProductDTO]
    low_stock: list[ProductDTO]
    total_stock_value: str


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, include_inactive: bool = False) -> InventoryReportDTO:
        with self._uow:
            products = self._uow.products.list_all()

        products = sorted(
            (p for p in products if include_inactive or p.is_active),
            key=lambda p: p.name.lower(),
        )
        total = Money.zero()
        for product in products:
            total = total + product.stock_value
        return InventoryReportDTO(
            products=[product_to_dto(p) for p in products],
            low_stock=[product_to_dto(p) for p in products if p.is_low_stock],
            total_stock_value=str(total),
        )
