"""Application service: Show Sale use case (query)."""

from __future__ import annotations

from stockledger.application.dto import SaleDTO
from stockledger.application.mapping import sale_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.unit_of_work import UnitOfWork


class ShowSaleHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, sale_id_or_invoice: str) -> SaleDTO:
        """Look a sale up by ID or by invoice number."""
        with self._uow:
            sale = self._uow.sales.get_by_id(sale_id_or_invoice)
            if sale is None:
                sale = self._uow.sales.get_by_invoice_number(sale_id_or_invoice)
        if sale is None:
            raise EntityNotFoundError("Sale", sale_id_or_invoice)
        return sale_to_dto(sale)


class ListSalesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, limit: int | None = None) -> list[SaleDTO]:
        """Return sales newest first, optionally only the latest *limit*."""
        with self._uow:
            sales = self._uow.sales.list_all()
        sales.sort(key=lambda s: s.sale_date, reverse=True)
        if limit is not None:
            sales = sales[:limit]
        return [sale_to_dto(s) for s in sales]
