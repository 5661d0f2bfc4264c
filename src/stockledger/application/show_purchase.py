"""Application service: Show Purchase Order use case (query)."""

from __future__ import annotations

from stockledger.application.dto import PurchaseOrderDTO
from stockledger.application.mapping import purchase_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.unit_of_work import UnitOfWork


class ShowPurchaseHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id_or_number: str) -> PurchaseOrderDTO:
        """Look a purchase order up by ID or by PO number."""
        with self._uow:
            order = self._uow.purchases.get_by_id(order_id_or_number)
            if order is None:
                order = self._uow.purchases.get_by_number(order_id_or_number)
        if order is None:
            raise EntityNotFoundError("Purchase order", order_id_or_number)
        return purchase_to_dto(order)


class ListPurchasesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, status: str | None = None) -> list[PurchaseOrderDTO]:
        """Return purchase orders by PO number, optionally filtered by status."""
        with self._uow:
            orders = self._uow.purchases.list_all()
        return [
            purchase_to_dto(o)
            for o in sorted(orders, key=lambda o: o.purchase_order_number)
            if status is None or o.status.value == status
        ]
