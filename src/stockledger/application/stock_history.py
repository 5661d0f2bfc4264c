"""Application service: Stock History use cases (queries over the ledger)."""

from __future__ import annotations

from stockledger.application.dto import LedgerEntryDTO
from stockledger.application.mapping import ledger_entry_to_dto
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.repository.unit_of_work import UnitOfWork

DEFAULT_HISTORY_LIMIT = 20


class StockHistoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def for_product(self, product_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> list[LedgerEntryDTO]:
        """The *limit* most recent movements of a product, newest first."""
        if limit <= 0:
            raise ValidationError("Limit must be positive")
        with self._uow:
            if self._uow.products.get_by_id(product_id) is None:
                raise EntityNotFoundError("Product", product_id)
            entries = self._uow.ledger.recent_for_product(product_id, limit)
        return [ledger_entry_to_dto(e) for e in entries]

    def for_reference(self, reference_id: str) -> list[LedgerEntryDTO]:
        """Every movement caused by one sale or purchase order, oldest first."""
        with self._uow:
            entries = self._uow.ledger.for_reference(reference_id)
        return [ledger_entry_to_dto(e) for e in entries]
