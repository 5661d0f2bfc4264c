"""Abstract repository for stock ledger entries.

The ledger is append-only: there is deliberately no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.ledger import StockLedgerEntry


class LedgerRepository(ABC):

    @abstractmethod
    def append(self, entry: StockLedgerEntry) -> None:
        """Add an entry to the end of the ledger."""

    @abstractmethod
    def for_product(self, product_id: str) -> list[StockLedgerEntry]:
        """Return every entry for a product, oldest first."""

    @abstractmethod
    def recent_for_product(self, product_id: str, limit: int) -> list[StockLedgerEntry]:
        """Return the *limit* most recent entries for a product, newest first."""

    @abstractmethod
    def for_reference(self, reference_id: str) -> list[StockLedgerEntry]:
        """Return every entry caused by the given sale or purchase order."""

    @abstractmethod
    def list_all(self) -> list[StockLedgerEntry]:
        """Return the whole ledger, oldest first."""
