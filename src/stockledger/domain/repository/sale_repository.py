"""Abstract repository for Sale aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.sale import Sale


class SaleRepository(ABC):

    @abstractmethod
    def get_by_id(self, sale_id: str) -> Sale | None:
        """Return a sale by its ID, or None if not found."""

    @abstractmethod
    def get_by_invoice_number(self, invoice_number: str) -> Sale | None:
        """Return a sale by its generated invoice number, or None."""

    @abstractmethod
    def list_all(self) -> list[Sale]:
        """Return every sale."""

    @abstractmethod
    def save(self, sale: Sale) -> None:
        """Persist a new or updated sale."""
