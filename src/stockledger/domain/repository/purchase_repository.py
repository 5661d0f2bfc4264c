"""Abstract repository for PurchaseOrder aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.purchase import PurchaseOrder


class PurchaseRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> PurchaseOrder | None:
        """Return a purchase order by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, purchase_order_number: str) -> PurchaseOrder | None:
        """Return a purchase order by its generated number, or None."""

    @abstractmethod
    def list_all(self) -> list[PurchaseOrder]:
        """Return every purchase order."""

    @abstractmethod
    def save(self, order: PurchaseOrder) -> None:
        """Persist a new or updated purchase order."""
