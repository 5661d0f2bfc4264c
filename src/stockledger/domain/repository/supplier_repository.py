"""Abstract repository for Supplier aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.supplier import Supplier


class SupplierRepository(ABC):

    @abstractmethod
    def get_by_id(self, supplier_id: str) -> Supplier | None:
        """Return a supplier by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Supplier]:
        """Return every supplier."""

    @abstractmethod
    def save(self, supplier: Supplier) -> None:
        """Persist a new or updated supplier."""
