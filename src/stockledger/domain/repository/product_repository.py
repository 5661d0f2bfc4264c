"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (in-memory, JSON file)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product, active or not."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""
