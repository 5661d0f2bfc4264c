"""In-memory stores and builders for testing.

Tests run against the same ``InMemoryStore`` the JSON store builds on, so
the unit-of-work staging, locking and version checks under test are the
real ones.  No file I/O, no side effects.
"""

from __future__ import annotations

from decimal import Decimal

from stockledger.application.add_product import AddProductHandler
from stockledger.application.add_supplier import AddSupplierHandler
from stockledger.domain.exceptions import ConcurrencyConflictError
from stockledger.domain.model.product import Product
from stockledger.domain.model.purchase import PurchaseOrder
from stockledger.domain.model.sale import Sale
from stockledger.domain.repository.sequence_repository import SequenceRepository
from stockledger.infrastructure.persistence.memory import (
    PRODUCTS,
    PURCHASES,
    SALES,
    ChangeSet,
    InMemoryStore,
    InMemoryUnitOfWork,
)


class FakeSequenceRepository(SequenceRepository):

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def next_value(self, name: str) -> int:
        self._counters[name] = self._counters.get(name, 0) + 1
        return self._counters[name]

    def current_value(self, name: str) -> int:
        return self._counters.get(name, 0)


class FlakyStore(InMemoryStore):
    """Fails the first *failures* commits with a version conflict."""

    def __init__(self, failures: int = 1) -> None:
        super().__init__(lock_timeout=1.0)
        self.failures = failures
        self.apply_calls = 0

    def apply(self, changes: ChangeSet) -> None:
        self.apply_calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConcurrencyConflictError("simulated conflict")
        super().apply(changes)


def make_store() -> InMemoryStore:
    return InMemoryStore(lock_timeout=5.0)


def uow(store: InMemoryStore) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store)


def seed_product(
    store: InMemoryStore,
    name: str = "Widget",
    stock: int | str | Decimal = 0,
    cost: str = "60.00",
    price: str = "100.00",
    min_stock: int = 10,
) -> str:
    """Add a product through the real handler and return its ID."""
    dto = AddProductHandler(uow(store)).handle(
        name=name,
        cost_price=cost,
        selling_price=price,
        initial_stock=stock,
        min_stock_level=min_stock,
    )
    return dto.id


def seed_supplier(store: InMemoryStore, name: str = "Acme Wholesale") -> str:
    return AddSupplierHandler(uow(store)).handle(name=name).id


def stored_product(store: InMemoryStore, product_id: str) -> Product:
    return store.read(PRODUCTS, product_id)


def stored_sale(store: InMemoryStore, sale_id: str) -> Sale:
    return store.read(SALES, sale_id)


def stored_purchase(store: InMemoryStore, order_id: str) -> PurchaseOrder:
    return store.read(PURCHASES, order_id)


def stock_of(store: InMemoryStore, product_id: str) -> Decimal:
    return stored_product(store, product_id).current_stock


def ledger_for(store: InMemoryStore, product_id: str) -> list:
    return [e for e in store.ledger_entries() if e.product_id == product_id]
