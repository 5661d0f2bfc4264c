"""In-memory storage with real transactional semantics.

``InMemoryStore`` is the shared state; ``InMemoryUnitOfWork`` is a private
view of it for one business operation.  Every aggregate read through a
unit of work is a deep copy, every write is staged, and ``commit()``
applies the whole change set under the store lock after checking that no
versioned record (products, purchase orders) moved on since it was read.

Thread-safe: many units of work may run against one store at once, each
in its own thread.  A single unit of work is not shared between threads.
"""

from __future__ import annotations

import contextlib
import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, ContextManager

from stockledger.domain.exceptions import ConcurrencyConflictError
from stockledger.domain.model.ledger import StockLedgerEntry
from stockledger.domain.model.product import Product
from stockledger.domain.model.purchase import PurchaseOrder
from stockledger.domain.model.sale import Sale
from stockledger.domain.model.supplier import Supplier
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.repository.product_repository import ProductRepository
from stockledger.domain.repository.purchase_repository import PurchaseRepository
from stockledger.domain.repository.sale_repository import SaleRepository
from stockledger.domain.repository.sequence_repository import SequenceRepository
from stockledger.domain.repository.supplier_repository import SupplierRepository
from stockledger.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0

PRODUCTS = "products"
SUPPLIERS = "suppliers"
SALES = "sales"
PURCHASES = "purchases"
TABLES = (PRODUCTS, SUPPLIERS, SALES, PURCHASES)
VERSIONED_TABLES = (PRODUCTS, PURCHASES)

# Values that must be unique across a table, checked again at commit
_UNIQUE_KEYS = {
    PRODUCTS: lambda product: product.name.lower(),
    SALES: lambda sale: sale.invoice_number,
    PURCHASES: lambda order: order.purchase_order_number,
}


class KeyedLocks:
    """One mutex per key, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def acquire(self, key: str, timeout: float) -> bool:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        return lock.acquire(timeout=timeout)

    def release(self, key: str) -> None:
        with self._guard:
            lock = self._locks[key]
        lock.release()


@dataclass
class ChangeSet:
    """Everything a unit of work wants to write."""

    records: dict[str, dict[str, Any]] = field(
        default_factory=lambda: {table: {} for table in TABLES}
    )
    ledger: list[StockLedgerEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.ledger and not any(self.records.values())


class InMemoryStore:
    """Shared state for every unit of work opened on it."""

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.lock_timeout = lock_timeout
        self.locks = KeyedLocks()
        self._lock = threading.RLock()
        self._tables: dict[str, dict[str, Any]] = {table: {} for table in TABLES}
        self._ledger: list[StockLedgerEntry] = []
        self._counters: dict[str, int] = {}

    # --- Reads (always copies) ------------------------------------------------

    def read(self, table: str, key: str) -> Any | None:
        with self._lock:
            self._refresh()
            record = self._tables[table].get(key)
            return copy.deepcopy(record)

    def read_all(self, table: str) -> list[Any]:
        with self._lock:
            self._refresh()
            return copy.deepcopy(list(self._tables[table].values()))

    def ledger_entries(self) -> list[StockLedgerEntry]:
        # Entries are frozen, a shallow copy of the list is enough.
        with self._lock:
            self._refresh()
            return list(self._ledger)

    def stock_snapshot(self) -> tuple[list[Product], list[StockLedgerEntry]]:
        """Products and ledger entries as of one committed state."""
        with self._lock:
            self._refresh()
            return copy.deepcopy(list(self._tables[PRODUCTS].values())), list(self._ledger)

    # --- Writes ---------------------------------------------------------------

    def apply(self, changes: ChangeSet) -> None:
        """Apply a change set atomically, or raise without touching anything."""
        if changes.is_empty:
            return
        with self._lock, self._exclusive():
            self._refresh()
            self._check_versions(changes)
            self._check_unique_keys(changes)
            for table, records in changes.records.items():
                for key, record in records.items():
                    stored = copy.deepcopy(record)
                    if table in VERSIONED_TABLES:
                        stored.version = record.version + 1
                    self._tables[table][key] = stored
            self._ledger.extend(changes.ledger)
            self._persist()

    def next_value(self, name: str) -> int:
        with self._lock, self._exclusive():
            self._refresh()
            value = self._counters.get(name, 0) + 1
            self._counters[name] = value
            self._persist()
            return value

    def current_value(self, name: str) -> int:
        with self._lock:
            self._refresh()
            return self._counters.get(name, 0)

    # --- Hooks for durable subclasses -----------------------------------------

    def _exclusive(self) -> ContextManager[object]:
        """Exclude other stores sharing the same durable state.

        Held around every read-check-write cycle.  A purely in-memory store
        is never shared, so the store lock alone is enough.
        """
        return contextlib.nullcontext()

    def _refresh(self) -> None:
        """Reload state from durable storage.  Called with the lock held."""

    def _persist(self) -> None:
        """Write state to durable storage.  Called with the lock held."""

    # --- Internal helpers -----------------------------------------------------

    def _check_unique_keys(self, changes: ChangeSet) -> None:
        for table, unique_key in _UNIQUE_KEYS.items():
            if not changes.records[table]:
                continue
            taken = {unique_key(record): key for key, record in self._tables[table].items()}
            for key, record in changes.records[table].items():
                value = unique_key(record)
                owner = taken.get(value)
                if owner is not None and owner != key:
                    raise ConcurrencyConflictError(
                        f"{table[:-1].capitalize()} '{value}' is already used by '{owner}'"
                    )

    def _check_versions(self, changes: ChangeSet) -> None:
        for table in VERSIONED_TABLES:
            for key, record in changes.records[table].items():
                stored = self._tables[table].get(key)
                stored_version = stored.version if stored is not None else 0
                if stored_version != record.version:
                    logger.warning(
                        "version_conflict",
                        extra={"table": table, "key": key,
                               "expected": record.version, "found": stored_version},
                    )
                    raise ConcurrencyConflictError(
                        f"{table[:-1].capitalize()} '{key}' was modified concurrently "
                        f"(expected version {record.version}, found {stored_version})"
                    )


# ---------------------------------------------------------------------------
# Repositories bound to one unit of work
# ---------------------------------------------------------------------------


class _StagedTable:
    """Identity map plus pending writes for one table."""

    def __init__(self, store: InMemoryStore, changes: ChangeSet, table: str) -> None:
        self._store = store
        self._table = table
        self._pending = changes.records[table]
        self._seen: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        if key in self._pending:
            return self._pending[key]
        if key not in self._seen:
            record = self._store.read(self._table, key)
            if record is None:
                return None
            self._seen[key] = record
        return self._seen[key]

    def all(self) -> list[Any]:
        merged = {record.id: record for record in self._store.read_all(self._table)}
        merged.update(self._seen)
        merged.update(self._pending)
        return list(merged.values())

    def put(self, key: str, record: Any) -> None:
        self._seen[key] = record
        self._pending[key] = record


class _ProductRepository(ProductRepository):

    def __init__(self, staged: _StagedTable) -> None:
        self._staged = staged

    def get_by_id(self, product_id: str) -> Product | None:
        return self._staged.get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self._staged.all():
            if product.name.lower() == name.strip().lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return self._staged.all()

    def save(self, product: Product) -> None:
        self._staged.put(product.id, product)


class _SupplierRepository(SupplierRepository):

    def __init__(self, staged: _StagedTable) -> None:
        self._staged = staged

    def get_by_id(self, supplier_id: str) -> Supplier | None:
        return self._staged.get(supplier_id)

    def list_all(self) -> list[Supplier]:
        return self._staged.all()

    def save(self, supplier: Supplier) -> None:
        self._staged.put(supplier.id, supplier)


class _SaleRepository(SaleRepository):

    def __init__(self, staged: _StagedTable) -> None:
        self._staged = staged

    def get_by_id(self, sale_id: str) -> Sale | None:
        return self._staged.get(sale_id)

    def get_by_invoice_number(self, invoice_number: str) -> Sale | None:
        for sale in self._staged.all():
            if sale.invoice_number == invoice_number:
                return sale
        return None

    def list_all(self) -> list[Sale]:
        return self._staged.all()

    def save(self, sale: Sale) -> None:
        self._staged.put(sale.id, sale)


class _PurchaseRepository(PurchaseRepository):

    def __init__(self, staged: _StagedTable) -> None:
        self._staged = staged

    def get_by_id(self, order_id: str) -> PurchaseOrder | None:
        return self._staged.get(order_id)

    def get_by_number(self, purchase_order_number: str) -> PurchaseOrder | None:
        for order in self._staged.all():
            if order.purchase_order_number == purchase_order_number:
                return order
        return None

    def list_all(self) -> list[PurchaseOrder]:
        return self._staged.all()

    def save(self, order: PurchaseOrder) -> None:
        self._staged.put(order.id, order)


class _LedgerRepository(LedgerRepository):

    def __init__(self, store: InMemoryStore, changes: ChangeSet) -> None:
        self._store = store
        self._pending = changes.ledger

    def append(self, entry: StockLedgerEntry) -> None:
        self._pending.append(entry)

    def for_product(self, product_id: str) -> list[StockLedgerEntry]:
        return [e for e in self.list_all() if e.product_id == product_id]

    def recent_for_product(self, product_id: str, limit: int) -> list[StockLedgerEntry]:
        entries = self.for_product(product_id)
        entries.reverse()
        return entries[:limit]

    def for_reference(self, reference_id: str) -> list[StockLedgerEntry]:
        return [e for e in self.list_all() if e.reference_id == reference_id]

    def list_all(self) -> list[StockLedgerEntry]:
        return self._store.ledger_entries() + list(self._pending)


class _SequenceRepository(SequenceRepository):
    """Counters bypass staging: a number handed out stays used."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def next_value(self, name: str) -> int:
        return self._store.next_value(name)

    def current_value(self, name: str) -> int:
        return self._store.current_value(name)


class InMemoryUnitOfWork(UnitOfWork):

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._held: list[str] = []
        self.sequences = _SequenceRepository(store)
        self._begin()

    def lock(self, *keys: str) -> None:
        for key in sorted(set(keys) - set(self._held)):
            if not self._store.locks.acquire(key, self._store.lock_timeout):
                raise ConcurrencyConflictError(
                    f"Timed out waiting for lock on '{key}'"
                )
            self._held.append(key)

    def commit(self) -> None:
        self._store.apply(self._changes)
        self._reset()

    def stock_snapshot(self) -> tuple[list[Product], list[StockLedgerEntry]]:
        return self._store.stock_snapshot()

    def rollback(self) -> None:
        self._reset()

    def _begin(self) -> None:
        self._reset()

    def _end(self) -> None:
        while self._held:
            self._store.locks.release(self._held.pop())

    def _reset(self) -> None:
        self._changes = ChangeSet()
        self.products = _ProductRepository(self._staged(PRODUCTS))
        self.suppliers = _SupplierRepository(self._staged(SUPPLIERS))
        self.sales = _SaleRepository(self._staged(SALES))
        self.purchases = _PurchaseRepository(self._staged(PURCHASES))
        self.ledger = _LedgerRepository(self._store, self._changes)

    def _staged(self, table: str) -> _StagedTable:
        return _StagedTable(self._store, self._changes, table)
