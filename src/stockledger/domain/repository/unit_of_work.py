"""Abstract unit of work.

A unit of work groups every read and write of one business operation so
that they either all take effect or none do.  Use it as a context
manager::

    with uow:
        uow.lock(product_id)
        product = uow.products.get_by_id(product_id)
        ...
        uow.commit()

Leaving the block without ``commit()``, or because of an exception,
discards every staged change.  Locks taken with ``lock()`` are held until
the block exits.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from stockledger.domain.model.ledger import StockLedgerEntry
from stockledger.domain.model.product import Product
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.repository.product_repository import ProductRepository
from stockledger.domain.repository.purchase_repository import PurchaseRepository
from stockledger.domain.repository.sale_repository import SaleRepository
from stockledger.domain.repository.sequence_repository import SequenceRepository
from stockledger.domain.repository.supplier_repository import SupplierRepository


def product_lock_key(product_id: str) -> str:
    return f"product:{product_id}"


def purchase_lock_key(order_id: str) -> str:
    return f"purchase:{order_id}"


def sale_lock_key(sale_id: str) -> str:
    return f"sale:{sale_id}"


def supplier_lock_key(supplier_id: str) -> str:
    return f"supplier:{supplier_id}"


def product_name_lock_key(name: str) -> str:
    return f"product-name:{name.strip().lower()}"


class UnitOfWork(ABC):

    products: ProductRepository
    suppliers: SupplierRepository
    ledger: LedgerRepository
    sales: SaleRepository
    purchases: PurchaseRepository
    sequences: SequenceRepository

    def __enter__(self) -> UnitOfWork:
        self._begin()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.rollback()
        finally:
            self._end()

    @abstractmethod
    def lock(self, *keys: str) -> None:
        """Serialize this unit of work against others holding the same keys.

        Keys are acquired in sorted order so two units of work locking the
        same set never deadlock.  Call before reading the guarded records.
        """

    @abstractmethod
    def commit(self) -> None:
        """Apply every staged change atomically.

        Raises ConcurrencyConflictError if a record changed underneath us.
        """

    @abstractmethod
    def stock_snapshot(self) -> tuple[list[Product], list[StockLedgerEntry]]:
        """Committed products and ledger entries, read at one point in time.

        Staged changes of this unit of work are not included.
        """

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged changes.  Safe to call after commit (no-op)."""

    @abstractmethod
    def _begin(self) -> None:
        """Start a fresh set of staged changes."""

    @abstractmethod
    def _end(self) -> None:
        """Release locks taken during the unit of work."""
