"""Concurrency tests: many units of work against one store, one thread each."""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from stockledger.application.adjust_stock import AdjustStockHandler
from stockledger.application.create_purchase import CreatePurchaseHandler
from stockledger.application.create_sale import CreateSaleHandler
from stockledger.application.dto import PurchaseItemSpec, ReceiptItemSpec, SaleItemSpec
from stockledger.application.receive_purchase import ReceivePurchaseHandler
from stockledger.application.reconcile_stock import ReconcileStockHandler
from stockledger.domain.exceptions import ConcurrencyConflictError, InsufficientStockError
from tests.fakes import (
    FlakyStore,
    ledger_for,
    make_store,
    seed_product,
    seed_supplier,
    stock_of,
    uow,
)

WORKERS = 8


def _sell_one(store, product_id):
    handler = CreateSaleHandler(uow(store))
    return handler.handle([SaleItemSpec(product_id, Decimal("1"))], today=date(2026, 10, 17))


def _run_concurrently(fn, count):
    """Run fn(i) count times across threads; return (results, errors)."""
    results, errors = [], []
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(fn, i) for i in range(count)]
        for future in futures:
            try:
                results.append(future.result())
            except Exception as exc:
                errors.append(exc)
    return results, errors


class TestConcurrentSales:

    def test_n_sales_of_one_unit_drain_stock_exactly(self):
        store = make_store()
        pid = seed_product(store, stock=20)

        results, errors = _run_concurrently(lambda _: _sell_one(store, pid), 20)

        assert errors == []
        assert stock_of(store, pid) == 0
        assert len(ledger_for(store, pid)) == 21

    def test_one_sale_too_many_fails_exactly_once(self):
        store = make_store()
        pid = seed_product(store, stock=10)

        results, errors = _run_concurrently(lambda _: _sell_one(store, pid), 11)

        assert len(results) == 10
        assert len(errors) == 1
        assert isinstance(errors[0], InsufficientStockError)
        assert stock_of(store, pid) == 0

    def test_invoice_numbers_are_unique(self):
        store = make_store()
        pid = seed_product(store, stock=50)

        results, errors = _run_concurrently(lambda _: _sell_one(store, pid), 30)

        assert errors == []
        numbers = {dto.invoice_number for dto in results}
        assert len(numbers) == 30
        assert numbers == {f"INV2610{n:04d}" for n in range(1, 31)}

    def test_sales_and_adjustments_interleave_without_drift(self):
        store = make_store()
        pid = seed_product(store, stock=30)

        def work(i):
            if i % 3 == 0:
                return AdjustStockHandler(uow(store)).handle(pid, 2, "return")
            return _sell_one(store, pid)

        _, errors = _run_concurrently(work, 30)

        assert all(isinstance(e, InsufficientStockError) for e in errors)
        assert stock_of(store, pid) >= 0
        assert ReconcileStockHandler(uow(store)).handle() == []


class TestConcurrentReceipts:

    def test_same_receipt_submitted_twice_books_stock_once(self):
        store = make_store()
        supplier = seed_supplier(store)
        pid = seed_product(store, stock=0)
        order = CreatePurchaseHandler(uow(store)).handle(
            supplier, [PurchaseItemSpec(pid, Decimal("10"), "1")],
        )

        def receive(_):
            return ReceivePurchaseHandler(uow(store)).handle(
                order.id, [ReceiptItemSpec(pid, Decimal("6"))],
            )

        _, errors = _run_concurrently(receive, 4)

        assert errors == []
        assert stock_of(store, pid) == 6
        assert len(ledger_for(store, pid)) == 1


class TestReconcileUnderLoad:

    def test_reconcile_never_reports_a_mismatch_while_stock_moves(self):
        store = make_store()
        pid = seed_product(store, stock=400)
        stop = threading.Event()

        def keep_adjusting():
            while not stop.is_set():
                AdjustStockHandler(uow(store)).handle(pid, -1, "damage")

        worker = threading.Thread(target=keep_adjusting)
        worker.start()
        try:
            reports = [ReconcileStockHandler(uow(store)).handle() for _ in range(200)]
        finally:
            stop.set()
            worker.join()

        assert [r for r in reports if r] == []


class TestConflictRetry:

    def test_conflict_is_retried(self):
        store = FlakyStore(failures=0)
        pid = seed_product(store, stock=5)
        store.failures = 2

        AdjustStockHandler(uow(store), max_attempts=3).handle(pid, -1, "damage")

        assert stock_of(store, pid) == 4
        assert len(ledger_for(store, pid)) == 2

    def test_conflict_surfaces_after_max_attempts(self):
        store = FlakyStore(failures=0)
        pid = seed_product(store, stock=5)
        store.failures = 5
        store.apply_calls = 0

        with pytest.raises(ConcurrencyConflictError):
            AdjustStockHandler(uow(store), max_attempts=2).handle(pid, -1, "damage")

        assert store.apply_calls == 2
        assert stock_of(store, pid) == 5

    def test_stale_read_is_detected_at_commit(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        stale = uow(store)

        with stale:
            product = stale.products.get_by_id(pid)
            AdjustStockHandler(uow(store)).handle(pid, -1, "damage")
            product.current_stock = Decimal("99")
            stale.products.save(product)
            with pytest.raises(ConcurrencyConflictError, match="modified concurrently"):
                stale.commit()

        assert stock_of(store, pid) == 4
