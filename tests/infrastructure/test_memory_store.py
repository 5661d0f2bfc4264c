"""Tests for the in-memory store and its unit of work."""

import dataclasses
from decimal import Decimal

import pytest

from stockledger.application.create_sale import CreateSaleHandler
from stockledger.application.dto import SaleItemSpec
from stockledger.domain.exceptions import ConcurrencyConflictError
from stockledger.domain.repository.unit_of_work import product_lock_key
from stockledger.infrastructure.persistence.memory import InMemoryStore, InMemoryUnitOfWork
from tests.fakes import make_store, seed_product, stock_of, uow


class TestUnitOfWork:

    def test_changes_without_commit_are_discarded(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        work = uow(store)

        with work:
            product = work.products.get_by_id(pid)
            product.current_stock = Decimal("1")
            work.products.save(product)

        assert stock_of(store, pid) == 5

    def test_exception_rolls_back(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        work = uow(store)

        with pytest.raises(RuntimeError):
            with work:
                product = work.products.get_by_id(pid)
                product.current_stock = Decimal("1")
                work.products.save(product)
                raise RuntimeError("boom")

        assert stock_of(store, pid) == 5

    def test_reads_are_copies(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        work = uow(store)

        with work:
            work.products.get_by_id(pid).current_stock = Decimal("0")
            work.commit()

        assert stock_of(store, pid) == 5

    def test_identity_map_within_one_unit_of_work(self):
        store = make_store()
        pid = seed_product(store)
        work = uow(store)

        with work:
            assert work.products.get_by_id(pid) is work.products.get_by_id(pid)

    def test_staged_records_visible_to_list_all(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        work = uow(store)

        with work:
            product = work.products.get_by_id(pid)
            product.current_stock = Decimal("7")
            work.products.save(product)
            (listed,) = work.products.list_all()
            assert listed.current_stock == 7

    def test_commit_bumps_version(self):
        store = make_store()
        pid = seed_product(store)
        before = store.read("products", pid).version
        work = uow(store)

        with work:
            work.products.save(work.products.get_by_id(pid))
            work.commit()

        assert store.read("products", pid).version == before + 1

    def test_sequence_values_survive_rollback(self):
        store = make_store()
        work = uow(store)

        with work:
            assert work.sequences.next_value("invoice:2610") == 1

        assert store.current_value("invoice:2610") == 1


class TestLocks:

    def test_lock_times_out_with_conflict(self):
        store = InMemoryStore(lock_timeout=0.05)
        holder, waiter = InMemoryUnitOfWork(store), InMemoryUnitOfWork(store)

        with holder:
            holder.lock(product_lock_key("p1"))
            with pytest.raises(ConcurrencyConflictError, match="Timed out"):
                with waiter:
                    waiter.lock(product_lock_key("p1"))

    def test_locks_released_on_exit(self):
        store = InMemoryStore(lock_timeout=0.05)
        first, second = InMemoryUnitOfWork(store), InMemoryUnitOfWork(store)

        with first:
            first.lock("a", "b")
        with second:
            second.lock("b", "a")

    def test_relocking_a_held_key_is_a_no_op(self):
        store = InMemoryStore(lock_timeout=0.05)
        work = InMemoryUnitOfWork(store)

        with work:
            work.lock("a")
            work.lock("a", "b")


class TestUniqueValues:

    def test_product_name_taken_since_read_is_rejected_at_commit(self):
        store = make_store()
        pid = seed_product(store, name="Widget")
        work = uow(store)

        with work:
            original = work.products.get_by_id(pid)
            work.products.save(dataclasses.replace(original, id="copy", name="WIDGET", version=0))
            with pytest.raises(ConcurrencyConflictError):
                work.commit()

        assert len(store.read_all("products")) == 1

    def test_reused_invoice_number_is_rejected_at_commit(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        sale = CreateSaleHandler(uow(store)).handle([SaleItemSpec(pid, Decimal("1"))])
        work = uow(store)

        with work:
            original = work.sales.get_by_id(sale.id)
            work.sales.save(dataclasses.replace(original, id="copy"))
            with pytest.raises(ConcurrencyConflictError):
                work.commit()

        assert [s.id for s in store.read_all("sales")] == [sale.id]

    def test_resaving_the_same_sale_is_allowed(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        sale = CreateSaleHandler(uow(store)).handle([SaleItemSpec(pid, Decimal("1"))])
        work = uow(store)

        with work:
            work.sales.save(work.sales.get_by_id(sale.id))
            work.commit()

        assert len(store.read_all("sales")) == 1


class TestStockSnapshot:

    def test_snapshot_excludes_staged_changes(self):
        store = make_store()
        pid = seed_product(store, stock=5)
        work = uow(store)

        with work:
            product = work.products.get_by_id(pid)
            product.current_stock = Decimal("1")
            work.products.save(product)
            products, entries = work.stock_snapshot()

        assert [p.current_stock for p in products] == [Decimal("5")]
        assert len(entries) == 1
