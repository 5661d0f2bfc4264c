"""Unit tests for StockMovementService."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import InsufficientStockError
from stockledger.domain.model.ledger import (
    MovementReason,
    ReferenceType,
    StockReference,
    TransactionType,
)
from stockledger.domain.model.value_objects import Money
from stockledger.domain.service.stock_movement_service import StockMovementService
from tests.fakes import ledger_for, make_store, seed_product, stock_of, uow


class TestApplyMovement:

    def test_decrement_writes_one_out_entry(self):
        store = make_store()
        pid = seed_product(store, stock=20)
        work = uow(store)

        with work:
            product = work.products.get_by_id(pid)
            entry = StockMovementService(work).apply_movement(
                product, Decimal("-5"), MovementReason.SALE, Money.of("60"),
                reference=StockReference("s1", ReferenceType.SALE),
            )
            work.commit()

        assert entry.transaction_type == TransactionType.OUT
        assert (entry.quantity, entry.previous_stock, entry.new_stock) == (5, 20, 15)
        assert stock_of(store, pid) == 15
        assert ledger_for(store, pid)[-1] == entry

    def test_clamped_decrement_records_applied_quantity(self):
        store = make_store()
        pid = seed_product(store, stock=15)
        work = uow(store)

        with work:
            product = work.products.get_by_id(pid)
            entry = StockMovementService(work).apply_movement(
                product, Decimal("-25"), MovementReason.DAMAGE, Money.of("60"), clamp=True,
            )
            work.commit()

        assert entry.quantity == 15
        assert entry.new_stock == 0

    def test_clamp_on_empty_stock_writes_nothing(self):
        store = make_store()
        pid = seed_product(store, stock=0)
        work = uow(store)

        with work:
            product = work.products.get_by_id(pid)
            entry = StockMovementService(work).apply_movement(
                product, Decimal("-3"), MovementReason.THEFT, Money.of("60"), clamp=True,
            )
            work.commit()

        assert entry is None
        assert ledger_for(store, pid) == []

    def test_rejected_decrement_leaves_no_trace(self):
        store = make_store()
        pid = seed_product(store, stock=2)
        work = uow(store)

        with pytest.raises(InsufficientStockError):
            with work:
                product = work.products.get_by_id(pid)
                StockMovementService(work).apply_movement(
                    product, Decimal("-3"), MovementReason.SALE, Money.of("60"),
                )
                work.commit()

        assert stock_of(store, pid) == 2
        assert len(ledger_for(store, pid)) == 1
