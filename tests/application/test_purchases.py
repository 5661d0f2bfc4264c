"""Integration tests for the purchase order lifecycle."""

from datetime import date
from decimal import Decimal

import pytest

from stockledger.application.cancel_purchase import CancelPurchaseHandler
from stockledger.application.create_purchase import CreatePurchaseHandler
from stockledger.application.dto import PurchaseItemSpec, ReceiptItemSpec
from stockledger.application.receive_purchase import ReceivePurchaseHandler
from stockledger.application.show_purchase import ListPurchasesHandler, ShowPurchaseHandler
from stockledger.application.stock_history import StockHistoryHandler
from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InvalidStateError,
    OverReceiptError,
    ValidationError,
)
from stockledger.domain.model.ledger import MovementReason, ReferenceType, TransactionType
from stockledger.domain.model.purchase import PurchaseStatus
from tests.fakes import (
    ledger_for,
    make_store,
    seed_product,
    seed_supplier,
    stock_of,
    stored_purchase,
    uow,
)


def _setup():
    store = make_store()
    supplier = seed_supplier(store)
    widget = seed_product(store, name="Widget", stock=0)
    gadget = seed_product(store, name="Gadget", stock=2)
    return store, supplier, widget, gadget


def _create(store, supplier, items):
    return CreatePurchaseHandler(uow(store)).handle(supplier, items)


# ── Create ───────────────────────────────────────────────────────────────────


class TestCreatePurchase:

    def test_new_order_is_pending_and_moves_no_stock(self):
        store, supplier, widget, _ = _setup()

        dto = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "4.50")])

        assert dto.status == "pending"
        assert dto.purchase_order_number == "PO000001"
        assert dto.total_amount == "$45.00"
        assert stock_of(store, widget) == 0

    def test_po_numbers_are_sequential(self):
        store, supplier, widget, _ = _setup()
        first = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("1"), "1")])
        second = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("1"), "1")])
        assert second.purchase_order_number == "PO000002"
        assert first.id != second.id

    def test_unknown_supplier(self):
        store, _, widget, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Supplier"):
            _create(store, "nope", [PurchaseItemSpec(widget, Decimal("1"), "1")])

    def test_unknown_product(self):
        store, supplier, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Product"):
            _create(store, supplier, [PurchaseItemSpec("nope", Decimal("1"), "1")])

    def test_non_positive_quantity(self):
        store, supplier, widget, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            _create(store, supplier, [PurchaseItemSpec(widget, Decimal("0"), "1")])

    def test_expected_delivery_date_kept(self):
        store, supplier, widget, _ = _setup()
        dto = CreatePurchaseHandler(uow(store)).handle(
            supplier,
            [PurchaseItemSpec(widget, Decimal("1"), "1")],
            expected_delivery_date=date(2026, 11, 1),
        )
        assert stored_purchase(store, dto.id).expected_delivery_date == date(2026, 11, 1)


# ── Receive ──────────────────────────────────────────────────────────────────


class TestReceivePurchase:

    def test_receive_zero_then_three_then_seven(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "4.50")])
        receive = ReceivePurchaseHandler(uow(store))

        dto = receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("0"))])
        assert dto.status == "pending"
        assert ledger_for(store, widget) == []

        dto = receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("3"))])
        assert dto.status == "partially_received"
        assert stock_of(store, widget) == 3

        dto = receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("10"))])
        assert dto.status == "received"
        assert dto.received_date is not None
        assert stock_of(store, widget) == 10

        entries = ledger_for(store, widget)
        assert [e.quantity for e in entries] == [3, 7]
        assert all(e.transaction_type == TransactionType.IN for e in entries)
        assert all(e.reason == MovementReason.PURCHASE for e in entries)
        assert all(e.reference.reference_type == ReferenceType.PURCHASE for e in entries)
        assert entries[1].unit_cost.amount == Decimal("4.50")

        with pytest.raises(InvalidStateError):
            receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("10"))])

    def test_resubmitting_same_quantity_is_a_no_op(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "1")])
        receive = ReceivePurchaseHandler(uow(store))

        receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("4"))])
        receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("4"))])

        assert stock_of(store, widget) == 4
        assert len(ledger_for(store, widget)) == 1

    def test_over_receipt_on_any_line_rejects_whole_call(self):
        store, supplier, widget, gadget = _setup()
        order = _create(store, supplier, [
            PurchaseItemSpec(widget, Decimal("10"), "1"),
            PurchaseItemSpec(gadget, Decimal("5"), "1"),
        ])

        with pytest.raises(OverReceiptError):
            ReceivePurchaseHandler(uow(store)).handle(order.id, [
                ReceiptItemSpec(widget, Decimal("5")),
                ReceiptItemSpec(gadget, Decimal("6")),
            ])

        assert stock_of(store, widget) == 0
        assert stock_of(store, gadget) == 2
        stored = stored_purchase(store, order.id)
        assert stored.status == PurchaseStatus.PENDING
        assert [i.received_quantity for i in stored.items] == [0, 0]

    def test_expiry_date_reaches_ledger(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "1")])
        ReceivePurchaseHandler(uow(store)).handle(
            order.id, [ReceiptItemSpec(widget, Decimal("10"), date(2027, 6, 30))],
        )
        assert ledger_for(store, widget)[0].expiry_date == date(2027, 6, 30)

    def test_batch_number_reaches_ledger_per_receipt(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "1")])
        receive = ReceivePurchaseHandler(uow(store))
        receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("4"), batch_number="B-1")])
        receive.handle(order.id, [ReceiptItemSpec(widget, Decimal("10"), batch_number="B-2")])

        assert [e.batch_number for e in ledger_for(store, widget)] == ["B-1", "B-2"]
        (entry, _) = StockHistoryHandler(uow(store)).for_product(widget)
        assert (entry.batch_number, entry.quantity) == ("B-2", Decimal("6"))

    def test_duplicate_receipt_lines_rejected(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "1")])
        with pytest.raises(ValidationError, match="only once"):
            ReceivePurchaseHandler(uow(store)).handle(order.id, [
                ReceiptItemSpec(widget, Decimal("1")),
                ReceiptItemSpec(widget, Decimal("2")),
            ])

    def test_product_not_on_order_rejected(self):
        store, supplier, widget, gadget = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "1")])
        with pytest.raises(ValidationError, match="not found in purchase order"):
            ReceivePurchaseHandler(uow(store)).handle(
                order.id, [ReceiptItemSpec(gadget, Decimal("1"))],
            )

    def test_unknown_order(self):
        store, _, widget, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Purchase order"):
            ReceivePurchaseHandler(uow(store)).handle(
                "nope", [ReceiptItemSpec(widget, Decimal("1"))],
            )


# ── Cancel ───────────────────────────────────────────────────────────────────


class TestCancelPurchase:

    def test_cancel_partially_received_keeps_stock(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("10"), "1")])
        ReceivePurchaseHandler(uow(store)).handle(order.id, [ReceiptItemSpec(widget, Decimal("4"))])

        dto = CancelPurchaseHandler(uow(store)).handle(order.id)

        assert dto.status == "cancelled"
        assert stock_of(store, widget) == 4
        assert len(ledger_for(store, widget)) == 1

    def test_cancel_received_order_rejected(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("2"), "1")])
        ReceivePurchaseHandler(uow(store)).handle(order.id, [ReceiptItemSpec(widget, Decimal("2"))])
        with pytest.raises(InvalidStateError):
            CancelPurchaseHandler(uow(store)).handle(order.id)

    def test_cancelled_order_cannot_be_received(self):
        store, supplier, widget, _ = _setup()
        order = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("2"), "1")])
        CancelPurchaseHandler(uow(store)).handle(order.id)
        with pytest.raises(InvalidStateError):
            ReceivePurchaseHandler(uow(store)).handle(order.id, [ReceiptItemSpec(widget, Decimal("1"))])


# ── Queries ──────────────────────────────────────────────────────────────────


class TestPurchaseQueries:

    def test_show_by_number_and_list_by_status(self):
        store, supplier, widget, _ = _setup()
        first = _create(store, supplier, [PurchaseItemSpec(widget, Decimal("1"), "1")])
        _create(store, supplier, [PurchaseItemSpec(widget, Decimal("1"), "1")])
        CancelPurchaseHandler(uow(store)).handle(first.id)

        assert ShowPurchaseHandler(uow(store)).handle("PO000001").id == first.id
        pending = ListPurchasesHandler(uow(store)).handle(status="pending")
        assert [o.purchase_order_number for o in pending] == ["PO000002"]
