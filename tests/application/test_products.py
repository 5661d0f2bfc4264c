"""Integration tests for product and supplier use cases."""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from stockledger.application.add_product import AddProductHandler
from stockledger.application.add_supplier import AddSupplierHandler, ListSuppliersHandler
from stockledger.application.cancel_purchase import CancelPurchaseHandler
from stockledger.application.create_purchase import CreatePurchaseHandler
from stockledger.application.deactivate_product import DeactivateProductHandler
from stockledger.application.deactivate_supplier import DeactivateSupplierHandler
from stockledger.application.dto import PurchaseItemSpec
from stockledger.application.find_product import FindProductHandler
from stockledger.application.update_product import UpdateProductHandler
from stockledger.application.update_supplier import UpdateSupplierHandler
from stockledger.domain.exceptions import EntityNotFoundError, InvalidStateError, ValidationError
from stockledger.domain.model.ledger import MovementReason, TransactionType
from tests.fakes import ledger_for, make_store, seed_product, seed_supplier, stock_of, uow


class TestAddProduct:

    def test_initial_stock_is_booked_in_ledger(self):
        store = make_store()
        dto = AddProductHandler(uow(store)).handle(
            name="Widget", cost_price="60", selling_price="100", initial_stock=20,
        )

        assert dto.current_stock == 20
        assert dto.selling_price == "$100.00"
        (entry,) = ledger_for(store, dto.id)
        assert entry.transaction_type == TransactionType.IN
        assert entry.reason == MovementReason.INITIAL_STOCK
        assert (entry.previous_stock, entry.new_stock) == (0, 20)
        assert dto.profit_margin == Decimal("66.67")

    def test_zero_initial_stock_writes_no_entry(self):
        store = make_store()
        pid = seed_product(store, stock=0)
        assert ledger_for(store, pid) == []

    def test_duplicate_name_rejected(self):
        store = make_store()
        seed_product(store, name="Widget")
        with pytest.raises(ValidationError, match="already exists"):
            seed_product(store, name="widget")

    def test_negative_initial_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            AddProductHandler(uow(make_store())).handle(
                name="Widget", cost_price="1", selling_price="2", initial_stock=-1,
            )

    def test_unknown_supplier_rejected(self):
        with pytest.raises(EntityNotFoundError, match="Supplier"):
            AddProductHandler(uow(make_store())).handle(
                name="Widget", cost_price="1", selling_price="2", supplier_id="nope",
            )

    def test_known_supplier_accepted(self):
        store = make_store()
        sid = seed_supplier(store)
        dto = AddProductHandler(uow(store)).handle(
            name="Widget", cost_price="1", selling_price="2", supplier_id=sid,
        )
        assert dto.id

    def test_inactive_supplier_rejected(self):
        store = make_store()
        sid = seed_supplier(store)
        DeactivateSupplierHandler(uow(store)).handle(sid)
        with pytest.raises(EntityNotFoundError, match="Supplier"):
            AddProductHandler(uow(store)).handle(
                name="Widget", cost_price="1", selling_price="2", supplier_id=sid,
            )

    def test_concurrent_adds_with_same_name_create_one_product(self):
        store = make_store()

        def add(i):
            return AddProductHandler(uow(store)).handle(
                name="Widget" if i % 2 else "widget", cost_price="1", selling_price="2",
            )

        results, errors = [], []
        with ThreadPoolExecutor(max_workers=8) as pool:
            for future in [pool.submit(add, i) for i in range(8)]:
                try:
                    results.append(future.result())
                except ValidationError as exc:
                    errors.append(exc)

        assert len(results) == 1
        assert len(errors) == 7
        assert len(store.read_all("products")) == 1


class TestUpdateProduct:

    def test_prices_and_levels_change_but_not_stock(self):
        store = make_store()
        pid = seed_product(store, stock=20)

        dto = UpdateProductHandler(uow(store)).handle(
            pid, selling_price="120", min_stock_level="25",
        )

        assert dto.selling_price == "$120.00"
        assert dto.cost_price == "$60.00"
        assert dto.is_low_stock
        assert stock_of(store, pid) == 20

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            UpdateProductHandler(uow(make_store())).handle("nope", selling_price="1")


class TestFindAndDeactivate:

    def test_find_by_id_or_name(self):
        store = make_store()
        pid = seed_product(store, name="Blue Widget")
        find = FindProductHandler(uow(store))
        assert find.handle(pid).name == "Blue Widget"
        assert find.handle("blue widget").id == pid

    def test_find_unknown(self):
        with pytest.raises(EntityNotFoundError, match="Product not found: 'Gizmo'"):
            FindProductHandler(uow(make_store())).handle("Gizmo")

    def test_deactivate(self):
        store = make_store()
        pid = seed_product(store)
        DeactivateProductHandler(uow(store)).handle(pid)
        assert FindProductHandler(uow(store)).handle(pid).is_active is False


class TestSuppliers:

    def test_add_and_list(self):
        store = make_store()
        AddSupplierHandler(uow(store)).handle(
            name="Zeta Supplies", email="Sales@Zeta.example.com", payment_terms="net15",
        )
        seed_supplier(store, name="acme")

        suppliers = ListSuppliersHandler(uow(store)).handle()
        assert [s.name for s in suppliers] == ["acme", "Zeta Supplies"]
        assert suppliers[1].email == "sales@zeta.example.com"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError, match="Invalid email"):
            AddSupplierHandler(uow(make_store())).handle(name="Acme", email="not-an-email")

    def test_unknown_payment_terms_rejected(self):
        with pytest.raises(ValidationError, match="payment terms"):
            AddSupplierHandler(uow(make_store())).handle(name="Acme", payment_terms="net90")

    def test_update_details(self):
        store = make_store()
        sid = seed_supplier(store)

        dto = UpdateSupplierHandler(uow(store)).handle(
            sid, contact_person="Dana", phone="+15550100", payment_terms="net45",
        )

        assert (dto.contact_person, dto.phone, dto.payment_terms) == ("Dana", "+15550100", "net45")
        assert dto.name == "Acme Wholesale"

    def test_update_is_all_or_nothing(self):
        store = make_store()
        sid = seed_supplier(store)
        with pytest.raises(ValidationError, match="Invalid email"):
            UpdateSupplierHandler(uow(store)).handle(sid, name="Renamed", email="nope")

        (supplier,) = ListSuppliersHandler(uow(store)).handle()
        assert supplier.name == "Acme Wholesale"

    def test_update_to_existing_name_rejected(self):
        store = make_store()
        seed_supplier(store, name="Acme")
        other = seed_supplier(store, name="Zeta")
        with pytest.raises(ValidationError, match="already exists"):
            UpdateSupplierHandler(uow(store)).handle(other, name="ACME")

    def test_update_unknown(self):
        with pytest.raises(EntityNotFoundError):
            UpdateSupplierHandler(uow(make_store())).handle("nope", name="X")


class TestDeactivateSupplier:

    def test_deactivate_hides_from_list(self):
        store = make_store()
        sid = seed_supplier(store)
        DeactivateSupplierHandler(uow(store)).handle(sid)

        assert ListSuppliersHandler(uow(store)).handle() == []
        (supplier,) = ListSuppliersHandler(uow(store)).handle(include_inactive=True)
        assert supplier.is_active is False

    def test_refused_while_active_products_reference_it(self):
        store = make_store()
        sid = seed_supplier(store)
        pid = AddProductHandler(uow(store)).handle(
            name="Widget", cost_price="1", selling_price="2", supplier_id=sid,
        ).id

        with pytest.raises(InvalidStateError, match="active product"):
            DeactivateSupplierHandler(uow(store)).handle(sid)

        DeactivateProductHandler(uow(store)).handle(pid)
        DeactivateSupplierHandler(uow(store)).handle(sid)

    def test_refused_while_purchase_orders_are_open(self):
        store = make_store()
        sid = seed_supplier(store)
        pid = seed_product(store)
        order = CreatePurchaseHandler(uow(store)).handle(
            sid, [PurchaseItemSpec(pid, Decimal("5"), "1.00")],
        )

        with pytest.raises(InvalidStateError, match="purchase order"):
            DeactivateSupplierHandler(uow(store)).handle(sid)

        CancelPurchaseHandler(uow(store)).handle(order.id)
        DeactivateSupplierHandler(uow(store)).handle(sid)

    def test_inactive_supplier_cannot_receive_new_orders(self):
        store = make_store()
        sid = seed_supplier(store)
        pid = seed_product(store)
        DeactivateSupplierHandler(uow(store)).handle(sid)

        with pytest.raises(EntityNotFoundError, match="Supplier"):
            CreatePurchaseHandler(uow(store)).handle(
                sid, [PurchaseItemSpec(pid, Decimal("5"), "1.00")],
            )

    def test_twice_rejected(self):
        store = make_store()
        sid = seed_supplier(store)
        DeactivateSupplierHandler(uow(store)).handle(sid)
        with pytest.raises(ValidationError, match="already inactive"):
            DeactivateSupplierHandler(uow(store)).handle(sid)
