"""Aggregate <-> JSON-compatible dict conversion.

Decimals are stored as strings so no precision is lost; dates and
datetimes as ISO-8601 strings.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from stockledger.domain.model.ledger import (
    MovementReason,
    ReferenceType,
    StockLedgerEntry,
    StockReference,
    TransactionType,
)
from stockledger.domain.model.product import Product
from stockledger.domain.model.purchase import (
    PurchaseOrder,
    PurchaseOrderLineItem,
    PurchaseStatus,
)
from stockledger.domain.model.sale import (
    PaymentMethod,
    PaymentStatus,
    Sale,
    SaleLineItem,
)
from stockledger.domain.model.supplier import Supplier
from stockledger.domain.model.value_objects import Money

# --- Helpers -----------------------------------------------------------------


def _money(raw: str) -> Money:
    return Money(Decimal(raw))


def _date(raw: str | None) -> date | None:
    return date.fromisoformat(raw) if raw else None


def _datetime(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# --- Product -----------------------------------------------------------------


def product_to_raw(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "sku": product.sku,
        "unit": product.unit,
        "supplier_id": product.supplier_id,
        "cost_price": str(product.cost_price.amount),
        "selling_price": str(product.selling_price.amount),
        "current_stock": str(product.current_stock),
        "min_stock_level": str(product.min_stock_level),
        "max_stock_level": str(product.max_stock_level),
        "is_active": product.is_active,
        "version": product.version,
    }


def product_to_domain(raw: dict) -> Product:
    return Product(
        id=raw["id"],
        name=raw["name"],
        sku=raw.get("sku"),
        unit=raw.get("unit", "piece"),
        supplier_id=raw.get("supplier_id"),
        cost_price=_money(raw["cost_price"]),
        selling_price=_money(raw["selling_price"]),
        current_stock=Decimal(raw["current_stock"]),
        min_stock_level=Decimal(raw["min_stock_level"]),
        max_stock_level=Decimal(raw["max_stock_level"]),
        is_active=raw.get("is_active", True),
        version=raw.get("version", 0),
    )


# --- Supplier ----------------------------------------------------------------


def supplier_to_raw(supplier: Supplier) -> dict:
    return {
        "id": supplier.id,
        "name": supplier.name,
        "contact_person": supplier.contact_person,
        "email": supplier.email,
        "phone": supplier.phone,
        "payment_terms": supplier.payment_terms,
        "is_active": supplier.is_active,
    }


def supplier_to_domain(raw: dict) -> Supplier:
    return Supplier(
        id=raw["id"],
        name=raw["name"],
        contact_person=raw.get("contact_person"),
        email=raw.get("email"),
        phone=raw.get("phone"),
        payment_terms=raw.get("payment_terms", "net30"),
        is_active=raw.get("is_active", True),
    )


# --- Ledger ------------------------------------------------------------------


def ledger_entry_to_raw(entry: StockLedgerEntry) -> dict:
    return {
        "id": entry.id,
        "product_id": entry.product_id,
        "transaction_type": entry.transaction_type.value,
        "reason": entry.reason.value,
        "quantity": str(entry.quantity),
        "previous_stock": str(entry.previous_stock),
        "new_stock": str(entry.new_stock),
        "unit_cost": str(entry.unit_cost.amount),
        "reference_id": entry.reference.reference_id if entry.reference else None,
        "reference_type": entry.reference.reference_type.value if entry.reference else None,
        "notes": entry.notes,
        "batch_number": entry.batch_number,
        "expiry_date": _iso(entry.expiry_date),
        "created_at": entry.created_at.isoformat(),
    }


def ledger_entry_to_domain(raw: dict) -> StockLedgerEntry:
    reference = None
    if raw.get("reference_id"):
        reference = StockReference(
            reference_id=raw["reference_id"],
            reference_type=ReferenceType(raw["reference_type"]),
        )
    return StockLedgerEntry(
        id=raw["id"],
        product_id=raw["product_id"],
        transaction_type=TransactionType(raw["transaction_type"]),
        reason=MovementReason(raw["reason"]),
        quantity=Decimal(raw["quantity"]),
        previous_stock=Decimal(raw["previous_stock"]),
        new_stock=Decimal(raw["new_stock"]),
        unit_cost=_money(raw["unit_cost"]),
        reference=reference,
        notes=raw.get("notes"),
        batch_number=raw.get("batch_number"),
        expiry_date=_date(raw.get("expiry_date")),
        created_at=datetime.fromisoformat(raw["created_at"]),
    )


# --- Sale --------------------------------------------------------------------


def sale_to_raw(sale: Sale) -> dict:
    return {
        "id": sale.id,
        "invoice_number": sale.invoice_number,
        "customer_name": sale.customer_name,
        "customer_phone": sale.customer_phone,
        "customer_email": sale.customer_email,
        "payment_method": sale.payment_method.value,
        "payment_status": sale.payment_status.value,
        "paid_amount": str(sale.paid_amount.amount),
        "tax_amount": str(sale.tax_amount.amount),
        "discount_amount": str(sale.discount_amount.amount),
        "notes": sale.notes,
        "sale_date": sale.sale_date.isoformat(),
        "items": [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": str(item.quantity),
                "unit_price": str(item.unit_price.amount),
                "unit_cost": str(item.unit_cost.amount),
                "discount": str(item.discount.amount),
            }
            for item in sale.items
        ],
    }


def sale_to_domain(raw: dict) -> Sale:
    items = [
        SaleLineItem(
            product_id=i["product_id"],
            product_name=i["product_name"],
            quantity=Decimal(i["quantity"]),
            unit_price=_money(i["unit_price"]),
            unit_cost=_money(i["unit_cost"]),
            discount=_money(i.get("discount", "0")),
        )
        for i in raw["items"]
    ]
    return Sale(
        id=raw["id"],
        invoice_number=raw["invoice_number"],
        items=items,
        payment_method=PaymentMethod(raw["payment_method"]),
        payment_status=PaymentStatus(raw["payment_status"]),
        paid_amount=_money(raw["paid_amount"]),
        tax_amount=_money(raw["tax_amount"]),
        discount_amount=_money(raw["discount_amount"]),
        customer_name=raw.get("customer_name"),
        customer_phone=raw.get("customer_phone"),
        customer_email=raw.get("customer_email"),
        notes=raw.get("notes"),
        sale_date=datetime.fromisoformat(raw["sale_date"]),
    )


# --- Purchase order ----------------------------------------------------------


def purchase_to_raw(order: PurchaseOrder) -> dict:
    return {
        "id": order.id,
        "purchase_order_number": order.purchase_order_number,
        "supplier_id": order.supplier_id,
        "status": order.status.value,
        "tax_amount": str(order.tax_amount.amount),
        "discount_amount": str(order.discount_amount.amount),
        "order_date": order.order_date.isoformat(),
        "expected_delivery_date": _iso(order.expected_delivery_date),
        "received_date": _iso(order.received_date),
        "notes": order.notes,
        "version": order.version,
        "items": [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": str(item.quantity),
                "unit_cost": str(item.unit_cost.amount),
                "received_quantity": str(item.received_quantity),
                "expiry_date": _iso(item.expiry_date),
            }
            for item in order.items
        ],
    }


def purchase_to_domain(raw: dict) -> PurchaseOrder:
    items = [
        PurchaseOrderLineItem(
            product_id=i["product_id"],
            product_name=i["product_name"],
            quantity=Decimal(i["quantity"]),
            unit_cost=_money(i["unit_cost"]),
            received_quantity=Decimal(i.get("received_quantity", "0")),
            expiry_date=_date(i.get("expiry_date")),
        )
        for i in raw["items"]
    ]
    return PurchaseOrder(
        id=raw["id"],
        purchase_order_number=raw["purchase_order_number"],
        supplier_id=raw["supplier_id"],
        items=items,
        status=PurchaseStatus(raw["status"]),
        tax_amount=_money(raw["tax_amount"]),
        discount_amount=_money(raw["discount_amount"]),
        order_date=datetime.fromisoformat(raw["order_date"]),
        expected_delivery_date=_date(raw.get("expected_delivery_date")),
        received_date=_datetime(raw.get("received_date")),
        notes=raw.get("notes"),
        version=raw.get("version", 0),
    )
