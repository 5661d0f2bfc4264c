"""Data Transfer Objects — plain containers that cross layer boundaries.

Input specs arrive already typed from the CLI (or any other caller);
output DTOs carry results back without exposing domain internals.
Money is rendered as display strings (``"$15.00"``); quantities stay
Decimal so callers can still do arithmetic on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

# --- Inputs ------------------------------------------------------------------


@dataclass(frozen=True)
class SaleItemSpec:
    """Input: one line of a sale.  Omitted unit price means selling price."""

    product_id: str
    quantity: Decimal
    unit_price: str | None = None
    discount: str | None = None


@dataclass(frozen=True)
class PurchaseItemSpec:
    """Input: one line of a new purchase order."""

    product_id: str
    quantity: Decimal
    unit_cost: str


@dataclass(frozen=True)
class ReceiptItemSpec:
    """Input: the cumulative quantity received so far for one line.

    ``batch_number`` and ``expiry_date`` describe the goods booked by this
    receipt and are copied onto its ledger entry.
    """

    product_id: str
    received_quantity: Decimal
    expiry_date: date | None = None
    batch_number: str | None = None


@dataclass(frozen=True)
class CustomerSpec:
    name: str | None = None
    phone: str | None = None
    email: str | None = None


# --- Outputs -----------------------------------------------------------------


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    sku: str | None
    unit: str
    current_stock: Decimal
    min_stock_level: Decimal
    max_stock_level: Decimal
    cost_price: str
    selling_price: str
    stock_value: str
    profit_margin: Decimal
    is_low_stock: bool
    is_active: bool


@dataclass(frozen=True)
class SupplierDTO:
    id: str
    name: str
    contact_person: str | None
    email: str | None
    phone: str | None
    payment_terms: str
    is_active: bool


@dataclass(frozen=True)
class LedgerEntryDTO:
    id: str
    product_id: str
    transaction_type: str
    reason: str
    quantity: Decimal
    previous_stock: Decimal
    new_stock: Decimal
    unit_cost: str
    total_value: str
    reference_id: str | None
    reference_type: str | None
    notes: str | None
    batch_number: str | None
    expiry_date: str | None
    created_at: str


@dataclass(frozen=True)
class SaleLineItemDTO:
    product_id: str
    product_name: str
    quantity: Decimal
    unit_price: str
    discount: str
    total_price: str


@dataclass(frozen=True)
class SaleDTO:
    id: str
    invoice_number: str
    customer_name: str | None
    items: list[SaleLineItemDTO]
    subtotal: str
    tax_amount: str
    discount_amount: str
    total_amount: str
    payment_method: str
    payment_status: str
    paid_amount: str
    balance_due: str
    sale_date: str


@dataclass(frozen=True)
class PurchaseLineItemDTO:
    product_id: str
    product_name: str
    quantity: Decimal
    unit_cost: str
    total_cost: str
    received_quantity: Decimal
    remaining_quantity: Decimal


@dataclass(frozen=True)
class PurchaseOrderDTO:
    id: str
    purchase_order_number: str
    supplier_id: str
    status: str
    items: list[PurchaseLineItemDTO]
    subtotal: str
    tax_amount: str
    discount_amount: str
    total_amount: str
    order_date: str
    received_date: str | None


@dataclass(frozen=True)
class AdjustmentDTO:
    """Result of a manual adjustment.

    ``applied`` can be smaller in magnitude than ``requested`` when the
    stock was clamped at zero; ``entry`` is None if nothing moved.
    """

    product_id: str
    product_name: str
    previous_stock: Decimal
    new_stock: Decimal
    requested: Decimal
    applied: Decimal
    entry: LedgerEntryDTO | None


@dataclass(frozen=True)
class SalesSummaryDTO:
    """Totals over the sales dated within ``start``..``end`` (inclusive, UTC).

    ``total_profit`` may be negative and is therefore a plain Decimal.
    """

    start: date
    end: date
    sale_count: int
    total_revenue: str
    total_profit: Decimal
    amount_outstanding: str
    pending_payments: int
    by_payment_method: dict[str, int]
