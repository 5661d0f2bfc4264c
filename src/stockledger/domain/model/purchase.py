"""Purchase order aggregate — goods ordered from a supplier.

Status machine::

    PENDING ──> PARTIALLY_RECEIVED ──> RECEIVED
       │                 │
       └──> CANCELLED <──┘

RECEIVED and CANCELLED are terminal.  Stock is only ever added by
receiving; cancelling never takes stock back out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import (
    InvalidStateError,
    OverReceiptError,
    ValidationError,
)
from stockledger.domain.model.value_objects import Money, positive_quantity, to_quantity

MAX_NOTES_LENGTH = 500


class PurchaseStatus(Enum):
    PENDING = "pending"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = (PurchaseStatus.RECEIVED, PurchaseStatus.CANCELLED)


@dataclass
class PurchaseOrderLineItem:
    """One product on a purchase order.

    ``quantity`` and ``unit_cost`` are fixed at creation; only
    ``received_quantity`` (and the expiry date of received goods) change.
    """

    product_id: str
    product_name: str
    quantity: Decimal
    unit_cost: Money
    received_quantity: Decimal = Decimal("0")
    expiry_date: date | None = None

    def __post_init__(self) -> None:
        self.quantity = positive_quantity(self.quantity)

    @property
    def total_cost(self) -> Money:
        return self.unit_cost * self.quantity

    @property
    def remaining_quantity(self) -> Decimal:
        return self.quantity - self.received_quantity

    @property
    def is_fully_received(self) -> bool:
        return self.received_quantity >= self.quantity

    def receive_up_to(self, new_received: Decimal) -> Decimal:
        """Set the cumulative received quantity and return the delta.

        Over-receipt is rejected rather than clamped.  Lowering the figure
        is rejected too: the stock has already been booked in.
        """
        new_received = to_quantity(new_received)
        if new_received < 0:
            raise ValidationError("Received quantity cannot be negative")
        if new_received > self.quantity:
            raise OverReceiptError(self.product_name, self.quantity, new_received)
        if new_received < self.received_quantity:
            raise ValidationError(
                f"Received quantity for {self.product_name} cannot go down "
                f"(already received {self.received_quantity})"
            )
        delta = new_received - self.received_quantity
        self.received_quantity = new_received
        return delta


@dataclass
class PurchaseOrder:
    """Aggregate root for purchase orders.

    Use ``PurchaseOrder.create()`` for new orders.  ``version`` is owned by
    the storage layer for optimistic concurrency checks.
    """

    id: str
    purchase_order_number: str
    supplier_id: str
    items: list[PurchaseOrderLineItem]
    status: PurchaseStatus = PurchaseStatus.PENDING
    tax_amount: Money = field(default_factory=Money.zero)
    discount_amount: Money = field(default_factory=Money.zero)
    order_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expected_delivery_date: date | None = None
    received_date: datetime | None = None
    notes: str | None = None
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: str,
        purchase_order_number: str,
        supplier_id: str,
        items: list[PurchaseOrderLineItem],
        tax_amount: Money | None = None,
        discount_amount: Money | None = None,
        expected_delivery_date: date | None = None,
        notes: str | None = None,
    ) -> PurchaseOrder:
        """Create a new pending order, enforcing all invariants."""
        if not items:
            raise ValidationError("Purchase order must contain at least one item")

        product_ids = [item.product_id for item in items]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once per purchase order")
        if notes and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        order = PurchaseOrder(
            id=order_id,
            purchase_order_number=purchase_order_number,
            supplier_id=supplier_id,
            items=list(items),
            tax_amount=tax_amount or Money.zero(),
            discount_amount=discount_amount or Money.zero(),
            expected_delivery_date=expected_delivery_date,
            notes=notes,
        )
        order._check_discount()
        return order

    # --- State transitions ----------------------------------------------------

    def record_receipt(
        self,
        product_id: str,
        new_received_quantity: Decimal,
        expiry_date: date | None = None,
    ) -> Decimal:
        """Update one line's cumulative received quantity.

        Returns the delta to book into stock (zero when the same figure is
        submitted twice).  Call ``refresh_status()`` once all lines of a
        receipt have been recorded.
        """
        self._assert_receivable()
        item = self.find_item(product_id)
        delta = item.receive_up_to(new_received_quantity)
        if expiry_date is not None:
            item.expiry_date = expiry_date
        return delta

    def refresh_status(self, now: datetime | None = None) -> None:
        """Derive status from the received quantities of all lines."""
        self._assert_receivable()
        if all(item.is_fully_received for item in self.items):
            self.status = PurchaseStatus.RECEIVED
            self.received_date = now or datetime.now(timezone.utc)
        elif any(item.received_quantity > 0 for item in self.items):
            self.status = PurchaseStatus.PARTIALLY_RECEIVED

    def cancel(self) -> None:
        """Transition PENDING|PARTIALLY_RECEIVED -> CANCELLED.

        Goods already received stay in stock.
        """
        if self.status == PurchaseStatus.CANCELLED:
            raise InvalidStateError(
                f"Purchase order {self.purchase_order_number} is already cancelled"
            )
        if self.status == PurchaseStatus.RECEIVED:
            raise InvalidStateError(
                f"Cannot cancel purchase order {self.purchase_order_number} "
                f"— it has been received"
            )
        self.status = PurchaseStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.total_cost
        return result

    @property
    def total_amount(self) -> Money:
        self._check_discount()
        return self.subtotal + self.tax_amount - self.discount_amount

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    # --- Internal helpers -----------------------------------------------------

    def find_item(self, product_id: str) -> PurchaseOrderLineItem:
        for item in self.items:
            if item.product_id == product_id:
                return item
        raise ValidationError(
            f"Product ID '{product_id}' not found in purchase order "
            f"{self.purchase_order_number}"
        )

    def _check_discount(self) -> None:
        gross = self.subtotal + self.tax_amount
        if self.discount_amount > gross:
            raise ValidationError(
                f"Discount {self.discount_amount} exceeds order total {gross}"
            )

    def _assert_receivable(self) -> None:
        if self.is_terminal:
            raise InvalidStateError(
                f"Purchase order {self.purchase_order_number} is "
                f"{self.status.value} and cannot be received"
            )
