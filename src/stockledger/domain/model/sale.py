"""Sale aggregate — an invoice over one or more line items.

A sale is created atomically together with the stock decrements its lines
cause.  Afterwards only the payment fields may change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Money, positive_quantity

MAX_CUSTOMER_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 500


def utc_today() -> date:
    """The business day.  Sale dates, invoice periods and reports all use it."""
    return datetime.now(timezone.utc).date()


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CREDIT = "credit"


class PaymentStatus(Enum):
    PAID = "paid"
    PARTIAL = "partial"
    PENDING = "pending"


@dataclass
class SaleLineItem:
    """Price snapshot of one product at sale time.

    ``unit_cost`` is the product's cost price at the same moment; it is
    what the ledger entry is valued at and what profit is computed from.
    """

    product_id: str
    product_name: str
    quantity: Decimal
    unit_price: Money
    unit_cost: Money
    discount: Money = field(default_factory=Money.zero)

    def __post_init__(self) -> None:
        self.quantity = positive_quantity(self.quantity)
        if self.discount > self.total_price:
            raise ValidationError(
                f"Discount {self.discount} exceeds line total {self.total_price} "
                f"for {self.product_name}"
            )

    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def net_price(self) -> Money:
        return self.total_price - self.discount

    @property
    def profit(self) -> Decimal:
        """Can be negative when selling below cost."""
        margin = (self.unit_price.amount - self.unit_cost.amount) * self.quantity
        return margin - self.discount.amount


@dataclass
class Sale:
    """Aggregate root for sales.

    Use ``Sale.create()`` for new sales.  The ``__init__`` stays simple so
    the repository can reconstitute persisted sales without re-validating.
    """

    id: str
    invoice_number: str
    items: list[SaleLineItem]
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PAID
    paid_amount: Money = field(default_factory=Money.zero)
    tax_amount: Money = field(default_factory=Money.zero)
    discount_amount: Money = field(default_factory=Money.zero)
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    notes: str | None = None
    sale_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW sales only) ------------------------------------

    @staticmethod
    def create(
        sale_id: str,
        invoice_number: str,
        items: list[SaleLineItem],
        payment_method: PaymentMethod = PaymentMethod.CASH,
        payment_status: PaymentStatus = PaymentStatus.PAID,
        paid_amount: Money | None = None,
        tax_amount: Money | None = None,
        discount_amount: Money | None = None,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        customer_email: str | None = None,
        notes: str | None = None,
    ) -> Sale:
        """Create a new sale, enforcing all invariants."""
        if not items:
            raise ValidationError("Sale must contain at least one item")
        if customer_name and len(customer_name.strip()) > MAX_CUSTOMER_NAME_LENGTH:
            raise ValidationError(
                f"Customer name cannot exceed {MAX_CUSTOMER_NAME_LENGTH} characters"
            )
        if notes and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        sale = Sale(
            id=sale_id,
            invoice_number=invoice_number,
            items=list(items),
            payment_method=payment_method,
            tax_amount=tax_amount or Money.zero(),
            discount_amount=discount_amount or Money.zero(),
            customer_name=customer_name.strip() if customer_name else None,
            customer_phone=customer_phone.strip() if customer_phone else None,
            customer_email=customer_email.strip().lower() if customer_email else None,
            notes=notes,
        )
        # total_amount raises if the order-level discount exceeds subtotal + tax
        sale.update_payment(payment_status, paid_amount or Money.zero())
        return sale

    # --- Mutations ------------------------------------------------------------

    def update_payment(self, status: PaymentStatus, paid_amount: Money) -> None:
        """Record a payment.  Never touches stock."""
        if paid_amount > self.total_amount:
            raise ValidationError(
                f"Paid amount {paid_amount} cannot exceed total amount {self.total_amount}"
            )
        self.payment_status = status
        self.paid_amount = paid_amount

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.net_price
        return result

    @property
    def total_amount(self) -> Money:
        gross = self.subtotal + self.tax_amount
        if self.discount_amount > gross:
            raise ValidationError(
                f"Discount {self.discount_amount} exceeds sale total {gross}"
            )
        return gross - self.discount_amount

    @property
    def balance_due(self) -> Money:
        return self.total_amount - self.paid_amount

    @property
    def profit(self) -> Decimal:
        return sum((item.profit for item in self.items), Decimal("0"))
