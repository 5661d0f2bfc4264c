"""Stock ledger entry — immutable record of one stock movement.

Each entry carries a before/after snapshot of the product's stock so the
ledger can be audited line by line without replaying history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Money

MAX_NOTES_LENGTH = 200


class TransactionType(Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class MovementReason(Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    RETURN = "return"
    DAMAGE = "damage"
    EXPIRED = "expired"
    THEFT = "theft"
    CORRECTION = "correction"
    TRANSFER = "transfer"
    INITIAL_STOCK = "initial_stock"


# Reasons an operator may pick for a manual adjustment.
ADJUSTMENT_REASONS = (
    MovementReason.DAMAGE,
    MovementReason.EXPIRED,
    MovementReason.THEFT,
    MovementReason.CORRECTION,
    MovementReason.RETURN,
)


class ReferenceType(Enum):
    PURCHASE = "purchase"
    SALE = "sale"


@dataclass(frozen=True)
class StockReference:
    """Link from a ledger entry back to the document that caused it."""

    reference_id: str
    reference_type: ReferenceType


@dataclass(frozen=True)
class StockLedgerEntry:
    """One movement of one product.

    ``quantity`` is always the positive magnitude actually applied; the
    direction comes from ``transaction_type`` (or, for ``adjustment``,
    from the snapshots).
    """

    id: str
    product_id: str
    transaction_type: TransactionType
    reason: MovementReason
    quantity: Decimal
    previous_stock: Decimal
    new_stock: Decimal
    unit_cost: Money
    reference: StockReference | None = None
    notes: str | None = None
    batch_number: str | None = None
    expiry_date: date | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError("Ledger entry quantity must be positive")
        if self.new_stock < 0:
            raise ValidationError("Ledger entry cannot leave stock negative")
        if self.notes is not None and len(self.notes) > MAX_NOTES_LENGTH:
            raise ValidationError(
                f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"
            )

        if self.transaction_type == TransactionType.IN:
            expected = self.previous_stock + self.quantity
        elif self.transaction_type == TransactionType.OUT:
            expected = self.previous_stock - self.quantity
        else:
            expected = self.previous_stock + self.signed_quantity
        if expected != self.new_stock:
            raise ValidationError(
                f"Ledger snapshot mismatch: {self.previous_stock} "
                f"{self.transaction_type.value} {self.quantity} != {self.new_stock}"
            )

    # --- Computed properties --------------------------------------------------

    @property
    def signed_quantity(self) -> Decimal:
        if self.transaction_type == TransactionType.IN:
            return self.quantity
        if self.transaction_type == TransactionType.OUT:
            return -self.quantity
        return self.quantity if self.new_stock >= self.previous_stock else -self.quantity

    @property
    def total_value(self) -> Money:
        return self.unit_cost * abs(self.quantity)

    @property
    def reference_id(self) -> str | None:
        return self.reference.reference_id if self.reference else None
