"""Parsing of enum-valued inputs arriving as plain strings."""

from __future__ import annotations

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.ledger import ADJUSTMENT_REASONS, MovementReason
from stockledger.domain.model.sale import PaymentMethod, PaymentStatus


def parse_payment_method(value: str) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError(f"Invalid payment method '{value}'") from None


def parse_payment_status(value: str | None, default: PaymentStatus = PaymentStatus.PAID) -> PaymentStatus:
    if value is None:
        return default
    try:
        return PaymentStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid payment status '{value}'") from None


def parse_adjustment_reason(value: str | MovementReason) -> MovementReason:
    try:
        reason = MovementReason(value)
    except ValueError:
        reason = None
    if reason not in ADJUSTMENT_REASONS:
        allowed = ", ".join(r.value for r in ADJUSTMENT_REASONS)
        raise ValidationError(f"Invalid adjustment reason '{value}' (expected one of {allowed})")
    return reason
