"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each subclass carries the offending values as attributes so callers can
translate them into a response without parsing the message.
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: '{identifier}'")


class InsufficientStockError(DomainException):
    """A decrementing movement asked for more than is on hand."""

    def __init__(self, product_name: str, available: Decimal, requested: Decimal) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(available {available}, requested {requested})"
        )


class OverReceiptError(DomainException):
    """Receiving would push a purchase line above its ordered quantity."""

    def __init__(self, product_name: str, ordered: Decimal, received: Decimal) -> None:
        self.product_name = product_name
        self.ordered = ordered
        self.received = received
        super().__init__(
            f"Cannot receive {received} of {product_name} "
            f"— only {ordered} ordered"
        )


class InvalidStateError(DomainException):
    """The aggregate is in a state that forbids the requested transition."""


class ConcurrencyConflictError(DomainException):
    """An optimistic version check failed at commit time."""
