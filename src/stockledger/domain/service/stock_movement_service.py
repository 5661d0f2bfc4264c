"""Domain service: Stock Movement.

The one place where a product's stock changes.  Every movement mutates
the product record and appends exactly one ledger entry describing it,
with the before/after snapshot taken from the record at the moment of
the call.  Callers must have locked the product in the same unit of work
before loading it, otherwise the snapshot may be stale.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from stockledger.domain.model.ledger import (
    MovementReason,
    StockLedgerEntry,
    StockReference,
    TransactionType,
)
from stockledger.domain.model.product import Product
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.unit_of_work import UnitOfWork


class StockMovementService:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def apply_movement(
        self,
        product: Product,
        signed_delta: Decimal,
        reason: MovementReason,
        unit_cost: Money,
        reference: StockReference | None = None,
        notes: str | None = None,
        clamp: bool = False,
        batch_number: str | None = None,
        expiry_date: date | None = None,
    ) -> StockLedgerEntry | None:
        """Move stock and record it.

        Decrements below zero raise InsufficientStockError unless *clamp*
        is set.  When clamping, the entry records the quantity actually
        removed; if nothing could be removed at all, no entry is written
        and None is returned.
        """
        previous, new = product.apply_movement(signed_delta, clamp=clamp)
        applied = new - previous
        if applied == 0:
            return None

        entry = StockLedgerEntry(
            id=str(uuid.uuid4()),
            product_id=product.id,
            transaction_type=TransactionType.IN if applied > 0 else TransactionType.OUT,
            reason=reason,
            quantity=abs(applied),
            previous_stock=previous,
            new_stock=new,
            unit_cost=unit_cost,
            reference=reference,
            notes=notes,
            batch_number=batch_number,
            expiry_date=expiry_date,
        )
        self._uow.products.save(product)
        self._uow.ledger.append(entry)
        return entry
