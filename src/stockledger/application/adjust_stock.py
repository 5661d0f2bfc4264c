"""Application service: Adjust Stock use case.

Operator-initiated corrections (damage, theft, a recount...).  Unlike a
sale, an adjustment that would take stock below zero is clamped at zero
instead of rejected; the ledger records the quantity actually removed.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.application.choices import parse_adjustment_reason
from stockledger.application.dto import AdjustmentDTO
from stockledger.application.mapping import ledger_entry_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.ledger import MovementReason
from stockledger.domain.model.value_objects import to_quantity
from stockledger.domain.repository.unit_of_work import UnitOfWork, product_lock_key
from stockledger.domain.service.stock_movement_service import StockMovementService

logger = logging.getLogger(__name__)


class AdjustStockHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        product_id: str,
        quantity_delta: Decimal | str | int,
        reason: str,
        notes: str | None = None,
    ) -> AdjustmentDTO:
        delta = to_quantity(quantity_delta)
        if delta == 0:
            raise ValidationError("Adjustment quantity cannot be zero")
        movement_reason = parse_adjustment_reason(reason)

        return run_with_retry(
            self._adjust, product_id, delta, movement_reason, notes,
            max_attempts=self._max_attempts,
        )

    def _adjust(
        self,
        product_id: str,
        delta: Decimal,
        reason: MovementReason,
        notes: str | None,
    ) -> AdjustmentDTO:
        with self._uow:
            self._uow.lock(product_lock_key(product_id))
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError("Product", product_id)

            previous = product.current_stock
            entry = StockMovementService(self._uow).apply_movement(
                product,
                delta,
                reason,
                unit_cost=product.cost_price,
                notes=notes,
                clamp=True,
            )
            self._uow.commit()

        applied = product.current_stock - previous
        if applied != delta:
            logger.warning(
                "adjustment_clamped",
                extra={"product_id": product.id, "requested": str(delta),
                       "applied": str(applied)},
            )
        else:
            logger.info(
                "stock_adjusted",
                extra={"product_id": product.id, "reason": reason.value,
                       "applied": str(applied)},
            )
        return AdjustmentDTO(
            product_id=product.id,
            product_name=product.name,
            previous_stock=previous,
            new_stock=product.current_stock,
            requested=delta,
            applied=applied,
            entry=ledger_entry_to_dto(entry) if entry else None,
        )
