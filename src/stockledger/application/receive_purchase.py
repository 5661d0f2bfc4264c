"""Application service: Receive Purchase Order use case.

Each receipt line states the *cumulative* quantity received so far for a
product; only the difference from the previously recorded figure is
booked into stock.  Submitting the same figure twice is therefore a
no-op for that line.

The whole call is atomic: if any line would over-receive, nothing is
recorded for any line.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.application.dto import PurchaseOrderDTO, ReceiptItemSpec
from stockledger.application.mapping import purchase_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.ledger import MovementReason, ReferenceType, StockReference
from stockledger.domain.model.value_objects import to_quantity
from stockledger.domain.repository.unit_of_work import (
    UnitOfWork,
    product_lock_key,
    purchase_lock_key,
)
from stockledger.domain.service.stock_movement_service import StockMovementService

logger = logging.getLogger(__name__)


class ReceivePurchaseHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(self, order_id: str, receipts: list[ReceiptItemSpec]) -> PurchaseOrderDTO:
        if not receipts:
            raise ValidationError("Must specify at least one item to receive")
        product_ids = [r.product_id for r in receipts]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once per receipt")
        for receipt in receipts:
            if to_quantity(receipt.received_quantity) < 0:
                raise ValidationError("Received quantity cannot be negative")

        return run_with_retry(
            self._receive, order_id, receipts, max_attempts=self._max_attempts
        )

    def _receive(self, order_id: str, receipts: list[ReceiptItemSpec]) -> PurchaseOrderDTO:
        with self._uow:
            self._uow.lock(
                purchase_lock_key(order_id),
                *(product_lock_key(r.product_id) for r in receipts),
            )
            order = self._uow.purchases.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError("Purchase order", order_id)

            # Record every line on the aggregate first; any rejection
            # aborts the unit of work before stock is touched.
            deltas: list[tuple[ReceiptItemSpec, Decimal]] = []
            for receipt in receipts:
                delta = order.record_receipt(
                    receipt.product_id,
                    to_quantity(receipt.received_quantity),
                    receipt.expiry_date,
                )
                deltas.append((receipt, delta))

            movements = StockMovementService(self._uow)
            reference = StockReference(order.id, ReferenceType.PURCHASE)
            received_total = Decimal("0")
            for receipt, delta in deltas:
                if delta <= 0:
                    continue
                product = self._uow.products.get_by_id(receipt.product_id)
                if product is None:
                    raise EntityNotFoundError("Product", receipt.product_id)
                item = order.find_item(receipt.product_id)
                movements.apply_movement(
                    product,
                    delta,
                    MovementReason.PURCHASE,
                    unit_cost=item.unit_cost,
                    reference=reference,
                    batch_number=receipt.batch_number,
                    expiry_date=item.expiry_date,
                )
                received_total += delta

            order.refresh_status()
            self._uow.purchases.save(order)
            self._uow.commit()

        logger.info(
            "purchase_received",
            extra={
                "purchase_id": order.id,
                "purchase_order_number": order.purchase_order_number,
                "status": order.status.value,
                "received_quantity": str(received_total),
            },
        )
        return purchase_to_dto(order)
