"""Application service: Cancel Purchase Order use case.

Allowed from PENDING or PARTIALLY_RECEIVED.  Goods already received on a
partially received order stay in stock; no reversing movement is
written.
"""

from __future__ import annotations

import logging

from stockledger.application.dto import PurchaseOrderDTO
from stockledger.application.mapping import purchase_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.purchase import PurchaseStatus
from stockledger.domain.repository.unit_of_work import UnitOfWork, purchase_lock_key

logger = logging.getLogger(__name__)


class CancelPurchaseHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(self, order_id: str) -> PurchaseOrderDTO:
        return run_with_retry(self._cancel, order_id, max_attempts=self._max_attempts)

    def _cancel(self, order_id: str) -> PurchaseOrderDTO:
        with self._uow:
            self._uow.lock(purchase_lock_key(order_id))
            order = self._uow.purchases.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError("Purchase order", order_id)

            had_receipts = order.status == PurchaseStatus.PARTIALLY_RECEIVED
            order.cancel()
            self._uow.purchases.save(order)
            self._uow.commit()

        if had_receipts:
            logger.warning(
                "partially_received_purchase_cancelled",
                extra={"purchase_id": order.id,
                       "purchase_order_number": order.purchase_order_number},
            )
        else:
            logger.info("purchase_cancelled", extra={"purchase_id": order.id})
        return purchase_to_dto(order)
