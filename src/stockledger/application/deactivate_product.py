"""Application service: Deactivate Product use case (soft delete)."""

from __future__ import annotations

import logging

from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.unit_of_work import UnitOfWork, product_lock_key

logger = logging.getLogger(__name__)


class DeactivateProductHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(self, product_id: str) -> None:
        run_with_retry(self._deactivate, product_id, max_attempts=self._max_attempts)

    def _deactivate(self, product_id: str) -> None:
        with self._uow:
            self._uow.lock(product_lock_key(product_id))
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError("Product", product_id)
            product.deactivate()
            self._uow.products.save(product)
            self._uow.commit()

        logger.info("product_deactivated", extra={"product_id": product_id})
