"""Application service: Update Product use case.

Prices and reorder thresholds only.  Stock is never set directly; use a
movement (sale, purchase receipt, adjustment) instead.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.application.dto import ProductDTO
from stockledger.application.mapping import product_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.value_objects import Money, to_quantity
from stockledger.domain.repository.unit_of_work import UnitOfWork, product_lock_key

logger = logging.getLogger(__name__)


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        product_id: str,
        cost_price: str | None = None,
        selling_price: str | None = None,
        min_stock_level: Decimal | str | None = None,
        max_stock_level: Decimal | str | None = None,
    ) -> ProductDTO:
        """Update a product's prices and/or thresholds.

        This does NOT affect existing sales, purchase orders or ledger
        entries; they captured a price snapshot when they were created.
        """
        return run_with_retry(
            self._update,
            product_id,
            Money.of(cost_price) if cost_price is not None else None,
            Money.of(selling_price) if selling_price is not None else None,
            to_quantity(min_stock_level) if min_stock_level is not None else None,
            to_quantity(max_stock_level) if max_stock_level is not None else None,
            max_attempts=self._max_attempts,
        )

    def _update(
        self,
        product_id: str,
        cost_price: Money | None,
        selling_price: Money | None,
        min_stock_level: Decimal | None,
        max_stock_level: Decimal | None,
    ) -> ProductDTO:
        with self._uow:
            self._uow.lock(product_lock_key(product_id))
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError("Product", product_id)

            product.update_prices(cost_price, selling_price)
            product.update_levels(min_stock_level, max_stock_level)
            self._uow.products.save(product)
            self._uow.commit()

        logger.info("product_updated", extra={"product_id": product_id})
        return product_to_dto(product)
