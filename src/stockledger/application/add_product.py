"""Application service: Add Product use case.

A product starts at zero stock.  Any initial quantity is booked as an
``in / initial_stock`` movement so the ledger explains it like every
other change.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from stockledger.application.dto import ProductDTO
from stockledger.application.mapping import product_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.ledger import MovementReason
from stockledger.domain.model.product import (
    DEFAULT_MAX_STOCK_LEVEL,
    DEFAULT_MIN_STOCK_LEVEL,
    Product,
)
from stockledger.domain.model.value_objects import Money, to_quantity
from stockledger.domain.repository.unit_of_work import (
    UnitOfWork,
    product_lock_key,
    product_name_lock_key,
    supplier_lock_key,
)
from stockledger.domain.service.stock_movement_service import StockMovementService

logger = logging.getLogger(__name__)


class AddProductHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        name: str,
        cost_price: str,
        selling_price: str,
        initial_stock: Decimal | str | int = 0,
        min_stock_level: Decimal | str | int = DEFAULT_MIN_STOCK_LEVEL,
        max_stock_level: Decimal | str | int = DEFAULT_MAX_STOCK_LEVEL,
        unit: str = "piece",
        sku: str | None = None,
        supplier_id: str | None = None,
    ) -> ProductDTO:
        """Add a new product to the catalog."""
        initial = to_quantity(initial_stock)
        if initial < 0:
            raise ValidationError("Initial stock cannot be negative")

        return run_with_retry(
            self._add,
            name,
            Money.of(cost_price),
            Money.of(selling_price),
            initial,
            to_quantity(min_stock_level),
            to_quantity(max_stock_level),
            unit,
            sku,
            supplier_id,
            max_attempts=self._max_attempts,
        )

    def _add(
        self,
        name: str,
        cost_price: Money,
        selling_price: Money,
        initial: Decimal,
        min_stock_level: Decimal,
        max_stock_level: Decimal,
        unit: str,
        sku: str | None,
        supplier_id: str | None,
    ) -> ProductDTO:
        product_id = str(uuid.uuid4())
        keys = [product_lock_key(product_id), product_name_lock_key(name or "")]
        if supplier_id is not None:
            keys.append(supplier_lock_key(supplier_id))
        with self._uow:
            self._uow.lock(*keys)

            if name and self._uow.products.get_by_name(name) is not None:
                raise ValidationError(f"Product '{name.strip()}' already exists")
            if supplier_id is not None:
                supplier = self._uow.suppliers.get_by_id(supplier_id)
                if supplier is None or not supplier.is_active:
                    raise EntityNotFoundError("Supplier", supplier_id)

            product = Product.create(
                product_id=product_id,
                name=name,
                cost_price=cost_price,
                selling_price=selling_price,
                min_stock_level=min_stock_level,
                max_stock_level=max_stock_level,
                unit=unit,
                sku=sku,
                supplier_id=supplier_id,
            )
            self._uow.products.save(product)

            if initial > 0:
                StockMovementService(self._uow).apply_movement(
                    product,
                    initial,
                    MovementReason.INITIAL_STOCK,
                    unit_cost=product.cost_price,
                )
            self._uow.commit()

        logger.info(
            "product_added",
            extra={"product_id": product.id, "initial_stock": str(initial)},
        )
        return product_to_dto(product)
