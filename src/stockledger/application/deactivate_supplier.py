"""Application service: Deactivate Supplier use case (soft delete).

Refused while the supplier still has active products or open purchase
orders.  Adding a product or creating a purchase order for a supplier
takes the same supplier lock, so neither can slip in between the check
and the commit.
"""

from __future__ import annotations

import logging

from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError, InvalidStateError
from stockledger.domain.model.purchase import PurchaseStatus
from stockledger.domain.repository.unit_of_work import UnitOfWork, supplier_lock_key

logger = logging.getLogger(__name__)

_OPEN_STATUSES = (PurchaseStatus.PENDING, PurchaseStatus.PARTIALLY_RECEIVED)


class DeactivateSupplierHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(self, supplier_id: str) -> None:
        run_with_retry(self._deactivate, supplier_id, max_attempts=self._max_attempts)

    def _deactivate(self, supplier_id: str) -> None:
        with self._uow:
            self._uow.lock(supplier_lock_key(supplier_id))
            supplier = self._uow.suppliers.get_by_id(supplier_id)
            if supplier is None:
                raise EntityNotFoundError("Supplier", supplier_id)

            active_products = [
                p for p in self._uow.products.list_all()
                if p.supplier_id == supplier_id and p.is_active
            ]
            if active_products:
                raise InvalidStateError(
                    f"Cannot deactivate supplier '{supplier.name}': "
                    f"{len(active_products)} active product(s) still reference it"
                )
            open_orders = [
                o for o in self._uow.purchases.list_all()
                if o.supplier_id == supplier_id and o.status in _OPEN_STATUSES
            ]
            if open_orders:
                raise InvalidStateError(
                    f"Cannot deactivate supplier '{supplier.name}': "
                    f"{len(open_orders)} purchase order(s) are still open"
                )

            supplier.deactivate()
            self._uow.suppliers.save(supplier)
            self._uow.commit()

        logger.info("supplier_deactivated", extra={"supplier_id": supplier_id})
