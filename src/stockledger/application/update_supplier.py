"""Application service: Update Supplier use case."""

from __future__ import annotations

import logging

from stockledger.application.dto import SupplierDTO
from stockledger.application.mapping import supplier_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.repository.unit_of_work import UnitOfWork, supplier_lock_key

logger = logging.getLogger(__name__)


class UpdateSupplierHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        supplier_id: str,
        name: str | None = None,
        contact_person: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        payment_terms: str | None = None,
    ) -> SupplierDTO:
        return run_with_retry(
            self._update,
            supplier_id,
            name,
            contact_person,
            email,
            phone,
            payment_terms,
            max_attempts=self._max_attempts,
        )

    def _update(
        self,
        supplier_id: str,
        name: str | None,
        contact_person: str | None,
        email: str | None,
        phone: str | None,
        payment_terms: str | None,
    ) -> SupplierDTO:
        with self._uow:
            self._uow.lock(supplier_lock_key(supplier_id))
            supplier = self._uow.suppliers.get_by_id(supplier_id)
            if supplier is None:
                raise EntityNotFoundError("Supplier", supplier_id)

            supplier.update_details(
                name=name,
                contact_person=contact_person,
                email=email,
                phone=phone,
                payment_terms=payment_terms,
            )
            for other in self._uow.suppliers.list_all():
                if other.id != supplier.id and other.name.lower() == supplier.name.lower():
                    raise ValidationError(f"Supplier '{supplier.name}' already exists")

            self._uow.suppliers.save(supplier)
            self._uow.commit()

        logger.info("supplier_updated", extra={"supplier_id": supplier_id})
        return supplier_to_dto(supplier)
