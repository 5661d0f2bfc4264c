"""Application service: Add Supplier / List Suppliers use cases."""

from __future__ import annotations

import logging
import uuid

from stockledger.application.dto import SupplierDTO
from stockledger.application.mapping import supplier_to_dto
from stockledger.domain.model.supplier import Supplier
from stockledger.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class AddSupplierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        contact_person: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        payment_terms: str = "net30",
    ) -> SupplierDTO:
        supplier = Supplier.create(
            supplier_id=str(uuid.uuid4()),
            name=name,
            contact_person=contact_person,
            email=email,
            phone=phone,
            payment_terms=payment_terms,
        )
        with self._uow:
            self._uow.suppliers.save(supplier)
            self._uow.commit()

        logger.info("supplier_added", extra={"supplier_id": supplier.id})
        return supplier_to_dto(supplier)


class ListSuppliersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, include_inactive: bool = False) -> list[SupplierDTO]:
        with self._uow:
            suppliers = self._uow.suppliers.list_all()
        return [
            supplier_to_dto(s)
            for s in sorted(suppliers, key=lambda s: s.name.lower())
            if include_inactive or s.is_active
        ]
