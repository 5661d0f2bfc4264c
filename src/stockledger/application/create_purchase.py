"""Application service: Create Purchase Order use case.

Creates a PENDING order.  No stock moves until goods are received.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from stockledger.application.dto import PurchaseItemSpec, PurchaseOrderDTO
from stockledger.application.mapping import purchase_to_dto
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.purchase import PurchaseOrder, PurchaseOrderLineItem
from stockledger.domain.model.value_objects import Money, positive_quantity
from stockledger.domain.repository.unit_of_work import UnitOfWork, supplier_lock_key
from stockledger.domain.service.document_numbering_service import DocumentNumberingService

logger = logging.getLogger(__name__)


class CreatePurchaseHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        supplier_id: str,
        item_specs: list[PurchaseItemSpec],
        tax_amount: str | None = None,
        discount_amount: str | None = None,
        expected_delivery_date: date | None = None,
        notes: str | None = None,
    ) -> PurchaseOrderDTO:
        """Create a new purchase order.

        Steps:
        1. Resolve the supplier and every product (fail if one is missing).
        2. Build line items with the agreed unit costs.
        3. Allocate a PO number and let the aggregate validate the rest.
        4. Persist and return a DTO.
        """
        if not item_specs:
            raise ValidationError("Purchase order must contain at least one item")
        tax = Money.of(tax_amount) if tax_amount is not None else None
        discount = Money.of(discount_amount) if discount_amount is not None else None

        with self._uow:
            self._uow.lock(supplier_lock_key(supplier_id))
            supplier = self._uow.suppliers.get_by_id(supplier_id)
            if supplier is None or not supplier.is_active:
                raise EntityNotFoundError("Supplier", supplier_id)

            line_items: list[PurchaseOrderLineItem] = []
            for spec in item_specs:
                product = self._uow.products.get_by_id(spec.product_id)
                if product is None:
                    raise EntityNotFoundError("Product", spec.product_id)
                line_items.append(
                    PurchaseOrderLineItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=positive_quantity(spec.quantity),
                        unit_cost=Money.of(spec.unit_cost),
                    )
                )

            numbering = DocumentNumberingService(self._uow.sequences)
            order = PurchaseOrder.create(
                order_id=str(uuid.uuid4()),
                purchase_order_number=numbering.next_purchase_order_number(),
                supplier_id=supplier.id,
                items=line_items,
                tax_amount=tax,
                discount_amount=discount,
                expected_delivery_date=expected_delivery_date,
                notes=notes,
            )
            self._uow.purchases.save(order)
            self._uow.commit()

        logger.info(
            "purchase_created",
            extra={
                "purchase_id": order.id,
                "purchase_order_number": order.purchase_order_number,
                "total_amount": str(order.total_amount.amount),
            },
        )
        return purchase_to_dto(order)
