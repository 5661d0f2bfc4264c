"""Application service: Create Sale use case.

All-or-nothing: every product on the sale is locked (in a fixed order)
before any availability check, every line is checked before any stock
moves, and the sale, its invoice number's document, the stock decrements
and the ledger entries are committed together.

Steps:
1. Lock and resolve every product (fail if one does not exist).
2. Check availability for every product, summing repeated lines.
3. Build line items, defaulting unit price to the selling price.
4. Allocate an invoice number and create the Sale.
5. Decrement stock, one ``out / sale`` ledger entry per line.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date
from decimal import Decimal

from stockledger.application.choices import parse_payment_method, parse_payment_status
from stockledger.application.dto import CustomerSpec, SaleDTO, SaleItemSpec
from stockledger.application.mapping import sale_to_dto
from stockledger.application.retry import DEFAULT_MAX_ATTEMPTS, run_with_retry
from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from stockledger.domain.model.ledger import MovementReason, ReferenceType, StockReference
from stockledger.domain.model.product import Product
from stockledger.domain.model.sale import PaymentMethod, PaymentStatus, Sale, SaleLineItem
from stockledger.domain.model.value_objects import Money, positive_quantity
from stockledger.domain.repository.unit_of_work import UnitOfWork, product_lock_key
from stockledger.domain.service.document_numbering_service import DocumentNumberingService
from stockledger.domain.service.stock_movement_service import StockMovementService

logger = logging.getLogger(__name__)


class CreateSaleHandler:

    def __init__(self, uow: UnitOfWork, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self._uow = uow
        self._max_attempts = max_attempts

    def handle(
        self,
        item_specs: list[SaleItemSpec],
        payment_method: str = PaymentMethod.CASH.value,
        payment_status: str | None = None,
        paid_amount: str | None = None,
        tax_amount: str | None = None,
        discount_amount: str | None = None,
        customer: CustomerSpec | None = None,
        notes: str | None = None,
        today: date | None = None,
    ) -> SaleDTO:
        """Create a sale and take its goods out of stock.

        When no paid amount is given, a ``paid`` sale is taken as paid in
        full and any other status as nothing paid yet.
        """
        if not item_specs:
            raise ValidationError("Sale must contain at least one item")
        for spec in item_specs:
            positive_quantity(spec.quantity)

        return run_with_retry(
            self._create,
            item_specs,
            parse_payment_method(payment_method),
            parse_payment_status(payment_status),
            Money.of(paid_amount) if paid_amount is not None else None,
            Money.of(tax_amount) if tax_amount is not None else None,
            Money.of(discount_amount) if discount_amount is not None else None,
            customer or CustomerSpec(),
            notes,
            today,
            max_attempts=self._max_attempts,
        )

    def _create(
        self,
        item_specs: list[SaleItemSpec],
        payment_method: PaymentMethod,
        payment_status: PaymentStatus,
        paid_amount: Money | None,
        tax_amount: Money | None,
        discount_amount: Money | None,
        customer: CustomerSpec,
        notes: str | None,
        today: date | None,
    ) -> SaleDTO:
        with self._uow:
            self._uow.lock(*(product_lock_key(spec.product_id) for spec in item_specs))

            # Phase 1: resolve and check everything before mutating anything
            products = self._load_products(item_specs)
            self._check_availability(item_specs, products)
            lines = [self._build_line(spec, products[spec.product_id]) for spec in item_specs]

            # Phase 2: create the document
            numbering = DocumentNumberingService(self._uow.sequences)
            sale = Sale.create(
                sale_id=str(uuid.uuid4()),
                invoice_number=numbering.next_invoice_number(today),
                items=lines,
                payment_method=payment_method,
                payment_status=payment_status,
                tax_amount=tax_amount,
                discount_amount=discount_amount,
                customer_name=customer.name,
                customer_phone=customer.phone,
                customer_email=customer.email,
                notes=notes,
            )
            if paid_amount is None and payment_status == PaymentStatus.PAID:
                sale.update_payment(payment_status, sale.total_amount)
            elif paid_amount is not None:
                sale.update_payment(payment_status, paid_amount)
            self._uow.sales.save(sale)

            # Phase 3: move stock
            movements = StockMovementService(self._uow)
            reference = StockReference(sale.id, ReferenceType.SALE)
            for line in sale.items:
                movements.apply_movement(
                    products[line.product_id],
                    -line.quantity,
                    MovementReason.SALE,
                    unit_cost=line.unit_cost,
                    reference=reference,
                )

            self._uow.commit()

        logger.info(
            "sale_created",
            extra={
                "sale_id": sale.id,
                "invoice_number": sale.invoice_number,
                "total_amount": str(sale.total_amount.amount),
                "lines": len(sale.items),
            },
        )
        return sale_to_dto(sale)

    # --- Internal helpers -----------------------------------------------------

    def _load_products(self, item_specs: list[SaleItemSpec]) -> dict[str, Product]:
        products: dict[str, Product] = {}
        for spec in item_specs:
            if spec.product_id in products:
                continue
            product = self._uow.products.get_by_id(spec.product_id)
            if product is None or not product.is_active:
                raise EntityNotFoundError("Product", spec.product_id)
            products[spec.product_id] = product
        return products

    @staticmethod
    def _check_availability(
        item_specs: list[SaleItemSpec], products: dict[str, Product]
    ) -> None:
        requested: dict[str, Decimal] = defaultdict(Decimal)
        for spec in item_specs:
            requested[spec.product_id] += positive_quantity(spec.quantity)

        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.current_stock < quantity:
                raise InsufficientStockError(product.name, product.current_stock, quantity)

    @staticmethod
    def _build_line(spec: SaleItemSpec, product: Product) -> SaleLineItem:
        unit_price = (
            Money.of(spec.unit_price) if spec.unit_price is not None else product.selling_price
        )
        return SaleLineItem(
            product_id=product.id,
            product_name=product.name,
            quantity=positive_quantity(spec.quantity),
            unit_price=unit_price,
            unit_cost=product.cost_price,
            discount=Money.of(spec.discount) if spec.discount is not None else Money.zero(),
        )

