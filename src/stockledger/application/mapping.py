"""Domain -> DTO mapping shared by several handlers."""

from __future__ import annotations

from stockledger.application.dto import (
    LedgerEntryDTO,
    ProductDTO,
    PurchaseLineItemDTO,
    PurchaseOrderDTO,
    SaleDTO,
    SaleLineItemDTO,
    SupplierDTO,
)
from stockledger.domain.model.ledger import StockLedgerEntry
from stockledger.domain.model.product import Product
from stockledger.domain.model.purchase import PurchaseOrder
from stockledger.domain.model.sale import Sale
from stockledger.domain.model.supplier import Supplier

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        name=product.name,
        sku=product.sku,
        unit=product.unit,
        current_stock=product.current_stock,
        min_stock_level=product.min_stock_level,
        max_stock_level=product.max_stock_level,
        cost_price=str(product.cost_price),
        selling_price=str(product.selling_price),
        stock_value=str(product.stock_value),
        profit_margin=product.profit_margin,
        is_low_stock=product.is_low_stock,
        is_active=product.is_active,
    )


def supplier_to_dto(supplier: Supplier) -> SupplierDTO:
    return SupplierDTO(
        id=supplier.id,
        name=supplier.name,
        contact_person=supplier.contact_person,
        email=supplier.email,
        phone=supplier.phone,
        payment_terms=supplier.payment_terms,
        is_active=supplier.is_active,
    )


def ledger_entry_to_dto(entry: StockLedgerEntry) -> LedgerEntryDTO:
    return LedgerEntryDTO(
        id=entry.id,
        product_id=entry.product_id,
        transaction_type=entry.transaction_type.value,
        reason=entry.reason.value,
        quantity=entry.quantity,
        previous_stock=entry.previous_stock,
        new_stock=entry.new_stock,
        unit_cost=str(entry.unit_cost),
        total_value=str(entry.total_value),
        reference_id=entry.reference_id,
        reference_type=entry.reference.reference_type.value if entry.reference else None,
        notes=entry.notes,
        batch_number=entry.batch_number,
        expiry_date=entry.expiry_date.isoformat() if entry.expiry_date else None,
        created_at=entry.created_at.strftime(_TIMESTAMP_FORMAT),
    )


def sale_to_dto(sale: Sale) -> SaleDTO:
    return SaleDTO(
        id=sale.id,
        invoice_number=sale.invoice_number,
        customer_name=sale.customer_name,
        items=[
            SaleLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=str(item.unit_price),
                discount=str(item.discount),
                total_price=str(item.total_price),
            )
            for item in sale.items
        ],
        subtotal=str(sale.subtotal),
        tax_amount=str(sale.tax_amount),
        discount_amount=str(sale.discount_amount),
        total_amount=str(sale.total_amount),
        payment_method=sale.payment_method.value,
        payment_status=sale.payment_status.value,
        paid_amount=str(sale.paid_amount),
        balance_due=str(sale.balance_due),
        sale_date=sale.sale_date.strftime(_TIMESTAMP_FORMAT),
    )


def purchase_to_dto(order: PurchaseOrder) -> PurchaseOrderDTO:
    return PurchaseOrderDTO(
        id=order.id,
        purchase_order_number=order.purchase_order_number,
        supplier_id=order.supplier_id,
        status=order.status.value,
        items=[
            PurchaseLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_cost=str(item.unit_cost),
                total_cost=str(item.total_cost),
                received_quantity=item.received_quantity,
                remaining_quantity=item.remaining_quantity,
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        tax_amount=str(order.tax_amount),
        discount_amount=str(order.discount_amount),
        total_amount=str(order.total_amount),
        order_date=order.order_date.strftime(_TIMESTAMP_FORMAT),
        received_date=(
            order.received_date.strftime(_TIMESTAMP_FORMAT) if order.received_date else None
        ),
    )
