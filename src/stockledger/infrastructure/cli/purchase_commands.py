"""CLI commands for purchase orders."""

from __future__ import annotations

import click

from stockledger.application.cancel_purchase import CancelPurchaseHandler
from stockledger.application.create_purchase import CreatePurchaseHandler
from stockledger.application.dto import PurchaseItemSpec, PurchaseOrderDTO, ReceiptItemSpec
from stockledger.application.receive_purchase import ReceivePurchaseHandler
from stockledger.application.show_purchase import ListPurchasesHandler, ShowPurchaseHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import max_attempts, unit_of_work
from stockledger.infrastructure.cli.parsing import (
    fmt_qty,
    parse_date,
    parse_decimal,
    resolve_product_id,
    split_items,
)


def _parse_items(raw: str) -> list[PurchaseItemSpec]:
    """Parse 'Widget:10:4.50,Gadget:5:12.00' into PurchaseItemSpec list."""
    return [
        PurchaseItemSpec(
            product_id=resolve_product_id(parts[0]),
            quantity=parse_decimal(parts[1], f"quantity for '{parts[0]}'"),
            unit_cost=parts[2],
        )
        for parts in split_items(raw, 3, 3, "Product:Qty:UnitCost")
    ]


def _parse_receipts(raw: str) -> list[ReceiptItemSpec]:
    """Parse 'Widget:7:B-12:2027-03-31,Gadget:5' (cumulative received quantities)."""
    specs: list[ReceiptItemSpec] = []
    for parts in split_items(raw, 2, 4, "Product:ReceivedQty[:Batch[:Expiry]]"):
        batch = parts[2] if len(parts) > 2 and parts[2] else None
        expiry = None
        if len(parts) > 3:
            expiry = parse_date(parts[3], f"expiry date for '{parts[0]}'")
        specs.append(
            ReceiptItemSpec(
                product_id=resolve_product_id(parts[0]),
                received_quantity=parse_decimal(parts[1], f"quantity for '{parts[0]}'"),
                expiry_date=expiry,
                batch_number=batch,
            )
        )
    return specs


def _resolve_order_id(order: str) -> str:
    try:
        return ShowPurchaseHandler(unit_of_work()).handle(order).id
    except DomainException as exc:
        raise click.ClickException(str(exc))


def _display_purchase(dto: PurchaseOrderDTO) -> None:
    """Shared formatting for displaying a purchase order."""
    click.echo(f"Purchase order {dto.purchase_order_number}  (status={dto.status})")
    click.echo(f"Supplier: {dto.supplier_id}")
    click.echo(f"Ordered:  {dto.order_date}")
    if dto.received_date:
        click.echo(f"Received: {dto.received_date}")
    click.echo()
    click.echo(
        f"  {'Product':<20} {'Qty':>7} {'Received':>9} {'Remaining':>10} {'Cost':>10} {'Total':>10}"
    )
    click.echo(f"  {'-'*71}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {fmt_qty(item.quantity):>7} "
            f"{fmt_qty(item.received_quantity):>9} {fmt_qty(item.remaining_quantity):>10} "
            f"{item.unit_cost:>10} {item.total_cost:>10}"
        )
    click.echo(f"  {'-'*71}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>44}")
    click.echo(f"  {'Tax':<27} {dto.tax_amount:>44}")
    click.echo(f"  {'Discount':<27} {dto.discount_amount:>44}")
    click.echo(f"  {'Total':<27} {dto.total_amount:>44}")


@click.command("create")
@click.option("--supplier-id", required=True, help="Supplier ID.")
@click.option("--items", required=True, help="Items as 'Product:Qty:UnitCost,...'.")
@click.option("--tax", "tax_amount", default=None, help="Tax amount.")
@click.option("--discount", "discount_amount", default=None, help="Order-level discount.")
@click.option("--expected", "expected_delivery", default=None,
              type=click.DateTime(formats=["%Y-%m-%d"]), help="Expected delivery date.")
@click.option("--notes", default=None, help="Free-text notes.")
def purchase_create(
    supplier_id: str,
    items: str,
    tax_amount: str | None,
    discount_amount: str | None,
    expected_delivery,
    notes: str | None,
) -> None:
    """Create a pending purchase order."""
    specs = _parse_items(items)
    handler = CreatePurchaseHandler(unit_of_work())

    try:
        dto = handler.handle(
            supplier_id=supplier_id,
            item_specs=specs,
            tax_amount=tax_amount,
            discount_amount=discount_amount,
            expected_delivery_date=expected_delivery.date() if expected_delivery else None,
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_purchase(dto)


@click.command("receive")
@click.option("--order", required=True, help="Purchase order ID or number.")
@click.option("--items", required=True,
              help="Cumulative received quantities as 'Product:Qty[:Batch[:YYYY-MM-DD]],...'.")
def purchase_receive(order: str, items: str) -> None:
    """Record goods received against a purchase order.

    Quantities are the total received so far for each line, not the
    increment; re-sending the same figures changes nothing.
    """
    order_id = _resolve_order_id(order)
    receipts = _parse_receipts(items)
    handler = ReceivePurchaseHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        dto = handler.handle(order_id, receipts)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_purchase(dto)


@click.command("cancel")
@click.option("--order", required=True, help="Purchase order ID or number.")
def purchase_cancel(order: str) -> None:
    """Cancel a purchase order (received goods stay in stock)."""
    order_id = _resolve_order_id(order)
    handler = CancelPurchaseHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order {dto.purchase_order_number} cancelled.")


@click.command("show")
@click.argument("order")
def purchase_show(order: str) -> None:
    """Show a purchase order by ID or number."""
    try:
        dto = ShowPurchaseHandler(unit_of_work()).handle(order)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_purchase(dto)


@click.command("list")
@click.option("--status", default=None, help="Only orders with this status.")
def purchase_list(status: str | None) -> None:
    """List purchase orders."""
    orders = ListPurchasesHandler(unit_of_work()).handle(status=status)

    if not orders:
        click.echo("No purchase orders found.")
        return

    click.echo(f"{'Number':<10} {'Status':<20} {'Ordered':<20} {'Total':>10}")
    click.echo("-" * 63)
    for o in orders:
        click.echo(f"{o.purchase_order_number:<10} {o.status:<20} {o.order_date:<20} {o.total_amount:>10}")
