"""CLI commands for sales."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import click

from stockledger.application.create_sale import CreateSaleHandler
from stockledger.application.dto import CustomerSpec, SaleDTO, SaleItemSpec
from stockledger.application.sales_summary import SalesSummaryHandler
from stockledger.application.show_sale import ListSalesHandler, ShowSaleHandler
from stockledger.application.update_payment import UpdatePaymentHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import max_attempts, unit_of_work
from stockledger.infrastructure.cli.parsing import (
    fmt_qty,
    parse_decimal,
    resolve_product_id,
    split_items,
)


def _parse_items(raw: str) -> list[SaleItemSpec]:
    """Parse 'Widget:3,Gadget:5:19.99' into SaleItemSpec list."""
    specs: list[SaleItemSpec] = []
    for parts in split_items(raw, 2, 3, "Product:Qty[:UnitPrice]"):
        specs.append(
            SaleItemSpec(
                product_id=resolve_product_id(parts[0]),
                quantity=parse_decimal(parts[1], f"quantity for '{parts[0]}'"),
                unit_price=parts[2] if len(parts) == 3 else None,
            )
        )
    return specs


def _display_sale(dto: SaleDTO) -> None:
    """Shared formatting for displaying a sale."""
    click.echo(f"Invoice {dto.invoice_number}  (sale {dto.id})")
    click.echo(f"Date:     {dto.sale_date}")
    if dto.customer_name:
        click.echo(f"Customer: {dto.customer_name}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>7} {'Price':>10} {'Disc':>8} {'Total':>10}")
    click.echo(f"  {'-'*59}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {fmt_qty(item.quantity):>7} {item.unit_price:>10} "
            f"{item.discount:>8} {item.total_price:>10}"
        )
    click.echo(f"  {'-'*59}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>32}")
    click.echo(f"  {'Tax':<27} {dto.tax_amount:>32}")
    click.echo(f"  {'Discount':<27} {dto.discount_amount:>32}")
    click.echo(f"  {'Total':<27} {dto.total_amount:>32}")
    click.echo(
        f"Payment: {dto.payment_method}, {dto.payment_status} "
        f"(paid {dto.paid_amount}, due {dto.balance_due})"
    )


@click.command("create")
@click.option("--items", required=True, help="Items as 'Product:Qty[:UnitPrice],...'.")
@click.option("--method", "payment_method", default="cash", help="Payment method.")
@click.option("--status", "payment_status", default=None, help="Payment status (default paid).")
@click.option("--paid", "paid_amount", default=None, help="Amount paid so far.")
@click.option("--tax", "tax_amount", default=None, help="Tax amount.")
@click.option("--discount", "discount_amount", default=None, help="Sale-level discount.")
@click.option("--customer", default=None, help="Customer name.")
@click.option("--phone", default=None, help="Customer phone.")
@click.option("--email", default=None, help="Customer email.")
@click.option("--notes", default=None, help="Free-text notes.")
def sale_create(
    items: str,
    payment_method: str,
    payment_status: str | None,
    paid_amount: str | None,
    tax_amount: str | None,
    discount_amount: str | None,
    customer: str | None,
    phone: str | None,
    email: str | None,
    notes: str | None,
) -> None:
    """Record a sale and take its items out of stock."""
    specs = _parse_items(items)
    handler = CreateSaleHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        dto = handler.handle(
            item_specs=specs,
            payment_method=payment_method,
            payment_status=payment_status,
            paid_amount=paid_amount,
            tax_amount=tax_amount,
            discount_amount=discount_amount,
            customer=CustomerSpec(name=customer, phone=phone, email=email),
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_sale(dto)


@click.command("show")
@click.argument("sale")
def sale_show(sale: str) -> None:
    """Show a sale by ID or invoice number."""
    try:
        dto = ShowSaleHandler(unit_of_work()).handle(sale)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_sale(dto)


@click.command("list")
@click.option("--limit", default=20, type=int, help="Number of recent sales to show.")
def sale_list(limit: int) -> None:
    """List the most recent sales."""
    sales = ListSalesHandler(unit_of_work()).handle(limit=limit)

    if not sales:
        click.echo("No sales found.")
        return

    click.echo(f"{'Invoice':<12} {'Date':<20} {'Customer':<20} {'Total':>10} {'Status':<8}")
    click.echo("-" * 74)
    for s in sales:
        click.echo(
            f"{s.invoice_number:<12} {s.sale_date:<20} {(s.customer_name or ''):<20} "
            f"{s.total_amount:>10} {s.payment_status:<8}"
        )


@click.command("pay")
@click.option("--id", "sale_id", required=True, help="Sale ID.")
@click.option("--status", "payment_status", required=True, help="paid, partial or pending.")
@click.option("--amount", "paid_amount", required=True, help="Total amount paid so far.")
def sale_pay(sale_id: str, payment_status: str, paid_amount: str) -> None:
    """Record a payment against a sale."""
    handler = UpdatePaymentHandler(unit_of_work())

    try:
        dto = handler.handle(sale_id, payment_status, paid_amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Sale {dto.invoice_number}: {dto.payment_status}, paid {dto.paid_amount}, "
        f"due {dto.balance_due}"
    )


@click.command("summary")
@click.option("--from", "start", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="First day (YYYY-MM-DD, UTC). Defaults to today.")
@click.option("--to", "end", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Last day (YYYY-MM-DD, UTC). Defaults to the first day.")
def sale_summary(start: datetime | None, end: datetime | None) -> None:
    """Show sales count, revenue and profit for a range of days."""
    try:
        summary = SalesSummaryHandler(unit_of_work()).handle(
            start=start.date() if start else None,
            end=end.date() if end else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    period = str(summary.start)
    if summary.end != summary.start:
        period = f"{summary.start} to {summary.end}"
    click.echo(f"Sales summary for {period}")
    click.echo(f"Sales:       {summary.sale_count}")
    click.echo(f"Revenue:     {summary.total_revenue}")
    click.echo(f"Profit:      {_fmt_signed_money(summary.total_profit)}")
    click.echo(f"Outstanding: {summary.amount_outstanding} ({summary.pending_payments} pending)")
    methods = ", ".join(
        f"{name} {count}" for name, count in summary.by_payment_method.items() if count
    )
    if methods:
        click.echo(f"By method:   {methods}")


def _fmt_signed_money(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):.2f}"
