"""CLI commands for stock levels and the stock ledger."""

from __future__ import annotations

import click

from stockledger.application.adjust_stock import AdjustStockHandler
from stockledger.application.dto import LedgerEntryDTO
from stockledger.application.reconcile_stock import ReconcileStockHandler
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.application.stock_history import DEFAULT_HISTORY_LIMIT, StockHistoryHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import max_attempts, unit_of_work
from stockledger.infrastructure.cli.parsing import fmt_qty, parse_decimal, resolve_product_id


def _display_entries(entries: list[LedgerEntryDTO]) -> None:
    click.echo(
        f"{'When':<20} {'Type':<10} {'Reason':<14} {'Qty':>7} {'Before':>8} {'After':>8} "
        f"{'Value':>10}  Batch"
    )
    click.echo("-" * 96)
    for e in entries:
        click.echo(
            f"{e.created_at:<20} {e.transaction_type:<10} {e.reason:<14} "
            f"{fmt_qty(e.quantity):>7} {fmt_qty(e.previous_stock):>8} "
            f"{fmt_qty(e.new_stock):>8} {e.total_value:>10}  {e.batch_number or ''}"
        )


@click.command("show")
@click.option("--low", "low_only", is_flag=True, default=False, help="Only low-stock products.")
def stock_show(low_only: bool) -> None:
    """Show current stock levels."""
    report = ShowInventoryHandler(unit_of_work()).handle()
    products = report.low_stock if low_only else report.products

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'Product':<20} {'Stock':>8} {'Min':>6} {'Max':>6} {'Value':>12}")
    click.echo("-" * 56)
    for p in products:
        flag = "  LOW" if p.is_low_stock else ""
        click.echo(
            f"{p.name:<20} {fmt_qty(p.current_stock):>8} {fmt_qty(p.min_stock_level):>6} "
            f"{fmt_qty(p.max_stock_level):>6} {p.stock_value:>12}{flag}"
        )
    click.echo("-" * 56)
    click.echo(f"{'Total stock value':<42} {report.total_stock_value:>12}")


@click.command("adjust")
@click.option("--product", required=True, help="Product ID or name.")
@click.option("--quantity", required=True, help="Signed change, e.g. -3 or 5.")
@click.option("--reason", required=True,
              help="damage, expired, theft, correction or return.")
@click.option("--notes", default=None, help="Free-text notes (max 200 characters).")
def stock_adjust(product: str, quantity: str, reason: str, notes: str | None) -> None:
    """Manually correct a product's stock."""
    product_id = resolve_product_id(product)
    delta = parse_decimal(quantity, "quantity")
    handler = AdjustStockHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        dto = handler.handle(product_id, delta, reason, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"'{dto.product_name}' stock {fmt_qty(dto.previous_stock)} -> {fmt_qty(dto.new_stock)}"
    )
    if dto.applied != dto.requested:
        click.echo(
            f"Requested {fmt_qty(dto.requested)}, applied {fmt_qty(dto.applied)} "
            f"(stock cannot go below zero)."
        )


@click.command("history")
@click.option("--product", default=None, help="Product ID or name.")
@click.option("--reference", default=None, help="Sale or purchase order ID.")
@click.option("--limit", default=DEFAULT_HISTORY_LIMIT, type=int, help="Entries to show.")
def stock_history(product: str | None, reference: str | None, limit: int) -> None:
    """Show ledger entries for a product or a document."""
    if (product is None) == (reference is None):
        raise click.UsageError("Give exactly one of --product or --reference.")
    handler = StockHistoryHandler(unit_of_work())

    try:
        if product is not None:
            entries = handler.for_product(resolve_product_id(product), limit=limit)
        else:
            entries = handler.for_reference(reference)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not entries:
        click.echo("No ledger entries found.")
        return
    _display_entries(entries)


@click.command("reconcile")
def stock_reconcile() -> None:
    """Check every product's stock against its ledger."""
    mismatches = ReconcileStockHandler(unit_of_work()).handle()

    if not mismatches:
        click.echo("Stock matches the ledger for every product.")
        return

    click.echo(f"{'Product':<20} {'Stock':>8} {'Ledger':>8} {'Diff':>8}")
    click.echo("-" * 47)
    for m in mismatches:
        click.echo(
            f"{m.product_name:<20} {fmt_qty(m.current_stock):>8} "
            f"{fmt_qty(m.ledger_balance):>8} {fmt_qty(m.difference):>8}"
        )
    raise click.ClickException(f"{len(mismatches)} product(s) out of balance")
