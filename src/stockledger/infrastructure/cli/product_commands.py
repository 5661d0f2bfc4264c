"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from stockledger.application.add_product import AddProductHandler
from stockledger.application.deactivate_product import DeactivateProductHandler
from stockledger.application.find_product import FindProductHandler
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.application.update_product import UpdateProductHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import max_attempts, unit_of_work
from stockledger.infrastructure.cli.parsing import fmt_qty, parse_decimal, resolve_product_id


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--cost", "cost_price", required=True, help="Cost price (e.g. 60.00).")
@click.option("--price", "selling_price", required=True, help="Selling price (e.g. 100.00).")
@click.option("--stock", "initial_stock", default="0", help="Opening stock quantity.")
@click.option("--min-stock", default="10", help="Low-stock threshold.")
@click.option("--max-stock", default="1000", help="Maximum stock level.")
@click.option("--unit", default="piece", help="Unit of measure.")
@click.option("--sku", default=None, help="Stock keeping unit (generated if omitted).")
@click.option("--supplier-id", default=None, help="Default supplier ID.")
def product_add(
    name: str,
    cost_price: str,
    selling_price: str,
    initial_stock: str,
    min_stock: str,
    max_stock: str,
    unit: str,
    sku: str | None,
    supplier_id: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        product = handler.handle(
            name=name,
            cost_price=cost_price,
            selling_price=selling_price,
            initial_stock=parse_decimal(initial_stock, "stock"),
            min_stock_level=parse_decimal(min_stock, "minimum stock"),
            max_stock_level=parse_decimal(max_stock, "maximum stock"),
            unit=unit,
            sku=sku,
            supplier_id=supplier_id,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product {product.id} '{product.name}' ({product.sku}) added "
        f"at {product.selling_price}, stock {fmt_qty(product.current_stock)} {product.unit}"
    )


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, default=False,
              help="Include deactivated products.")
def product_list(include_inactive: bool) -> None:
    """List products in the catalog."""
    report = ShowInventoryHandler(unit_of_work()).handle(include_inactive=include_inactive)

    if not report.products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<36}  {'Name':<20} {'SKU':<14} {'Cost':>10} {'Price':>10}")
    click.echo("-" * 95)
    for p in report.products:
        name = p.name if p.is_active else f"{p.name} (inactive)"
        click.echo(
            f"{p.id:<36}  {name:<20} {(p.sku or ''):<14} {p.cost_price:>10} {p.selling_price:>10}"
        )


@click.command("show")
@click.argument("product")
def product_show(product: str) -> None:
    """Show a product by ID or name."""
    try:
        dto = FindProductHandler(unit_of_work()).handle(product)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id}")
    click.echo(f"Name:       {dto.name}")
    click.echo(f"SKU:        {dto.sku}")
    click.echo(f"Stock:      {fmt_qty(dto.current_stock)} {dto.unit}"
               + ("  (LOW)" if dto.is_low_stock else ""))
    click.echo(f"Levels:     min {fmt_qty(dto.min_stock_level)} / max {fmt_qty(dto.max_stock_level)}")
    click.echo(f"Cost:       {dto.cost_price}")
    click.echo(f"Price:      {dto.selling_price}  (margin {dto.profit_margin}%)")
    click.echo(f"Value:      {dto.stock_value}")
    click.echo(f"Active:     {'yes' if dto.is_active else 'no'}")


@click.command("update")
@click.option("--product", required=True, help="Product ID or name.")
@click.option("--cost", "cost_price", default=None, help="New cost price.")
@click.option("--price", "selling_price", default=None, help="New selling price.")
@click.option("--min-stock", default=None, help="New low-stock threshold.")
@click.option("--max-stock", default=None, help="New maximum stock level.")
def product_update(
    product: str,
    cost_price: str | None,
    selling_price: str | None,
    min_stock: str | None,
    max_stock: str | None,
) -> None:
    """Update a product's prices or stock thresholds."""
    if not any((cost_price, selling_price, min_stock, max_stock)):
        raise click.UsageError("Nothing to update.")
    product_id = resolve_product_id(product)
    handler = UpdateProductHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        dto = handler.handle(
            product_id=product_id,
            cost_price=cost_price,
            selling_price=selling_price,
            min_stock_level=parse_decimal(min_stock, "minimum stock") if min_stock else None,
            max_stock_level=parse_decimal(max_stock, "maximum stock") if max_stock else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product '{dto.name}' updated: cost {dto.cost_price}, price {dto.selling_price}")


@click.command("deactivate")
@click.option("--product", required=True, help="Product ID or name.")
def product_deactivate(product: str) -> None:
    """Deactivate a product so it can no longer be sold."""
    product_id = resolve_product_id(product)
    handler = DeactivateProductHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product '{product}' deactivated.")
