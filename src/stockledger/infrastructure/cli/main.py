import click

from stockledger.infrastructure.bootstrap import init_logging
from stockledger.infrastructure.cli.product_commands import (
    product_add,
    product_deactivate,
    product_list,
    product_show,
    product_update,
)
from stockledger.infrastructure.cli.purchase_commands import (
    purchase_cancel,
    purchase_create,
    purchase_list,
    purchase_receive,
    purchase_show,
)
from stockledger.infrastructure.cli.sale_commands import (
    sale_create,
    sale_list,
    sale_pay,
    sale_show,
    sale_summary,
)
from stockledger.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_history,
    stock_reconcile,
    stock_show,
)
from stockledger.infrastructure.cli.supplier_commands import (
    supplier_add,
    supplier_deactivate,
    supplier_list,
    supplier_update,
)
from stockledger.infrastructure.config import ConfigurationError


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log operations to stderr.")
def cli(verbose: bool) -> None:
    """Stock Ledger — inventory, sales and purchasing"""
    try:
        init_logging(verbose=verbose)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def supplier() -> None:
    """Manage suppliers."""


@cli.group()
def sale() -> None:
    """Record and inspect sales."""


@cli.group()
def purchase() -> None:
    """Manage purchase orders."""


@cli.group()
def stock() -> None:
    """Inspect and adjust stock levels."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_deactivate)
product.add_command(product_list)
product.add_command(product_show)
product.add_command(product_update)
supplier.add_command(supplier_add)
supplier.add_command(supplier_deactivate)
supplier.add_command(supplier_list)
supplier.add_command(supplier_update)
sale.add_command(sale_create)
sale.add_command(sale_list)
sale.add_command(sale_pay)
sale.add_command(sale_show)
sale.add_command(sale_summary)
purchase.add_command(purchase_cancel)
purchase.add_command(purchase_create)
purchase.add_command(purchase_list)
purchase.add_command(purchase_receive)
purchase.add_command(purchase_show)
stock.add_command(stock_adjust)
stock.add_command(stock_history)
stock.add_command(stock_reconcile)
stock.add_command(stock_show)
