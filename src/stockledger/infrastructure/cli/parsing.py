"""Helpers shared by the command modules: item parsing and display."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import click

from stockledger.application.find_product import FindProductHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import unit_of_work


def parse_decimal(raw: str, what: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise click.BadParameter(f"Invalid {what} '{raw}'.")
    if not value.is_finite():
        raise click.BadParameter(f"Invalid {what} '{raw}'.")
    return value


def parse_date(raw: str, what: str) -> date:
    try:
        return datetime.strptime(raw.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"Invalid {what} '{raw}', expected YYYY-MM-DD.")


def split_items(raw: str, min_parts: int, max_parts: int, usage: str) -> list[list[str]]:
    """Split 'A:1,B:2:3.50' into [['A', '1'], ['B', '2', '3.50']]."""
    rows: list[list[str]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        parts = [p.strip() for p in pair.split(":")]
        if not min_parts <= len(parts) <= max_parts or not parts[0]:
            raise click.BadParameter(f"Invalid item format '{pair}'. Expected '{usage}'.")
        rows.append(parts)
    if not rows:
        raise click.BadParameter(f"No items given. Expected '{usage}'.")
    return rows


def resolve_product_id(id_or_name: str) -> str:
    """Accept either a product ID or its name."""
    try:
        return FindProductHandler(unit_of_work()).handle(id_or_name).id
    except DomainException as exc:
        raise click.ClickException(str(exc))


def fmt_qty(value: Decimal) -> str:
    """Render 15, 2.5 and 1E+2 as '15', '2.5' and '100'."""
    return format(value.normalize(), "f")
