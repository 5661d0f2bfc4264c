"""CLI commands for suppliers."""

from __future__ import annotations

import click

from stockledger.application.add_supplier import AddSupplierHandler, ListSuppliersHandler
from stockledger.application.deactivate_supplier import DeactivateSupplierHandler
from stockledger.application.update_supplier import UpdateSupplierHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import max_attempts, unit_of_work


@click.command("add")
@click.option("--name", required=True, help="Supplier name.")
@click.option("--contact", "contact_person", default=None, help="Contact person.")
@click.option("--email", default=None, help="Email address.")
@click.option("--phone", default=None, help="Phone number.")
@click.option("--terms", "payment_terms", default="net30", help="Payment terms (e.g. net30).")
def supplier_add(
    name: str,
    contact_person: str | None,
    email: str | None,
    phone: str | None,
    payment_terms: str,
) -> None:
    """Register a supplier."""
    handler = AddSupplierHandler(unit_of_work())

    try:
        dto = handler.handle(
            name=name,
            contact_person=contact_person,
            email=email,
            phone=phone,
            payment_terms=payment_terms,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier {dto.id} '{dto.name}' added ({dto.payment_terms})")


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, default=False,
              help="Include deactivated suppliers.")
def supplier_list(include_inactive: bool) -> None:
    """List suppliers."""
    suppliers = ListSuppliersHandler(unit_of_work()).handle(include_inactive=include_inactive)

    if not suppliers:
        click.echo("No suppliers found.")
        return

    click.echo(f"{'ID':<36}  {'Name':<24} {'Contact':<20} {'Terms':<6}")
    click.echo("-" * 90)
    for s in suppliers:
        click.echo(f"{s.id:<36}  {s.name:<24} {(s.contact_person or ''):<20} {s.payment_terms:<6}")


@click.command("update")
@click.option("--id", "supplier_id", required=True, help="Supplier ID.")
@click.option("--name", default=None, help="New supplier name.")
@click.option("--contact", "contact_person", default=None, help="New contact person.")
@click.option("--email", default=None, help="New email address.")
@click.option("--phone", default=None, help="New phone number.")
@click.option("--terms", "payment_terms", default=None, help="New payment terms.")
def supplier_update(
    supplier_id: str,
    name: str | None,
    contact_person: str | None,
    email: str | None,
    phone: str | None,
    payment_terms: str | None,
) -> None:
    """Update a supplier's details."""
    if not any((name, contact_person, email, phone, payment_terms)):
        raise click.UsageError("Nothing to update.")
    handler = UpdateSupplierHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        dto = handler.handle(
            supplier_id,
            name=name,
            contact_person=contact_person,
            email=email,
            phone=phone,
            payment_terms=payment_terms,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier '{dto.name}' updated ({dto.payment_terms})")


@click.command("deactivate")
@click.option("--id", "supplier_id", required=True, help="Supplier ID.")
def supplier_deactivate(supplier_id: str) -> None:
    """Deactivate a supplier with no active products or open orders."""
    handler = DeactivateSupplierHandler(unit_of_work(), max_attempts=max_attempts())

    try:
        handler.handle(supplier_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier {supplier_id} deactivated.")
