"""Supplier management commands."""

import click
from shopledger.cli.error_handling import handle_domain_error
from shopledger.domain.entities import SupplierType
from shopledger.domain.errors import DomainError
from shopledger.domain.supplier import SupplierService


@click.group()
def supplier_group():
    """Manage suppliers and trade-in customers."""
    pass


@supplier_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "supplier_type",
    type=click.Choice([t.value for t in SupplierType], case_sensitive=False),
    default=SupplierType.REGISTERED.value,
    help="registered trade supplier or walk-in customer (default: registered)",
)
@click.option("--email", help="Contact email")
@click.option("--phone", help="Contact phone")
@click.pass_context
def create_supplier(ctx, name: str, supplier_type: str, email: str | None, phone: str | None):
    """Create a supplier."""
    service = SupplierService(ctx.obj["db"], ctx.obj["cache"])
    try:
        supplier_id = service.create_supplier(
            name=name,
            supplier_type=SupplierType(supplier_type.lower()),
            email=email,
            phone=phone,
        )
        click.echo(f"Created supplier '{name}' (ID: {supplier_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@supplier_group.command("list")
@click.option(
    "--type",
    "supplier_type",
    type=click.Choice([t.value for t in SupplierType], case_sensitive=False),
    help="Only list one type of supplier",
)
@click.pass_context
def list_suppliers(ctx, supplier_type: str | None):
    """List suppliers."""
    service = SupplierService(ctx.obj["db"], ctx.obj["cache"])
    suppliers = service.list_suppliers(
        SupplierType(supplier_type.lower()) if supplier_type else None
    )
    if not suppliers:
        click.echo("No suppliers found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<30} {'Type':<12} {'Email':<30}")
    click.echo("-" * 80)
    for s in suppliers:
        click.echo(f"{s.id:<6} {s.name[:30]:<30} {s.supplier_type.value:<12} {(s.email or ''):<30}")


def register_commands(cli):
    """Register supplier commands with main CLI."""
    cli.add_command(supplier_group, name="supplier")
