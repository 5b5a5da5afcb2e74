"""Consignment settlement commands."""

import click
from shopledger.cli.error_handling import handle_domain_error, parse_option
from shopledger.domain.consignment import ConsignmentService
from shopledger.domain.entities import SettlementStatus
from shopledger.domain.errors import DomainError
from shopledger.utils.amount_parser import parse_amount


def _money(value) -> str:
    return f"£{value:,.2f}" if value is not None else "-"


@click.group()
def consignment_group():
    """Manage consignment settlements."""
    pass


@consignment_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in SettlementStatus], case_sensitive=False),
    help="Only settled or unsettled settlements",
)
@click.option("--supplier-id", type=int, help="Only this supplier")
@click.pass_context
def list_settlements(ctx, status: str | None, supplier_id: int | None):
    """List settlements, newest first."""
    service = ConsignmentService(ctx.obj["db"], ctx.obj["cache"])
    settlements = service.list_settlements(
        SettlementStatus(status.lower()) if status else None, supplier_id
    )
    if not settlements:
        click.echo("No settlements found.")
        return

    click.echo(f"\n{'ID':<6} {'Product':<8} {'Sale':<6} {'Supplier':<9} {'Agreed':>12} {'Payout':>12}  Status")
    click.echo("-" * 75)
    for s in settlements:
        click.echo(
            f"{s.id:<6} {s.product_id:<8} {s.sale_id:<6} {s.supplier_id or '':<9} "
            f"{_money(s.agreed_price):>12} {_money(s.payout_amount):>12}  {s.status.value}"
        )


@consignment_group.command("payout")
@click.argument("settlement_id", type=int)
@click.option("--amount", help="Amount paid per unit (default: the agreed price)")
@click.option("--notes", help="Notes")
@click.pass_context
def record_payout(ctx, settlement_id: int, amount: str | None, notes: str | None):
    """Record that a consignment supplier has been paid."""
    service = ConsignmentService(ctx.obj["db"], ctx.obj["cache"])
    payout = parse_option(ctx, parse_amount, amount, "amount") if amount else None
    try:
        settlement = service.record_payout(settlement_id, payout_amount=payout, notes=notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Settled {settlement_id}: paid {_money(settlement.payout_amount)}")


@consignment_group.command("owed")
@click.option("--supplier-id", type=int, help="Only this supplier")
@click.pass_context
def owed(ctx, supplier_id: int | None):
    """Show the total still owed on unsettled settlements."""
    service = ConsignmentService(ctx.obj["db"], ctx.obj["cache"])
    click.echo(f"Unsettled: {_money(service.unsettled_total(supplier_id))}")


def register_commands(cli):
    """Register consignment commands with main CLI."""
    cli.add_command(consignment_group, name="consignment")
