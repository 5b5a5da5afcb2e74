"""Sale (checkout) commands."""

from decimal import Decimal

import click
from shopledger.cli.date_filters import period_option, resolve_cli_date_range
from shopledger.cli.error_handling import handle_domain_error, parse_option
from shopledger.domain.checkout import DiscountKind
from shopledger.domain.errors import DomainError
from shopledger.domain.sale import SaleLine, SaleService, TradeIn
from shopledger.utils.amount_parser import parse_amount


def parse_item(value: str) -> SaleLine:
    """Parse PRODUCT_ID[:QUANTITY]."""
    product, _, quantity = value.partition(":")
    try:
        return SaleLine(product_id=int(product), quantity=int(quantity) if quantity else 1)
    except ValueError:
        raise ValueError(f"expected PRODUCT_ID[:QUANTITY], got '{value}'")


def parse_trade_in(value: str, customer_id: int | None) -> TradeIn:
    """Parse ALLOWANCE[:DESCRIPTION]."""
    allowance, _, description = value.partition(":")
    return TradeIn(
        allowance=parse_amount(allowance),
        description=description.strip() or None,
        customer_supplier_id=customer_id,
    )


@click.group()
def sale_group():
    """Record and view sales."""
    pass


@sale_group.command("record")
@click.option("--item", "items", multiple=True, help="PRODUCT_ID[:QUANTITY], repeatable")
@click.option("--px", "trade_ins", multiple=True, help="Part-exchange ALLOWANCE[:DESCRIPTION], repeatable")
@click.option("--px-customer-id", type=int, help="Supplier ID of the customer trading items in")
@click.option("--payment-method", help="cash, card, transfer or other")
@click.option("--staff", help="Staff member completing the sale")
@click.option("--discount", default="0", help="Cart discount")
@click.option(
    "--discount-kind",
    type=click.Choice([k.value for k in DiscountKind], case_sensitive=False),
    default=DiscountKind.PERCENTAGE.value,
    help="Whether --discount is a percentage or a fixed amount (default: percentage)",
)
@click.option("--owner-approved", is_flag=True, help="Owner approves paying the customer a negative balance")
@click.option("--notes", help="Notes")
@click.pass_context
def record_sale(
    ctx,
    items: tuple[str, ...],
    trade_ins: tuple[str, ...],
    px_customer_id: int | None,
    payment_method: str | None,
    staff: str | None,
    discount: str,
    discount_kind: str,
    owner_approved: bool,
    notes: str | None,
):
    """Complete a checkout.

    Examples:
        shopledger sale record --item 12 --item 7:2 --payment-method card --staff Sam
        shopledger sale record --item 12 --px "1500:Omega Seamaster" --px-customer-id 9 \\
            --payment-method cash --staff Sam --owner-approved
    """
    service = SaleService(ctx.obj["db"], ctx.obj["cache"])
    lines = [parse_option(ctx, parse_item, item, "item") for item in items]
    exchanges = [
        parse_option(ctx, lambda v: parse_trade_in(v, px_customer_id), px, "part-exchange")
        for px in trade_ins
    ]
    cart_discount: Decimal = parse_option(ctx, parse_amount, discount, "discount")

    try:
        sale_id = service.record_sale(
            lines=lines,
            payment_method=payment_method,
            staff_member=staff,
            trade_ins=exchanges,
            discount=cart_discount,
            discount_kind=DiscountKind(discount_kind.lower()),
            owner_approved=owner_approved,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    sale = service.get_sale(sale_id)
    click.echo(f"Recorded sale {sale_id}")
    click.echo(f"  Subtotal      £{sale.subtotal:>10,.2f}")
    click.echo(f"  Discount      £{sale.discount_total:>10,.2f}")
    click.echo(f"  Tax           £{sale.tax_total:>10,.2f}")
    click.echo(f"  Total         £{sale.total:>10,.2f}")
    if sale.part_exchange_total:
        click.echo(f"  Part-exchange £{sale.part_exchange_total:>10,.2f}")
    click.echo(f"  Net           £{sale.net_total:>10,.2f}")


@sale_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_option
@click.pass_context
def list_sales(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """List sales, oldest first."""
    service = SaleService(ctx.obj["db"], ctx.obj["cache"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )
    sales = service.list_sales(start, end)
    if not sales:
        click.echo("No sales found.")
        return

    click.echo(f"\n{'ID':<6} {'Sold at':<17} {'Staff':<12} {'Payment':<10} {'Total':>12} {'Net':>12}")
    click.echo("-" * 75)
    for s in sales:
        click.echo(
            f"{s.id:<6} {s.sold_at:%Y-%m-%d %H:%M} {(s.staff_member or '')[:12]:<12} "
            f"{s.payment_method:<10} £{s.total:>11,.2f} £{s.net_total:>11,.2f}"
        )


def register_commands(cli):
    """Register sale commands with main CLI."""
    cli.add_command(sale_group, name="sale")
