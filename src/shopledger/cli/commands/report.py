"""Profit and loss report commands."""

import click
from shopledger.cli.date_filters import period_option, resolve_cli_date_range
from shopledger.cli.error_handling import handle_domain_error
from shopledger.domain.entities import SummaryGroupBy
from shopledger.domain.errors import DomainError
from shopledger.domain.report import ReportService
from shopledger.utils.date_parser import get_date_range


def date_range_options(func):
    func = period_option(func)
    func = click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")(func)
    func = click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")(func)
    return func


def _resolve(ctx, start_date, end_date, period):
    return resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_range=get_date_range("this-month"),
    )


def _line(label: str, value, indent: int = 0) -> None:
    click.echo(f"{' ' * indent}{label:<{40 - indent}} £{value:>12,.2f}")


@click.group()
def report_group():
    """Profit and loss reports (default period: this month)."""
    pass


@report_group.command("pnl")
@date_range_options
@click.option("--daily", is_flag=True, help="Show revenue and gross profit per day")
@click.pass_context
def pnl(ctx, start_date: str | None, end_date: str | None, period: str | None, daily: bool):
    """Consolidated P&L: gross profit less operating expenses."""
    start, end = _resolve(ctx, start_date, end_date, period)
    service = ReportService(ctx.obj["db"], ctx.obj["cache"])
    try:
        report = service.consolidated_pnl(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nP&L {start} to {end}")
    click.echo("=" * 55)
    _line("Revenue", report.revenue)
    _line("Cost of goods sold", report.cogs)
    _line("Gross profit", report.gross_profit)
    click.echo()
    for category, amount in sorted(report.expenses_by_category.items(), key=lambda kv: -kv[1]):
        _line(category, amount, indent=2)
    _line("Operating expenses", report.operating_expenses)
    click.echo("-" * 55)
    _line("Net profit", report.net_profit)
    click.echo()
    click.echo(f"Transactions: {report.transaction_count}   Items sold: {report.items_sold}")
    if report.unsettled_amount:
        click.echo(f"Unsettled consignment payouts: £{report.unsettled_amount:,.2f}")

    if daily and report.daily:
        click.echo(f"\n{'Day':<12} {'Revenue':>12} {'Gross profit':>14}")
        for d in report.daily:
            click.echo(f"{d.day!s:<12} £{d.revenue:>11,.2f} £{d.gross_profit:>13,.2f}")


@report_group.command("summary")
@date_range_options
@click.option(
    "--group-by",
    type=click.Choice([g.value for g in SummaryGroupBy], case_sensitive=False),
    default=SummaryGroupBy.PRODUCT.value,
    help="Group lines by product, category or supplier (default: product)",
)
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, period: str | None, group_by: str):
    """Revenue, COGS and gross profit per group."""
    start, end = _resolve(ctx, start_date, end_date, period)
    service = ReportService(ctx.obj["db"], ctx.obj["cache"])
    try:
        groups = service.summarise(group_by, start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not groups:
        click.echo("No sales in this period.")
        return

    click.echo(f"\n{group_by.capitalize():<20} {'Qty':>5} {'Revenue':>12} {'COGS':>12} {'GP':>12} {'Settled GP':>12} {'Unsettled':>12}")
    click.echo("-" * 92)
    for key, data in sorted(groups.items(), key=lambda kv: -kv[1]["revenue"]):
        label = str(key) if key is not None else "(none)"
        click.echo(
            f"{label[:20]:<20} {data['quantity']:>5} £{data['revenue']:>11,.2f} £{data['cogs']:>11,.2f} "
            f"£{data['gross_profit']:>11,.2f} £{data['settled_gross_profit']:>11,.2f} "
            f"£{data['unsettled_amount']:>11,.2f}"
        )


@report_group.command("px-consignment")
@date_range_options
@click.pass_context
def px_consignment(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """Part-exchange and consignment performance."""
    start, end = _resolve(ctx, start_date, end_date, period)
    service = ReportService(ctx.obj["db"], ctx.obj["cache"])
    try:
        result = service.px_consignment_summary(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nPart-exchange ({result.px_items} line(s))")
    _line("Allowances", result.px_allowances, indent=2)
    _line("Gross profit", result.px_gross_profit, indent=2)
    click.echo(f"\nConsignment ({result.consignment_items} line(s))")
    _line("Payouts", result.consignment_payouts, indent=2)
    _line("Gross profit (settled only)", result.consignment_gross_profit, indent=2)
    _line("Unsettled", result.unsettled_amount, indent=2)
    if result.unsettled_settlements:
        click.echo(f"\n{len(result.unsettled_settlements)} settlement(s) awaiting payout")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
