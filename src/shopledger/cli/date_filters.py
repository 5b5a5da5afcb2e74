"""CLI helpers for date range resolution."""

from datetime import date

import click

from shopledger.cli.error_handling import parse_option
from shopledger.utils.date_parser import PERIODS, get_date_range, parse_date


def period_option(func):
    """Add a --period option accepting the named reporting periods."""
    return click.option(
        "--period",
        type=click.Choice(PERIODS, case_sensitive=False),
        help="Named period, e.g. this-month or last-quarter",
    )(func)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Turn --period or --start-date/--end-date into a date range.

    Falls back to default_range when nothing is given. Exits with an error
    when a period is combined with explicit dates or a date does not parse.
    """
    if period and (start_date or end_date):
        click.echo(
            "Error: --period cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)
    if period:
        return get_date_range(period)
    if not start_date and not end_date and default_range is not None:
        return default_range

    start = parse_option(ctx, parse_date, start_date, "start date") if start_date else None
    end = parse_option(ctx, parse_date, end_date, "end date") if end_date else None
    return start, end
