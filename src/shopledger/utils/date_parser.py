"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = (
    "today",
    "this-week",
    "this-month",
    "this-quarter",
    "this-year",
    "last-week",
    "last-month",
    "last-quarter",
    "last-year",
)


def _quarter_start(day: date) -> date:
    return day.replace(month=3 * ((day.month - 1) // 3) + 1, day=1)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "15 January 2024") and a few
    relative forms: "today", "yesterday", "tomorrow", and "last/this/next"
    followed by week, month or year (the first day of that period).

    Args:
        date_str: Date string
        today: Reference date for relative forms, defaults to date.today()

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    prefix, _, period = date_str.partition(" ")
    if prefix in ("last", "this", "next") and period in ("week", "month", "year"):
        offset = {"last": -1, "this": 0, "next": 1}[prefix]
        if period == "week":
            return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
        if period == "month":
            return today.replace(day=1) + relativedelta(months=offset)
        return today.replace(month=1, day=1) + relativedelta(years=offset)

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    # UK shop: 03/04/2024 is the 3rd of April. A leading year reads year-month-day.
    dayfirst = not date_str[:4].isdigit()
    try:
        return date_parser.parse(date_str, dayfirst=dayfirst).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named reporting period.

    Current periods end today; previous periods end on their last day.

    Args:
        period: One of PERIODS
        today: Reference date, defaults to date.today()

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "today":
        return (today, today)
    if period == "this-week":
        return (today - timedelta(days=today.weekday()), today)
    if period == "this-month":
        return (today.replace(day=1), today)
    if period == "this-quarter":
        return (_quarter_start(today), today)
    if period == "this-year":
        return (today.replace(month=1, day=1), today)

    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return (start, start + timedelta(days=6))
    if period == "last-month":
        end = today.replace(day=1) - timedelta(days=1)
        return (end.replace(day=1), end)
    if period == "last-quarter":
        end = _quarter_start(today) - timedelta(days=1)
        return (_quarter_start(end), end)
    if period == "last-year":
        return (date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
