"""Parsing of money amounts and rates typed at the till or on the command line."""

import re
from decimal import Decimal, InvalidOperation

# Leading ISO code or any currency sign, e.g. "GBP 12.50", "£12.50", "12.50€".
_CURRENCY = re.compile(r"^\s*(?:GBP|EUR|USD)\s*|[£$€¥]", re.IGNORECASE)
_THOUSANDS = re.compile(r"(?<=\d),(?=\d{3}(?:\D|$))")


def _to_decimal(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{text}'")
    if not value.is_finite():
        raise ValueError(f"Could not parse amount '{text}': not a finite number")
    return value


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount.

    Accepts a currency sign or code, thousands separators and accounting
    negatives: "£1,234.56", "GBP 80", "-12.50", "(99.99)".

    Raises:
        ValueError: If the string is empty or not a number
    """
    text = (amount_str or "").strip()
    if not text:
        raise ValueError("Empty amount string")

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    text = _THOUSANDS.sub("", _CURRENCY.sub("", text)).strip()

    value = _to_decimal(text)
    return -value if negative else value


def parse_positive_amount(amount_str: str) -> Decimal:
    """Parse an amount that must be greater than zero.

    Raises:
        ValueError: If the amount cannot be parsed or is not positive
    """
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"Amount must be greater than zero, got {amount}")
    return amount


def parse_rate(rate_str: str) -> Decimal:
    """Parse a VAT or sales tax percentage such as "20" or "17.5%".

    Raises:
        ValueError: If the rate is not a number between 0 and 100
    """
    text = (rate_str or "").strip().rstrip("%").strip()
    if not text:
        raise ValueError("Empty rate")
    rate = _to_decimal(text)
    if rate < 0 or rate > 100:
        raise ValueError(f"Rate must be between 0 and 100, got {rate}")
    return rate
