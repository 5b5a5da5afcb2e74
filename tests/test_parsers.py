"""Tests for amount and choice parsers."""

from decimal import Decimal

import pytest

from shopledger.domain.entities import PaymentMethod
from shopledger.domain.errors import ValidationError
from shopledger.utils.amount_parser import parse_amount, parse_positive_amount, parse_rate
from shopledger.utils.choice_parser import (
    parse_expense_category,
    parse_payment_method,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("£1,234.56", Decimal("1234.56")),
        ("-12.50", Decimal("-12.50")),
        ("(99.99)", Decimal("-99.99")),
        ("  7 ", Decimal("7")),
        ("GBP 80", Decimal("80")),
        ("1,234,567", Decimal("1234567")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_positive_amount():
    assert parse_positive_amount("0.01") == Decimal("0.01")
    with pytest.raises(ValueError, match="greater than zero"):
        parse_positive_amount("0")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("cash", PaymentMethod.CASH),
        ("CARD", PaymentMethod.CARD),
        ("Bank Transfer", PaymentMethod.TRANSFER),
        ("direct_debit", PaymentMethod.TRANSFER),
        ("other", PaymentMethod.OTHER),
    ],
)
def test_parse_payment_method(text, expected):
    assert parse_payment_method(text) == expected


def test_parse_payment_method_unknown():
    with pytest.raises(ValidationError, match="Unknown payment method"):
        parse_payment_method("cheque")


def test_builtin_category_kept():
    assert parse_expense_category(" Rent ") == "rent"


def test_custom_category_slug():
    assert parse_expense_category("Shop Fittings & Display") == "shop_fittings_display"


@pytest.mark.parametrize("text", ["", "  ", "&&&"])
def test_invalid_category(text):
    with pytest.raises(ValidationError):
        parse_expense_category(text)


@pytest.mark.parametrize("text,expected", [("20", Decimal("20")), ("17.5%", Decimal("17.5")), ("0", Decimal("0"))])
def test_parse_rate(text, expected):
    assert parse_rate(text) == expected


@pytest.mark.parametrize("text", ["", "-5", "120", "twenty"])
def test_parse_rate_rejects(text):
    with pytest.raises(ValueError):
        parse_rate(text)
