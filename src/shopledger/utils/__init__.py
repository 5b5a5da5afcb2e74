"""Utility functions for shopledger."""

from shopledger.utils.date_parser import parse_date
from shopledger.utils.amount_parser import parse_amount, parse_positive_amount
from shopledger.utils.choice_parser import parse_expense_category, parse_payment_method

__all__ = [
    "parse_date",
    "parse_amount",
    "parse_positive_amount",
    "parse_expense_category",
    "parse_payment_method",
]
