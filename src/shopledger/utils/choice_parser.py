"""Parsing of enumerated choices entered by users."""

import re

from shopledger.domain.entities import ExpenseCategory, PaymentMethod
from shopledger.domain.errors import ValidationError

# Checkout labels mapped onto stored payment methods.
PAYMENT_METHOD_LABELS = {
    "cash": PaymentMethod.CASH,
    "card": PaymentMethod.CARD,
    "transfer": PaymentMethod.TRANSFER,
    "bank transfer": PaymentMethod.TRANSFER,
    "direct debit": PaymentMethod.TRANSFER,
    "other": PaymentMethod.OTHER,
}

_CUSTOM_CATEGORY = re.compile(r"^[a-z0-9][a-z0-9_]*$")


def parse_payment_method(value: str) -> PaymentMethod:
    """Parse a payment method or one of its checkout labels.

    Raises:
        ValidationError: If the value is not a known method or label
    """
    key = " ".join(value.strip().lower().replace("_", " ").split())
    if key not in PAYMENT_METHOD_LABELS:
        raise ValidationError(
            f"Unknown payment method '{value}'. Supported: cash, card, transfer, other"
        )
    return PAYMENT_METHOD_LABELS[key]


def parse_expense_category(value: str) -> str:
    """Normalise an expense category.

    Built-in categories are returned as is. Anything else is treated as a
    custom category and turned into a lower-case slug.

    Raises:
        ValidationError: If the value is empty or cannot be made into a slug
    """
    key = value.strip().lower()
    if not key:
        raise ValidationError("Category is required")
    if key in {c.value for c in ExpenseCategory}:
        return key

    slug = re.sub(r"[^a-z0-9]+", "_", key).strip("_")
    if not _CUSTOM_CATEGORY.match(slug):
        raise ValidationError(f"Invalid category '{value}'")
    return slug
