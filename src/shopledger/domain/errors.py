"""Shared domain error messages and error types."""

import re
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PersistenceError(DomainError):
    """The store rejected a write."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


# Postgres SQLSTATE codes surfaced by the hosted store.
UNIQUE_VIOLATION = "23505"
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"


def not_found(kind: str, record_id: int) -> str:
    """Return message for a missing record."""
    return f"{kind} {record_id} not found"


def template_inactive(template_id: int) -> str:
    """Return message when a paused template is asked for an occurrence."""
    return f"Expense template {template_id} is paused"


def settlement_already_paid(settlement_id: int) -> str:
    """Return message when a payout is recorded twice."""
    return f"Consignment settlement {settlement_id} is already settled"


def describe_persistence_error(message: str, code: Optional[str] = None) -> str:
    """Translate a store rejection into a readable message.

    Args:
        message: Raw error text from the store
        code: Optional SQLSTATE code

    Returns:
        Human-readable description
    """
    lowered = message.lower()

    if code == UNIQUE_VIOLATION or "unique" in lowered:
        if "barcode" in lowered:
            return (
                "This barcode already exists in your inventory. "
                "Please use a different barcode or leave it empty."
            )
        if "sku" in lowered:
            return "This SKU already exists. Please use a different SKU."
        constraint = re.search(r'constraint "(\w+)"', message)
        if constraint:
            return f"Duplicate value for {constraint.group(1).replace('_', ' ')}"
        return "A record with this value already exists"

    if code == NOT_NULL_VIOLATION or "not null" in lowered or "not-null" in lowered:
        column = re.search(r'column "(\w+)"', message)
        if column is None:
            column = re.search(r"not null constraint failed: \w+\.(\w+)", lowered)
        if column:
            return f"Missing required field: {column.group(1).replace('_', ' ')}"
        return "A required field is missing"

    if code == FOREIGN_KEY_VIOLATION or "foreign key" in lowered:
        return "Invalid supplier or linked record selected"

    if code == INSUFFICIENT_PRIVILEGE or "row-level security" in lowered:
        return "Permission denied. Please ensure you have the correct access rights."

    return message
