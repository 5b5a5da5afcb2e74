"""Tests for store error translation."""

import click
import pytest

from shopledger.cli.error_handling import handle_domain_error
from shopledger.domain.errors import (
    DomainError,
    FOREIGN_KEY_VIOLATION,
    INSUFFICIENT_PRIVILEGE,
    NOT_NULL_VIOLATION,
    NotFoundError,
    PersistenceError,
    UNIQUE_VIOLATION,
    describe_persistence_error,
)


@pytest.mark.parametrize(
    "message,code,expected",
    [
        (
            'duplicate key value violates unique constraint "products_barcode_key"',
            UNIQUE_VIOLATION,
            "This barcode already exists in your inventory. Please use a different barcode or leave it empty.",
        ),
        (
            "UNIQUE constraint failed: products.sku",
            None,
            "This SKU already exists. Please use a different SKU.",
        ),
        (
            'duplicate key value violates unique constraint "settlement_product_sale"',
            UNIQUE_VIOLATION,
            "Duplicate value for settlement product sale",
        ),
        (
            'null value in column "payment_method" violates not-null constraint',
            NOT_NULL_VIOLATION,
            "Missing required field: payment method",
        ),
        (
            "NOT NULL constraint failed: expenses.incurred_at",
            None,
            "Missing required field: incurred at",
        ),
        (
            "FOREIGN KEY constraint failed",
            None,
            "Invalid supplier or linked record selected",
        ),
        (
            'insert or update on table "products" violates foreign key constraint',
            FOREIGN_KEY_VIOLATION,
            "Invalid supplier or linked record selected",
        ),
        (
            'new row violates row-level security policy for table "expenses"',
            INSUFFICIENT_PRIVILEGE,
            "Permission denied. Please ensure you have the correct access rights.",
        ),
        ("disk I/O error", None, "disk I/O error"),
    ],
)
def test_describe_persistence_error(message, code, expected):
    assert describe_persistence_error(message, code) == expected


def test_error_hierarchy():
    error = PersistenceError("Invalid supplier or linked record selected", FOREIGN_KEY_VIOLATION)

    assert isinstance(error, DomainError)
    assert isinstance(error, ValueError)
    assert error.code == FOREIGN_KEY_VIOLATION
    assert issubclass(NotFoundError, DomainError)


def test_unrecognised_store_error_is_prefixed_once(capsys):
    ctx = click.Context(click.Command("sale"))
    error = PersistenceError(describe_persistence_error("disk I/O error"))

    with pytest.raises(click.exceptions.Exit):
        handle_domain_error(ctx, error)

    assert capsys.readouterr().err == "Error: disk I/O error\n"
