"""Tests for domain entities."""

import pytest
from dataclasses import replace
from datetime import datetime, date, UTC
from decimal import Decimal

from shopledger.domain.entities import (
    BulkItemResult,
    BulkResult,
    ConsignmentSettlement,
    Expense,
    ExpenseTemplate,
    Frequency,
    SettlementStatus,
    Supplier,
    SupplierType,
    TemplateStatus,
)


def make_expense(**overrides) -> Expense:
    fields = dict(
        id=1,
        description="Window cleaning",
        amount=Decimal("60.00"),
        amount_ex_vat=None,
        vat_amount=None,
        vat_rate=None,
        amount_inc_vat=None,
        category="maintenance",
        payment_method="cash",
        supplier_id=None,
        incurred_at=datetime(2024, 3, 1),
        is_cogs=False,
        notes=None,
        template_id=None,
    )
    fields.update(overrides)
    return Expense(**fields)


def make_template(**overrides) -> ExpenseTemplate:
    fields = dict(
        id=1,
        description="Rent",
        amount=Decimal("1500"),
        category="rent",
        payment_method="transfer",
        supplier_id=None,
        vat_rate=None,
        frequency=Frequency.MONTHLY,
        anchor_date=date(2024, 1, 1),
        next_due_date=date(2024, 2, 1),
        is_active=True,
        notes=None,
        last_generated_at=None,
        created_at=datetime.now(UTC),
    )
    fields.update(overrides)
    return ExpenseTemplate(**fields)


class TestSupplier:
    """Tests for Supplier entity."""

    def test_supplier_immutability(self):
        supplier = Supplier(
            id=1,
            name="Walk-in",
            supplier_type=SupplierType.CUSTOMER,
            email=None,
            phone=None,
            created_at=datetime.now(UTC),
        )
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            supplier.name = "New Name"

    def test_supplier_equality(self):
        created_at = datetime.now(UTC)
        a = Supplier(1, "A", SupplierType.REGISTERED, None, None, created_at)
        b = Supplier(1, "A", SupplierType.REGISTERED, None, None, created_at)
        c = Supplier(2, "A", SupplierType.REGISTERED, None, None, created_at)

        assert a == b
        assert a != c


class TestExpense:
    """Tests for Expense entity."""

    def test_reporting_amount_without_vat(self):
        assert make_expense().reporting_amount == Decimal("60.00")

    def test_reporting_amount_prefers_inc_vat(self):
        expense = make_expense(
            amount=Decimal("50.00"),
            amount_ex_vat=Decimal("50.00"),
            vat_amount=Decimal("10.00"),
            vat_rate=Decimal("20"),
            amount_inc_vat=Decimal("60.00"),
        )
        assert expense.reporting_amount == Decimal("60.00")


class TestExpenseTemplate:
    """Tests for ExpenseTemplate entity."""

    def test_status(self):
        assert make_template().status == TemplateStatus.ACTIVE
        assert make_template(is_active=False).status == TemplateStatus.PAUSED


class TestConsignmentSettlement:
    """Tests for ConsignmentSettlement entity."""

    def test_status_follows_paid_at(self):
        settlement = ConsignmentSettlement(
            id=1,
            product_id=1,
            sale_id=1,
            supplier_id=None,
            agreed_price=Decimal("600"),
            payout_amount=None,
            paid_at=None,
            notes=None,
        )
        assert settlement.status == SettlementStatus.UNSETTLED

        paid = replace(settlement, paid_at=datetime(2024, 4, 1), payout_amount=Decimal("600"))
        assert paid.status == SettlementStatus.SETTLED


class TestBulkResult:
    """Tests for BulkResult."""

    def test_succeeded_and_failed(self):
        result = BulkResult(
            (
                BulkItemResult(1, True),
                BulkItemResult(2, False, "Expense 2 not found"),
                BulkItemResult(3, True),
            )
        )
        assert result.succeeded == [1, 3]
        assert result.failed == [2]

    def test_empty(self):
        assert BulkResult().succeeded == []
        assert BulkResult().failed == []
