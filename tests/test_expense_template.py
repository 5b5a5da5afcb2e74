"""Tests for ExpenseTemplateService."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from shopledger.domain.entities import Frequency, TemplateStatus
from shopledger.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def rent_template(template_service):
    template_id = template_service.create_template(
        description="Shop rent",
        amount=Decimal("1500.00"),
        category="rent",
        payment_method="Direct Debit",
        frequency="monthly",
        anchor_date=date(2024, 1, 15),
    )
    return template_service.get_template(template_id)


def test_create_computes_next_due_from_anchor(rent_template):
    assert rent_template.anchor_date == date(2024, 1, 15)
    assert rent_template.next_due_date == date(2024, 2, 15)
    assert rent_template.frequency == Frequency.MONTHLY
    assert rent_template.payment_method == "transfer"
    assert rent_template.status == TemplateStatus.ACTIVE


def test_create_with_explicit_due_date(template_service):
    template_id = template_service.create_template(
        description="Insurance",
        amount=Decimal("300"),
        category="fees",
        payment_method="card",
        frequency="annually",
        anchor_date=date(2024, 1, 15),
        next_due_date=date(2024, 1, 15),
    )

    assert template_service.get_template(template_id).next_due_date == date(2024, 1, 15)


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": Decimal("0")},
        {"amount": Decimal("-5")},
        {"frequency": "daily"},
        {"description": "  "},
        {"payment_method": "cheque"},
        {"vat_rate": Decimal("-1")},
        {"next_due_date": date(2023, 12, 31)},
    ],
)
def test_create_rejects_invalid_input(template_service, overrides):
    fields = dict(
        description="Window cleaning",
        amount=Decimal("40"),
        category="repairs",
        payment_method="cash",
        frequency="weekly",
        anchor_date=date(2024, 1, 1),
    )
    fields.update(overrides)

    with pytest.raises(ValidationError):
        template_service.create_template(**fields)


def test_create_rejects_unknown_supplier(template_service):
    with pytest.raises(NotFoundError):
        template_service.create_template(
            description="Cleaning",
            amount=Decimal("40"),
            category="other",
            payment_method="cash",
            frequency="weekly",
            supplier_id=999,
        )


def test_change_frequency_recomputes_from_anchor(template_service):
    """Monthly to quarterly from 2024-01-15 gives 2024-04-15."""
    template_id = template_service.create_template(
        description="Alarm monitoring",
        amount=Decimal("90"),
        category="utilities",
        payment_method="card",
        frequency="monthly",
        anchor_date=date(2024, 1, 15),
        next_due_date=date(2024, 1, 15),
    )

    due = template_service.change_frequency(template_id, "quarterly")

    assert due == date(2024, 4, 15)
    template = template_service.get_template(template_id)
    assert template.frequency == Frequency.QUARTERLY
    assert template.next_due_date == date(2024, 4, 15)
    assert template.anchor_date == date(2024, 1, 15)


def test_change_frequency_with_new_anchor(template_service, rent_template):
    due = template_service.change_frequency(rent_template.id, "weekly", date(2024, 3, 1))

    assert due == date(2024, 3, 8)
    assert template_service.get_template(rent_template.id).anchor_date == date(2024, 3, 1)


def test_change_frequency_rejects_earlier_anchor(template_service, rent_template):
    with pytest.raises(ValidationError, match="before the current start"):
        template_service.change_frequency(rent_template.id, "weekly", date(2024, 1, 1))

    template = template_service.get_template(rent_template.id)
    assert template.anchor_date == date(2024, 1, 15)
    assert template.next_due_date == date(2024, 2, 15)
    assert template.frequency == Frequency.MONTHLY


def test_change_frequency_does_not_compound(template_service, rent_template):
    template_service.change_frequency(rent_template.id, "quarterly")
    template_service.change_frequency(rent_template.id, "monthly")

    assert template_service.get_template(rent_template.id).next_due_date == date(2024, 2, 15)


def test_update_schedule_explicit_date(template_service, rent_template):
    template = template_service.update_schedule(rent_template.id, next_due_date=date(2024, 3, 1))

    assert template.next_due_date == date(2024, 3, 1)
    assert template.frequency == Frequency.MONTHLY


def test_update_schedule_frequency_only(template_service, rent_template):
    template = template_service.update_schedule(rent_template.id, frequency="annually")

    assert template.next_due_date == date(2025, 1, 15)


def test_update_schedule_rejects_date_before_anchor(template_service, rent_template):
    with pytest.raises(ValidationError):
        template_service.update_schedule(rent_template.id, next_due_date=date(2024, 1, 1))


def test_update_template_fields(template_service, rent_template):
    template_service.update_template(
        rent_template.id, amount=Decimal("1600"), vat_rate=Decimal("20"), notes="New lease"
    )

    template = template_service.get_template(rent_template.id)
    assert template.amount == Decimal("1600.00")
    assert template.vat_rate == Decimal("20")
    assert template.notes == "New lease"

    template_service.update_template(rent_template.id, clear_vat=True)
    assert template_service.get_template(rent_template.id).vat_rate is None


def test_toggle_pause_keeps_next_due_date(template_service, rent_template):
    assert template_service.toggle_pause(rent_template.id) == TemplateStatus.PAUSED
    paused = template_service.get_template(rent_template.id)
    assert not paused.is_active
    assert paused.next_due_date == rent_template.next_due_date

    assert template_service.toggle_pause(rent_template.id) == TemplateStatus.ACTIVE
    resumed = template_service.get_template(rent_template.id)
    assert resumed.is_active
    assert resumed.next_due_date == rent_template.next_due_date


def test_list_hides_paused_by_default(template_service, rent_template):
    template_service.toggle_pause(rent_template.id)

    assert template_service.list_templates() == []
    assert [t.id for t in template_service.list_templates(include_paused=True)] == [rent_template.id]


def test_list_due(template_service, rent_template):
    assert template_service.list_due(date(2024, 2, 14)) == []
    assert [t.id for t in template_service.list_due(date(2024, 2, 15))] == [rent_template.id]

    template_service.toggle_pause(rent_template.id)
    assert template_service.list_due(date(2024, 2, 15)) == []


def test_record_occurrence_creates_expense_and_advances(template_service, expense_service, rent_template):
    expense_id = template_service.record_occurrence(rent_template.id)

    expense = expense_service.get_expense(expense_id)
    assert expense.incurred_at == datetime(2024, 2, 15)
    assert expense.amount == Decimal("1500.00")
    assert expense.template_id == rent_template.id
    assert expense.vat_rate is None

    template = template_service.get_template(rent_template.id)
    assert template.anchor_date == date(2024, 2, 15)
    assert template.next_due_date == date(2024, 3, 15)
    assert template.last_generated_at is not None


def test_record_occurrence_applies_vat(template_service, expense_service):
    template_id = template_service.create_template(
        description="Card terminal",
        amount=Decimal("120.00"),
        category="fees",
        payment_method="card",
        frequency="monthly",
        anchor_date=date(2024, 1, 31),
        vat_rate=Decimal("20"),
    )

    expense = expense_service.get_expense(template_service.record_occurrence(template_id))

    assert expense.incurred_at.date() == date(2024, 2, 29)
    assert expense.amount_ex_vat == Decimal("100.00")
    assert expense.vat_amount == Decimal("20.00")
    assert expense.amount_inc_vat == Decimal("120.00")
    assert template_service.get_template(template_id).next_due_date == date(2024, 3, 29)


def test_record_occurrence_rejects_paused(template_service, rent_template):
    template_service.toggle_pause(rent_template.id)

    with pytest.raises(ValidationError, match="paused"):
        template_service.record_occurrence(rent_template.id)


def test_delete_detaches_expenses(template_service, expense_service, rent_template):
    expense_id = template_service.record_occurrence(rent_template.id)

    assert template_service.delete_template(rent_template.id) == 1

    assert template_service.get_template(rent_template.id) is None
    expense = expense_service.get_expense(expense_id)
    assert expense is not None
    assert expense.template_id is None


def test_missing_template(template_service):
    with pytest.raises(NotFoundError):
        template_service.toggle_pause(42)
    with pytest.raises(NotFoundError):
        template_service.delete_template(42)
