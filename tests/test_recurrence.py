"""Tests for recurrence date arithmetic and template states."""

from datetime import date

import pytest

from shopledger.domain.entities import Frequency, TemplateStatus
from shopledger.domain.errors import ValidationError
from shopledger.domain.recurrence import (
    compute_next_due_date,
    on_frequency_change,
    parse_frequency,
    toggled_status,
)


@pytest.mark.parametrize(
    "frequency,expected",
    [
        (Frequency.WEEKLY, date(2024, 1, 22)),
        (Frequency.MONTHLY, date(2024, 2, 15)),
        (Frequency.QUARTERLY, date(2024, 4, 15)),
        (Frequency.ANNUALLY, date(2025, 1, 15)),
    ],
)
def test_one_unit_after_anchor(frequency, expected):
    assert compute_next_due_date(date(2024, 1, 15), frequency) == expected


@pytest.mark.parametrize("frequency", list(Frequency))
@pytest.mark.parametrize(
    "anchor",
    [date(2024, 1, 31), date(2024, 2, 29), date(2023, 12, 31), date(2024, 6, 1)],
)
def test_next_due_is_after_anchor(anchor, frequency):
    assert compute_next_due_date(anchor, frequency) > anchor


class TestMonthEndClamping:
    def test_monthly_from_jan_31_leap_year(self):
        assert compute_next_due_date(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)

    def test_monthly_from_jan_31_common_year(self):
        assert compute_next_due_date(date(2023, 1, 31), Frequency.MONTHLY) == date(2023, 2, 28)

    def test_quarterly_from_nov_30(self):
        assert compute_next_due_date(date(2023, 11, 30), Frequency.QUARTERLY) == date(2024, 2, 29)

    def test_annually_from_leap_day(self):
        assert compute_next_due_date(date(2024, 2, 29), Frequency.ANNUALLY) == date(2025, 2, 28)

    def test_weekly_crosses_month(self):
        assert compute_next_due_date(date(2024, 1, 29), Frequency.WEEKLY) == date(2024, 2, 5)


def test_frequency_change_uses_same_anchor():
    """Monthly to quarterly from 2024-01-15 lands on 2024-04-15."""
    anchor = date(2024, 1, 15)
    monthly = compute_next_due_date(anchor, Frequency.MONTHLY)

    assert monthly == date(2024, 2, 15)
    assert on_frequency_change(anchor, Frequency.QUARTERLY) == date(2024, 4, 15)


def test_parse_frequency():
    assert parse_frequency("Monthly") == Frequency.MONTHLY
    assert parse_frequency(Frequency.WEEKLY) == Frequency.WEEKLY


def test_parse_frequency_rejects_unknown():
    with pytest.raises(ValidationError, match="Unknown frequency"):
        parse_frequency("fortnightly")


def test_pause_and_resume():
    assert toggled_status(TemplateStatus.ACTIVE) == TemplateStatus.PAUSED
    assert toggled_status(TemplateStatus.PAUSED) == TemplateStatus.ACTIVE


def test_deleted_is_terminal():
    with pytest.raises(ValidationError):
        toggled_status(TemplateStatus.DELETED)
