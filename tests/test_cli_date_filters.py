"""Tests for CLI date filter helper."""

from datetime import date

import click
import pytest

from shopledger.cli.date_filters import resolve_cli_date_range
from shopledger.utils.date_parser import get_date_range

FEBRUARY = (date(2024, 2, 1), date(2024, 2, 29))


def resolve(**kwargs):
    options = {"start_date": None, "end_date": None, "period": None}
    options.update(kwargs)
    return resolve_cli_date_range(click.Context(click.Command("report")), **options)


@pytest.mark.parametrize(
    "options",
    [
        {"period": "this-month", "start_date": "2024-01-01"},
        {"period": "last-year", "end_date": "2024-01-31"},
    ],
)
def test_period_excludes_explicit_dates(options, capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve(**options)

    assert excinfo.value.exit_code == 1
    assert "cannot be combined" in capsys.readouterr().err


def test_period_wins_over_default():
    assert resolve(period="last-quarter", default_range=FEBRUARY) == get_date_range("last-quarter")


def test_explicit_dates_are_day_first():
    assert resolve(start_date="01/03/2024", end_date="31/03/2024") == (
        date(2024, 3, 1),
        date(2024, 3, 31),
    )


def test_open_ended_range():
    assert resolve(start_date="2024-03-01") == (date(2024, 3, 1), None)


def test_default_only_when_nothing_given():
    assert resolve(default_range=FEBRUARY) == FEBRUARY
    assert resolve() == (None, None)
    assert resolve(end_date="2024-02-10", default_range=FEBRUARY) == (None, date(2024, 2, 10))


@pytest.mark.parametrize("field,label", [("start_date", "start date"), ("end_date", "end date")])
def test_unparseable_date(field, label, capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve(**{field: "whenever"})

    assert f"Invalid {label}" in capsys.readouterr().err
