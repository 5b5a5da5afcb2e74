"""Recurring expense date arithmetic and template state transitions."""

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from shopledger.domain.entities import Frequency, TemplateStatus
from shopledger.domain.errors import ValidationError

# relativedelta clamps to the last day of a shorter target month.
_STEPS = {
    Frequency.WEEKLY: timedelta(days=7),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.ANNUALLY: relativedelta(years=1),
}


def parse_frequency(value: str | Frequency) -> Frequency:
    """Parse a frequency string.

    Raises:
        ValidationError: If the value is not a known frequency
    """
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(value.strip().lower())
    except ValueError:
        allowed = ", ".join(f.value for f in Frequency)
        raise ValidationError(f"Unknown frequency '{value}'. Supported: {allowed}")


def compute_next_due_date(anchor: date, frequency: Frequency) -> date:
    """Return the date one frequency unit after the anchor."""
    return anchor + _STEPS[frequency]


def on_frequency_change(current_anchor: date, new_frequency: Frequency) -> date:
    """Recompute the next due date after the user picks a different frequency.

    Always measured from the schedule's anchor, never from the previous
    next_due_date.
    """
    return compute_next_due_date(current_anchor, new_frequency)


def toggled_status(status: TemplateStatus) -> TemplateStatus:
    """Return the state reached by pausing or resuming a template."""
    if status == TemplateStatus.ACTIVE:
        return TemplateStatus.PAUSED
    if status == TemplateStatus.PAUSED:
        return TemplateStatus.ACTIVE
    raise ValidationError("A deleted template cannot be paused or resumed")
