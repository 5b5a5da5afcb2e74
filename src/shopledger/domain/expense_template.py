"""Recurring expense template domain service."""

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.entities import ExpenseTemplate, Frequency, TemplateStatus
from shopledger.domain.errors import (
    NotFoundError,
    ValidationError,
    not_found,
    template_inactive,
)
from shopledger.domain.recurrence import (
    compute_next_due_date,
    on_frequency_change,
    parse_frequency,
    toggled_status,
)
from shopledger.domain.vat import expense_vat_fields, to_decimal
from shopledger.utils.choice_parser import parse_expense_category, parse_payment_method

logger = logging.getLogger(__name__)

TEMPLATE_TAGS = (tags.EXPENSE_TEMPLATES, tags.DASHBOARD)


def _validate_amount(amount: Decimal) -> None:
    if amount <= 0:
        raise ValidationError(f"Amount must be greater than zero, got {amount}")


def _validate_vat_rate(vat_rate: Optional[Decimal]) -> None:
    if vat_rate is not None and vat_rate < 0:
        raise ValidationError(f"VAT rate must not be negative, got {vat_rate}")


class ExpenseTemplateService:
    """Service for recurring expense templates.

    Templates only record when the next expense is due. Nothing here runs on
    a timer: an occurrence is materialised when a user asks for it.
    """

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        """Initialize template service.

        Args:
            db: Database instance
            cache: Shared query cache, invalidated after every mutation
        """
        self.db = db
        self.cache = cache if cache is not None else QueryCache()

    def create_template(
        self,
        description: str,
        amount: Decimal,
        category: str,
        payment_method: str,
        frequency: str | Frequency,
        anchor_date: Optional[date] = None,
        next_due_date: Optional[date] = None,
        supplier_id: Optional[int] = None,
        vat_rate: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a recurring expense template.

        Args:
            description: What the expense is for
            amount: Gross amount of each occurrence
            category: Expense category
            payment_method: Payment method or checkout label
            frequency: weekly, monthly, quarterly or annually
            anchor_date: Date the schedule counts from, defaults to today
            next_due_date: Explicit first due date, defaults to one frequency
                unit after the anchor
            supplier_id: Optional supplier
            vat_rate: Optional VAT rate; the amount is then VAT-inclusive
            notes: Optional notes

        Returns:
            Template ID

        Raises:
            ValidationError: On invalid amount, frequency, category, payment method or dates
            NotFoundError: If the supplier does not exist
        """
        if not description or not description.strip():
            raise ValidationError("Description is required")
        amount = to_decimal(amount)
        _validate_amount(amount)
        vat_rate = None if vat_rate is None else to_decimal(vat_rate)
        _validate_vat_rate(vat_rate)
        freq = parse_frequency(frequency)
        category = parse_expense_category(category)
        method = parse_payment_method(payment_method)

        if supplier_id is not None and self.db.get_supplier(supplier_id) is None:
            raise NotFoundError(not_found("Supplier", supplier_id))

        anchor = anchor_date or date.today()
        due = next_due_date or compute_next_due_date(anchor, freq)
        if due < anchor:
            raise ValidationError(f"Next due date {due} is before the schedule start {anchor}")

        template_id = self.db.create_expense_template(
            description=description.strip(),
            amount=amount,
            category=category,
            payment_method=method.value,
            frequency=freq.value,
            anchor_date=anchor,
            next_due_date=due,
            supplier_id=supplier_id,
            vat_rate=vat_rate,
            notes=notes,
        )
        logger.info("Created %s expense template %s due %s", freq.value, template_id, due)
        self.cache.invalidate(*TEMPLATE_TAGS)
        return template_id

    def get_template(self, template_id: int) -> Optional[ExpenseTemplate]:
        return self.db.get_expense_template(template_id)

    def require_template(self, template_id: int) -> ExpenseTemplate:
        """Get a template or raise NotFoundError."""
        template = self.db.get_expense_template(template_id)
        if template is None:
            raise NotFoundError(not_found("Expense template", template_id))
        return template

    def list_templates(self, include_paused: bool = False) -> list[ExpenseTemplate]:
        """List templates ordered by next due date."""
        return self.cache.read(
            tags.EXPENSE_TEMPLATES + ("list", include_paused),
            lambda: self.db.list_expense_templates(active_only=not include_paused),
        )

    def list_due(self, as_of: Optional[date] = None) -> list[ExpenseTemplate]:
        """List active templates due on or before a date (default today)."""
        as_of = as_of or date.today()
        return self.cache.read(
            tags.EXPENSE_TEMPLATES + ("due", as_of),
            lambda: self.db.list_expense_templates(active_only=True, due_on_or_before=as_of),
        )

    def update_template(
        self,
        template_id: int,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        payment_method: Optional[str] = None,
        vat_rate: Optional[Decimal] = None,
        clear_vat: bool = False,
        notes: Optional[str] = None,
    ) -> None:
        """Update template fields other than the schedule.

        Raises:
            ValidationError: On invalid values, or vat_rate combined with clear_vat
            NotFoundError: If the template does not exist
        """
        self.require_template(template_id)

        fields: dict = {}
        if description is not None:
            if not description.strip():
                raise ValidationError("Description is required")
            fields["description"] = description.strip()
        if amount is not None:
            amount = to_decimal(amount)
            _validate_amount(amount)
            fields["amount"] = amount
        if category is not None:
            fields["category"] = parse_expense_category(category)
        if payment_method is not None:
            fields["payment_method"] = parse_payment_method(payment_method).value
        if clear_vat:
            if vat_rate is not None:
                raise ValidationError("Cannot set both vat_rate and clear_vat")
            fields["vat_rate"] = None
        elif vat_rate is not None:
            vat_rate = to_decimal(vat_rate)
            _validate_vat_rate(vat_rate)
            fields["vat_rate"] = vat_rate
        if notes is not None:
            fields["notes"] = notes

        if not fields:
            return
        self.db.update_expense_template(template_id, **fields)
        logger.info("Updated expense template %s: %s", template_id, ", ".join(sorted(fields)))
        self.cache.invalidate(*TEMPLATE_TAGS)

    def update_schedule(
        self,
        template_id: int,
        frequency: Optional[str | Frequency] = None,
        next_due_date: Optional[date] = None,
    ) -> ExpenseTemplate:
        """Apply the schedule editor: a new frequency and/or an explicit due date.

        A frequency change without an explicit date recomputes the due date
        from the anchor.

        Raises:
            ValidationError: If the due date is before the schedule anchor
            NotFoundError: If the template does not exist
        """
        template = self.require_template(template_id)
        fields: dict = {}

        if frequency is not None:
            freq = parse_frequency(frequency)
            fields["frequency"] = freq.value
            if next_due_date is None:
                fields["next_due_date"] = on_frequency_change(template.anchor_date, freq)

        if next_due_date is not None:
            if next_due_date < template.anchor_date:
                raise ValidationError(
                    f"Next due date {next_due_date} is before the schedule start {template.anchor_date}"
                )
            fields["next_due_date"] = next_due_date

        if fields:
            self.db.update_expense_template(template_id, **fields)
            logger.info("Rescheduled expense template %s: %s", template_id, fields)
            self.cache.invalidate(*TEMPLATE_TAGS)
        return self.require_template(template_id)

    def change_frequency(
        self,
        template_id: int,
        frequency: str | Frequency,
        anchor_date: Optional[date] = None,
    ) -> date:
        """Switch frequency and recompute the next due date from the anchor.

        Args:
            template_id: Template to change
            frequency: New frequency
            anchor_date: New anchor for the schedule, defaults to the current one

        Returns:
            The new next due date

        Raises:
            ValidationError: If the new anchor is before the current one
            NotFoundError: If the template does not exist
        """
        template = self.require_template(template_id)
        freq = parse_frequency(frequency)
        anchor = anchor_date or template.anchor_date
        if anchor < template.anchor_date:
            raise ValidationError(
                f"Schedule start {anchor} is before the current start {template.anchor_date}"
            )
        due = on_frequency_change(anchor, freq)

        self.db.update_expense_template(
            template_id, frequency=freq.value, anchor_date=anchor, next_due_date=due
        )
        logger.info(
            "Expense template %s now %s from %s, next due %s", template_id, freq.value, anchor, due
        )
        self.cache.invalidate(*TEMPLATE_TAGS)
        return due

    def toggle_pause(self, template_id: int) -> TemplateStatus:
        """Pause an active template or resume a paused one.

        The next due date is left untouched.
        """
        template = self.require_template(template_id)
        new_status = toggled_status(template.status)
        self.db.update_expense_template(
            template_id, is_active=new_status == TemplateStatus.ACTIVE
        )
        logger.info("Expense template %s is now %s", template_id, new_status.value)
        self.cache.invalidate(*TEMPLATE_TAGS)
        return new_status

    def delete_template(self, template_id: int) -> int:
        """Delete a template. Linked expenses are kept and detached.

        Returns:
            Number of expenses detached
        """
        self.require_template(template_id)
        detached = self.db.delete_expense_template(template_id)
        logger.info("Deleted expense template %s, detached %d expense(s)", template_id, detached)
        self.cache.invalidate(*TEMPLATE_TAGS, tags.EXPENSES)
        return detached

    def record_occurrence(self, template_id: int) -> int:
        """Create the expense that is due for a template and advance its schedule.

        The expense is dated on the due date. The due date becomes the new
        anchor and the next due date moves one frequency unit past it.

        Returns:
            ID of the created expense

        Raises:
            NotFoundError: If the template does not exist
            ValidationError: If the template is paused
        """
        template = self.require_template(template_id)
        if not template.is_active:
            raise ValidationError(template_inactive(template_id))

        due = template.next_due_date
        vat_fields = expense_vat_fields(template.amount, template.vat_rate)
        expense_id = self.db.create_expense(
            description=template.description,
            category=template.category,
            payment_method=template.payment_method,
            incurred_at=datetime.combine(due, time.min),
            supplier_id=template.supplier_id,
            notes=template.notes,
            template_id=template.id,
            **vat_fields,
        )

        next_due = compute_next_due_date(due, template.frequency)
        self.db.update_expense_template(
            template_id,
            anchor_date=due,
            next_due_date=next_due,
            last_generated_at=datetime.now(),
        )
        logger.info(
            "Recorded expense %s from template %s, next due %s", expense_id, template_id, next_due
        )
        self.cache.invalidate(*TEMPLATE_TAGS, tags.EXPENSES, tags.REPORTS)
        return expense_id
