"""Expense domain service."""

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Callable, Iterable, Optional

from shopledger.database import cache as tags
from shopledger.database.base import Database
from shopledger.database.cache import QueryCache
from shopledger.domain.entities import BulkItemResult, BulkResult, Expense, Frequency
from shopledger.domain.errors import DomainError, NotFoundError, ValidationError, not_found
from shopledger.domain.expense_template import ExpenseTemplateService
from shopledger.domain.recurrence import parse_frequency
from shopledger.domain.vat import DEFAULT_VAT_RATE, expense_vat_fields, to_decimal
from shopledger.utils.choice_parser import parse_expense_category, parse_payment_method

logger = logging.getLogger(__name__)

EXPENSE_TAGS = (tags.EXPENSES, tags.REPORTS, tags.DASHBOARD)


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


class ExpenseService:
    """Service for managing expenses."""

    def __init__(self, db: Database, cache: Optional[QueryCache] = None):
        """Initialize expense service.

        Args:
            db: Database instance
            cache: Shared query cache, invalidated after every mutation
        """
        self.db = db
        self.cache = cache if cache is not None else QueryCache()
        self.templates = ExpenseTemplateService(db, self.cache)

    def create_expense(
        self,
        description: str,
        amount: Decimal,
        category: str,
        payment_method: str,
        incurred_at: Optional[date | datetime] = None,
        include_vat: bool = False,
        vat_rate: Optional[Decimal] = None,
        supplier_id: Optional[int] = None,
        is_cogs: bool = False,
        notes: Optional[str] = None,
        frequency: Optional[str | Frequency] = None,
        next_due_date: Optional[date] = None,
    ) -> int:
        """Create an expense, optionally as the first occurrence of a schedule.

        Args:
            description: What the expense was for
            amount: Amount as entered
            category: Expense category (built-in or custom)
            payment_method: Payment method or checkout label
            incurred_at: When the expense was incurred, defaults to now
            include_vat: Whether the amount includes VAT
            vat_rate: VAT rate percentage, defaults to the standard rate
                when include_vat is set
            supplier_id: Optional supplier
            is_cogs: Expense is stock purchase and excluded from operating costs
            notes: Optional notes
            frequency: When given, also create a recurring template anchored
                on the expense date and link the expense to it
            next_due_date: Explicit first due date for the template

        Returns:
            Expense ID

        Raises:
            ValidationError: On invalid input
            NotFoundError: If the supplier does not exist
        """
        if not description or not description.strip():
            raise ValidationError("Description is required")
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationError(f"Amount must be greater than zero, got {amount}")
        category = parse_expense_category(category)
        method = parse_payment_method(payment_method)
        if supplier_id is not None and self.db.get_supplier(supplier_id) is None:
            raise NotFoundError(not_found("Supplier", supplier_id))

        incurred = _as_datetime(incurred_at) if incurred_at is not None else datetime.now()
        rate = None
        if include_vat:
            rate = to_decimal(vat_rate) if vat_rate is not None else DEFAULT_VAT_RATE
        vat_fields = expense_vat_fields(amount, rate)

        template_id = None
        if frequency is not None:
            template_id = self.templates.create_template(
                description=description,
                amount=amount,
                category=category,
                payment_method=method.value,
                frequency=frequency,
                anchor_date=incurred.date(),
                next_due_date=next_due_date,
                supplier_id=supplier_id,
                vat_rate=rate,
                notes=notes,
            )

        expense_id = self.db.create_expense(
            description=description.strip(),
            category=category,
            payment_method=method.value,
            incurred_at=incurred,
            supplier_id=supplier_id,
            is_cogs=is_cogs,
            notes=notes,
            template_id=template_id,
            **vat_fields,
        )
        logger.info("Created expense %s (%s %s)", expense_id, category, vat_fields["amount"])
        self.cache.invalidate(*EXPENSE_TAGS)
        return expense_id

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        return self.db.get_expense(expense_id)

    def require_expense(self, expense_id: int) -> Expense:
        """Get an expense or raise NotFoundError."""
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(not_found("Expense", expense_id))
        return expense

    def update_expense(
        self,
        expense_id: int,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        include_vat: Optional[bool] = None,
        vat_rate: Optional[Decimal] = None,
        category: Optional[str] = None,
        payment_method: Optional[str] = None,
        incurred_at: Optional[date | datetime] = None,
        supplier_id: Optional[int] = None,
        is_cogs: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update an expense.

        Changing the amount, include_vat or vat_rate recomputes every VAT
        column from the new gross amount.

        Raises:
            NotFoundError: If the expense or supplier does not exist
            ValidationError: On invalid input
        """
        expense = self.require_expense(expense_id)
        fields: dict = {}

        if description is not None:
            if not description.strip():
                raise ValidationError("Description is required")
            fields["description"] = description.strip()
        if category is not None:
            fields["category"] = parse_expense_category(category)
        if payment_method is not None:
            fields["payment_method"] = parse_payment_method(payment_method).value
        if incurred_at is not None:
            fields["incurred_at"] = _as_datetime(incurred_at)
        if supplier_id is not None:
            if self.db.get_supplier(supplier_id) is None:
                raise NotFoundError(not_found("Supplier", supplier_id))
            fields["supplier_id"] = supplier_id
        if is_cogs is not None:
            fields["is_cogs"] = is_cogs
        if notes is not None:
            fields["notes"] = notes

        if amount is not None or include_vat is not None or vat_rate is not None:
            gross = to_decimal(amount) if amount is not None else expense.reporting_amount
            if gross <= 0:
                raise ValidationError(f"Amount must be greater than zero, got {gross}")
            with_vat = include_vat if include_vat is not None else expense.vat_rate is not None
            rate = None
            if with_vat:
                rate = to_decimal(vat_rate) if vat_rate is not None else (
                    expense.vat_rate if expense.vat_rate is not None else DEFAULT_VAT_RATE
                )
            fields.update(expense_vat_fields(gross, rate))

        if not fields:
            return
        self.db.update_expense(expense_id, **fields)
        logger.info("Updated expense %s: %s", expense_id, ", ".join(sorted(fields)))
        self.cache.invalidate(*EXPENSE_TAGS)

    def delete_expense(self, expense_id: int) -> None:
        """Delete an expense.

        Raises:
            NotFoundError: If the expense does not exist
        """
        self.db.delete_expense(expense_id)
        logger.info("Deleted expense %s", expense_id)
        self.cache.invalidate(*EXPENSE_TAGS)

    def list_expenses(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        template_id: Optional[int] = None,
        is_cogs: Optional[bool] = None,
    ) -> list[Expense]:
        """List expenses, newest first."""
        if category is not None:
            category = parse_expense_category(category)
        return self.cache.read(
            tags.EXPENSES + ("filtered", start_date, end_date, category, template_id, is_cogs),
            lambda: self.db.list_expenses(
                start_date=start_date,
                end_date=end_date,
                category=category,
                template_id=template_id,
                is_cogs=is_cogs,
            ),
        )

    def make_recurring(
        self,
        expense_id: int,
        frequency: str | Frequency,
        next_due_date: Optional[date] = None,
    ) -> int:
        """Turn an existing expense into the first occurrence of a schedule.

        The template copies the expense and is anchored on its date.

        Returns:
            Template ID

        Raises:
            NotFoundError: If the expense does not exist
            ValidationError: If the expense is already linked to a template
        """
        expense = self.require_expense(expense_id)
        if expense.template_id is not None:
            raise ValidationError(
                f"Expense {expense_id} already belongs to template {expense.template_id}"
            )

        template_id = self.templates.create_template(
            description=expense.description,
            amount=expense.reporting_amount,
            category=expense.category,
            payment_method=expense.payment_method,
            frequency=parse_frequency(frequency),
            anchor_date=expense.incurred_at.date(),
            next_due_date=next_due_date,
            supplier_id=expense.supplier_id,
            vat_rate=expense.vat_rate,
            notes=expense.notes,
        )
        self.db.update_expense(expense_id, template_id=template_id)
        self.cache.invalidate(*EXPENSE_TAGS)
        return template_id

    def _run_bulk(
        self, expense_ids: Iterable[int], action: Callable[[int], None], label: str
    ) -> BulkResult:
        results = []
        for expense_id in expense_ids:
            try:
                action(expense_id)
            except DomainError as e:
                logger.warning("Bulk %s failed for expense %s: %s", label, expense_id, e)
                results.append(BulkItemResult(record_id=expense_id, ok=False, error=str(e)))
            else:
                results.append(BulkItemResult(record_id=expense_id, ok=True))

        result = BulkResult(results=tuple(results))
        logger.info(
            "Bulk %s: %d succeeded, %d failed", label, len(result.succeeded), len(result.failed)
        )
        return result

    def bulk_delete(self, expense_ids: Iterable[int]) -> BulkResult:
        """Delete expenses one at a time.

        A failure does not stop the run and earlier deletions are kept.
        """
        return self._run_bulk(expense_ids, self.delete_expense, "delete")

    def bulk_recategorize(self, expense_ids: Iterable[int], category: str) -> BulkResult:
        """Move expenses to a category one at a time, keeping partial progress."""
        category = parse_expense_category(category)
        return self._run_bulk(
            expense_ids,
            lambda expense_id: self.update_expense(expense_id, category=category),
            "recategorize",
        )
