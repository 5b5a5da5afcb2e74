"""Expense management commands."""

import os
from decimal import Decimal

import click
from shopledger.cli.date_filters import period_option, resolve_cli_date_range
from shopledger.cli.error_handling import handle_domain_error, parse_option
from shopledger.domain.attachments import Attachment, validate_attachments
from shopledger.domain.entities import BulkResult, Frequency
from shopledger.domain.errors import DomainError
from shopledger.domain.expense import ExpenseService
from shopledger.domain.vat import DEFAULT_VAT_RATE
from shopledger.utils.amount_parser import parse_positive_amount, parse_rate
from shopledger.utils.date_parser import parse_date

FREQUENCY_CHOICE = click.Choice([f.value for f in Frequency], case_sensitive=False)


def _print_bulk_result(action: str, result: BulkResult) -> None:
    click.echo(f"{action} {len(result.succeeded)} expense(s)")
    for item in result.results:
        if not item.ok:
            click.echo(f"  Failed {item.record_id}: {item.error}", err=True)


@click.group()
def expense_group():
    """Manage expenses."""
    pass


@expense_group.command("add")
@click.option("--description", required=True, help="What the expense was for")
@click.option("--amount", required=True, help="Amount (e.g., 120.00)")
@click.option("--category", required=True, help="Category (rent, utilities, marketing, fees, wages, repairs, other or a custom one)")
@click.option("--payment-method", default="card", help="cash, card, transfer, other, 'Bank Transfer' or 'Direct Debit' (default: card)")
@click.option("--date", "incurred", help="Date incurred (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--include-vat", is_flag=True, help="Amount includes VAT")
@click.option("--vat-rate", default=str(DEFAULT_VAT_RATE), show_default=True, help="VAT rate percentage, used with --include-vat")
@click.option("--supplier-id", type=int, help="Supplier ID")
@click.option("--cogs", "is_cogs", is_flag=True, help="Stock purchase, excluded from operating expenses")
@click.option("--notes", help="Notes")
@click.option("--recurring", type=FREQUENCY_CHOICE, help="Also schedule this expense to recur")
@click.option("--next-due", help="First due date of the schedule (default: one period after the expense date)")
@click.pass_context
def add_expense(
    ctx,
    description: str,
    amount: str,
    category: str,
    payment_method: str,
    incurred: str | None,
    include_vat: bool,
    vat_rate: str,
    supplier_id: int | None,
    is_cogs: bool,
    notes: str | None,
    recurring: str | None,
    next_due: str | None,
):
    """Record an expense.

    Examples:
        shopledger expense add --description "Shop rent" --amount 1500 --category rent --recurring monthly
        shopledger expense add --description "Card fees" --amount 120 --category fees --include-vat
    """
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])

    value: Decimal = parse_option(ctx, parse_positive_amount, amount, "amount")
    rate: Decimal = parse_option(ctx, parse_rate, vat_rate, "VAT rate")
    incurred_at = parse_option(ctx, parse_date, incurred, "date") if incurred else None
    next_due_date = parse_option(ctx, parse_date, next_due, "next due date") if next_due else None

    if next_due_date is not None and recurring is None:
        click.echo("Error: --next-due requires --recurring", err=True)
        ctx.exit(1)

    try:
        expense_id = service.create_expense(
            description=description,
            amount=value,
            category=category,
            payment_method=payment_method,
            incurred_at=incurred_at,
            include_vat=include_vat,
            vat_rate=rate if include_vat else None,
            supplier_id=supplier_id,
            is_cogs=is_cogs,
            notes=notes,
            frequency=recurring,
            next_due_date=next_due_date,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    expense = service.get_expense(expense_id)
    click.echo(f"Created expense {expense_id}: {description} £{expense.reporting_amount:,.2f}")
    if expense.vat_amount is not None:
        click.echo(f"  Ex VAT £{expense.amount_ex_vat:,.2f}, VAT £{expense.vat_amount:,.2f} @ {expense.vat_rate}%")
    if expense.template_id is not None:
        template = service.templates.get_template(expense.template_id)
        click.echo(f"  Recurring {template.frequency.value} (template {template.id}), next due {template.next_due_date}")


@expense_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@period_option
@click.option("--category", help="Only this category")
@click.option("--template-id", type=int, help="Only occurrences of this template")
@click.pass_context
def list_expenses(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    category: str | None,
    template_id: int | None,
):
    """View expenses with optional filters."""
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    try:
        expenses = service.list_expenses(
            start_date=start, end_date=end, category=category, template_id=template_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not expenses:
        click.echo("No expenses found.")
        return

    click.echo(f"\n{'ID':<6} {'Date':<12} {'Description':<30} {'Category':<14} {'Amount':>12} {'VAT':>10}")
    click.echo("-" * 90)
    total = Decimal("0")
    for e in expenses:
        vat = f"£{e.vat_amount:,.2f}" if e.vat_amount is not None else ""
        recurring = " *" if e.template_id is not None else ""
        click.echo(
            f"{e.id:<6} {e.incurred_at.date()!s:<12} {e.description[:30]:<30} "
            f"{e.category[:14]:<14} £{e.reporting_amount:>11,.2f} {vat:>10}{recurring}"
        )
        total += e.reporting_amount
    click.echo("-" * 90)
    click.echo(f"{'Total':<64} £{total:>11,.2f}")


@expense_group.command("update")
@click.argument("expense_id", type=int)
@click.option("--description", help="New description")
@click.option("--amount", help="New amount")
@click.option("--category", help="New category")
@click.option("--payment-method", help="New payment method")
@click.option("--date", "incurred", help="New date incurred")
@click.option("--vat/--no-vat", "include_vat", default=None, help="Whether the amount includes VAT")
@click.option("--vat-rate", help="New VAT rate percentage")
@click.option("--notes", help="Notes")
@click.pass_context
def update_expense(
    ctx,
    expense_id: int,
    description: str | None,
    amount: str | None,
    category: str | None,
    payment_method: str | None,
    incurred: str | None,
    include_vat: bool | None,
    vat_rate: str | None,
    notes: str | None,
):
    """Update an expense.

    Updates only the fields that are provided. VAT figures are recomputed when
    the amount or VAT settings change.
    """
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])
    value = parse_option(ctx, parse_positive_amount, amount, "amount") if amount else None
    rate = parse_option(ctx, parse_rate, vat_rate, "VAT rate") if vat_rate else None
    incurred_at = parse_option(ctx, parse_date, incurred, "date") if incurred else None

    try:
        service.update_expense(
            expense_id,
            description=description,
            amount=value,
            include_vat=include_vat,
            vat_rate=rate,
            category=category,
            payment_method=payment_method,
            incurred_at=incurred_at,
            notes=notes,
        )
        click.echo(f"Updated expense {expense_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@expense_group.command("delete")
@click.argument("expense_id", type=int)
@click.pass_context
def delete_expense(ctx, expense_id: int):
    """Delete an expense."""
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])
    try:
        service.delete_expense(expense_id)
        click.echo(f"Deleted expense {expense_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@expense_group.command("bulk-delete")
@click.argument("expense_ids", type=int, nargs=-1, required=True)
@click.pass_context
def bulk_delete(ctx, expense_ids: tuple[int, ...]):
    """Delete several expenses. Failures are reported and the rest still go."""
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])
    result = service.bulk_delete(expense_ids)
    _print_bulk_result("Deleted", result)
    if result.failed:
        ctx.exit(1)


@expense_group.command("bulk-recategorize")
@click.argument("expense_ids", type=int, nargs=-1, required=True)
@click.option("--category", required=True, help="Category to move the expenses to")
@click.pass_context
def bulk_recategorize(ctx, expense_ids: tuple[int, ...], category: str):
    """Move several expenses to one category."""
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])
    try:
        result = service.bulk_recategorize(expense_ids, category)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    _print_bulk_result("Recategorized", result)
    if result.failed:
        ctx.exit(1)


@expense_group.command("make-recurring")
@click.argument("expense_id", type=int)
@click.option("--frequency", type=FREQUENCY_CHOICE, required=True, help="How often the expense recurs")
@click.option("--next-due", help="First due date (default: one period after the expense date)")
@click.pass_context
def make_recurring(ctx, expense_id: int, frequency: str, next_due: str | None):
    """Schedule an existing expense to recur."""
    service = ExpenseService(ctx.obj["db"], ctx.obj["cache"])
    next_due_date = parse_option(ctx, parse_date, next_due, "next due date") if next_due else None
    try:
        template_id = service.make_recurring(expense_id, frequency, next_due_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    template = service.templates.get_template(template_id)
    click.echo(
        f"Expense {expense_id} now recurs {template.frequency.value} "
        f"(template {template_id}), next due {template.next_due_date}"
    )


@expense_group.command("check-receipt")
@click.argument("files", type=click.Path(exists=True, dir_okay=False), nargs=-1, required=True)
@click.pass_context
def check_receipt(ctx, files: tuple[str, ...]):
    """Check receipt files can be attached to an expense."""
    attachments = [Attachment(os.path.basename(f), os.path.getsize(f)) for f in files]
    try:
        validate_attachments(attachments, "receipt")
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"{len(attachments)} receipt file(s) OK")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
