"""Recurring expense template commands."""

from datetime import date

import click
from shopledger.cli.error_handling import handle_domain_error, parse_option
from shopledger.domain.entities import ExpenseTemplate, Frequency
from shopledger.domain.errors import DomainError
from shopledger.domain.expense_template import ExpenseTemplateService
from shopledger.utils.date_parser import parse_date

FREQUENCY_CHOICE = click.Choice([f.value for f in Frequency], case_sensitive=False)


def _print_templates(templates: list[ExpenseTemplate], today: date) -> None:
    click.echo(f"\n{'ID':<6} {'Description':<30} {'Amount':>12} {'Frequency':<10} {'Next due':<12} Status")
    click.echo("-" * 90)
    for t in templates:
        status = t.status.value
        if t.is_active and t.next_due_date <= today:
            status = "due"
        click.echo(
            f"{t.id:<6} {t.description[:30]:<30} £{t.amount:>11,.2f} "
            f"{t.frequency.value:<10} {t.next_due_date!s:<12} {status}"
        )


@click.group()
def template_group():
    """Manage recurring expense schedules."""
    pass


@template_group.command("list")
@click.option("--all", "include_paused", is_flag=True, help="Include paused templates")
@click.pass_context
def list_templates(ctx, include_paused: bool):
    """List recurring expenses ordered by next due date."""
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    templates = service.list_templates(include_paused=include_paused)
    if not templates:
        click.echo("No recurring expenses found.")
        return
    _print_templates(templates, date.today())


@template_group.command("due")
@click.option("--as-of", help="Reference date (default: today)")
@click.pass_context
def list_due(ctx, as_of: str | None):
    """List recurring expenses that are due."""
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    when = parse_option(ctx, parse_date, as_of, "date") if as_of else date.today()
    templates = service.list_due(when)
    if not templates:
        click.echo(f"Nothing due on or before {when}.")
        return
    _print_templates(templates, when)


@template_group.command("schedule")
@click.argument("template_id", type=int)
@click.option("--frequency", type=FREQUENCY_CHOICE, help="New frequency")
@click.option("--next-due", help="New next due date")
@click.pass_context
def edit_schedule(ctx, template_id: int, frequency: str | None, next_due: str | None):
    """Edit a schedule.

    Changing only the frequency recomputes the next due date from the date the
    schedule counts from.

    Examples:
        shopledger template schedule 4 --frequency quarterly
        shopledger template schedule 4 --next-due 2024-07-01
    """
    if frequency is None and next_due is None:
        click.echo("Error: give --frequency and/or --next-due", err=True)
        ctx.exit(1)
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    next_due_date = parse_option(ctx, parse_date, next_due, "next due date") if next_due else None
    try:
        template = service.update_schedule(template_id, frequency, next_due_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Template {template_id} recurs {template.frequency.value}, next due {template.next_due_date}"
    )


@template_group.command("set-frequency")
@click.argument("template_id", type=int)
@click.argument("frequency", type=FREQUENCY_CHOICE)
@click.option("--from", "anchor", help="Date the schedule counts from (default: unchanged)")
@click.pass_context
def set_frequency(ctx, template_id: int, frequency: str, anchor: str | None):
    """Change frequency and recompute the next due date."""
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    anchor_date = parse_option(ctx, parse_date, anchor, "date") if anchor else None
    try:
        due = service.change_frequency(template_id, frequency, anchor_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Template {template_id} now recurs {frequency.lower()}, next due {due}")


@template_group.command("pause")
@click.argument("template_id", type=int)
@click.pass_context
def toggle_pause(ctx, template_id: int):
    """Pause an active template, or resume a paused one."""
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    try:
        status = service.toggle_pause(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Template {template_id} is now {status.value}")


@template_group.command("record")
@click.argument("template_id", type=int)
@click.pass_context
def record_occurrence(ctx, template_id: int):
    """Record the expense that is due and move the schedule on."""
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    try:
        expense_id = service.record_occurrence(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    template = service.get_template(template_id)
    click.echo(
        f"Recorded expense {expense_id} from template {template_id}, "
        f"next due {template.next_due_date}"
    )


@template_group.command("delete")
@click.argument("template_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_template(ctx, template_id: int, yes: bool):
    """Delete a template. Expenses it created are kept."""
    if not yes:
        click.confirm(f"Delete template {template_id}?", abort=True)
    service = ExpenseTemplateService(ctx.obj["db"], ctx.obj["cache"])
    try:
        detached = service.delete_template(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted template {template_id} ({detached} expense(s) kept)")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
