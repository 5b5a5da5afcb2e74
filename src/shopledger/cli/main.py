"""Main CLI entry point."""

import logging

import click
from shopledger.database.cache import QueryCache
from shopledger.database.factories import DB_PATH_ENV, create_sqlite_database

# Import and register all commands at module level
from shopledger.cli.commands import (
    consignment,
    expense,
    product,
    report,
    sale,
    supplier,
    template,
)

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "SHOPLEDGER_LOG_LEVEL"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help=f"Logging verbosity (overrides {LOG_LEVEL_ENV} environment variable)",
    envvar=LOG_LEVEL_ENV,
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Shopledger - shop back office.

    Record sales with part-exchanges and consignment stock, track expenses
    and their recurring schedules, and report profit.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["cache"] = QueryCache()
        ctx.call_on_close(db.disconnect)


# Register all commands
supplier.register_commands(cli)
product.register_commands(cli)
expense.register_commands(cli)
template.register_commands(cli)
sale.register_commands(cli)
consignment.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    try:
        cli()
    except Exception as e:
        logger.exception("Command failed")
        click.echo(f"Error: Unexpected failure: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
