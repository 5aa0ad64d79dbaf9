"""Main CLI entry point."""

import click

from ledgerly.books import Books
from ledgerly.logging_config import (
    DEFAULT_LOG_LEVEL,
    LOG_JSON_ENV,
    LOG_LEVEL_ENV,
    configure_logging,
    remove_logging,
)
from ledgerly.storage.factories import DB_PATH_ENV, create_sqlite_store

# Import and register all commands at module level
from ledgerly.cli.commands import (
    account,
    transaction,
    invoice,
    party,
    tax,
    report,
    settings,
    currency,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    envvar=LOG_LEVEL_ENV,
    help="Logging level",
)
@click.option(
    "--log-json",
    is_flag=True,
    envvar=LOG_JSON_ENV,
    help="Emit logs as JSON lines",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_json: bool):
    """Ledgerly - double-entry bookkeeping.

    Post transactions, raise invoices, calculate VAT and corporate tax, and
    derive balance sheet and profit & loss statements.
    """
    ctx.ensure_object(dict)
    handler = configure_logging(log_level, json_output=log_json)
    ctx.call_on_close(lambda: remove_logging(handler))

    # Open the books only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        books = Books.open(create_sqlite_store(database_path=db_path))
        ctx.obj["books"] = books
        ctx.call_on_close(books.close)


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
invoice.register_commands(cli)
party.register_commands(cli)
tax.register_commands(cli)
report.register_commands(cli)
settings.register_commands(cli)
currency.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
