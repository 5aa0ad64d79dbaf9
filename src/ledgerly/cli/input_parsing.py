"""CLI helpers that parse options or exit with a consistent error."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click

from ledgerly.domain.errors import NotFoundError
from ledgerly.domain.ledger import LedgerService
from ledgerly.utils.account_resolver import resolve_account
from ledgerly.utils.amount_parser import parse_amount
from ledgerly.utils.date_parser import get_date_range, parse_date
from ledgerly.cli.error_handling import fail


def resolve_account_or_exit(ctx: click.Context, ledger: LedgerService, account: str) -> str:
    """Resolve an account code, name or ID, or exit with a CLI error."""
    try:
        return resolve_account(ledger, account)
    except NotFoundError as exc:
        fail(ctx, str(exc))


def parse_date_or_exit(ctx: click.Context, value: str, label: str = "date") -> date:
    """Parse a date option, or exit with a CLI error."""
    try:
        return parse_date(value)
    except ValueError as e:
        fail(ctx, f"Invalid {label}: {e}")


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    """Parse an amount option, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        fail(ctx, f"Invalid {label}: {e}")


def resolve_date_range(
    ctx: click.Context,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
) -> tuple[date | None, date | None]:
    """Resolve --period or --start-date/--end-date into a date range."""
    if period and (start_date or end_date):
        fail(ctx, "--period cannot be combined with --start-date or --end-date.")
    if period:
        try:
            return get_date_range(period)
        except ValueError as e:
            fail(ctx, str(e))

    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    end = parse_date_or_exit(ctx, end_date, "end date") if end_date else None
    if start and end and end < start:
        fail(ctx, "End date is before start date.")
    return start, end
