"""Tests for CLI date range and input parsing helpers."""

from datetime import date
from decimal import Decimal

import click
import pytest

from ledgerly.cli.input_parsing import (
    parse_amount_or_exit,
    resolve_account_or_exit,
    resolve_date_range,
)
from ledgerly.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_date_range_rejects_period_with_start_end(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_date_range(_ctx(), start_date="2024-01-01", end_date=None, period="this-month")

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "cannot be combined" in err


def test_resolve_date_range_returns_period_range():
    expected_start, expected_end = get_date_range("last-quarter")

    start, end = resolve_date_range(_ctx(), start_date=None, end_date=None, period="last-quarter")

    assert start == expected_start
    assert end == expected_end


def test_resolve_date_range_parses_explicit_dates():
    start, end = resolve_date_range(_ctx(), start_date="2024-01-01", end_date="2024-01-31", period=None)

    assert start == date(2024, 1, 1)
    assert end == date(2024, 1, 31)


def test_resolve_date_range_open_ended():
    assert resolve_date_range(_ctx(), start_date=None, end_date=None, period=None) == (None, None)


def test_resolve_date_range_rejects_reversed_dates(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_date_range(_ctx(), start_date="2024-02-01", end_date="2024-01-01", period=None)

    assert "before start date" in capsys.readouterr().err


def test_resolve_date_range_reports_bad_date(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_date_range(_ctx(), start_date="someday", end_date=None, period=None)

    assert "Invalid start date" in capsys.readouterr().err


def test_parse_amount_or_exit():
    assert parse_amount_or_exit(_ctx(), "1,250.00") == Decimal("1250.00")

    with pytest.raises(click.exceptions.Exit):
        parse_amount_or_exit(_ctx(), "lots", "fee")


def test_resolve_account_or_exit(ledger, capsys):
    assert resolve_account_or_exit(_ctx(), ledger, "Accounts Receivable") == "1100"

    with pytest.raises(click.exceptions.Exit):
        resolve_account_or_exit(_ctx(), ledger, "Petty Cash")
    assert "Account Petty Cash not found" in capsys.readouterr().err
