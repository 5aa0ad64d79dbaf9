"""Input parsing helpers for ledgerly."""

from ledgerly.utils.date_parser import parse_date, get_date_range
from ledgerly.utils.amount_parser import parse_amount, parse_money
from ledgerly.utils.account_resolver import resolve_account

__all__ = ["parse_date", "get_date_range", "parse_amount", "parse_money", "resolve_account"]
