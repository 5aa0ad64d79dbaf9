"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Optional

from ledgerly.domain.reference_data import CURRENCIES

_SYMBOLS = sorted({c.symbol for c in CURRENCIES.values()}, key=len, reverse=True)
_MONEY = re.compile(r"^(?P<amount>.*?)\s*(?P<code>[A-Za-z]{3})$")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles "1234.5", "1,234.50", "$99", "€12", "-5" and "(5.00)" (negative
    in parentheses). Sign checks are left to the caller.

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    is_negative = text.startswith("(") and text.endswith(")")
    if is_negative:
        text = text[1:-1].strip()
    if text.startswith("-"):
        is_negative = not is_negative
        text = text[1:].strip()

    for symbol in _SYMBOLS:
        if text.startswith(symbol):
            text = text[len(symbol):].strip()
            break
    text = text.replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_money(money_str: str, default_currency: Optional[str] = None) -> tuple[Decimal, Optional[str]]:
    """Parse an amount with an optional trailing currency code.

    Examples: "100 EUR" -> (100, "EUR"), "99.50" -> (99.50, default_currency).
    """
    match = _MONEY.match(money_str.strip())
    if match and match.group("amount"):
        return parse_amount(match.group("amount")), match.group("code").upper()
    return parse_amount(money_str), default_currency
