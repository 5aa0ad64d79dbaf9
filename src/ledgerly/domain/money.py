"""Decimal and date coercion helpers shared by the domain services."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from dateutil import parser as date_parser

from ledgerly.domain.errors import ValidationError

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value, field_name: str = "amount") -> Decimal:
    """Coerce an int, float, str or Decimal into a Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.

    Raises:
        ValidationError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"Invalid {field_name}: {value!r}")
    else:
        raise ValidationError(f"Invalid {field_name}: {value!r}")

    if not result.is_finite():
        raise ValidationError(f"Invalid {field_name}: {value!r}")
    return result


def optional_decimal(value, field_name: str = "amount") -> Optional[Decimal]:
    """Like ``to_decimal`` but passes ``None`` through."""
    if value is None:
        return None
    return to_decimal(value, field_name)


def percentage_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Return ``rate`` percent of ``amount``."""
    return amount * rate / HUNDRED


def to_date(value, field_name: str = "date") -> date:
    """Coerce a date, datetime or ISO-8601 string into a date.

    Datetimes keep only their calendar date.

    Raises:
        ValidationError: If the value is missing or not a date
    """
    if value is None:
        raise ValidationError(f"{field_name.capitalize()} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date_parser.isoparse(value.strip()).date()
        except ValueError:
            raise ValidationError(f"Invalid {field_name}: {value!r} (expected YYYY-MM-DD)")
    raise ValidationError(f"Invalid {field_name}: {value!r}")
