"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

PERIODS = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)


def _quarter_start(day: date) -> date:
    return day.replace(month=(day.month - 1) // 3 * 3 + 1, day=1)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Accepts ISO and free-form dates ("2024-01-15", "15 Jan 2024") and
    relative words: "today", "yesterday", "tomorrow", "last friday", and
    "this/last/next" followed by "month", "quarter" or "year" (the first day
    of that period).

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text == "tomorrow":
        return today + timedelta(days=1)

    words = text.split()
    if len(words) == 2 and words[0] in ("last", "this", "next"):
        which, unit = words
        step = {"last": -1, "this": 0, "next": 1}[which]
        if unit == "month":
            return today.replace(day=1) + relativedelta(months=step)
        if unit == "quarter":
            return _quarter_start(today) + relativedelta(months=3 * step)
        if unit == "year":
            return today.replace(month=1, day=1) + relativedelta(years=step)
        if unit in WEEKDAYS and which == "last":
            days_ago = (today.weekday() - WEEKDAYS.index(unit)) % 7 or 7
            return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named reporting period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    month, quarter or year.

    Args:
        period: One of PERIODS

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return today.replace(day=1), today
    if period == "last-month":
        start = today.replace(day=1) - relativedelta(months=1)
        return start, start + relativedelta(day=31)
    if period == "this-quarter":
        return _quarter_start(today), today
    if period == "last-quarter":
        start = _quarter_start(today) - relativedelta(months=3)
        return start, start + relativedelta(months=2, day=31)
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
