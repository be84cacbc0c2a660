"""Timestamp helpers shared across contexts."""

from datetime import date, datetime


def now() -> datetime:
    """Current local time, second precision."""
    return datetime.now().replace(microsecond=0)


def today() -> date:
    """Current local date."""
    return date.today()


def format_date(value: date) -> str:
    """
    Format a date as YYYY-MM-DD.

    This is the storage format for period-end dates, so lexical order
    matches chronological order.
    """
    return value.strftime("%Y-%m-%d")


def parse_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD string back into a date.

    Raises:
        ValueError: If value is not a valid ISO date
    """
    return date.fromisoformat(value)
