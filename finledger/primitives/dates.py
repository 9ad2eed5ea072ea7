"""
Day-Granularity Date Math

Dates cross the boundary as ``YYYY-MM-DD`` strings and are handled
internally as ``datetime.date``. There is no time-of-day anywhere in
the ledger.
"""

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import Union

DATE_FORMAT = "%Y-%m-%d"
DAYS_PER_MONTH = 30

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidDateError(ValueError):
    """Raised when a value is not a valid calendar date."""
    pass


def parse_calendar_date(value: Union[str, date]) -> date:
    """
    Parse a calendar date.

    Accepts ``date`` instances and strict ``YYYY-MM-DD`` strings.
    Datetimes are rejected because they carry a time-of-day.

    Raises:
        InvalidDateError: If the value is not a real calendar day
    """
    if isinstance(value, datetime):
        raise InvalidDateError("Expected a calendar date without a time component")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Unsupported date type: {type(value).__name__}")

    text = value.strip()
    if not _ISO_DATE.match(text):
        raise InvalidDateError(f"'{value}' is not in YYYY-MM-DD format")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise InvalidDateError(f"'{value}' is not a valid calendar date")


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def months_between(start: date, due: date) -> int:
    """
    Whole months between two dates for interest purposes.

    Partial months round up and the result is never below 1, so a
    same-day loan still accrues one month.
    """
    days = math.ceil(abs((due - start).days))
    return max(1, math.ceil(days / DAYS_PER_MONTH))


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def last_n_days(today: date, n: int) -> list[date]:
    """The ``n`` consecutive days ending with ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(n - 1, -1, -1)]


def month_days(today: date) -> list[date]:
    """Every day of the calendar month containing ``today``."""
    _, length = calendar.monthrange(today.year, today.month)
    return [date(today.year, today.month, day) for day in range(1, length + 1)]


def month_bounds(today: date) -> tuple[date, date]:
    days = month_days(today)
    return days[0], days[-1]


def year_bounds(today: date) -> tuple[date, date]:
    return date(today.year, 1, 1), date(today.year, 12, 31)


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def year_months(today: date) -> list[date]:
    """First day of each month of the calendar year containing ``today``."""
    return [date(today.year, month, 1) for month in range(1, 13)]
