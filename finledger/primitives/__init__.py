"""Money and date primitives shared by every component."""

from finledger.primitives.dates import (
    InvalidDateError,
    add_days,
    format_date,
    last_n_days,
    month_bounds,
    month_days,
    month_key,
    months_between,
    parse_calendar_date,
    year_bounds,
    year_months,
)
from finledger.primitives.money import (
    InvalidAmountError,
    apply_rate,
    from_minor,
    quantize,
    share,
    to_minor,
)

__all__ = [
    # Dates
    "InvalidDateError",
    "add_days",
    "format_date",
    "last_n_days",
    "month_bounds",
    "month_days",
    "month_key",
    "months_between",
    "parse_calendar_date",
    "year_bounds",
    "year_months",
    # Money
    "InvalidAmountError",
    "apply_rate",
    "from_minor",
    "quantize",
    "share",
    "to_minor",
]
