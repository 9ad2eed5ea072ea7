"""
Fixed-Point Money Arithmetic

All amounts that reach storage are integer minor units (paise).
Decimal is used only at the edges: parsing caller input and
presenting results with exactly two fraction digits.

DESIGN DECISION: Rounding is always ROUND_HALF_UP to 2 places.
Binary floats are never used for totals.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

MINOR_UNITS = 100
TWO_PLACES = Decimal("0.01")

# Working precision for interest arithmetic
RATE_PRECISION = 60

AmountInput = Union[str, int, Decimal, float]


class InvalidAmountError(ValueError):
    """Raised when a value cannot be read as a currency amount."""
    pass


def _to_decimal(value: AmountInput) -> Decimal:
    """Read caller input as a finite Decimal."""
    if isinstance(value, bool):
        raise InvalidAmountError("Amount must be a number, not a boolean")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # repr() gives the shortest string that round-trips
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            raise InvalidAmountError("Amount is required")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise InvalidAmountError(f"'{value}' is not a valid amount")
    else:
        raise InvalidAmountError(f"Unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmountError(f"'{value}' is not a finite amount")
    return result


def quantize(value: AmountInput) -> Decimal:
    """Round a value to 2 decimal places, half-up."""
    try:
        return _to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError(f"'{value}' is too large to be an amount")


def to_minor(value: AmountInput) -> int:
    """
    Parse an external amount into integer minor units.

    Args:
        value: Decimal string, int, Decimal or float

    Returns:
        Amount in minor units, rounded half-up

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    return int(quantize(value) * MINOR_UNITS)


def from_minor(minor: int) -> Decimal:
    """Convert minor units to a Decimal with exactly two fraction digits."""
    return (Decimal(minor) / MINOR_UNITS).quantize(TWO_PLACES)


def apply_rate(minor: int, percent: Decimal, periods: int = 1) -> int:
    """
    Simple interest on an amount in minor units.

    Returns ``minor * percent * periods / 100`` rounded half-up to a
    whole minor unit.
    """
    with localcontext() as ctx:
        ctx.prec = RATE_PRECISION
        raw = Decimal(minor) * Decimal(percent) * periods / 100
        try:
            return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except InvalidOperation:
            raise InvalidAmountError(f"Interest on {minor} at {percent}% is out of range")


def share(part: int, whole: int) -> Decimal:
    """Fraction of ``whole`` represented by ``part`` (0 when whole is 0)."""
    if whole == 0:
        return Decimal(0)
    return Decimal(part) / Decimal(whole)
