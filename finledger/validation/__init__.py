"""Validation module."""

from finledger.validation.validator import (
    EntryValidator,
    LoanValidator,
    parse_enum,
    parse_loan_status,
    parse_optional_date,
    parse_payload,
)

__all__ = [
    "EntryValidator",
    "LoanValidator",
    "parse_enum",
    "parse_loan_status",
    "parse_optional_date",
    "parse_payload",
]
