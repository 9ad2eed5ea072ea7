"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking (amounts, calendar dates, enum members)
- Required field presence
- This is pydantic parsing of the request payload

STAGE 2 - SEMANTIC VALIDATION:
- Business rules the types cannot express
- Amount sanity ceiling
- due_date >= start_date
- Direction-specific loan attributes

Stage 2 only runs when stage 1 passes. Every issue found within a
stage is reported together.

IMPORTANT: Validation NEVER silently fixes issues.
Nothing is written until a payload has passed both stages.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from finledger.config import LedgerSettings, get_settings
from finledger.errors import StateError, ValidationError
from finledger.models.common import ValidationIssue
from finledger.models.ledger import ExpenseCreate, IncomeCreate
from finledger.models.loan import Loan, LoanCreate, LoanDirection, LoanStatus, total_payable_minor
from finledger.primitives import (
    InvalidAmountError,
    InvalidDateError,
    from_minor,
    parse_calendar_date,
    to_minor,
)

PayloadT = TypeVar("PayloadT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)

_VALUE_ERROR_PREFIX = "Value error, "


def _issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """One issue per failing field, in pydantic's reporting order."""
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "payload"
        message = detail["msg"]
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        issue_type = "missing" if detail["type"] == "missing" else "invalid_value"
        issues.append(ValidationIssue(
            field=field,
            issue_type=issue_type,
            message=f"{field}: {message}",
        ))
    return issues


def parse_payload(model: type[PayloadT], payload: Union[PayloadT, dict[str, Any]]) -> PayloadT:
    """
    Stage 1: parse a request payload into its model.

    Raises:
        ValidationError: With one issue per failing field
    """
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError.single(
            "payload", "invalid_value", "Request body must be an object"
        )
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(_issues_from_pydantic(e))


def parse_enum(enum: type[EnumT], field: str, value: Union[EnumT, str, None]) -> Optional[EnumT]:
    """Read an optional filter value as an enum member."""
    if value is None or isinstance(value, enum):
        return value
    try:
        return enum(str(value).strip())
    except ValueError:
        allowed = ", ".join(member.value for member in enum)
        raise ValidationError.single(
            field, "invalid_value", f"{field}: '{value}' is not one of {allowed}"
        )


def parse_optional_date(field: str, value: Union[date, str, None]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_calendar_date(value)
    except InvalidDateError as e:
        raise ValidationError.single(field, "invalid_value", f"{field}: {e}")


def parse_loan_status(value: Union[LoanStatus, str, None]) -> LoanStatus:
    """
    Read a requested stored status.

    Only ``pending`` and ``paid`` can be stored; ``overdue`` is derived
    and anything else is unknown.

    Raises:
        StateError: For any other value
    """
    if isinstance(value, LoanStatus):
        return value
    text = str(value).strip().lower() if value is not None else ""
    try:
        return LoanStatus(text)
    except ValueError:
        raise StateError.single(
            "status",
            "invalid_state",
            f"'{value}' is not a valid loan status. Allowed: pending, paid",
        )


class _SemanticValidator:
    """Shared stage 2 checks."""

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    @property
    def max_amount_minor(self) -> int:
        return to_minor(self._settings.max_amount)

    def _check_amount(self, field: str, amount_minor: int) -> list[ValidationIssue]:
        issues = []
        if amount_minor <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{field}: Amount must be greater than zero",
            ))
        elif amount_minor > self.max_amount_minor:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=(
                    f"{field}: Amount {from_minor(amount_minor)} exceeds the "
                    f"maximum of {from_minor(self.max_amount_minor)}"
                ),
            ))
        return issues

    @staticmethod
    def _raise_if_any(issues: list[ValidationIssue]) -> None:
        if issues:
            raise ValidationError(issues)


class EntryValidator(_SemanticValidator):
    """Validates expense and income payloads."""

    def validate_expense(self, payload: Union[ExpenseCreate, dict[str, Any]]) -> ExpenseCreate:
        """
        Run both stages on an expense payload.

        Raises:
            ValidationError: If the payload is malformed or breaks a rule
        """
        expense = parse_payload(ExpenseCreate, payload)
        self._raise_if_any(self._check_amount("amount", expense.amount))
        return expense

    def validate_income(self, payload: Union[IncomeCreate, dict[str, Any]]) -> IncomeCreate:
        income = parse_payload(IncomeCreate, payload)
        self._raise_if_any(self._check_amount("amount", income.amount))
        return income


class LoanValidator(_SemanticValidator):
    """
    Validates loan payloads and loan edits.

    All direction-specific rules live here:
    - both directions need a counterparty name
    - lending needs the borrower's address and phone
    - borrowing may carry a borrowing category (optional)
    """

    def _validate_semantic(self, loan: LoanCreate) -> list[ValidationIssue]:
        issues = self._check_amount("amount", loan.amount)

        if loan.interest_rate is not None and loan.interest_rate < 0:
            issues.append(ValidationIssue(
                field="interestRate",
                issue_type="invalid_value",
                message="interestRate: Interest rate cannot be negative",
            ))
        elif loan.interest_rate is not None and loan.interest_rate > self._settings.max_interest_rate:
            issues.append(ValidationIssue(
                field="interestRate",
                issue_type="invalid_value",
                message=(
                    f"interestRate: Interest rate {loan.interest_rate}% exceeds the "
                    f"maximum of {self._settings.max_interest_rate}%"
                ),
            ))

        if loan.due_date < loan.start_date:
            issues.append(ValidationIssue(
                field="dueDate",
                issue_type="inconsistent",
                message="dueDate: Due date cannot be before the start date",
            ))

        if not loan.counterparty_name:
            name_field = (
                "borrowerName" if loan.direction == LoanDirection.LENDING else "lenderName"
            )
            issues.append(ValidationIssue(
                field=name_field,
                issue_type="missing",
                message=f"{name_field}: Counterparty name is required",
            ))

        if loan.direction == LoanDirection.LENDING:
            if not loan.counterparty_address:
                issues.append(ValidationIssue(
                    field="address",
                    issue_type="missing",
                    message="address: Address is required when lending",
                ))
            if not loan.counterparty_phone:
                issues.append(ValidationIssue(
                    field="phone",
                    issue_type="missing",
                    message="phone: Phone number is required when lending",
                ))

        if not issues:
            issues.extend(self._check_total_payable(loan))
        return issues

    def _check_total_payable(self, loan: LoanCreate) -> list[ValidationIssue]:
        """The repayment figure must be computable before the loan is stored."""
        try:
            total_payable_minor(
                loan.amount, loan.interest_rate or 0, loan.start_date, loan.due_date
            )
        except InvalidAmountError as e:
            return [ValidationIssue(
                field="interestRate",
                issue_type="invalid_value",
                message=f"interestRate: {e}",
            )]
        return []

    def validate(self, payload: Union[LoanCreate, dict[str, Any]]) -> LoanCreate:
        """
        Run both stages on a loan payload.

        Raises:
            ValidationError: With every issue found in the failing stage
        """
        loan = parse_payload(LoanCreate, payload)
        self._raise_if_any(self._validate_semantic(loan))
        return loan

    def validate_due_date_change(self, loan: Loan, due_date: Union[date, str, None]) -> date:
        """Parse a new due date and check it against the loan's start date."""
        if due_date is None:
            raise ValidationError.single("dueDate", "missing", "dueDate: Due date is required")
        new_due = parse_optional_date("dueDate", due_date)
        if new_due < loan.start_date:
            raise ValidationError.single(
                "dueDate",
                "inconsistent",
                "dueDate: Due date cannot be before the start date",
            )
        return new_due

