"""
Loan Models

One ``Loan`` record covers both directions. A ``direction``
discriminant selects which of two small optional attribute groups
applies:

- lending: counterparty address and phone
- borrowing: a borrowing category tag

CRITICAL: ``overdue`` is never stored. The stored status is only
``pending`` or ``paid``; the effective status is derived at read time
from (status, due_date, today).
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from finledger.models.common import (
    CalendarDate,
    MinorAmount,
    RequestModel,
    ResponseModel,
)
from finledger.primitives import (
    apply_rate,
    format_date,
    from_minor,
    months_between,
)


class LoanDirection(str, Enum):
    """Money given out (lending) or taken in (borrowing)."""
    LENDING = "lending"
    BORROWING = "borrowing"


class LoanStatus(str, Enum):
    """Stored loan status."""
    PENDING = "pending"
    PAID = "paid"


class EffectiveStatus(str, Enum):
    """Display-time loan status."""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class BorrowingCategory(str, Enum):
    """Who the money was borrowed from."""
    BANK = "Bank"
    FRIENDS = "Friends"
    THIRD_PARTY = "Third Party"


def effective_status(status: LoanStatus, due_date: date, today: date) -> EffectiveStatus:
    """Pending loans past their due date read as overdue."""
    if status == LoanStatus.PENDING and due_date < today:
        return EffectiveStatus.OVERDUE
    return EffectiveStatus(status.value)


def total_payable_minor(principal_minor: int, interest_rate, start_date: date, due_date: date) -> int:
    """
    Agreed repayment amount in minor units.

    ``principal + principal * rate * months / 100`` with simple,
    non-compounding interest over whole months (minimum one). The
    figure depends only on the two dates, never on today.
    """
    months = months_between(start_date, due_date)
    return principal_minor + apply_rate(principal_minor, interest_rate, months)


class LoanCreate(RequestModel):
    """
    Payload for adding a loan.

    Only types are checked here. Direction-specific requirements live
    in ``finledger.validation.validator.LoanValidator``.
    """

    direction: LoanDirection = Field(
        ...,
        validation_alias=AliasChoices("direction", "type"),
    )
    counterparty_name: Optional[str] = Field(
        default=None,
        max_length=200,
        validation_alias=AliasChoices(
            "counterparty_name", "counterpartyName", "borrowerName", "lenderName"
        ),
    )
    amount: MinorAmount
    interest_rate: Optional[Decimal] = Field(
        default=None,
        validation_alias=AliasChoices("interest_rate", "interestRate", "interest"),
    )
    start_date: CalendarDate
    due_date: CalendarDate
    notes: Optional[str] = Field(default=None, max_length=1000)

    # Lending attributes
    counterparty_address: Optional[str] = Field(
        default=None,
        max_length=500,
        validation_alias=AliasChoices(
            "counterparty_address", "counterpartyAddress", "address"
        ),
    )
    counterparty_phone: Optional[str] = Field(
        default=None,
        max_length=30,
        validation_alias=AliasChoices(
            "counterparty_phone", "counterpartyPhone", "phone", "phoneNumber"
        ),
    )

    # Borrowing attributes
    borrowing_category: Optional[BorrowingCategory] = Field(
        default=None,
        validation_alias=AliasChoices(
            "borrowing_category", "borrowingCategory", "category"
        ),
    )


class Loan(BaseModel):
    """A stored loan."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    account_id: str
    direction: LoanDirection
    counterparty_name: str
    amount_minor: int = Field(..., gt=0, description="Principal in minor units")
    interest_rate: Decimal = Field(default=Decimal("0"), ge=0, description="Percent per month")
    start_date: date
    due_date: date
    status: LoanStatus = LoanStatus.PENDING
    paid_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    counterparty_address: Optional[str] = None
    counterparty_phone: Optional[str] = None
    borrowing_category: Optional[BorrowingCategory] = None

    @property
    def principal(self) -> Decimal:
        return from_minor(self.amount_minor)

    @property
    def months(self) -> int:
        return months_between(self.start_date, self.due_date)

    @property
    def total_payable_minor(self) -> int:
        return total_payable_minor(
            self.amount_minor, self.interest_rate, self.start_date, self.due_date
        )

    @property
    def total_payable(self) -> Decimal:
        return from_minor(self.total_payable_minor)

    @property
    def interest(self) -> Decimal:
        return from_minor(self.total_payable_minor - self.amount_minor)

    def effective_status(self, today: date) -> EffectiveStatus:
        return effective_status(self.status, self.due_date, today)

    def to_public_dict(self, today: date) -> dict:
        result = {
            "id": self.id,
            "direction": self.direction.value,
            "counterpartyName": self.counterparty_name,
            "amount": self.principal,
            "interestRate": self.interest_rate,
            "months": self.months,
            "interest": self.interest,
            "totalPayable": self.total_payable,
            "startDate": format_date(self.start_date),
            "dueDate": format_date(self.due_date),
            "status": self.effective_status(today).value,
            "storedStatus": self.status.value,
            "paidDate": format_date(self.paid_date) if self.paid_date else None,
            "notes": self.notes,
        }
        if self.direction == LoanDirection.LENDING:
            result["counterpartyAddress"] = self.counterparty_address
            result["counterpartyPhone"] = self.counterparty_phone
        else:
            result["borrowingCategory"] = (
                self.borrowing_category.value if self.borrowing_category else None
            )
        return result


class DirectionStats(ResponseModel):
    """Totals for one loan direction."""

    count: int = 0
    principal: Decimal = Decimal("0.00")
    total_payable: Decimal = Decimal("0.00")
    pending: int = 0
    paid: int = 0
    overdue: int = 0


class LoanStats(ResponseModel):
    """Portfolio summary across both directions."""

    lending: DirectionStats
    borrowing: DirectionStats
    outstanding_receivable: Decimal
    outstanding_payable: Decimal
