"""
Analytics Models

Output shapes of the analytics aggregator and the suggestion engine.
All amounts are ``Decimal`` with exactly two fraction digits.
"""

from decimal import Decimal
from enum import Enum

from pydantic import Field

from finledger.models.common import ResponseModel


class ChartPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class Severity(str, Enum):
    """Advisory severity tag."""
    WARNING = "warning"
    SUCCESS = "success"
    TIP = "tip"
    REMINDER = "reminder"


class CategoryAmount(ResponseModel):
    """One slice of the category pie."""

    category: str
    amount: Decimal


class DashboardSummary(ResponseModel):
    """Headline numbers over the full account history."""

    balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    unread_notification_count: int = Field(ge=0)
    expenses_by_category: dict[str, Decimal] = Field(default_factory=dict)
    loans_due_soon: int = Field(default=0, ge=0)
    overdue_loans: int = Field(default=0, ge=0)


class ChartSeries(ResponseModel):
    """
    Calendar-aligned income/expense buckets.

    ``labels``, ``income`` and ``expenses`` always have the same,
    period-determined length. Empty buckets hold zero.
    """

    period: ChartPeriod
    start_date: str
    end_date: str
    labels: list[str]
    income: list[Decimal]
    expenses: list[Decimal]
    total_income: Decimal
    total_expenses: Decimal
    categories: list[CategoryAmount] = Field(default_factory=list)

    @property
    def bucket_count(self) -> int:
        return len(self.labels)


class Advisory(ResponseModel):
    """A suggestion engine output message."""

    code: str
    severity: Severity
    message: str
