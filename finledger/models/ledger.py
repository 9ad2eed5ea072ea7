"""
Ledger Entry Models

Expense and income entries plus the request payloads that create them.

DESIGN DECISION: Request payloads and stored entries are separate
models. A payload is what the caller typed (decimal amount, date
string); an entry is what we keep (minor units, account, id,
creation time). Entries are never edited after creation.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from finledger.models.common import CalendarDate, MinorAmount, RequestModel
from finledger.primitives import format_date, from_minor


class ExpenseCategory(str, Enum):
    """Fixed expense taxonomy."""
    FOOD = "Food"
    TRAVEL = "Travel"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"


class IncomeCategory(str, Enum):
    """Fixed income taxonomy."""
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENT = "Investment"
    BUSINESS = "Business"
    GIFT = "Gift"
    HOMEMAKER = "HomeMaker"
    OTHER = "Other"


class EntryKind(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


# =============================================================================
# REQUEST PAYLOADS
# =============================================================================

class ExpenseCreate(RequestModel):
    """Payload for adding an expense."""

    name: str = Field(..., min_length=1, max_length=200)
    category: ExpenseCategory = ExpenseCategory.OTHER
    amount: MinorAmount = Field(..., gt=0)
    date: CalendarDate
    notes: Optional[str] = Field(default=None, max_length=1000)


class IncomeCreate(RequestModel):
    """Payload for adding an income."""

    source: str = Field(..., min_length=1, max_length=200)
    category: IncomeCategory = IncomeCategory.SALARY
    amount: MinorAmount = Field(..., gt=0)
    date: CalendarDate
    notes: Optional[str] = Field(default=None, max_length=1000)


# =============================================================================
# STORED ENTRIES
# =============================================================================

class LedgerEntry(BaseModel):
    """Fields shared by both kinds of ledger entry."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    account_id: str
    amount_minor: int = Field(..., gt=0, description="Amount in minor units")
    entry_date: date
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def amount(self):
        return from_minor(self.amount_minor)


class ExpenseEntry(LedgerEntry):
    """A single expense."""

    name: str
    category: ExpenseCategory

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "amount": self.amount,
            "date": format_date(self.entry_date),
            "notes": self.notes,
        }


class IncomeEntry(LedgerEntry):
    """A single income."""

    source: str
    category: IncomeCategory

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "category": self.category.value,
            "amount": self.amount,
            "date": format_date(self.entry_date),
            "notes": self.notes,
        }
