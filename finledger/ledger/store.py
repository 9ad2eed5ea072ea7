"""
Ledger Store

Expenses and incomes for each account, plus the aggregates derived
from them.

DESIGN DECISION: There is no running balance. Every aggregate is
recomputed from the authoritative entry set on each read, so a delete
is reflected immediately and nothing can drift.

All amounts handled here are integer minor units. Conversion to
Decimal happens at the boundary.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Optional, Union

from finledger.audit import AuditLogger
from finledger.errors import NotFoundError
from finledger.models.ledger import (
    EntryKind,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseEntry,
    IncomeCategory,
    IncomeCreate,
    IncomeEntry,
    LedgerEntry,
)
from finledger.services.storage import LedgerStorageInterface
from finledger.validation import EntryValidator, parse_enum, parse_optional_date

DateInput = Union[date, str, None]


def newest_first(entries: list[LedgerEntry]) -> list[LedgerEntry]:
    """
    Order entries by date, newest first.

    Entries on the same day keep reverse creation order. Storage
    returns entries in insertion order and ``list.sort`` is stable.
    """
    ordered = list(reversed(entries))
    ordered.sort(key=lambda entry: entry.entry_date, reverse=True)
    return ordered


class LedgerStore:
    """
    Expense and income ledger.

    Every add validates the whole payload before a single record is
    written.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._validator = validator or EntryValidator()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        account_id: str,
        payload: Union[ExpenseCreate, dict[str, Any]],
    ) -> ExpenseEntry:
        """
        Record an expense.

        Raises:
            ValidationError: Amount not positive, blank name, unknown
                category or bad date
        """
        expense = self._validator.validate_expense(payload)
        entry = ExpenseEntry(
            account_id=account_id,
            name=expense.name,
            category=expense.category,
            amount_minor=expense.amount,
            entry_date=expense.date,
            notes=expense.notes or None,
        )
        self._storage.save_expense(entry)

        if self._audit_logger:
            self._audit_logger.log_entry_added(
                kind=EntryKind.EXPENSE.value,
                account_id=account_id,
                entry_id=entry.id,
                amount=str(entry.amount),
                category=entry.category.value,
            )
        return entry

    def add_income(
        self,
        account_id: str,
        payload: Union[IncomeCreate, dict[str, Any]],
    ) -> IncomeEntry:
        """Record an income. Same rules as ``add_expense``."""
        income = self._validator.validate_income(payload)
        entry = IncomeEntry(
            account_id=account_id,
            source=income.source,
            category=income.category,
            amount_minor=income.amount,
            entry_date=income.date,
            notes=income.notes or None,
        )
        self._storage.save_income(entry)

        if self._audit_logger:
            self._audit_logger.log_entry_added(
                kind=EntryKind.INCOME.value,
                account_id=account_id,
                entry_id=entry.id,
                amount=str(entry.amount),
                category=entry.category.value,
            )
        return entry

    def delete_expense(self, account_id: str, entry_id: str) -> None:
        """
        Raises:
            NotFoundError: If the id is unknown (including a repeat delete)
        """
        if not self._storage.delete_expense(account_id, entry_id):
            raise NotFoundError("expense", entry_id)
        if self._audit_logger:
            self._audit_logger.log_entry_deleted(EntryKind.EXPENSE.value, account_id, entry_id)

    def delete_income(self, account_id: str, entry_id: str) -> None:
        if not self._storage.delete_income(account_id, entry_id):
            raise NotFoundError("income", entry_id)
        if self._audit_logger:
            self._audit_logger.log_entry_deleted(EntryKind.INCOME.value, account_id, entry_id)

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def list_expenses(
        self,
        account_id: str,
        category: Union[ExpenseCategory, str, None] = None,
        date_from: DateInput = None,
        date_to: DateInput = None,
    ) -> list[ExpenseEntry]:
        entries = self._storage.list_expenses(
            account_id,
            category=parse_enum(ExpenseCategory, "category", category),
            date_from=parse_optional_date("dateFrom", date_from),
            date_to=parse_optional_date("dateTo", date_to),
        )
        return newest_first(entries)

    def list_incomes(
        self,
        account_id: str,
        category: Union[IncomeCategory, str, None] = None,
        date_from: DateInput = None,
        date_to: DateInput = None,
    ) -> list[IncomeEntry]:
        entries = self._storage.list_incomes(
            account_id,
            category=parse_enum(IncomeCategory, "category", category),
            date_from=parse_optional_date("dateFrom", date_from),
            date_to=parse_optional_date("dateTo", date_to),
        )
        return newest_first(entries)

    # -------------------------------------------------------------------------
    # Aggregates (minor units)
    # -------------------------------------------------------------------------

    def total_income(
        self,
        account_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        entries = self._storage.list_incomes(account_id, date_from=date_from, date_to=date_to)
        return sum(entry.amount_minor for entry in entries)

    def total_expenses(
        self,
        account_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        entries = self._storage.list_expenses(account_id, date_from=date_from, date_to=date_to)
        return sum(entry.amount_minor for entry in entries)

    def balance(self, account_id: str) -> int:
        """Total income minus total expenses over the full history."""
        return self.total_income(account_id) - self.total_expenses(account_id)

    def expenses_by_category(
        self,
        account_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> dict[ExpenseCategory, int]:
        """Expense totals per category. Categories with no spend are absent."""
        totals: dict[ExpenseCategory, int] = defaultdict(int)
        for entry in self._storage.list_expenses(account_id, date_from=date_from, date_to=date_to):
            totals[entry.category] += entry.amount_minor
        return dict(totals)

    def sum_by_day(
        self,
        account_id: str,
        kind: EntryKind,
        date_from: date,
        date_to: date,
    ) -> dict[date, int]:
        """Per-day totals of one entry kind within an inclusive range."""
        if kind == EntryKind.INCOME:
            entries = self._storage.list_incomes(account_id, date_from=date_from, date_to=date_to)
        else:
            entries = self._storage.list_expenses(account_id, date_from=date_from, date_to=date_to)

        totals: dict[date, int] = defaultdict(int)
        for entry in entries:
            totals[entry.entry_date] += entry.amount_minor
        return dict(totals)

