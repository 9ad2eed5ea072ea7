"""
In-Memory Storage

Default backend, and the one every test uses. Records live in
per-account dicts keyed by id; dict order is insertion order.
"""

from collections import defaultdict
from datetime import date
from typing import Optional

from finledger.models.audit import AuditEvent
from finledger.models.ledger import ExpenseCategory, ExpenseEntry, IncomeCategory, IncomeEntry
from finledger.models.loan import Loan, LoanDirection
from finledger.models.notification import Notification
from finledger.services.storage.interface import DuplicateError, StorageBackend, in_range


class InMemoryStorage(StorageBackend):
    """Dict-backed implementation of every storage interface."""

    def __init__(self):
        self._expenses: dict[str, dict[str, ExpenseEntry]] = defaultdict(dict)
        self._incomes: dict[str, dict[str, IncomeEntry]] = defaultdict(dict)
        self._loans: dict[str, dict[str, Loan]] = defaultdict(dict)
        self._notifications: dict[str, dict[str, Notification]] = defaultdict(dict)
        self._audit: list[AuditEvent] = []

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    def save_expense(self, entry: ExpenseEntry) -> None:
        bucket = self._expenses[entry.account_id]
        if entry.id in bucket:
            raise DuplicateError(f"Expense {entry.id} already exists")
        bucket[entry.id] = entry

    def get_expense(self, account_id: str, entry_id: str) -> Optional[ExpenseEntry]:
        return self._expenses[account_id].get(entry_id)

    def list_expenses(
        self,
        account_id: str,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[ExpenseEntry]:
        return [
            entry for entry in self._expenses[account_id].values()
            if (category is None or entry.category == category)
            and in_range(entry.entry_date, date_from, date_to)
        ]

    def delete_expense(self, account_id: str, entry_id: str) -> bool:
        return self._expenses[account_id].pop(entry_id, None) is not None

    def save_income(self, entry: IncomeEntry) -> None:
        bucket = self._incomes[entry.account_id]
        if entry.id in bucket:
            raise DuplicateError(f"Income {entry.id} already exists")
        bucket[entry.id] = entry

    def get_income(self, account_id: str, entry_id: str) -> Optional[IncomeEntry]:
        return self._incomes[account_id].get(entry_id)

    def list_incomes(
        self,
        account_id: str,
        category: Optional[IncomeCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[IncomeEntry]:
        return [
            entry for entry in self._incomes[account_id].values()
            if (category is None or entry.category == category)
            and in_range(entry.entry_date, date_from, date_to)
        ]

    def delete_income(self, account_id: str, entry_id: str) -> bool:
        return self._incomes[account_id].pop(entry_id, None) is not None

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def save_loan(self, loan: Loan) -> None:
        self._loans[loan.account_id][loan.id] = loan

    def get_loan(self, account_id: str, loan_id: str) -> Optional[Loan]:
        return self._loans[account_id].get(loan_id)

    def list_loans(
        self,
        account_id: str,
        direction: Optional[LoanDirection] = None,
    ) -> list[Loan]:
        return [
            loan for loan in self._loans[account_id].values()
            if direction is None or loan.direction == direction
        ]

    def delete_loan(self, account_id: str, loan_id: str) -> bool:
        return self._loans[account_id].pop(loan_id, None) is not None

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def save_notification(self, notification: Notification) -> None:
        self._notifications[notification.account_id][notification.id] = notification

    def get_notification(self, account_id: str, notification_id: str) -> Optional[Notification]:
        return self._notifications[account_id].get(notification_id)

    def list_notifications(
        self,
        account_id: str,
        unread_only: bool = False,
    ) -> list[Notification]:
        return [
            n for n in self._notifications[account_id].values()
            if not (unread_only and n.is_read)
        ]

    def find_by_dedupe_key(self, account_id: str, dedupe_key: str) -> Optional[Notification]:
        for notification in self._notifications[account_id].values():
            if notification.dedupe_key == dedupe_key:
                return notification
        return None

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def append_event(self, event: AuditEvent) -> bool:
        self._audit.append(event)
        return True

    def get_events_by_account(self, account_id: str) -> list[AuditEvent]:
        return [e for e in self._audit if e.account_id == account_id]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._audit[-limit:])) if limit > 0 else []
