"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file backend for a real database later
2. Use in-memory storage for testing
3. Keep ledger rules decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Every method is scoped by account id; a record stored under one
account is invisible to lookups under any other.

Storage never validates business rules. It stores what it is given.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from finledger.models.audit import AuditEvent
from finledger.models.ledger import ExpenseCategory, ExpenseEntry, IncomeCategory, IncomeEntry
from finledger.models.loan import Loan, LoanDirection
from finledger.models.notification import Notification


class LedgerStorageInterface(ABC):
    """Expense and income persistence."""

    @abstractmethod
    def save_expense(self, entry: ExpenseEntry) -> None:
        """
        Save a new expense.

        Raises:
            DuplicateError: If an expense with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_expense(self, account_id: str, entry_id: str) -> Optional[ExpenseEntry]:
        pass

    @abstractmethod
    def list_expenses(
        self,
        account_id: str,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[ExpenseEntry]:
        """
        List expenses with optional filters, in insertion order.

        Args:
            account_id: Owning account
            category: Filter by category
            date_from: Entries on or after this date
            date_to: Entries on or before this date
        """
        pass

    @abstractmethod
    def delete_expense(self, account_id: str, entry_id: str) -> bool:
        """Delete an expense. Returns False if it did not exist."""
        pass

    @abstractmethod
    def save_income(self, entry: IncomeEntry) -> None:
        pass

    @abstractmethod
    def get_income(self, account_id: str, entry_id: str) -> Optional[IncomeEntry]:
        pass

    @abstractmethod
    def list_incomes(
        self,
        account_id: str,
        category: Optional[IncomeCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[IncomeEntry]:
        pass

    @abstractmethod
    def delete_income(self, account_id: str, entry_id: str) -> bool:
        pass


class LoanStorageInterface(ABC):
    """Loan persistence."""

    @abstractmethod
    def save_loan(self, loan: Loan) -> None:
        """Insert or replace a loan by id."""
        pass

    @abstractmethod
    def get_loan(self, account_id: str, loan_id: str) -> Optional[Loan]:
        pass

    @abstractmethod
    def list_loans(
        self,
        account_id: str,
        direction: Optional[LoanDirection] = None,
    ) -> list[Loan]:
        """List loans in insertion order, optionally by direction."""
        pass

    @abstractmethod
    def delete_loan(self, account_id: str, loan_id: str) -> bool:
        pass


class NotificationStorageInterface(ABC):
    """Notification persistence."""

    @abstractmethod
    def save_notification(self, notification: Notification) -> None:
        """Insert or replace a notification by id."""
        pass

    @abstractmethod
    def get_notification(self, account_id: str, notification_id: str) -> Optional[Notification]:
        pass

    @abstractmethod
    def list_notifications(
        self,
        account_id: str,
        unread_only: bool = False,
    ) -> list[Notification]:
        """List notifications in insertion order."""
        pass

    @abstractmethod
    def find_by_dedupe_key(self, account_id: str, dedupe_key: str) -> Optional[Notification]:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_account(self, account_id: str) -> list[AuditEvent]:
        """All events for one account in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageBackend(
    LedgerStorageInterface,
    LoanStorageInterface,
    NotificationStorageInterface,
    AuditStorageInterface,
):
    """A backend implementing every storage concern."""
    pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageUnavailableError(StorageError):
    """Could not read or write the storage backend."""
    pass


def in_range(value: date, date_from: Optional[date], date_to: Optional[date]) -> bool:
    """Inclusive date range check shared by backends."""
    if date_from is not None and value < date_from:
        return False
    if date_to is not None and value > date_to:
        return False
    return True
