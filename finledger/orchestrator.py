"""
Ledger Service (request/response boundary)

This module ties together all the components and defines the single
inbound surface the client layer calls. Every method:

1. Takes a trusted ``account_id`` (authentication happens upstream)
2. Runs under that account's re-entrant lock, so reads and writes of
   one account see a consistent snapshot
3. Returns an ``ApiResponse`` envelope

DESIGN DECISION: Only the ledger's own error kinds (ValidationError,
StateError, NotFoundError) become failure envelopes. Anything else,
including a storage collaborator's ``StorageError``, is audited and
re-raised unchanged. The core never retries.
"""

import threading
import weakref
from contextlib import contextmanager
from datetime import date
from typing import Any, Callable, Iterator, Optional, TypeVar, Union

from finledger.analytics import AnalyticsAggregator, SuggestionEngine
from finledger.audit import AuditLogger, configure_logging
from finledger.config import LedgerSettings, Settings, get_settings
from finledger.errors import NotFoundError, ValidationError
from finledger.ledger import LedgerStore
from finledger.loans import LoanEngine
from finledger.models.analytics import ChartPeriod
from finledger.models.common import ApiResponse
from finledger.models.ledger import ExpenseCategory, ExpenseCreate, IncomeCategory, IncomeCreate
from finledger.models.loan import EffectiveStatus, LoanCreate, LoanDirection, LoanStatus
from finledger.models.notification import Notification, NotificationKind
from finledger.notifications import NotificationCenter
from finledger.primitives import month_key
from finledger.services.storage import InMemoryStorage, StorageBackend, create_storage
from finledger.validation import EntryValidator, LoanValidator

T = TypeVar("T")

DateInput = Union[date, str, None]
Payload = dict[str, Any]


class AccountLocks:
    """
    Per-account re-entrant locks.

    The registry itself is guarded by its own lock. Different accounts
    never share a lock. Entries are weak: a lock lives only while some
    caller holds a reference to it, so the registry stays bounded by the
    number of accounts with calls in flight.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.RLock]" = weakref.WeakValueDictionary()

    def get(self, account_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[account_id] = lock
            return lock

    @contextmanager
    def hold(self, account_id: str) -> Iterator[None]:
        with self.get(account_id):
            yield


class LedgerService:
    """
    Inbound boundary for the ledger and loan engine.

    Components are built from one storage backend unless injected.
    ``clock`` supplies today's date to every component.
    """

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        settings: Optional[LedgerSettings] = None,
        clock: Callable[[], date] = date.today,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or InMemoryStorage()
        self._settings = settings or get_settings().ledger
        self._clock = clock
        self._audit_logger = audit_logger or AuditLogger(self._storage)
        self._locks = AccountLocks()

        self._notifications = NotificationCenter(self._storage, self._audit_logger)
        self._ledger = LedgerStore(
            self._storage,
            audit_logger=self._audit_logger,
            validator=EntryValidator(self._settings),
        )
        self._loans = LoanEngine(
            self._storage,
            self._notifications,
            audit_logger=self._audit_logger,
            validator=LoanValidator(self._settings),
            settings=self._settings,
            clock=clock,
        )
        self._analytics = AnalyticsAggregator(
            self._ledger, self._loans, self._notifications, clock=clock
        )
        self._suggestions = SuggestionEngine(self._settings)

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _run(
        self,
        account_id: str,
        operation: str,
        action: Callable[[], T],
        message: Optional[str] = None,
    ) -> ApiResponse:
        """Run one call under the account lock and wrap the outcome."""
        if not account_id or not str(account_id).strip():
            return ApiResponse.fail("Account id is required")

        with self._locks.hold(account_id):
            try:
                data = action()
            except ValidationError as e:
                self._audit_logger.log_validation_failed(
                    account_id=account_id,
                    operation=operation,
                    issues=[issue.model_dump() for issue in e.issues],
                )
                return ApiResponse.fail(e.message)
            except NotFoundError as e:
                self._audit_logger.log_not_found(
                    account_id=account_id,
                    operation=operation,
                    entity_type=e.entity,
                    entity_id=e.entity_id,
                )
                return ApiResponse.fail(e.message)
            except Exception as e:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    account_id=account_id,
                    details={"operation": operation},
                )
                raise

        return ApiResponse.ok(data, message)

    def _refresh_due(self, account_id: str) -> None:
        """Due-date reminders are produced lazily, on read."""
        self._loans.scan_due_dates(account_id, self._clock())

    def _notification_dict(self, account_id: str, notification: Notification) -> dict:
        loan_exists = None
        if notification.loan_id:
            loan_exists = self._loans.exists(account_id, notification.loan_id)
        return notification.to_public_dict(loan_exists=loan_exists)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, account_id: str, payload: Union[ExpenseCreate, Payload]) -> ApiResponse:
        return self._run(
            account_id,
            "add_expense",
            lambda: self._ledger.add_expense(account_id, payload).to_public_dict(),
            "Expense added successfully",
        )

    def list_expenses(
        self,
        account_id: str,
        category: Union[ExpenseCategory, str, None] = None,
        date_from: DateInput = None,
        date_to: DateInput = None,
    ) -> ApiResponse:
        return self._run(
            account_id,
            "list_expenses",
            lambda: [
                entry.to_public_dict()
                for entry in self._ledger.list_expenses(account_id, category, date_from, date_to)
            ],
        )

    def delete_expense(self, account_id: str, expense_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "delete_expense",
            lambda: self._ledger.delete_expense(account_id, expense_id),
            "Expense deleted successfully",
        )

    # -------------------------------------------------------------------------
    # Incomes
    # -------------------------------------------------------------------------

    def add_income(self, account_id: str, payload: Union[IncomeCreate, Payload]) -> ApiResponse:
        return self._run(
            account_id,
            "add_income",
            lambda: self._ledger.add_income(account_id, payload).to_public_dict(),
            "Income added successfully",
        )

    def list_incomes(
        self,
        account_id: str,
        category: Union[IncomeCategory, str, None] = None,
        date_from: DateInput = None,
        date_to: DateInput = None,
    ) -> ApiResponse:
        return self._run(
            account_id,
            "list_incomes",
            lambda: [
                entry.to_public_dict()
                for entry in self._ledger.list_incomes(account_id, category, date_from, date_to)
            ],
        )

    def delete_income(self, account_id: str, income_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "delete_income",
            lambda: self._ledger.delete_income(account_id, income_id),
            "Income deleted successfully",
        )

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def add_loan(self, account_id: str, payload: Union[LoanCreate, Payload]) -> ApiResponse:
        return self._run(
            account_id,
            "add_loan",
            lambda: self._loans.add_loan(account_id, payload).to_public_dict(self._clock()),
            "Loan added successfully",
        )

    def list_loans(
        self,
        account_id: str,
        direction: Union[LoanDirection, str, None] = None,
        status: Union[EffectiveStatus, str, None] = None,
        search: Optional[str] = None,
    ) -> ApiResponse:
        def action() -> list[dict]:
            self._refresh_due(account_id)
            today = self._clock()
            return [
                loan.to_public_dict(today)
                for loan in self._loans.list_loans(account_id, direction, status, search)
            ]

        return self._run(account_id, "list_loans", action)

    def get_loan(self, account_id: str, loan_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "get_loan",
            lambda: self._loans.get_loan(account_id, loan_id).to_public_dict(self._clock()),
        )

    def update_loan_status(
        self,
        account_id: str,
        loan_id: str,
        status: Union[LoanStatus, str],
    ) -> ApiResponse:
        return self._run(
            account_id,
            "update_loan_status",
            lambda: self._loans.update_status(account_id, loan_id, status).to_public_dict(self._clock()),
            "Loan status updated",
        )

    def update_loan_due_date(
        self,
        account_id: str,
        loan_id: str,
        due_date: Union[date, str],
    ) -> ApiResponse:
        return self._run(
            account_id,
            "update_loan_due_date",
            lambda: self._loans.update_due_date(account_id, loan_id, due_date).to_public_dict(self._clock()),
            "Loan due date updated",
        )

    def delete_loan(self, account_id: str, loan_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "delete_loan",
            lambda: self._loans.delete_loan(account_id, loan_id),
            "Loan deleted successfully",
        )

    def loan_stats(self, account_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "loan_stats",
            lambda: self._loans.stats(account_id).to_public_dict(),
        )

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def dashboard(self, account_id: str) -> ApiResponse:
        def action() -> dict:
            self._refresh_due(account_id)
            return self._analytics.dashboard(account_id).to_public_dict()

        return self._run(account_id, "dashboard", action)

    def chart_series(self, account_id: str, period: Union[ChartPeriod, str] = ChartPeriod.WEEK) -> ApiResponse:
        return self._run(
            account_id,
            "chart_series",
            lambda: self._analytics.chart_series(account_id, period).to_public_dict(),
        )

    def category_breakdown(
        self,
        account_id: str,
        period: Union[ChartPeriod, str] = ChartPeriod.WEEK,
    ) -> ApiResponse:
        return self._run(
            account_id,
            "category_breakdown",
            lambda: [
                item.to_public_dict()
                for item in self._analytics.category_breakdown(account_id, period)
            ],
        )

    def suggestions(self, account_id: str, limit: Optional[int] = None) -> ApiResponse:
        """
        Evaluate the advisory rules.

        Each advisory is also recorded once per calendar month as a
        ``suggestion`` notification.
        """
        def action() -> list[dict]:
            self._refresh_due(account_id)
            summary = self._analytics.dashboard(account_id)
            month = self._analytics.chart_series(account_id, ChartPeriod.MONTH)
            advisories = self._suggestions.evaluate(summary, month, limit)

            current_month = month_key(self._clock())
            for advisory in advisories:
                self._notifications.notify(
                    account_id=account_id,
                    kind=NotificationKind.SUGGESTION,
                    title=advisory.severity.capitalize(),
                    message=advisory.message,
                    dedupe_key=f"suggestion:{advisory.code}:{current_month}",
                )
            return [advisory.to_public_dict() for advisory in advisories]

        return self._run(account_id, "suggestions", action)

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def list_notifications(self, account_id: str, unread_only: bool = False) -> ApiResponse:
        def action() -> list[dict]:
            self._refresh_due(account_id)
            return [
                self._notification_dict(account_id, notification)
                for notification in self._notifications.list_notifications(account_id, unread_only)
            ]

        return self._run(account_id, "list_notifications", action)

    def mark_notification_read(self, account_id: str, notification_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "mark_notification_read",
            lambda: self._notification_dict(
                account_id, self._notifications.mark_as_read(account_id, notification_id)
            ),
            "Notification marked as read",
        )

    def mark_all_notifications_read(self, account_id: str) -> ApiResponse:
        return self._run(
            account_id,
            "mark_all_notifications_read",
            lambda: {"updated": self._notifications.mark_all_as_read(account_id)},
            "All notifications marked as read",
        )

    def unread_count(self, account_id: str) -> ApiResponse:
        def action() -> dict:
            self._refresh_due(account_id)
            return {"unreadCount": self._notifications.unread_count(account_id)}

        return self._run(account_id, "unread_count", action)


def create_service(
    settings: Optional[Settings] = None,
    clock: Callable[[], date] = date.today,
) -> LedgerService:
    """
    Factory function to create a fully wired service.

    Configures logging and picks the storage backend from settings.
    """
    settings = settings or get_settings()
    configure_logging(settings.logging.level, settings.logging.json_output)
    storage = create_storage(settings.storage)
    return LedgerService(storage=storage, settings=settings.ledger, clock=clock)
