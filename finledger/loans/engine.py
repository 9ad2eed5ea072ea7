"""
Loan Engine

Lending and borrowing records, their interest, and their lifecycle.

LIFECYCLE:
- Created ``pending``
- ``pending -> paid`` stamps paid_date with today
- ``paid -> pending`` clears paid_date
- ``overdue`` is never stored; it is derived at read time whenever a
  pending loan's due date is before today

INTEREST:
Simple, per month, fixed by (start_date, due_date). A loan that goes
overdue does not accrue further interest.

DUE SCAN:
``scan_due_dates`` turns loans that are due soon or overdue into
``loan-due`` notifications. It is called on read by the service; there
is no scheduler. Dedupe keys include the due date, so moving a due
date re-arms the reminder.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional, Union

import structlog

from finledger.audit import AuditLogger
from finledger.config import LedgerSettings, get_settings
from finledger.errors import NotFoundError
from finledger.models.loan import (
    DirectionStats,
    EffectiveStatus,
    Loan,
    LoanCreate,
    LoanDirection,
    LoanStats,
    LoanStatus,
)
from finledger.models.notification import Notification, NotificationKind
from finledger.notifications import NotificationCenter
from finledger.primitives import add_days, format_date, from_minor
from finledger.services.storage import LoanStorageInterface
from finledger.validation import LoanValidator, parse_enum, parse_loan_status

logger = structlog.get_logger("finledger.loans")

Clock = Callable[[], date]


def is_due_soon(loan: Loan, today: date, window_days: int) -> bool:
    """Pending and due between today and ``window_days`` from now, inclusive."""
    return (
        loan.status == LoanStatus.PENDING
        and today <= loan.due_date <= add_days(today, window_days)
    )


def is_overdue(loan: Loan, today: date) -> bool:
    return loan.effective_status(today) == EffectiveStatus.OVERDUE


def _direction_stats(loans: list[Loan], today: date) -> DirectionStats:
    counts = {status: 0 for status in EffectiveStatus}
    for loan in loans:
        counts[loan.effective_status(today)] += 1
    return DirectionStats(
        count=len(loans),
        principal=from_minor(sum(loan.amount_minor for loan in loans)),
        total_payable=from_minor(sum(loan.total_payable_minor for loan in loans)),
        pending=counts[EffectiveStatus.PENDING],
        paid=counts[EffectiveStatus.PAID],
        overdue=counts[EffectiveStatus.OVERDUE],
    )


def _outstanding(loans: list[Loan]) -> Decimal:
    """Total payable still owed on loans not marked paid."""
    return from_minor(sum(
        loan.total_payable_minor for loan in loans if loan.status == LoanStatus.PENDING
    ))


class LoanEngine:
    """
    Loan records for each account.

    ``clock`` supplies today's date; tests inject a fixed one.
    """

    def __init__(
        self,
        storage: LoanStorageInterface,
        notifications: NotificationCenter,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[LoanValidator] = None,
        settings: Optional[LedgerSettings] = None,
        clock: Clock = date.today,
    ):
        self._storage = storage
        self._notifications = notifications
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().ledger
        self._validator = validator or LoanValidator(self._settings)
        self._clock = clock

    def today(self) -> date:
        return self._clock()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_loan(
        self,
        account_id: str,
        payload: Union[LoanCreate, dict[str, Any]],
    ) -> Loan:
        """
        Record a new loan in ``pending`` state.

        Raises:
            ValidationError: Any field or direction rule fails
        """
        request = self._validator.validate(payload)
        is_lending = request.direction == LoanDirection.LENDING

        loan = Loan(
            account_id=account_id,
            direction=request.direction,
            counterparty_name=request.counterparty_name,
            amount_minor=request.amount,
            interest_rate=request.interest_rate or Decimal("0"),
            start_date=request.start_date,
            due_date=request.due_date,
            notes=request.notes or None,
            counterparty_address=request.counterparty_address if is_lending else None,
            counterparty_phone=request.counterparty_phone if is_lending else None,
            borrowing_category=None if is_lending else request.borrowing_category,
        )
        total_payable = loan.total_payable
        self._storage.save_loan(loan)

        if self._audit_logger:
            self._audit_logger.log_loan_created(
                account_id=account_id,
                loan_id=loan.id,
                direction=loan.direction.value,
                principal=str(loan.principal),
                total_payable=str(total_payable),
            )
        return loan

    def update_status(
        self,
        account_id: str,
        loan_id: str,
        new_status: Union[LoanStatus, str],
    ) -> Loan:
        """
        Move a loan between ``pending`` and ``paid``.

        Raises:
            StateError: ``new_status`` is not pending or paid
            NotFoundError: Unknown loan id
        """
        status = parse_loan_status(new_status)
        loan = self.get_loan(account_id, loan_id)

        paid_date = self.today() if status == LoanStatus.PAID else None
        if status == loan.status and status == LoanStatus.PAID:
            # Re-marking paid keeps the original payment date
            paid_date = loan.paid_date

        updated = loan.model_copy(update={"status": status, "paid_date": paid_date})
        self._storage.save_loan(updated)

        if self._audit_logger:
            self._audit_logger.log_loan_status_updated(
                account_id=account_id,
                loan_id=loan_id,
                old_status=loan.status.value,
                new_status=status.value,
            )
        return updated

    def update_due_date(
        self,
        account_id: str,
        loan_id: str,
        due_date: Union[date, str],
    ) -> Loan:
        """
        Move a loan's due date. Effective status follows immediately.

        Raises:
            ValidationError: Not a calendar date, or before the start date
            NotFoundError: Unknown loan id
        """
        loan = self.get_loan(account_id, loan_id)
        new_due = self._validator.validate_due_date_change(loan, due_date)

        updated = loan.model_copy(update={"due_date": new_due})
        self._storage.save_loan(updated)

        if self._audit_logger:
            self._audit_logger.log_loan_due_date_updated(
                account_id=account_id,
                loan_id=loan_id,
                old_due=format_date(loan.due_date),
                new_due=format_date(new_due),
            )
        return updated

    def delete_loan(self, account_id: str, loan_id: str) -> None:
        """
        Remove a loan permanently.

        Loan-due notifications that point at it are left in place.
        """
        if not self._storage.delete_loan(account_id, loan_id):
            raise NotFoundError("loan", loan_id)
        if self._audit_logger:
            self._audit_logger.log_loan_deleted(account_id, loan_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_loan(self, account_id: str, loan_id: str) -> Loan:
        loan = self._storage.get_loan(account_id, loan_id)
        if loan is None:
            raise NotFoundError("loan", loan_id)
        return loan

    def exists(self, account_id: str, loan_id: str) -> bool:
        return self._storage.get_loan(account_id, loan_id) is not None

    def list_loans(
        self,
        account_id: str,
        direction: Union[LoanDirection, str, None] = None,
        status: Union[EffectiveStatus, str, None] = None,
        search: Optional[str] = None,
    ) -> list[Loan]:
        """
        Loans newest first, optionally filtered.

        Args:
            direction: lending or borrowing
            status: Effective status, so ``overdue`` is a valid filter
            search: Case-insensitive substring of the counterparty name
        """
        direction = parse_enum(LoanDirection, "direction", direction)
        status = parse_enum(EffectiveStatus, "status", status)
        needle = search.strip().casefold() if search else ""
        today = self.today()

        loans = list(reversed(self._storage.list_loans(account_id, direction=direction)))
        return [
            loan for loan in loans
            if (status is None or loan.effective_status(today) == status)
            and (not needle or needle in loan.counterparty_name.casefold())
        ]

    def stats(self, account_id: str) -> LoanStats:
        """Counts and totals per direction, by effective status."""
        today = self.today()
        loans = self._storage.list_loans(account_id)
        lending = [loan for loan in loans if loan.direction == LoanDirection.LENDING]
        borrowing = [loan for loan in loans if loan.direction == LoanDirection.BORROWING]

        return LoanStats(
            lending=_direction_stats(lending, today),
            borrowing=_direction_stats(borrowing, today),
            outstanding_receivable=_outstanding(lending),
            outstanding_payable=_outstanding(borrowing),
        )

    def due_counts(self, account_id: str) -> tuple[int, int]:
        """(due soon, overdue) counts for the dashboard."""
        today = self.today()
        window = self._settings.due_soon_days
        loans = self._storage.list_loans(account_id)
        due_soon = sum(1 for loan in loans if is_due_soon(loan, today, window))
        overdue = sum(1 for loan in loans if is_overdue(loan, today))
        return due_soon, overdue

    # -------------------------------------------------------------------------
    # Due-date scan
    # -------------------------------------------------------------------------

    def scan_due_dates(
        self,
        account_id: str,
        today: Optional[date] = None,
    ) -> list[Notification]:
        """
        Create loan-due notifications for loans due soon or overdue.

        Each (loan, state, due date) produces at most one notification.

        Returns:
            Notifications created by this scan
        """
        today = today or self.today()
        window = self._settings.due_soon_days
        created = []

        for loan in self._storage.list_loans(account_id):
            if is_overdue(loan, today):
                state = "overdue"
                title = "Loan overdue"
                verb = "was due"
            elif is_due_soon(loan, today, window):
                state = "due-soon"
                title = "Loan due soon"
                verb = "is due"
            else:
                continue

            due = format_date(loan.due_date)
            if loan.direction == LoanDirection.LENDING:
                message = (
                    f"{loan.counterparty_name} owes you {loan.total_payable}; "
                    f"repayment {verb} on {due}"
                )
            else:
                message = (
                    f"You owe {loan.counterparty_name} {loan.total_payable}; "
                    f"repayment {verb} on {due}"
                )

            notification = self._notifications.notify(
                account_id=account_id,
                kind=NotificationKind.LOAN_DUE,
                title=title,
                message=message,
                loan_id=loan.id,
                dedupe_key=f"loan-due:{loan.id}:{state}:{due}",
            )
            if notification is not None:
                created.append(notification)

        if created:
            logger.info("loan_due_scan", account_id=account_id, created=len(created))
        return created
