"""
Audit Logger

DESIGN DECISION: Every mutation in the ledger is logged.
This provides:
1. Complete traceability of balances and loan state
2. Debugging capability
3. A per-account history the user can inspect

The audit logger:
- Always writes a structured local log line
- Optionally appends the event to an audit storage backend
- Never lets an audit storage failure break the operation being audited
"""

import logging
from typing import Optional

import structlog

from finledger.models.audit import AuditEvent, AuditEventBuilder
from finledger.services.storage.interface import AuditStorageInterface, StorageError


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog for local logging.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("finledger").setLevel(getattr(logging, level.upper(), logging.INFO))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_entry_added(
        self,
        kind: str,
        account_id: str,
        entry_id: str,
        amount: str,
        category: str,
    ) -> None:
        """Log a new expense or income."""
        self.log(AuditEventBuilder.entry_added(kind, account_id, entry_id, amount, category))

    def log_entry_deleted(self, kind: str, account_id: str, entry_id: str) -> None:
        self.log(AuditEventBuilder.entry_deleted(kind, account_id, entry_id))

    def log_loan_created(
        self,
        account_id: str,
        loan_id: str,
        direction: str,
        principal: str,
        total_payable: str,
    ) -> None:
        self.log(AuditEventBuilder.loan_created(
            account_id=account_id,
            loan_id=loan_id,
            direction=direction,
            principal=principal,
            total_payable=total_payable,
        ))

    def log_loan_status_updated(
        self,
        account_id: str,
        loan_id: str,
        old_status: str,
        new_status: str,
    ) -> None:
        self.log(AuditEventBuilder.loan_status_updated(account_id, loan_id, old_status, new_status))

    def log_loan_due_date_updated(
        self,
        account_id: str,
        loan_id: str,
        old_due: str,
        new_due: str,
    ) -> None:
        self.log(AuditEventBuilder.loan_due_date_updated(account_id, loan_id, old_due, new_due))

    def log_loan_deleted(self, account_id: str, loan_id: str) -> None:
        self.log(AuditEventBuilder.loan_deleted(account_id, loan_id))

    def log_notification_created(
        self,
        account_id: str,
        notification_id: str,
        kind: str,
        title: str,
    ) -> None:
        self.log(AuditEventBuilder.notification_created(account_id, notification_id, kind, title))

    def log_notification_read(self, account_id: str, notification_id: str) -> None:
        self.log(AuditEventBuilder.notification_read(account_id, notification_id))

    def log_validation_failed(
        self,
        account_id: str,
        operation: str,
        issues: list[dict],
    ) -> None:
        """Log a rejected request."""
        self.log(AuditEventBuilder.validation_failed(account_id, operation, issues))

    def log_not_found(
        self,
        account_id: str,
        operation: str,
        entity_type: str,
        entity_id: str,
    ) -> None:
        self.log(AuditEventBuilder.entity_not_found(account_id, operation, entity_type, entity_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        account_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            account_id=account_id,
            details=details,
        ))
