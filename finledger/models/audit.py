"""
Audit Models for the Ledger

Every mutation of an account's ledger, loans or notifications is
recorded as an ``AuditEvent``.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger entries
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    INCOME_ADDED = "income_added"
    INCOME_DELETED = "income_deleted"

    # Loans
    LOAN_CREATED = "loan_created"
    LOAN_STATUS_UPDATED = "loan_status_updated"
    LOAN_DUE_DATE_UPDATED = "loan_due_date_updated"
    LOAN_DELETED = "loan_deleted"

    # Notifications
    NOTIFICATION_CREATED = "notification_created"
    NOTIFICATION_READ = "notification_read"

    # Rejections
    VALIDATION_FAILED = "validation_failed"
    ENTITY_NOT_FOUND = "entity_not_found"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Scope
    account_id: Optional[str] = Field(
        default=None,
        description="Account the event belongs to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'loan', 'notification')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "account_id": self.account_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_record(self) -> dict:
        """Flat, JSON-safe form for audit storage."""
        record = self.to_log_dict()
        record["details"] = json.dumps(self.details, default=str) if self.details else ""
        return record


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_added("expense", account_id, entry_id, "250.00")
        event = AuditEventBuilder.loan_deleted(account_id, loan_id)
    """

    @staticmethod
    def entry_added(
        kind: str,
        account_id: str,
        entry_id: str,
        amount: str,
        category: str,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.EXPENSE_ADDED if kind == "expense" else AuditEventType.INCOME_ADDED
        )
        return AuditEvent(
            event_type=event_type,
            account_id=account_id,
            entity_type=kind,
            entity_id=entry_id,
            description=f"{kind.capitalize()} added: {category} {amount}",
            details={"amount": amount, "category": category},
        )

    @staticmethod
    def entry_deleted(kind: str, account_id: str, entry_id: str) -> AuditEvent:
        event_type = (
            AuditEventType.EXPENSE_DELETED if kind == "expense" else AuditEventType.INCOME_DELETED
        )
        return AuditEvent(
            event_type=event_type,
            account_id=account_id,
            entity_type=kind,
            entity_id=entry_id,
            description=f"{kind.capitalize()} deleted",
        )

    @staticmethod
    def loan_created(
        account_id: str,
        loan_id: str,
        direction: str,
        principal: str,
        total_payable: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_CREATED,
            account_id=account_id,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Loan created ({direction}): {principal} -> {total_payable}",
            details={
                "direction": direction,
                "principal": principal,
                "total_payable": total_payable,
            },
        )

    @staticmethod
    def loan_status_updated(
        account_id: str,
        loan_id: str,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_STATUS_UPDATED,
            account_id=account_id,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Loan status changed: {old_status} -> {new_status}",
            details={"old_status": old_status, "new_status": new_status},
        )

    @staticmethod
    def loan_due_date_updated(
        account_id: str,
        loan_id: str,
        old_due: str,
        new_due: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_DUE_DATE_UPDATED,
            account_id=account_id,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Loan due date moved: {old_due} -> {new_due}",
            details={"old_due_date": old_due, "new_due_date": new_due},
        )

    @staticmethod
    def loan_deleted(account_id: str, loan_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_DELETED,
            account_id=account_id,
            entity_type="loan",
            entity_id=loan_id,
            description="Loan deleted",
        )

    @staticmethod
    def notification_created(
        account_id: str,
        notification_id: str,
        kind: str,
        title: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_CREATED,
            account_id=account_id,
            entity_type="notification",
            entity_id=notification_id,
            description=f"Notification created: {title}",
            details={"kind": kind},
        )

    @staticmethod
    def notification_read(account_id: str, notification_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_READ,
            account_id=account_id,
            entity_type="notification",
            entity_id=notification_id,
            description="Notification marked as read",
        )

    @staticmethod
    def validation_failed(
        account_id: str,
        operation: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            account_id=account_id,
            description=f"{operation} rejected with {len(issues)} issues",
            details={"operation": operation, "issues": issues},
        )

    @staticmethod
    def entity_not_found(
        account_id: str,
        operation: str,
        entity_type: str,
        entity_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            account_id=account_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation}: {entity_type} not found",
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        account_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            account_id=account_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
