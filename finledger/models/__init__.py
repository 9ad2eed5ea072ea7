"""
Data Models Package

All Pydantic models used by the ledger: request payloads, stored
entities, analytics outputs, the response envelope and audit events.
"""

from finledger.models.common import (
    ApiResponse,
    CalendarDate,
    MinorAmount,
    RequestModel,
    ResponseModel,
    ValidationIssue,
)
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
from finledger.models.loan import (
    BorrowingCategory,
    DirectionStats,
    EffectiveStatus,
    Loan,
    LoanCreate,
    LoanDirection,
    LoanStats,
    LoanStatus,
    effective_status,
    total_payable_minor,
)
from finledger.models.notification import Notification, NotificationKind
from finledger.models.analytics import (
    Advisory,
    CategoryAmount,
    ChartPeriod,
    ChartSeries,
    DashboardSummary,
    Severity,
)
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Common
    "ApiResponse",
    "CalendarDate",
    "MinorAmount",
    "RequestModel",
    "ResponseModel",
    "ValidationIssue",
    # Ledger models
    "EntryKind",
    "ExpenseCategory",
    "ExpenseCreate",
    "ExpenseEntry",
    "IncomeCategory",
    "IncomeCreate",
    "IncomeEntry",
    "LedgerEntry",
    # Loan models
    "BorrowingCategory",
    "DirectionStats",
    "EffectiveStatus",
    "Loan",
    "LoanCreate",
    "LoanDirection",
    "LoanStats",
    "LoanStatus",
    "effective_status",
    "total_payable_minor",
    # Notifications
    "Notification",
    "NotificationKind",
    # Analytics
    "Advisory",
    "CategoryAmount",
    "ChartPeriod",
    "ChartSeries",
    "DashboardSummary",
    "Severity",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
