"""
Notification Models

Notifications are created by the loan due-date scan or by the
suggestion engine. The only mutation ever applied is mark-as-read.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class NotificationKind(str, Enum):
    LOAN_DUE = "loan-due"
    SUGGESTION = "suggestion"
    SYSTEM = "system"


class Notification(BaseModel):
    """A single notification for one account."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    account_id: str
    kind: NotificationKind
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    is_read: bool = False

    # Back-reference for loan-due notifications; may outlive the loan
    loan_id: Optional[str] = None

    # At most one notification per key per account
    dedupe_key: Optional[str] = None

    def to_public_dict(self, loan_exists: Optional[bool] = None) -> dict:
        result = {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "createdAt": self.created_at.isoformat(),
            "isRead": self.is_read,
        }
        if self.loan_id is not None:
            result["loanId"] = self.loan_id
            result["loanExists"] = bool(loan_exists)
        return result
