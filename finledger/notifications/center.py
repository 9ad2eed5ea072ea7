"""
Notification Center

Creates, lists and marks notifications for one account at a time.

Notifications arrive from two producers: the loan due-date scan and
the suggestion engine. Both pass a dedupe key so that re-running
them (every read runs the scan) never stacks up copies.
"""

from typing import Optional

import structlog

from finledger.audit import AuditLogger
from finledger.errors import NotFoundError
from finledger.models.notification import Notification, NotificationKind
from finledger.services.storage import NotificationStorageInterface

logger = structlog.get_logger("finledger.notifications")


class NotificationCenter:
    """Unread counter and inbox for each account."""

    def __init__(
        self,
        storage: NotificationStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    def notify(
        self,
        account_id: str,
        kind: NotificationKind,
        title: str,
        message: str,
        loan_id: Optional[str] = None,
        dedupe_key: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Create a notification unless one with the same dedupe key exists.

        Returns:
            The new notification, or None when it was a duplicate
        """
        if dedupe_key and self._storage.find_by_dedupe_key(account_id, dedupe_key):
            return None

        notification = Notification(
            account_id=account_id,
            kind=kind,
            title=title,
            message=message,
            loan_id=loan_id,
            dedupe_key=dedupe_key,
        )
        self._storage.save_notification(notification)

        if self._audit_logger:
            self._audit_logger.log_notification_created(
                account_id=account_id,
                notification_id=notification.id,
                kind=kind.value,
                title=title,
            )
        return notification

    def list_notifications(self, account_id: str, unread_only: bool = False) -> list[Notification]:
        """Newest first; ties keep the newest insertion first."""
        notifications = list(reversed(self._storage.list_notifications(account_id, unread_only)))
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    def unread_count(self, account_id: str) -> int:
        return len(self._storage.list_notifications(account_id, unread_only=True))

    def mark_as_read(self, account_id: str, notification_id: str) -> Notification:
        """
        Mark one notification read. Marking it again changes nothing.

        Raises:
            NotFoundError: If the id is unknown in this account
        """
        notification = self._storage.get_notification(account_id, notification_id)
        if notification is None:
            raise NotFoundError("notification", notification_id)
        if notification.is_read:
            return notification

        updated = notification.model_copy(update={"is_read": True})
        self._storage.save_notification(updated)
        if self._audit_logger:
            self._audit_logger.log_notification_read(account_id, notification_id)
        return updated

    def mark_all_as_read(self, account_id: str) -> int:
        """Returns the number of notifications that changed."""
        unread = self._storage.list_notifications(account_id, unread_only=True)
        for notification in unread:
            self._storage.save_notification(notification.model_copy(update={"is_read": True}))
            if self._audit_logger:
                self._audit_logger.log_notification_read(account_id, notification.id)

        logger.debug("notifications_marked_read", account_id=account_id, count=len(unread))
        return len(unread)
