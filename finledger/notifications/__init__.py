"""Notification counter and inbox."""

from finledger.notifications.center import NotificationCenter

__all__ = ["NotificationCenter"]
