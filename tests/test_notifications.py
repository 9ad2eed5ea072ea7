"""Tests for the notification center."""

import pytest

from finledger.audit import AuditLogger
from finledger.errors import NotFoundError
from finledger.models import AuditEventType, NotificationKind
from finledger.notifications import NotificationCenter

ACCOUNT = "user-1"


@pytest.fixture
def center(storage) -> NotificationCenter:
    return NotificationCenter(storage, AuditLogger(storage))


def _notify(center, title="Heads up", dedupe_key=None):
    return center.notify(
        ACCOUNT,
        NotificationKind.SYSTEM,
        title=title,
        message="Something happened",
        dedupe_key=dedupe_key,
    )


class TestNotificationCenter:
    """Tests for unread counting and mark-as-read."""

    def test_new_notifications_are_unread(self, center):
        _notify(center)
        _notify(center)
        assert center.unread_count(ACCOUNT) == 2

    def test_mark_as_read_is_idempotent(self, center):
        first = _notify(center)
        _notify(center)

        center.mark_as_read(ACCOUNT, first.id)
        assert center.unread_count(ACCOUNT) == 1
        center.mark_as_read(ACCOUNT, first.id)
        assert center.unread_count(ACCOUNT) == 1

    def test_mark_unknown_is_not_found(self, center):
        with pytest.raises(NotFoundError):
            center.mark_as_read(ACCOUNT, "nope")

    def test_mark_is_scoped_to_account(self, center):
        notification = _notify(center)
        with pytest.raises(NotFoundError):
            center.mark_as_read("user-2", notification.id)

    def test_mark_all_returns_changed_count(self, center):
        first = _notify(center)
        _notify(center)
        _notify(center)
        center.mark_as_read(ACCOUNT, first.id)

        assert center.mark_all_as_read(ACCOUNT) == 2
        assert center.unread_count(ACCOUNT) == 0
        assert center.mark_all_as_read(ACCOUNT) == 0

    def test_dedupe_key(self, center):
        assert _notify(center, dedupe_key="k") is not None
        assert _notify(center, dedupe_key="k") is None
        assert len(center.list_notifications(ACCOUNT)) == 1

    def test_list_newest_first_and_unread_filter(self, center):
        first = _notify(center, title="first")
        second = _notify(center, title="second")
        center.mark_as_read(ACCOUNT, second.id)

        assert [n.title for n in center.list_notifications(ACCOUNT)] == ["second", "first"]
        assert [n.id for n in center.list_notifications(ACCOUNT, unread_only=True)] == [first.id]

    def test_read_is_audited_once(self, center, storage):
        notification = _notify(center)
        center.mark_as_read(ACCOUNT, notification.id)
        center.mark_as_read(ACCOUNT, notification.id)
        types = [e.event_type for e in storage.get_events_by_account(ACCOUNT)]
        assert types == [AuditEventType.NOTIFICATION_CREATED, AuditEventType.NOTIFICATION_READ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
