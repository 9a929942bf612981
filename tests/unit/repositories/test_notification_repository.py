"""
Unit tests for NotificationRepository and notification preferences.
"""

from datetime import datetime, timedelta

import pytest
import pytz

from refit.exceptions import NotificationSuppressedError
from refit.models import NotificationType
from refit.repositories import NotificationRepository
from refit.storage import StorageKeys


@pytest.fixture
def repo(storage):
    return NotificationRepository(storage)


def notify(repo, title="Task assigned", notification_type="task_assigned", **extra):
    now = extra.pop("now", None)
    data = {"type": notification_type, "title": title, "message": "", "priority": "medium"}
    data.update(extra)
    return repo.add(data, now=now)


class TestPreferences:
    """Tests for preference storage and merging."""

    def test_defaults_when_nothing_stored(self, repo):
        preferences = repo.get_preferences()

        assert preferences.in_app
        assert not preferences.quiet_hours.enabled
        assert all(preferences.types.values())

    def test_partial_stored_types_merge_over_defaults(self, repo, storage):
        storage.set_value(StorageKeys.NOTIFICATION_PREFERENCES, {"types": {"budget_alert": False}})

        preferences = repo.get_preferences()

        assert not preferences.is_type_enabled(NotificationType.BUDGET_ALERT)
        assert preferences.is_type_enabled(NotificationType.TASK_ASSIGNED)

    def test_update_preferences_persists(self, repo, storage):
        repo.update_preferences({"email": True})

        assert repo.get_preferences().email
        assert storage.get_value(StorageKeys.NOTIFICATION_PREFERENCES)["email"] is True

    def test_unreadable_preferences_fall_back(self, repo, storage):
        storage.set_value(StorageKeys.NOTIFICATION_PREFERENCES, {"quietHours": {"enabled": "sometimes"}})
        assert repo.get_preferences().quiet_hours.enabled is False


class TestSuppression:
    """Tests for is_allowed and suppressed adds."""

    def test_disabled_type_raises(self, repo):
        repo.update_preferences({"types": {"task_assigned": False}})

        with pytest.raises(NotificationSuppressedError):
            notify(repo)
        assert repo.count() == 0

    def test_in_app_off_raises(self, repo):
        repo.update_preferences({"in_app": False})
        with pytest.raises(NotificationSuppressedError):
            notify(repo, notification_type="system")

    def test_quiet_hours_wrap_midnight(self, repo):
        repo.update_preferences({"quiet_hours": {"enabled": True, "start": "22:00", "end": "08:00"}})

        # Rome is UTC+2 in June
        assert not repo.is_allowed(NotificationType.SYSTEM, datetime(2024, 6, 15, 21, 0, tzinfo=pytz.UTC))
        assert not repo.is_allowed(NotificationType.SYSTEM, datetime(2024, 6, 15, 5, 59, tzinfo=pytz.UTC))
        assert repo.is_allowed(NotificationType.SYSTEM, datetime(2024, 6, 15, 6, 0, tzinfo=pytz.UTC))
        assert repo.is_allowed(NotificationType.SYSTEM, datetime(2024, 6, 15, 19, 59, tzinfo=pytz.UTC))

    def test_legacy_mention_type(self, repo):
        notification = notify(repo, notification_type="mention")
        assert notification.type == NotificationType.TEAM_MENTION


class TestNotifications:
    """Tests for adding, reading and querying notifications."""

    def test_added_unread_even_if_marked_read(self, repo):
        notification = notify(repo, read=True)
        assert not notification.read

    def test_newest_first(self, repo, fixed_now):
        notify(repo, "Old", now=fixed_now - timedelta(hours=2))
        notify(repo, "New", now=fixed_now)
        notify(repo, "Middle", now=fixed_now - timedelta(hours=1))

        assert [n.title for n in repo.list_all()] == ["New", "Middle", "Old"]
        assert [n.title for n in repo.get_recent(1)] == ["New"]

    def test_mark_as_read(self, repo):
        notification = notify(repo)

        read = repo.mark_as_read(notification.id)

        assert read.read
        assert read.read_at is not None
        assert repo.unread_count() == 0

    def test_mark_all_as_read(self, repo):
        first = notify(repo, "One")
        notify(repo, "Two")
        repo.mark_as_read(first.id)

        assert repo.mark_all_as_read() == 1
        assert repo.unread_count() == 0
        assert repo.mark_all_as_read() == 0

    def test_mark_all_as_read_keeps_unreadable_records(self, repo, storage):
        notification = notify(repo)
        storage.add(StorageKeys.NOTIFICATIONS, {"id": "legacy-1", "type": "document_shared"})

        assert repo.mark_all_as_read() == 1

        stored = storage.get(StorageKeys.NOTIFICATIONS)
        assert [item["id"] for item in stored] == [notification.id, "legacy-1"]
        assert stored[0]["read"] is True
        assert stored[0]["readAt"] is not None
        assert stored[1] == {"id": "legacy-1", "type": "document_shared"}

    def test_get_for_user_includes_broadcasts(self, repo):
        notify(repo, "Mine", user_id="member-sara")
        notify(repo, "Everyone")
        notify(repo, "Other", user_id="member-luca")

        assert sorted(n.title for n in repo.get_for_user("member-sara")) == ["Everyone", "Mine"]

    def test_metadata_keeps_extra_keys(self, repo):
        notification = notify(repo, metadata={"task_id": "task-1", "comment_id": "comment-9"})

        assert notification.metadata.task_id == "task-1"
        assert notification.metadata.model_extra["comment_id"] == "comment-9"

    def test_clear_all(self, repo):
        notify(repo)
        assert repo.clear_all()
        assert repo.list_all() == []
