"""
Notification repository and preferences.

New notifications go to the front of the array. Preferences are one object
stored under their own key and always read merged over the defaults.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from ..exceptions import NotificationSuppressedError
from ..models import Notification, NotificationPreferences, NotificationType, Priority
from ..storage import StorageAdapter, StorageKeys
from ..utils.datetime_utils import get_local_now, to_iso, utc_now

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository[Notification]):
    """Repository for in-app notifications."""

    storage_key = StorageKeys.NOTIFICATIONS
    model = Notification
    id_prefix = "notification"
    prepend_new = True

    def _load(self) -> List[Notification]:
        return sorted(super()._load(), key=lambda n: n.created_at, reverse=True)

    # ==================== PREFERENCES ====================

    def get_preferences(self) -> NotificationPreferences:
        """Stored preferences over the defaults; per-type switches are merged key by key."""
        defaults = NotificationPreferences()
        stored = self.storage.get_value(StorageKeys.NOTIFICATION_PREFERENCES)
        if not isinstance(stored, dict):
            return defaults

        merged = {**defaults.to_storage(), **stored}
        merged["types"] = {**defaults.types, **(stored.get("types") or {})}
        try:
            return NotificationPreferences.model_validate(merged)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable notification preferences: {e}")
            return defaults

    def update_preferences(self, updates: Dict[str, Any]) -> NotificationPreferences:
        current = self.get_preferences().model_dump()
        current.update(updates)
        preferences = NotificationPreferences.model_validate(current)
        self.storage.set_value(StorageKeys.NOTIFICATION_PREFERENCES, preferences.to_storage())
        logger.info(f"Notification preferences updated: {list(updates.keys())}")
        return preferences

    def is_allowed(self, notification_type: NotificationType, now: Optional[datetime] = None) -> bool:
        """In-app on, type enabled, and the local clock outside quiet hours."""
        preferences = self.get_preferences()
        if not preferences.in_app:
            return False
        if not preferences.is_type_enabled(notification_type):
            return False

        clock = get_local_now(now).strftime("%H:%M")
        return not preferences.quiet_hours.contains(clock)

    # ==================== MUTATIONS ====================

    def add(self, data: Dict[str, Any], now: Optional[datetime] = None) -> Optional[Notification]:
        """
        Create an unread notification.

        Raises NotificationSuppressedError when preferences block it.
        """
        notification_type = NotificationType(data.get("type"))
        if not self.is_allowed(notification_type, now):
            logger.debug(f"Notification of type {notification_type.value} suppressed by preferences")
            raise NotificationSuppressedError(f"Notifications of type {notification_type.value} are disabled right now")

        record = dict(data)
        record["read"] = False
        record.pop("read_at", None)
        if now is not None:
            record.setdefault("created_at", now)
        return self.create(record)

    def mark_as_read(self, notification_id: str) -> Optional[Notification]:
        return self.update(notification_id, {"read": True, "read_at": utc_now()})

    def mark_all_as_read(self) -> int:
        """
        Mark every unread notification read; returns how many changed.

        Records that no longer parse are written back untouched.
        """
        read_at = to_iso(utc_now())
        changed = 0
        items = []
        for raw, notification in self._raw_records():
            if notification is not None and not notification.read:
                raw = {**raw, "read": True, "readAt": read_at}
                changed += 1
            items.append(raw)

        if changed and not self.storage.set(self.storage_key, items):
            return 0
        return changed

    def clear_all(self) -> bool:
        return self.storage.set(self.storage_key, [])

    # ==================== QUERIES ====================

    def get_unread(self) -> List[Notification]:
        return self.filter_by(lambda n: not n.read)

    def get_by_type(self, notification_type: NotificationType) -> List[Notification]:
        notification_type = NotificationType(notification_type)
        return self.filter_by(lambda n: n.type == notification_type)

    def get_by_priority(self, priority: Priority) -> List[Notification]:
        priority = Priority(priority)
        return self.filter_by(lambda n: n.priority == priority)

    def get_recent(self, limit: int = 10) -> List[Notification]:
        return self._load()[:limit]

    def get_for_user(self, user_id: str) -> List[Notification]:
        """Notifications addressed to the user or to everyone."""
        return self.filter_by(lambda n: n.user_id is None or n.user_id == user_id)

    def unread_count(self) -> int:
        return len(self.get_unread())


# Singleton
_notification_repository: Optional[NotificationRepository] = None


def get_notification_repository(storage: Optional[StorageAdapter] = None) -> NotificationRepository:
    """Get the notification repository singleton."""
    global _notification_repository
    if _notification_repository is None:
        _notification_repository = NotificationRepository(storage)
    return _notification_repository
