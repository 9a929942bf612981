"""
Notification grouping.

Notifications are grouped by type plus the first related entity found in
their metadata, in the order project, task, user, document. Notifications
without a related entity share one `<type>_general` group per type.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import Notification, NotificationType

# Metadata field -> entity kind in the group key, in precedence order
RELATED_ENTITY_FIELDS = (
    ("project_id", "project"),
    ("task_id", "task"),
    ("user_id", "user"),
    ("document_id", "document"),
)

TYPE_LABELS = {
    NotificationType.TASK_ASSIGNED: "assigned tasks",
    NotificationType.TASK_COMPLETED: "completed tasks",
    NotificationType.TASK_OVERDUE: "overdue tasks",
    NotificationType.PROJECT_UPDATE: "project updates",
    NotificationType.DEADLINE_APPROACHING: "upcoming deadlines",
    NotificationType.BUDGET_ALERT: "budget alerts",
    NotificationType.TEAM_MENTION: "mentions",
    NotificationType.DOCUMENT_UPLOADED: "uploaded documents",
    NotificationType.COMMENT_ADDED: "new comments",
    NotificationType.APPOINTMENT_REMINDER: "appointment reminders",
    NotificationType.SYSTEM: "system notifications",
}


@dataclass
class NotificationGroup:
    id: str  # the group key
    type: NotificationType
    latest_notification: Notification
    notifications: List[Notification] = field(default_factory=list)
    related_entity_id: Optional[str] = None
    related_entity_type: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.read)


def related_entity(notification: Notification) -> Optional[Tuple[str, str]]:
    """(kind, id) of the notification's related entity, if any."""
    metadata = notification.metadata
    if metadata is None:
        return None
    for attr, kind in RELATED_ENTITY_FIELDS:
        value = getattr(metadata, attr, None)
        if value:
            return kind, value
    return None


def group_key(notification: Notification) -> str:
    entity = related_entity(notification)
    if entity is None:
        return f"{notification.type.value}_general"
    kind, entity_id = entity
    return f"{notification.type.value}_{kind}_{entity_id}"


def group_notifications(notifications: Iterable[Notification]) -> List[NotificationGroup]:
    """
    Group notifications; groups are ordered by their latest notification, newest first.

    Every input notification ends up in exactly one group.
    """
    groups: Dict[str, NotificationGroup] = {}

    for notification in notifications:
        key = group_key(notification)
        group = groups.get(key)
        if group is None:
            entity = related_entity(notification)
            groups[key] = NotificationGroup(
                id=key,
                type=notification.type,
                latest_notification=notification,
                notifications=[notification],
                related_entity_id=entity[1] if entity else None,
                related_entity_type=entity[0] if entity else None,
            )
            continue

        group.notifications.append(notification)
        if notification.created_at > group.latest_notification.created_at:
            group.latest_notification = notification

    return sorted(groups.values(), key=lambda g: g.latest_notification.created_at, reverse=True)


def grouped_title(group: NotificationGroup) -> str:
    if group.count == 1:
        return group.latest_notification.title
    label = TYPE_LABELS.get(group.type, "notifications")
    return f"{group.count} {label}"


def grouped_message(group: NotificationGroup) -> str:
    if group.count == 1:
        return group.latest_notification.message
    return f"{group.latest_notification.message} (+{group.count - 1} more)"


def should_group_notifications(notifications: Iterable[Notification]) -> bool:
    """
    Advice for callers: True when some type occurs at least twice.

    group_notifications does not consult this.
    """
    notifications = list(notifications)
    if len(notifications) <= 1:
        return False

    counts: Dict[NotificationType, int] = {}
    for notification in notifications:
        counts[notification.type] = counts.get(notification.type, 0) + 1
    return any(count >= 2 for count in counts.values())
