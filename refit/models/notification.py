"""Notification and notification preference data models."""

from enum import Enum
from typing import Dict, Optional

from pydantic import ConfigDict, Field

from .base import Priority, RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class NotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    TASK_OVERDUE = "task_overdue"
    PROJECT_UPDATE = "project_update"
    DEADLINE_APPROACHING = "deadline_approaching"
    BUDGET_ALERT = "budget_alert"
    TEAM_MENTION = "team_mention"
    DOCUMENT_UPLOADED = "document_uploaded"
    COMMENT_ADDED = "comment_added"
    APPOINTMENT_REMINDER = "appointment_reminder"
    SYSTEM = "system"

    @classmethod
    def _missing_(cls, value):
        # Comment mentions were historically stored as "mention"
        if value == "mention":
            return cls.TEAM_MENTION
        return None


class NotificationMetadata(RefitModel):
    """Link to the related entity; extra keys are kept as given."""

    model_config = ConfigDict(extra="allow")

    project_id: Optional[str] = None
    task_id: Optional[str] = None
    user_id: Optional[str] = None
    document_id: Optional[str] = None


class Notification(RefitModel):
    id: str
    user_id: Optional[str] = None  # recipient; None means everyone
    type: NotificationType
    priority: Priority = Priority.MEDIUM
    title: str
    message: str = ""
    read: bool = False
    read_at: Optional[UtcDatetime] = None
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    metadata: Optional[NotificationMetadata] = None
    created_at: UtcDatetime = Field(default_factory=utc_now)


class QuietHours(RefitModel):
    enabled: bool = False
    start: str = "22:00"
    end: str = "08:00"

    def contains(self, clock: str) -> bool:
        """
        Whether an HH:MM clock time falls inside the quiet window.

        The window is [start, end); when start > end it wraps past midnight.
        """
        if not self.enabled or not self.start or not self.end:
            return False
        if self.start <= self.end:
            return self.start <= clock < self.end
        return clock >= self.start or clock < self.end


def _all_types_enabled() -> Dict[str, bool]:
    return {t.value: True for t in NotificationType}


class NotificationPreferences(RefitModel):
    email: bool = False
    push: bool = True
    in_app: bool = True
    types: Dict[str, bool] = Field(default_factory=_all_types_enabled)
    quiet_hours: QuietHours = Field(default_factory=QuietHours)

    def is_type_enabled(self, notification_type: NotificationType) -> bool:
        return self.types.get(NotificationType(notification_type).value, True)
