"""
Automatic notification checks.

Scans team workload and task deadlines and raises notifications for:
- Members above the overload threshold
- Open tasks due within the warning window, and overdue tasks
- High or urgent pending tasks nobody is assigned to

Each check remembers when it last notified a subject (member, task, or the
unassigned-task batch) under the ``notification_checks`` key and stays
quiet for that subject until the dedupe window has passed. Callers decide
how often to run the checks.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from config import settings
from ..exceptions import NotificationSuppressedError
from ..models import Notification, NotificationType, Priority, TaskStatus
from ..repositories import NotificationRepository, TaskRepository, TeamRepository
from ..storage import StorageAdapter, StorageKeys
from ..utils.datetime_utils import ensure_utc, parse_iso, to_iso, utc_now

logger = logging.getLogger(__name__)

UNASSIGNED_TASKS_CHECK = "unassigned_tasks"
ACTIVE_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)
DAY_SECONDS = 86400


class AutomaticNotifier:
    """Runs the periodic checks against the repositories of one storage."""

    def __init__(
        self,
        storage: StorageAdapter,
        tasks: TaskRepository,
        team: TeamRepository,
        notifications: NotificationRepository,
    ):
        self.storage = storage
        self.tasks = tasks
        self.team = team
        self.notifications = notifications

    # ==================== DEDUPE ====================

    def _checks(self) -> Dict[str, str]:
        checks = self.storage.get_value(StorageKeys.NOTIFICATION_CHECKS)
        return checks if isinstance(checks, dict) else {}

    def _recently_checked(self, check_key: str, now: datetime) -> bool:
        last = parse_iso(self._checks().get(check_key))
        if last is None:
            return False
        return now - last < timedelta(hours=settings.notification_dedupe_hours)

    def _mark_checked(self, check_key: str, now: datetime) -> None:
        checks = self._checks()
        checks[check_key] = to_iso(now)
        self.storage.set_value(StorageKeys.NOTIFICATION_CHECKS, checks)

    def _notify(self, check_key: str, data: Dict, now: datetime) -> Optional[Notification]:
        """Add the notification and stamp the check. Suppressed notifications are not stamped."""
        try:
            notification = self.notifications.add(data, now=now)
        except NotificationSuppressedError as e:
            logger.debug(f"Automatic notification {check_key} suppressed: {e}")
            return None

        if notification is not None:
            self._mark_checked(check_key, now)
        return notification

    # ==================== CHECKS ====================

    def check_overloaded_members(self, now: Optional[datetime] = None) -> List[Notification]:
        now = ensure_utc(now) if now is not None else utc_now()
        created = []

        for member in self.team.get_team_workload().overloaded:
            check_key = f"overload_{member.id}"
            if self._recently_checked(check_key, now):
                continue

            workload = member.workload
            notification = self._notify(check_key, {
                "type": NotificationType.SYSTEM,
                "priority": Priority.HIGH,
                "title": "Team member overloaded",
                "message": (
                    f"{member.name} is at {workload.utilization_rate:g}% utilisation "
                    f"({workload.current_tasks} active tasks). Consider reassigning some tasks."
                ),
                "metadata": {"user_id": member.id},
            }, now)
            if notification:
                created.append(notification)

        if created:
            logger.info(f"Raised {len(created)} overload notifications")
        return created

    def check_approaching_deadlines(self, now: Optional[datetime] = None) -> List[Notification]:
        """
        Warn about open tasks due within the warning window and flag overdue ones.

        A due date is taken as midnight UTC of that day. One day remaining
        is urgent, more is high priority.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        horizon = now + timedelta(days=settings.deadline_warning_days)
        created = []

        active = [t for t in self.tasks.list_all() if t.status in ACTIVE_TASK_STATUSES]
        for task in active:
            due = parse_iso(task.due_date)
            if due is None:
                continue

            if now < due <= horizon:
                check_key = f"deadline_{task.id}"
                if self._recently_checked(check_key, now):
                    continue

                days_remaining = math.ceil((due - now).total_seconds() / DAY_SECONDS)
                when = "tomorrow" if days_remaining == 1 else f"in {days_remaining} days"
                notification = self._notify(check_key, {
                    "type": NotificationType.DEADLINE_APPROACHING,
                    "priority": Priority.URGENT if days_remaining == 1 else Priority.HIGH,
                    "title": "Deadline approaching",
                    "message": f'Task "{task.title}" is due {when}',
                    "action_url": f"/tasks/{task.id}",
                    "action_label": "View task",
                    "metadata": {"task_id": task.id},
                }, now)

            elif due < now:
                check_key = f"overdue_{task.id}"
                if self._recently_checked(check_key, now):
                    continue

                days_overdue = math.ceil((now - due).total_seconds() / DAY_SECONDS)
                unit = "day" if days_overdue == 1 else "days"
                notification = self._notify(check_key, {
                    "type": NotificationType.TASK_OVERDUE,
                    "priority": Priority.URGENT,
                    "title": "Task overdue",
                    "message": f'Task "{task.title}" is {days_overdue} {unit} overdue',
                    "action_url": f"/tasks/{task.id}",
                    "action_label": "View task",
                    "metadata": {"task_id": task.id},
                }, now)

            else:
                continue

            if notification:
                created.append(notification)

        return created

    def check_unassigned_tasks(self, now: Optional[datetime] = None) -> Optional[Notification]:
        """One summary notification for high or urgent pending tasks with no assignee."""
        now = ensure_utc(now) if now is not None else utc_now()

        unassigned = [
            t for t in self.tasks.get_by_status(TaskStatus.PENDING)
            if t.priority in (Priority.HIGH, Priority.URGENT) and not t.assigned_to
        ]
        if not unassigned:
            return None
        if self._recently_checked(UNASSIGNED_TASKS_CHECK, now):
            return None

        return self._notify(UNASSIGNED_TASKS_CHECK, {
            "type": NotificationType.SYSTEM,
            "priority": Priority.HIGH,
            "title": "High priority tasks unassigned",
            "message": f"{len(unassigned)} high priority tasks are waiting for an assignee",
            "action_url": "/tasks",
            "action_label": "View tasks",
        }, now)

    def run_all(self, now: Optional[datetime] = None) -> List[Notification]:
        """Run every check once; returns the notifications created."""
        now = ensure_utc(now) if now is not None else utc_now()
        created = self.check_overloaded_members(now)
        created.extend(self.check_approaching_deadlines(now))
        unassigned = self.check_unassigned_tasks(now)
        if unassigned:
            created.append(unassigned)
        return created
