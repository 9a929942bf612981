"""
Task repository.

Tasks belong to a project and optionally to one of its phases. They are
assigned to team members by id (or by display name in older records).

Due dates are calendar dates compared against the UTC date. Dependencies
and blocked-by lists are plain id lists; nothing detects cycles.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .base import BaseRepository
from ..models import ChecklistItem, Priority, TaskEnhanced, TaskStatus, TaskType
from ..storage import StorageAdapter, StorageKeys, generate_id
from ..utils.datetime_utils import utc_now, utc_today
from ..utils.validation import ValidationResult, validate_task_data

logger = logging.getLogger(__name__)


class TaskRepository(BaseRepository[TaskEnhanced]):
    """Repository for task operations."""

    storage_key = StorageKeys.TASKS
    model = TaskEnhanced
    id_prefix = "task"

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        return validate_task_data(data)

    # ==================== QUERIES ====================

    def get_by_phase(self, phase_id: str) -> List[TaskEnhanced]:
        return self.filter_by(lambda t: t.phase_id == phase_id)

    def get_by_project(self, project_id: str, phase_ids: Optional[Iterable[str]] = None) -> List[TaskEnhanced]:
        """Tasks linked to the project directly or through one of the given phases."""
        phase_ids = set(phase_ids or [])
        return self.filter_by(lambda t: t.project_id == project_id or (t.phase_id is not None and t.phase_id in phase_ids))

    def get_by_assignee(self, assignee: str) -> List[TaskEnhanced]:
        """Tasks assigned to a member id or display name."""
        return self.filter_by(lambda t: t.is_assigned_to(assignee))

    def get_by_status(self, status: TaskStatus) -> List[TaskEnhanced]:
        status = TaskStatus(status)
        return self.filter_by(lambda t: t.status == status)

    def get_by_priority(self, priority: Priority) -> List[TaskEnhanced]:
        priority = Priority(priority)
        return self.filter_by(lambda t: t.priority == priority)

    def get_by_type(self, task_type: TaskType) -> List[TaskEnhanced]:
        task_type = TaskType(task_type)
        return self.filter_by(lambda t: t.type == task_type)

    def get_overdue(self, today: Optional[date] = None) -> List[TaskEnhanced]:
        """Not completed and due before today."""
        today = today or utc_today()
        return self.filter_by(lambda t: t.is_overdue(today))

    def get_due_today(self, today: Optional[date] = None) -> List[TaskEnhanced]:
        today = today or utc_today()
        return self.filter_by(lambda t: t.status != TaskStatus.COMPLETED and t.due_date == today)

    def get_due_soon(self, days: int = 7, today: Optional[date] = None) -> List[TaskEnhanced]:
        """Open tasks due within the next `days` days (today included), soonest first."""
        today = today or utc_today()
        horizon = today + timedelta(days=days)
        tasks = self.filter_by(
            lambda t: t.status != TaskStatus.COMPLETED
            and t.due_date is not None
            and today <= t.due_date <= horizon
        )
        return sorted(tasks, key=lambda t: t.due_date)

    def get_blocked(self) -> List[TaskEnhanced]:
        """Tasks with a non-empty blocked-by list."""
        return self.filter_by(lambda t: bool(t.blocked_by))

    def get_dependents(self, task_id: str) -> List[TaskEnhanced]:
        """Tasks that list task_id as a dependency."""
        return self.filter_by(lambda t: task_id in t.dependencies)

    # ==================== STATUS TRANSITIONS ====================

    def start(self, task_id: str) -> Optional[TaskEnhanced]:
        return self.update(task_id, {"status": TaskStatus.IN_PROGRESS})

    def complete(self, task_id: str) -> Optional[TaskEnhanced]:
        return self.update(task_id, {
            "status": TaskStatus.COMPLETED,
            "completed_at": utc_now(),
            "progress_percentage": 100,
            "remaining_hours": 0,
        })

    def pause(self, task_id: str) -> Optional[TaskEnhanced]:
        return self.update(task_id, {"status": TaskStatus.PENDING})

    def approve(self, task_id: str, approved_by: str) -> Optional[TaskEnhanced]:
        now = utc_now()
        return self.update(task_id, {
            "status": TaskStatus.COMPLETED,
            "approved_by": approved_by,
            "approved_at": now,
            "completed_at": now,
        })

    def reject(self, task_id: str, reason: str) -> Optional[TaskEnhanced]:
        """Send a task back to review with the rejection reason."""
        return self.update(task_id, {
            "status": TaskStatus.UNDER_REVIEW,
            "rejection_reason": reason,
        })

    # ==================== PROGRESS AND TIME ====================

    def update_progress(self, task_id: str, percentage: float) -> Optional[TaskEnhanced]:
        task = self.get(task_id)
        if task is None:
            return None

        percentage = max(0.0, min(100.0, percentage))
        remaining = task.estimated_hours * (1 - percentage / 100)
        return self.update(task_id, {"progress_percentage": percentage, "remaining_hours": remaining})

    def log_time(self, task_id: str, hours: float) -> Optional[TaskEnhanced]:
        """Add worked hours and derive remaining hours and progress from the estimate."""
        task = self.get(task_id)
        if task is None:
            return None

        actual = (task.actual_hours or 0.0) + hours
        remaining = max(0.0, task.estimated_hours - actual)
        if task.estimated_hours > 0:
            progress = min(100.0, actual / task.estimated_hours * 100)
        else:
            progress = task.progress_percentage

        logger.debug(f"Logged {hours}h on task {task_id}, total {actual}h")
        return self.update(task_id, {
            "actual_hours": actual,
            "remaining_hours": remaining,
            "progress_percentage": progress,
        })

    # ==================== CHECKLIST ====================

    def add_checklist_item(self, task_id: str, title: str) -> Optional[ChecklistItem]:
        task = self.get(task_id)
        if task is None:
            return None

        item = ChecklistItem(id=generate_id("check"), title=title)
        if self.update(task_id, {"checklist": task.checklist + [item]}) is None:
            return None
        return item

    def toggle_checklist_item(
        self,
        task_id: str,
        item_id: str,
        completed: bool,
        completed_by: Optional[str] = None,
    ) -> Optional[TaskEnhanced]:
        task = self.get(task_id)
        if task is None:
            return None

        checklist = []
        for item in task.checklist:
            if item.id == item_id:
                item = item.model_copy(update={
                    "completed": completed,
                    "completed_by": completed_by if completed else None,
                    "completed_at": utc_now() if completed else None,
                })
            checklist.append(item)
        return self.update(task_id, {"checklist": checklist})

    def remove_checklist_item(self, task_id: str, item_id: str) -> Optional[TaskEnhanced]:
        task = self.get(task_id)
        if task is None:
            return None
        return self.update(task_id, {"checklist": [i for i in task.checklist if i.id != item_id]})

    # ==================== DEPENDENCIES ====================

    def add_dependency(self, task_id: str, depends_on: str) -> Optional[TaskEnhanced]:
        task = self.get(task_id)
        if task is None:
            return None
        if depends_on in task.dependencies:
            return task
        return self.update(task_id, {"dependencies": task.dependencies + [depends_on]})

    def remove_dependency(self, task_id: str, depends_on: str) -> Optional[TaskEnhanced]:
        task = self.get(task_id)
        if task is None:
            return None
        return self.update(task_id, {"dependencies": [d for d in task.dependencies if d != depends_on]})

    def can_start(self, task_id: str) -> bool:
        """Every dependency exists and is completed."""
        task = self.get(task_id)
        if task is None:
            return False
        if not task.dependencies:
            return True

        by_id = {t.id: t for t in self._load()}
        for dep_id in task.dependencies:
            dep = by_id.get(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                return False
        return True

    def assign(self, task_id: str, member_ids: List[str]) -> Optional[TaskEnhanced]:
        return self.update(task_id, {"assigned_to": list(member_ids)})


# Singleton
_task_repository: Optional[TaskRepository] = None


def get_task_repository(storage: Optional[StorageAdapter] = None) -> TaskRepository:
    """Get the task repository singleton."""
    global _task_repository
    if _task_repository is None:
        _task_repository = TaskRepository(storage)
    return _task_repository
