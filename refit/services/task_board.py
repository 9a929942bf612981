"""Task board: column grouping, filtering and progress."""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from ..models import Priority, TaskEnhanced, TaskStatus

# Board columns, left to right. Blocked and cancelled tasks have no column.
BOARD_COLUMNS = (
    TaskStatus.PENDING,
    TaskStatus.IN_PROGRESS,
    TaskStatus.UNDER_REVIEW,
    TaskStatus.COMPLETED,
    TaskStatus.ON_HOLD,
)


def task_progress(task: TaskEnhanced) -> int:
    """Checklist completion when the task has a checklist, stored percentage otherwise."""
    return task.progress


def filter_tasks(
    tasks: Iterable[TaskEnhanced],
    project_id: Optional[str] = None,
    priority: Optional[Priority] = None,
    search: str = "",
) -> List[TaskEnhanced]:
    result = list(tasks)
    if project_id:
        result = [t for t in result if t.project_id == project_id]
    if priority:
        priority = Priority(priority)
        result = [t for t in result if t.priority == priority]
    if search:
        q = search.lower()
        result = [t for t in result if q in t.title.lower() or q in (t.description or "").lower()]
    return result


def group_tasks_by_status(tasks: Iterable[TaskEnhanced]) -> Dict[TaskStatus, List[TaskEnhanced]]:
    """One list per board column, always present, in column order."""
    columns: Dict[TaskStatus, List[TaskEnhanced]] = OrderedDict((status, []) for status in BOARD_COLUMNS)
    for task in tasks:
        if task.status in columns:
            columns[task.status].append(task)
    return columns


def board_summary(tasks: Iterable[TaskEnhanced]) -> Dict[str, int]:
    """Task count per column, keyed by status value."""
    return {status.value: len(items) for status, items in group_tasks_by_status(tasks).items()}
