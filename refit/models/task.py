"""Task data model for the project task board."""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, Field

from .base import DateOnly, Priority, RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class TaskStatus(str, Enum):
    """Task status states."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    UNDER_REVIEW = "under_review"
    ON_HOLD = "on_hold"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskType(str, Enum):
    CONSTRUCTION = "construction"
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    HVAC = "hvac"
    FINISHING = "finishing"
    INSPECTION = "inspection"
    DOCUMENTATION = "documentation"
    PROCUREMENT = "procurement"
    TECHNOLOGY = "technology"
    SIGNAGE = "signage"
    ADMINISTRATIVE = "administrative"
    OTHER = "other"


class ChecklistItem(RefitModel):
    """Individual checklist entry for a task."""
    id: str
    # Older records used "description" for the text
    title: str = Field(validation_alias=AliasChoices("title", "description"))
    completed: bool = False
    completed_by: Optional[str] = None
    completed_at: Optional[UtcDatetime] = None


class TaskReminder(RefitModel):
    enabled: bool = False
    days_before: int = 1
    sent: bool = False


class TaskEnhanced(RefitModel):
    """Task model representing a work item on a project or phase."""

    # Identification
    id: str
    title: str
    description: str = ""

    # Placement
    project_id: Optional[str] = None
    phase_id: Optional[str] = None
    assigned_to: List[str] = Field(default_factory=list)  # team member ids
    contractor_id: Optional[str] = None

    # Classification
    status: TaskStatus = TaskStatus.PENDING
    type: TaskType = TaskType.OTHER
    priority: Priority = Priority.MEDIUM
    required_skills: List[str] = Field(default_factory=list)

    # Timing
    start_date: Optional[DateOnly] = None
    due_date: Optional[DateOnly] = None
    estimated_hours: float = Field(default=0.0, ge=0)
    actual_hours: Optional[float] = None
    remaining_hours: Optional[float] = None
    progress_percentage: float = Field(default=0.0, ge=0, le=100)

    # Relations (no cycle detection)
    dependencies: List[str] = Field(default_factory=list)
    blocked_by: List[str] = Field(default_factory=list)

    # Details
    tags: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    checklist: List[ChecklistItem] = Field(default_factory=list)
    reminder: Optional[TaskReminder] = None

    # Review tracking
    approved_by: Optional[str] = None
    approved_at: Optional[UtcDatetime] = None
    rejection_reason: Optional[str] = None
    completed_at: Optional[UtcDatetime] = None

    # Metadata
    created_by: str = ""
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    @property
    def progress(self) -> int:
        """Checklist-derived progress when a checklist exists, stored percentage otherwise."""
        if self.checklist:
            done = sum(1 for item in self.checklist if item.completed)
            return int(done / len(self.checklist) * 100 + 0.5)
        return int(self.progress_percentage + 0.5)

    @property
    def is_open(self) -> bool:
        return self.status not in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)

    def is_overdue(self, today: date) -> bool:
        return self.status != TaskStatus.COMPLETED and self.due_date is not None and self.due_date < today

    def is_assigned_to(self, member: str) -> bool:
        return member in self.assigned_to
