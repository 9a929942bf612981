"""Project, phase and budget data models."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import DateOnly, Priority, RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class ProjectType(str, Enum):
    RENOVATION = "renovation"
    REFIT = "refit"
    EXPANSION = "expansion"
    MAINTENANCE = "maintenance"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PhaseStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


ACTIVE_PROJECT_STATUSES = (ProjectStatus.APPROVED, ProjectStatus.IN_PROGRESS)


class Budget(RefitModel):
    """
    Project budget figures.

    `remaining` is stored as given; nothing keeps it equal to
    approved - spent. Callers that change `spent` must update it too.
    """
    planned: float = 0.0
    approved: float = 0.0
    spent: float = 0.0
    remaining: float = 0.0

    @property
    def expected_remaining(self) -> float:
        return self.approved - self.spent


class ProjectDates(RefitModel):
    start_planned: Optional[DateOnly] = None
    start_actual: Optional[DateOnly] = None
    end_planned: Optional[DateOnly] = None
    end_actual: Optional[DateOnly] = None
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)


class ProjectPhase(RefitModel):
    """An ordered sub-stage of a project."""
    id: str
    project_id: str = ""
    name: str
    description: str = ""
    order: int = 0
    status: PhaseStatus = PhaseStatus.PENDING
    start_date: Optional[DateOnly] = None
    end_date: Optional[DateOnly] = None
    duration: int = 0  # days
    dependencies: List[str] = Field(default_factory=list)  # other phase ids
    assigned_contractors: List[str] = Field(default_factory=list)
    budget: float = 0.0
    actual_cost: Optional[float] = None
    progress: float = Field(default=0.0, ge=0, le=100)


class Project(RefitModel):
    """A renovation/refit project at one location."""

    id: str
    location_id: str
    name: str
    description: str = ""
    type: ProjectType = ProjectType.REFIT
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    budget: Budget = Field(default_factory=Budget)
    dates: ProjectDates = Field(default_factory=ProjectDates)
    project_manager: str = ""
    team: List[str] = Field(default_factory=list)
    phases: List[ProjectPhase] = Field(default_factory=list)
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    photos: List[Dict[str, Any]] = Field(default_factory=list)
    notes: str = ""

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_PROJECT_STATUSES

    def get_phase(self, phase_id: str) -> Optional[ProjectPhase]:
        for phase in self.phases:
            if phase.id == phase_id:
                return phase
        return None

    def ordered_phases(self) -> List[ProjectPhase]:
        return sorted(self.phases, key=lambda p: p.order)
