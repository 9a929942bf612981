"""Team member data model (skills, capacity, workload, performance)."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import DateOnly, RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class TeamMemberRole(str, Enum):
    MANAGER = "manager"
    COORDINATOR = "coordinator"
    TECHNICIAN = "technician"
    CONTRACTOR = "contractor"
    VIEWER = "viewer"


class TeamMemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    VACATION = "vacation"


class VacationPeriod(RefitModel):
    start: DateOnly
    end: DateOnly
    reason: Optional[str] = None


class Availability(RefitModel):
    hours_per_week: float = 40.0
    vacation: List[VacationPeriod] = Field(default_factory=list)


class Workload(RefitModel):
    current_tasks: int = 0
    total_hours: float = 0.0
    utilization_rate: float = 0.0  # 0-100


class Performance(RefitModel):
    tasks_completed: int = 0
    on_time_completion: float = 0.0  # percentage
    average_rating: float = 0.0


class MemberContacts(RefitModel):
    phone: Optional[str] = None
    mobile: Optional[str] = None


class TeamMember(RefitModel):
    """Team member with role, skills and capacity."""

    id: str
    name: str
    email: str
    role: TeamMemberRole = TeamMemberRole.TECHNICIAN
    department: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    availability: Availability = Field(default_factory=Availability)
    workload: Workload = Field(default_factory=Workload)
    performance: Performance = Field(default_factory=Performance)
    contacts: MemberContacts = Field(default_factory=MemberContacts)
    avatar: Optional[str] = None
    status: TeamMemberStatus = TeamMemberStatus.ACTIVE
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    def matching_skills(self, required: List[str]) -> List[str]:
        """Own skills that contain any required skill (case-insensitive)."""
        wanted = [r.lower() for r in required]
        return [s for s in self.skills if any(r in s.lower() for r in wanted)]

    def has_any_skill(self, required: List[str]) -> bool:
        return bool(self.matching_skills(required))

    @property
    def is_active(self) -> bool:
        return self.status == TeamMemberStatus.ACTIVE
