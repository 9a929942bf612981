"""
Team member repository.

Stores team member information for:
- Contact details and department
- Role and skills
- Weekly capacity and current workload
- Performance stats used by smart assignment
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import settings
from .base import BaseRepository
from ..exceptions import DuplicateEntityError
from ..models import TeamMember, TeamMemberRole, TeamMemberStatus
from ..storage import StorageAdapter, StorageKeys
from ..utils.validation import ValidationResult, validate_team_member_data

logger = logging.getLogger(__name__)

UNDERUTILIZED_THRESHOLD = 50


def _round(value: float) -> int:
    return int(value + 0.5)


def utilization_rate(total_hours: float, hours_per_week: float) -> float:
    """Assigned hours as a percentage of weekly capacity, capped at 100."""
    if hours_per_week <= 0:
        return 100.0 if total_hours > 0 else 0.0
    return float(min(100, _round(total_hours / hours_per_week * 100)))


@dataclass
class TeamWorkload:
    total: float = 0.0  # assigned hours across the team
    average: int = 0
    overloaded: List[TeamMember] = field(default_factory=list)
    underutilized: List[TeamMember] = field(default_factory=list)


class TeamRepository(BaseRepository[TeamMember]):
    """Repository for team member operations."""

    storage_key = StorageKeys.TEAM_MEMBERS
    model = TeamMember
    id_prefix = "member"

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        return validate_team_member_data(data)

    def create(self, data: Dict[str, Any]) -> Optional[TeamMember]:
        """Add a member. Raises DuplicateEntityError if the email is taken (case-insensitive)."""
        email = (data.get("email") or "").strip()
        if email and self.get_by_email(email) is not None:
            raise DuplicateEntityError(f"A team member with email {email} already exists")
        return super().create(data)

    # ==================== QUERIES ====================

    def get_by_email(self, email: str) -> Optional[TeamMember]:
        wanted = email.strip().lower()
        for member in self._load():
            if member.email.lower() == wanted:
                return member
        return None

    def get_by_name(self, name: str) -> Optional[TeamMember]:
        for member in self._load():
            if member.name == name:
                return member
        return None

    def get_by_role(self, role: TeamMemberRole) -> List[TeamMember]:
        role = TeamMemberRole(role)
        return self.filter_by(lambda m: m.role == role)

    def get_by_status(self, status: TeamMemberStatus) -> List[TeamMember]:
        status = TeamMemberStatus(status)
        return self.filter_by(lambda m: m.status == status)

    def get_active(self) -> List[TeamMember]:
        return self.get_by_status(TeamMemberStatus.ACTIVE)

    def get_by_skill(self, skill: str) -> List[TeamMember]:
        return self.filter_by(lambda m: m.has_any_skill([skill]))

    def get_by_department(self, department: str) -> List[TeamMember]:
        return self.filter_by(lambda m: m.department == department)

    def get_available_members(self, required_skills: Optional[List[str]] = None) -> List[TeamMember]:
        """Active members with any of the skills, least utilised first."""
        members = self.get_active()
        if required_skills:
            members = [m for m in members if m.has_any_skill(required_skills)]
        return sorted(members, key=lambda m: m.workload.utilization_rate)

    def search(self, query: str) -> List[TeamMember]:
        if not query.strip():
            return self._load()

        q = query.lower()
        return self.filter_by(
            lambda m: q in m.name.lower()
            or q in m.email.lower()
            or q in (m.department or "").lower()
            or any(q in s.lower() for s in m.skills)
        )

    def filter_members(
        self,
        role: Optional[TeamMemberRole] = None,
        status: Optional[TeamMemberStatus] = None,
        skills: Optional[List[str]] = None,
        department: Optional[str] = None,
        min_utilization: Optional[float] = None,
        max_utilization: Optional[float] = None,
    ) -> List[TeamMember]:
        """All given criteria must match."""
        members = self._load()
        if role:
            members = [m for m in members if m.role == TeamMemberRole(role)]
        if status:
            members = [m for m in members if m.status == TeamMemberStatus(status)]
        if skills:
            members = [m for m in members if m.has_any_skill(skills)]
        if department:
            members = [m for m in members if m.department == department]
        if min_utilization is not None:
            members = [m for m in members if m.workload.utilization_rate >= min_utilization]
        if max_utilization is not None:
            members = [m for m in members if m.workload.utilization_rate <= max_utilization]
        return members

    def get_utilization(self, member_id: str) -> float:
        member = self.get(member_id)
        return member.workload.utilization_rate if member else 0.0

    # ==================== WORKLOAD ====================

    def update_workload(self, member_id: str, tasks_delta: int, hours_delta: float) -> Optional[TeamMember]:
        """Shift task count and hours (never below zero) and recompute utilisation."""
        member = self.get(member_id)
        if member is None:
            return None

        current_tasks = max(0, member.workload.current_tasks + tasks_delta)
        total_hours = max(0.0, member.workload.total_hours + hours_delta)
        workload = member.workload.model_copy(update={
            "current_tasks": current_tasks,
            "total_hours": total_hours,
            "utilization_rate": utilization_rate(total_hours, member.availability.hours_per_week),
        })

        logger.debug(f"Workload for {member.name}: {current_tasks} tasks, {total_hours}h")
        return self.update(member_id, {"workload": workload})

    def get_team_workload(self) -> TeamWorkload:
        members = self._load()
        total = sum(m.workload.total_hours for m in members)
        average = total / len(members) if members else 0.0

        return TeamWorkload(
            total=total,
            average=_round(average),
            overloaded=[m for m in members if m.workload.utilization_rate > settings.overload_threshold],
            underutilized=[
                m for m in members
                if m.workload.utilization_rate < UNDERUTILIZED_THRESHOLD and m.is_active
            ],
        )

    # ==================== PERFORMANCE ====================

    def update_performance(self, member_id: str, task_completed: bool, on_time: bool) -> Optional[TeamMember]:
        """Fold one finished task into the completion count and on-time percentage."""
        member = self.get(member_id)
        if member is None:
            return None

        perf = member.performance
        completed = perf.tasks_completed + (1 if task_completed else 0)
        on_time_count = _round(perf.on_time_completion / 100 * perf.tasks_completed) + (1 if on_time else 0)
        on_time_rate = on_time_count / completed * 100 if completed > 0 else 0.0

        performance = perf.model_copy(update={
            "tasks_completed": completed,
            "on_time_completion": float(_round(on_time_rate)),
        })
        return self.update(member_id, {"performance": performance})

    def get_top_performers(self, limit: int = 5) -> List[TeamMember]:
        """Members with completed tasks, by on-time rate then average rating."""
        members = self.filter_by(lambda m: m.performance.tasks_completed > 0)
        members.sort(
            key=lambda m: (m.performance.on_time_completion, m.performance.average_rating),
            reverse=True,
        )
        return members[:limit]


# Singleton
_team_repository: Optional[TeamRepository] = None


def get_team_repository(storage: Optional[StorageAdapter] = None) -> TeamRepository:
    """Get the team repository singleton."""
    global _team_repository
    if _team_repository is None:
        _team_repository = TeamRepository(storage)
    return _team_repository
