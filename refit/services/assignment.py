"""
Smart task assignment scoring.

Ranks candidate team members for a task on a 0-100 scale:

    skill match   40 x matching/required skills (flat 20 when none required)
    availability  30 x (100 - utilisation) / 100
    performance   20 x on-time completion / 100
    experience    10 x min(tasks completed / 10, 1)

A candidate whose assigned hours plus the task's estimate would exceed
90% of weekly capacity is flagged as overloaded. Overloaded candidates are
still scored and listed but cannot be selected.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from config import settings
from ..models import Priority, TeamMember

logger = logging.getLogger(__name__)

SKILL_WEIGHT = 40
NO_SKILLS_REQUIRED_SCORE = 20
AVAILABILITY_WEIGHT = 30
PERFORMANCE_WEIGHT = 20
EXPERIENCE_WEIGHT = 10
EXPERIENCE_CAP_TASKS = 10


@dataclass
class AssignmentCandidate:
    member: TeamMember
    score: int
    would_be_overloaded: bool
    matching_skills: List[str] = field(default_factory=list)

    @property
    def selectable(self) -> bool:
        return not self.would_be_overloaded

    @property
    def label(self) -> str:
        return match_label(self.score)


def match_label(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "low"


def projected_utilization(member: TeamMember, estimated_hours: float) -> float:
    """Utilisation in percent if the task's hours were added."""
    capacity = member.availability.hours_per_week
    hours = member.workload.total_hours + estimated_hours
    if capacity <= 0:
        return float("inf") if hours > 0 else 0.0
    return hours / capacity * 100


def would_be_overloaded(member: TeamMember, estimated_hours: float) -> bool:
    """Projected utilisation above the overload threshold. No capacity at all counts as overloaded."""
    if member.availability.hours_per_week <= 0:
        return True
    return projected_utilization(member, estimated_hours) > settings.overload_threshold


def score_member(member: TeamMember, required_skills: Optional[List[str]] = None) -> float:
    """Unrounded score of one member."""
    required_skills = required_skills or []

    if required_skills:
        matching = member.matching_skills(required_skills)
        # Several own skills can match one requirement; the ratio is capped at 1
        ratio = min(len(matching) / len(required_skills), 1.0)
        score = ratio * SKILL_WEIGHT
    else:
        score = float(NO_SKILLS_REQUIRED_SCORE)

    score += (100 - member.workload.utilization_rate) / 100 * AVAILABILITY_WEIGHT
    score += member.performance.on_time_completion / 100 * PERFORMANCE_WEIGHT
    score += min(member.performance.tasks_completed / EXPERIENCE_CAP_TASKS, 1) * EXPERIENCE_WEIGHT
    return score


def score_candidates(
    members: Iterable[TeamMember],
    required_skills: Optional[List[str]] = None,
    estimated_hours: float = 0.0,
    priority: Priority = Priority.MEDIUM,
) -> List[AssignmentCandidate]:
    """
    Score and rank candidates, best first.

    Candidates are expected to be pre-filtered for availability. Ties keep
    their input order. The result is fully determined by the inputs.
    """
    required_skills = required_skills or []
    candidates = [
        AssignmentCandidate(
            member=member,
            score=int(score_member(member, required_skills) + 0.5),
            would_be_overloaded=would_be_overloaded(member, estimated_hours),
            matching_skills=member.matching_skills(required_skills),
        )
        for member in members
    ]
    candidates.sort(key=lambda c: c.score, reverse=True)

    logger.debug(
        f"Scored {len(candidates)} candidates for {Priority(priority).value} task "
        f"({estimated_hours}h, skills={required_skills})"
    )
    return candidates


def filter_candidates(candidates: Iterable[TeamMember], query: str) -> List[TeamMember]:
    """Narrow candidates by name, email or skill before scoring."""
    if not query.strip():
        return list(candidates)

    q = query.lower()
    return [
        m for m in candidates
        if q in m.name.lower() or q in m.email.lower() or any(q in s.lower() for s in m.skills)
    ]
