"""
Analytics over tasks, projects and team members.

Every calculator is a pure function of the entity lists it receives plus
an explicit reference time, so dashboards and tests see the same numbers.

Metrics:
- Team: task counts by status, overdue, on-time rate, average utilisation
- Member: per-member completion, on-time rate and tasks per day
- Project: task progress against schedule progress, budget use, per-phase status
- Budget: approved, spent and remaining, overall and per project
- Productivity: throughput, average task duration, top performers
- KPI list for the dashboard header
"""

import calendar
import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

from ..models import PhaseStatus, Project, TaskEnhanced, TaskStatus, TeamMember, TeamMemberStatus
from ..utils.datetime_utils import days_between, end_of_day, ensure_utc, parse_iso, start_of_day, utc_now, utc_today

logger = logging.getLogger(__name__)

DATE_RANGE_PRESETS = ("today", "week", "month", "quarter", "year")
DEFAULT_PERIOD_DAYS = 30
TOP_PERFORMERS_LIMIT = 5


def _round(value: float) -> int:
    return int(value + 0.5)


def _round1(value: float) -> float:
    return int(value * 10 + 0.5) / 10


def _sub_months(dt: datetime, months: int) -> datetime:
    """Same day N months earlier, clamped to the end of shorter months."""
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


# ==================== DATE RANGES ====================

@dataclass
class DateRange:
    start: datetime
    end: datetime
    preset: Optional[str] = None

    def contains(self, dt: datetime) -> bool:
        dt = ensure_utc(dt)
        return self.start <= dt <= self.end

    @property
    def days(self) -> int:
        """Whole days covered; never less than 1."""
        return days_between(self.start, self.end) or 1


def date_range_from_preset(preset: str, now: Optional[datetime] = None) -> DateRange:
    """
    Range ending at the end of today.

    Unknown presets fall back to the last month.
    """
    now = ensure_utc(now) if now is not None else utc_now()

    if preset == "today":
        start = now
    elif preset == "week":
        start = now - timedelta(days=7)
    elif preset == "quarter":
        start = _sub_months(now, 3)
    elif preset == "year":
        start = _sub_months(now, 12)
    else:
        start = _sub_months(now, 1)

    return DateRange(start=start_of_day(start), end=end_of_day(now), preset=preset)


def filter_tasks_by_date(tasks: Iterable[TaskEnhanced], date_range: Optional[DateRange]) -> List[TaskEnhanced]:
    """Tasks created inside the range; all tasks when no range is given."""
    if date_range is None:
        return list(tasks)
    return [t for t in tasks if date_range.contains(t.created_at)]


def _period_days(date_range: Optional[DateRange]) -> int:
    return date_range.days if date_range else DEFAULT_PERIOD_DAYS


def _finished_on(task: TaskEnhanced) -> date:
    return (task.completed_at or task.updated_at).date()


def _on_time(task: TaskEnhanced) -> bool:
    return task.due_date is not None and _finished_on(task) <= task.due_date


# ==================== RESULT TYPES ====================

@dataclass
class TeamMetrics:
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    pending_tasks: int = 0
    overdue_tasks: int = 0
    on_time_rate: int = 0
    average_utilization: int = 0
    active_members: int = 0
    total_members: int = 0
    total_hours_logged: float = 0.0
    total_hours_estimated: float = 0.0


@dataclass
class MemberMetrics:
    member_id: str
    member_name: str
    tasks_assigned: int = 0
    tasks_completed: int = 0
    tasks_on_time: int = 0
    on_time_rate: int = 0
    utilization: float = 0.0
    hours_logged: float = 0.0
    productivity: float = 0.0  # completed tasks per day


@dataclass
class PhaseMetrics:
    id: str
    name: str
    progress: int = 0
    tasks_completed: int = 0
    tasks_total: int = 0
    status: str = PhaseStatus.PENDING.value


@dataclass
class ProjectMetrics:
    id: str
    name: str
    progress: int = 0
    budget_spent: float = 0.0
    budget_approved: float = 0.0
    budget_remaining: float = 0.0
    budget_utilization: int = 0
    days_elapsed: int = 0
    days_remaining: int = 0
    days_total: int = 0
    schedule_progress: int = 0
    tasks_completed: int = 0
    tasks_total: int = 0
    on_schedule: bool = True
    phases: List[PhaseMetrics] = field(default_factory=list)


@dataclass
class ProjectBudgetLine:
    project_id: str
    project_name: str
    approved: float
    spent: float
    remaining: float


@dataclass
class BudgetMetrics:
    total_approved: float = 0.0
    total_spent: float = 0.0
    total_remaining: float = 0.0
    utilization_rate: int = 0
    by_project: List[ProjectBudgetLine] = field(default_factory=list)


@dataclass
class ProductivityMetrics:
    tasks_completed_per_day: float = 0.0
    average_task_duration: float = 0.0  # actual hours
    top_performers: List[MemberMetrics] = field(default_factory=list)


@dataclass
class KPIMetric:
    id: str
    label: str
    value: Union[int, float, str]
    unit: Optional[str] = None
    trend: Optional[str] = None  # up, down, neutral
    comparison: Optional[str] = None
    color: str = "blue"

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# ==================== CALCULATORS ====================

def team_metrics(
    tasks: Iterable[TaskEnhanced],
    members: Iterable[TeamMember],
    date_range: Optional[DateRange] = None,
    now: Optional[datetime] = None,
) -> TeamMetrics:
    tasks = filter_tasks_by_date(tasks, date_range)
    members = list(members)
    today = utc_today(now)

    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]
    with_due_date = [t for t in completed if t.due_date is not None]
    on_time = [t for t in with_due_date if _on_time(t)]
    active = [m for m in members if m.status == TeamMemberStatus.ACTIVE]

    on_time_rate = len(on_time) / len(with_due_date) * 100 if with_due_date else 0.0
    average_utilization = (
        sum(m.workload.utilization_rate for m in active) / len(active) if active else 0.0
    )

    return TeamMetrics(
        total_tasks=len(tasks),
        completed_tasks=len(completed),
        in_progress_tasks=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        pending_tasks=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
        overdue_tasks=sum(1 for t in tasks if t.is_overdue(today)),
        on_time_rate=_round(on_time_rate),
        average_utilization=_round(average_utilization),
        active_members=len(active),
        total_members=len(members),
        total_hours_logged=sum(t.actual_hours or 0 for t in tasks),
        total_hours_estimated=sum(t.estimated_hours for t in tasks),
    )


def member_metrics(
    member: TeamMember,
    tasks: Iterable[TaskEnhanced],
    date_range: Optional[DateRange] = None,
) -> MemberMetrics:
    member_tasks = [t for t in filter_tasks_by_date(tasks, date_range) if t.is_assigned_to(member.id)]
    completed = [t for t in member_tasks if t.status == TaskStatus.COMPLETED]
    with_due_date = [t for t in completed if t.due_date is not None]
    on_time = [t for t in with_due_date if _on_time(t)]

    on_time_rate = len(on_time) / len(with_due_date) * 100 if with_due_date else 0.0

    return MemberMetrics(
        member_id=member.id,
        member_name=member.name,
        tasks_assigned=len(member_tasks),
        tasks_completed=len(completed),
        tasks_on_time=len(on_time),
        on_time_rate=_round(on_time_rate),
        utilization=member.workload.utilization_rate,
        hours_logged=sum(t.actual_hours or 0 for t in member_tasks),
        productivity=_round1(len(completed) / _period_days(date_range)),
    )


def all_member_metrics(
    members: Iterable[TeamMember],
    tasks: Iterable[TaskEnhanced],
    date_range: Optional[DateRange] = None,
) -> List[MemberMetrics]:
    """Metrics for every member, most completed tasks first."""
    tasks = list(tasks)
    metrics = [member_metrics(m, tasks, date_range) for m in members]
    metrics.sort(key=lambda m: m.tasks_completed, reverse=True)
    return metrics


def _phase_status(progress: float, end_date: Optional[date], today: date) -> str:
    if progress >= 100:
        return PhaseStatus.COMPLETED.value
    if progress > 0:
        if end_date is not None and today > end_date:
            return "delayed"
        return PhaseStatus.IN_PROGRESS.value
    return PhaseStatus.PENDING.value


def project_metrics(
    project: Project,
    tasks: Iterable[TaskEnhanced],
    now: Optional[datetime] = None,
) -> ProjectMetrics:
    """
    Task-based progress compared with elapsed schedule.

    A project is on schedule while its completed-task share keeps up with
    the share of planned days already elapsed.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    project_tasks = [t for t in tasks if t.project_id == project.id]
    completed = sum(1 for t in project_tasks if t.status == TaskStatus.COMPLETED)
    progress = completed / len(project_tasks) * 100 if project_tasks else 0.0

    budget = project.budget
    budget_utilization = budget.spent / budget.approved * 100 if budget.approved > 0 else 0.0

    start = parse_iso(project.dates.start_planned)
    end = parse_iso(project.dates.end_planned)
    if start is not None and end is not None:
        days_total = days_between(start, end)
        days_elapsed = days_between(start, now)
        days_remaining = days_between(now, end)
    else:
        days_total = days_elapsed = days_remaining = 0

    schedule_progress = days_elapsed / days_total * 100 if days_total > 0 else 0.0

    today = now.date()
    phases = []
    for phase in project.ordered_phases():
        phase_tasks = [t for t in project_tasks if t.phase_id == phase.id]
        phase_completed = sum(1 for t in phase_tasks if t.status == TaskStatus.COMPLETED)
        phase_progress = phase_completed / len(phase_tasks) * 100 if phase_tasks else 0.0
        phases.append(PhaseMetrics(
            id=phase.id,
            name=phase.name,
            progress=_round(phase_progress),
            tasks_completed=phase_completed,
            tasks_total=len(phase_tasks),
            status=_phase_status(phase_progress, phase.end_date, today),
        ))

    return ProjectMetrics(
        id=project.id,
        name=project.name,
        progress=_round(progress),
        budget_spent=budget.spent,
        budget_approved=budget.approved,
        budget_remaining=budget.approved - budget.spent,
        budget_utilization=_round(budget_utilization),
        days_elapsed=max(0, days_elapsed),
        days_remaining=max(0, days_remaining),
        days_total=days_total,
        schedule_progress=_round(schedule_progress),
        tasks_completed=completed,
        tasks_total=len(project_tasks),
        on_schedule=progress >= schedule_progress,
        phases=phases,
    )


def all_project_metrics(
    projects: Iterable[Project],
    tasks: Iterable[TaskEnhanced],
    now: Optional[datetime] = None,
) -> List[ProjectMetrics]:
    tasks = list(tasks)
    return [project_metrics(p, tasks, now) for p in projects]


def budget_metrics(projects: Iterable[Project]) -> BudgetMetrics:
    projects = list(projects)
    total_approved = sum(p.budget.approved for p in projects)
    total_spent = sum(p.budget.spent for p in projects)
    utilization = total_spent / total_approved * 100 if total_approved > 0 else 0.0

    return BudgetMetrics(
        total_approved=total_approved,
        total_spent=total_spent,
        total_remaining=total_approved - total_spent,
        utilization_rate=_round(utilization),
        by_project=[
            ProjectBudgetLine(
                project_id=p.id,
                project_name=p.name,
                approved=p.budget.approved,
                spent=p.budget.spent,
                remaining=p.budget.approved - p.budget.spent,
            )
            for p in projects
        ],
    )


def productivity_metrics(
    tasks: Iterable[TaskEnhanced],
    members: Iterable[TeamMember],
    date_range: Optional[DateRange] = None,
) -> ProductivityMetrics:
    tasks = list(tasks)
    completed = [t for t in filter_tasks_by_date(tasks, date_range) if t.status == TaskStatus.COMPLETED]
    measured = [t for t in completed if t.estimated_hours and t.actual_hours]
    average_duration = sum(t.actual_hours for t in measured) / len(measured) if measured else 0.0

    return ProductivityMetrics(
        tasks_completed_per_day=_round1(len(completed) / _period_days(date_range)),
        average_task_duration=_round1(average_duration),
        top_performers=all_member_metrics(members, tasks, date_range)[:TOP_PERFORMERS_LIMIT],
    )


def kpi_metrics(
    tasks: Iterable[TaskEnhanced],
    members: Iterable[TeamMember],
    projects: Iterable[Project],
    date_range: Optional[DateRange] = None,
    now: Optional[datetime] = None,
) -> List[KPIMetric]:
    """Dashboard KPI cards, in display order."""
    tasks = list(tasks)
    projects = list(projects)

    team = team_metrics(tasks, members, date_range, now)
    budget = budget_metrics(projects)
    active_projects = sum(
        1 for p in all_project_metrics(projects, tasks, now) if 0 < p.progress < 100
    )

    logger.debug(f"KPIs computed over {team.total_tasks} tasks and {len(projects)} projects")

    return [
        KPIMetric(id="total-tasks", label="Total Tasks", value=team.total_tasks, color="blue"),
        KPIMetric(
            id="completed-tasks",
            label="Completed",
            value=team.completed_tasks,
            unit="tasks",
            trend="up",
            color="green",
        ),
        KPIMetric(
            id="on-time-rate",
            label="On-Time Rate",
            value=team.on_time_rate,
            unit="%",
            trend="up" if team.on_time_rate > 80 else "down",
            color="green" if team.on_time_rate > 80 else "yellow",
        ),
        KPIMetric(
            id="team-utilization",
            label="Team Utilization",
            value=team.average_utilization,
            unit="%",
            trend="up" if team.average_utilization > 70 else "neutral",
            color="purple",
        ),
        KPIMetric(id="active-projects", label="Active Projects", value=active_projects, color="indigo"),
        KPIMetric(
            id="budget-spent",
            label="Budget Spent",
            value=f"€{budget.total_spent / 1000:.1f}K",
            comparison=f"{budget.utilization_rate}% of total",
            color="red" if budget.utilization_rate > 90 else "blue",
        ),
    ]
