"""
Derived-view engines.

These are pure functions over model instances. ``automatic_notifications``
works against repositories and is imported from its module directly.
"""

from .payment_schedule import (
    PaymentStats,
    calculate_payment_schedule,
    calculate_payment_stats,
    effective_status,
    resolve_planned_date,
    unscheduled_terms,
)
from .assignment import (
    AssignmentCandidate,
    filter_candidates,
    match_label,
    score_candidates,
    score_member,
    would_be_overloaded,
)
from .notification_grouping import (
    NotificationGroup,
    group_key,
    group_notifications,
    grouped_message,
    grouped_title,
    should_group_notifications,
)
from .mentions import (
    MentionMatch,
    MentionSegment,
    MentionSuggestion,
    detect_mention,
    extract_mentions,
    get_suggestions,
    insert_mention,
    split_mentions,
)
from .activity_feed import count_by, filter_activities, group_by_date, retention_cutoff
from .task_board import BOARD_COLUMNS, board_summary, filter_tasks, group_tasks_by_status, task_progress
from .analytics import (
    DateRange,
    KPIMetric,
    budget_metrics,
    date_range_from_preset,
    kpi_metrics,
    member_metrics,
    productivity_metrics,
    project_metrics,
    team_metrics,
)

__all__ = [
    "PaymentStats",
    "calculate_payment_schedule",
    "calculate_payment_stats",
    "effective_status",
    "resolve_planned_date",
    "unscheduled_terms",
    "AssignmentCandidate",
    "filter_candidates",
    "match_label",
    "score_candidates",
    "score_member",
    "would_be_overloaded",
    "NotificationGroup",
    "group_key",
    "group_notifications",
    "grouped_message",
    "grouped_title",
    "should_group_notifications",
    "MentionMatch",
    "MentionSegment",
    "MentionSuggestion",
    "detect_mention",
    "extract_mentions",
    "get_suggestions",
    "insert_mention",
    "split_mentions",
    "count_by",
    "filter_activities",
    "group_by_date",
    "retention_cutoff",
    "BOARD_COLUMNS",
    "board_summary",
    "filter_tasks",
    "group_tasks_by_status",
    "task_progress",
    "DateRange",
    "KPIMetric",
    "budget_metrics",
    "date_range_from_preset",
    "kpi_metrics",
    "member_metrics",
    "productivity_metrics",
    "project_metrics",
    "team_metrics",
]
