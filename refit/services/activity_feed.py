"""
Activity feed filtering and grouping.

Filters are ANDed. Date bounds are inclusive. Grouping buckets entries by
the UTC calendar date of their timestamp, so every entry lands in exactly
one bucket.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ..models import ActivityFeedFilters, TeamActivity
from ..utils.datetime_utils import ensure_utc, utc_date_key, utc_now


def _matches_search(activity: TeamActivity, query: str) -> bool:
    fields = (activity.action, activity.description, activity.target_name, activity.user_name)
    return any(query in (value or "").lower() for value in fields)


def filter_activities(
    activities: Iterable[TeamActivity],
    filters: Optional[ActivityFeedFilters] = None,
) -> List[TeamActivity]:
    """Apply every non-empty criterion in filters."""
    result = list(activities)
    if filters is None:
        return result

    if filters.types:
        types = set(filters.types)
        result = [a for a in result if a.type in types]

    if filters.users:
        users = set(filters.users)
        result = [a for a in result if a.user_id in users]

    if filters.target_type:
        result = [a for a in result if a.target_type == filters.target_type]

    if filters.date_from:
        date_from = ensure_utc(filters.date_from)
        result = [a for a in result if a.timestamp >= date_from]

    if filters.date_to:
        date_to = ensure_utc(filters.date_to)
        result = [a for a in result if a.timestamp <= date_to]

    if filters.visibility:
        result = [a for a in result if a.visibility == filters.visibility]

    if filters.search_query and filters.search_query.strip():
        query = filters.search_query.strip().lower()
        result = [a for a in result if _matches_search(a, query)]

    return result


def group_by_date(activities: Iterable[TeamActivity]) -> Dict[str, List[TeamActivity]]:
    """
    Bucket activities by UTC date (YYYY-MM-DD).

    Buckets keep the order in which their first entry appears; entries keep
    their input order inside a bucket.
    """
    groups: Dict[str, List[TeamActivity]] = OrderedDict()
    for activity in activities:
        groups.setdefault(utc_date_key(activity.timestamp), []).append(activity)
    return groups


def retention_cutoff(days_to_keep: int, now: Optional[datetime] = None) -> datetime:
    now = ensure_utc(now) if now is not None else utc_now()
    return now - timedelta(days=days_to_keep)


def count_by(activities: Iterable[TeamActivity], attribute: str) -> Dict[str, int]:
    """Occurrences of each value of an attribute (enum values are unwrapped)."""
    counts: Dict[str, int] = {}
    for activity in activities:
        value = getattr(activity, attribute)
        key = getattr(value, "value", value)
        counts[key] = counts.get(key, 0) + 1
    return counts
