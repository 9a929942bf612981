"""
Team activity log repository.

Entries are only ever prepended or pruned; nothing edits an entry once it
has been written.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from config import settings
from .base import BaseRepository
from ..exceptions import ImmutableEntityError
from ..models import ActivityFeedFilters, ActivityType, TeamActivity
from ..services.activity_feed import count_by, filter_activities, group_by_date, retention_cutoff
from ..storage import StorageAdapter, StorageKeys

logger = logging.getLogger(__name__)


class ActivityRepository(BaseRepository[TeamActivity]):
    """Repository for the append-only activity feed."""

    storage_key = StorageKeys.ACTIVITIES
    model = TeamActivity
    id_prefix = "activity"
    prepend_new = True

    def _load(self) -> List[TeamActivity]:
        return sorted(super()._load(), key=lambda a: a.timestamp, reverse=True)

    def add(self, data: Dict[str, Any]) -> Optional[TeamActivity]:
        """Log an activity; the timestamp defaults to now."""
        return self.create(data)

    def update(self, entity_id: str, updates: Dict[str, Any]) -> Optional[TeamActivity]:
        raise ImmutableEntityError(f"Activity {entity_id} cannot be edited")

    # ==================== QUERIES ====================

    def get_activities(self, filters: Optional[ActivityFeedFilters] = None) -> List[TeamActivity]:
        """Newest first, narrowed by filters."""
        return filter_activities(self._load(), filters)

    def get_recent(self, limit: int = 10) -> List[TeamActivity]:
        return self._load()[:limit]

    def get_by_user(self, user_id: str) -> List[TeamActivity]:
        return self.filter_by(lambda a: a.user_id == user_id)

    def get_by_target(self, target_id: str) -> List[TeamActivity]:
        return self.filter_by(lambda a: a.target_id == target_id)

    def count_by_type(self, activity_type: Optional[ActivityType] = None):
        """Count of one type, or a {type: count} map when no type is given."""
        counts = count_by(self._load(), "type")
        if activity_type is None:
            return counts
        return counts.get(ActivityType(activity_type).value, 0)

    def count_by_user(self, user_id: Optional[str] = None):
        counts = count_by(self._load(), "user_id")
        if user_id is None:
            return counts
        return counts.get(user_id, 0)

    def grouped_by_date(self, filters: Optional[ActivityFeedFilters] = None) -> Dict[str, List[TeamActivity]]:
        return group_by_date(self.get_activities(filters))

    # ==================== RETENTION ====================

    def clear_old_activities(self, days_to_keep: Optional[int] = None, now: Optional[datetime] = None) -> int:
        """
        Drop entries strictly older than now - days_to_keep.

        Returns how many entries were removed. Records that no longer parse
        are kept as they are.
        """
        if days_to_keep is None:
            days_to_keep = settings.activity_retention_days
        cutoff = retention_cutoff(days_to_keep, now)

        records = self._raw_records()
        kept = [raw for raw, activity in records if activity is None or activity.timestamp >= cutoff]
        removed = len(records) - len(kept)
        if removed and not self.storage.set(self.storage_key, kept):
            return 0

        logger.info(f"Cleared {removed} activities older than {days_to_keep} days")
        return removed

    def clear_all(self) -> bool:
        return self.storage.set(self.storage_key, [])


# Singleton
_activity_repository: Optional[ActivityRepository] = None


def get_activity_repository(storage: Optional[StorageAdapter] = None) -> ActivityRepository:
    """Get the activity repository singleton."""
    global _activity_repository
    if _activity_repository is None:
        _activity_repository = ActivityRepository(storage)
    return _activity_repository
