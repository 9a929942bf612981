"""Team activity log data model."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from .base import RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class ActivityType(str, Enum):
    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    TASK_ASSIGNED = "task_assigned"
    TASK_UPDATED = "task_updated"
    COMMENT_ADDED = "comment_added"
    DOCUMENT_UPLOADED = "document_uploaded"
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    MEMBER_JOINED = "member_joined"
    MEMBER_LEFT = "member_left"
    WORKLOAD_CHANGED = "workload_changed"
    QUOTE_CREATED = "quote_created"
    QUOTE_APPROVED = "quote_approved"


class ActivityTargetType(str, Enum):
    TASK = "task"
    PROJECT = "project"
    MEMBER = "member"
    DOCUMENT = "document"
    QUOTE = "quote"
    COMMENT = "comment"
    APPOINTMENT = "appointment"


class ActivityVisibility(str, Enum):
    PUBLIC = "public"
    TEAM = "team"
    PRIVATE = "private"


class TeamActivity(RefitModel):
    """Append-only log entry. Never edited once written."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: ActivityType
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    action: str
    target_type: Optional[ActivityTargetType] = None
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    visibility: ActivityVisibility = ActivityVisibility.PUBLIC
    timestamp: UtcDatetime = Field(default_factory=utc_now)


class ActivityFeedFilters(RefitModel):
    """All criteria are ANDed; empty or None criteria are ignored."""

    types: List[ActivityType] = Field(default_factory=list)
    users: List[str] = Field(default_factory=list)
    target_type: Optional[ActivityTargetType] = None
    date_from: Optional[UtcDatetime] = None  # inclusive
    date_to: Optional[UtcDatetime] = None  # inclusive
    visibility: Optional[ActivityVisibility] = None
    search_query: Optional[str] = None
