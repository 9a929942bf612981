"""Comment, reaction and attachment data models."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now

DELETED_COMMENT_TEXT = "[Comment deleted]"


class CommentEntityType(str, Enum):
    TASK = "task"
    PROJECT = "project"
    PHASE = "phase"
    APPOINTMENT = "appointment"
    QUOTE = "quote"
    DOCUMENT = "document"


class Reaction(RefitModel):
    emoji: str
    user_id: str
    user_name: str = ""
    timestamp: UtcDatetime = Field(default_factory=utc_now)


class CommentAttachment(RefitModel):
    id: str
    name: str
    url: str
    type: str = ""
    size: int = 0


class Comment(RefitModel):
    """A comment on an entity; replies point at a top-level comment via parent_id."""

    id: str
    entity_type: CommentEntityType
    entity_id: str
    parent_id: Optional[str] = None
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None
    content: str
    mentions: List[str] = Field(default_factory=list)  # mentioned member ids
    reactions: List[Reaction] = Field(default_factory=list)
    attachments: List[CommentAttachment] = Field(default_factory=list)
    deleted: bool = False
    edited_by: Optional[str] = None
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: Optional[UtcDatetime] = None

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None


class CommentFilters(RefitModel):
    entity_type: Optional[CommentEntityType] = None
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
