"""
Comment repository.

Comments target any entity by (entity_type, entity_id). Replies point to a
top-level comment through parent_id; threads are one level deep. Deleting
is soft: the comment stays with a placeholder text so replies keep their
parent.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .base import BaseRepository
from .notifications import NotificationRepository
from ..exceptions import NotificationSuppressedError
from ..models import (
    DELETED_COMMENT_TEXT,
    Comment,
    CommentEntityType,
    CommentFilters,
    NotificationType,
    Priority,
    Reaction,
    TeamMember,
)
from ..services.mentions import extract_mentions
from ..storage import StorageAdapter, StorageKeys
from ..utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100

ENTITY_LABELS = {
    CommentEntityType.TASK: "task",
    CommentEntityType.PROJECT: "project",
    CommentEntityType.APPOINTMENT: "appointment",
}


def _preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


class CommentRepository(BaseRepository[Comment]):
    """Repository for comments, reactions and mention notifications."""

    storage_key = StorageKeys.COMMENTS
    model = Comment
    id_prefix = "comment"
    prepend_new = True

    def __init__(
        self,
        storage: Optional[StorageAdapter] = None,
        notifications: Optional[NotificationRepository] = None,
    ):
        super().__init__(storage)
        self.notifications = notifications or NotificationRepository(self.storage)

    def _touch(self, comment: Comment) -> Comment:
        # updated_at marks an edit and is set explicitly by update_content
        return comment

    # ==================== MUTATIONS ====================

    def add(self, data: Dict[str, Any], team_members: Optional[Iterable[TeamMember]] = None) -> Optional[Comment]:
        """
        Create a comment and notify every mentioned member except the author.

        When `mentions` is not given and a roster is, mentions are extracted
        from the content.
        """
        record = dict(data)
        record["reactions"] = []
        if "mentions" not in record and team_members is not None:
            record["mentions"] = extract_mentions(record.get("content") or "", team_members)

        comment = self.create(record)
        if comment is None:
            return None

        for user_id in comment.mentions:
            if user_id != comment.user_id:
                self._notify_mention(comment, user_id)
        return comment

    def _notify_mention(self, comment: Comment, user_id: str) -> None:
        if comment.is_reply:
            message = f'Mentioned you in a reply: "{_preview(comment.content)}"'
        else:
            label = ENTITY_LABELS.get(comment.entity_type, "item")
            message = f'Mentioned you in a comment on a {label}: "{_preview(comment.content)}"'

        metadata: Dict[str, Any] = {"comment_id": comment.id}
        if comment.entity_type == CommentEntityType.TASK:
            metadata["task_id"] = comment.entity_id
        elif comment.entity_type == CommentEntityType.PROJECT:
            metadata["project_id"] = comment.entity_id

        try:
            self.notifications.add({
                "user_id": user_id,
                "type": NotificationType.TEAM_MENTION,
                "priority": Priority.MEDIUM,
                "title": f"{comment.user_name} mentioned you",
                "message": message,
                "metadata": metadata,
            })
        except NotificationSuppressedError as e:
            logger.debug(f"Mention notification for {user_id} not sent: {e}")

    def update_content(self, comment_id: str, content: str, edited_by: str) -> Optional[Comment]:
        return self.update(comment_id, {
            "content": content,
            "edited_by": edited_by,
            "updated_at": utc_now(),
        })

    def delete(self, comment_id: str) -> bool:
        """Soft delete: flag the comment and replace its text."""
        return self.update(comment_id, {"deleted": True, "content": DELETED_COMMENT_TEXT}) is not None

    def purge(self, comment_id: str) -> bool:
        """Remove the record for good."""
        return super().delete(comment_id)

    # ==================== REACTIONS ====================

    def toggle_reaction(self, comment_id: str, emoji: str, user_id: str, user_name: str = "") -> Optional[Comment]:
        """Add the user's emoji reaction, or remove it if already there."""
        comment = self.get(comment_id)
        if comment is None:
            return None

        exists = any(r.user_id == user_id and r.emoji == emoji for r in comment.reactions)
        if exists:
            reactions = [r for r in comment.reactions if not (r.user_id == user_id and r.emoji == emoji)]
        else:
            reactions = comment.reactions + [Reaction(emoji=emoji, user_id=user_id, user_name=user_name)]
        return self.update(comment_id, {"reactions": reactions})

    def remove_reaction(self, comment_id: str, emoji: str, user_id: str) -> Optional[Comment]:
        comment = self.get(comment_id)
        if comment is None:
            return None

        reactions = [r for r in comment.reactions if not (r.user_id == user_id and r.emoji == emoji)]
        return self.update(comment_id, {"reactions": reactions})

    @staticmethod
    def reaction_tally(comment: Comment) -> Dict[str, List[Reaction]]:
        """Reactions grouped by emoji, in first-use order."""
        tally: Dict[str, List[Reaction]] = {}
        for reaction in comment.reactions:
            tally.setdefault(reaction.emoji, []).append(reaction)
        return tally

    # ==================== QUERIES ====================

    def _visible(self) -> List[Comment]:
        return [c for c in self._load() if not c.deleted]

    def get_by_entity(self, entity_type: CommentEntityType, entity_id: Optional[str] = None) -> List[Comment]:
        entity_type = CommentEntityType(entity_type)
        return [
            c for c in self._visible()
            if c.entity_type == entity_type and (entity_id is None or c.entity_id == entity_id)
        ]

    def get_thread(self, parent_id: str) -> List[Comment]:
        """Replies to a comment, oldest first."""
        replies = [c for c in self._visible() if c.parent_id == parent_id]
        return sorted(replies, key=lambda c: c.created_at)

    def get_top_level(self, filters: Optional[CommentFilters] = None) -> List[Comment]:
        comments = [c for c in self._visible() if not c.is_reply]
        if filters is None:
            return comments

        if filters.entity_type:
            comments = [c for c in comments if c.entity_type == filters.entity_type]
        if filters.entity_id:
            comments = [c for c in comments if c.entity_id == filters.entity_id]
        if filters.user_id:
            comments = [c for c in comments if c.user_id == filters.user_id]
        return comments

    def get_mentions_for_user(self, user_id: str) -> List[Comment]:
        return [c for c in self._visible() if user_id in c.mentions]

    def get_comment_count(self, entity_type: CommentEntityType, entity_id: Optional[str] = None) -> int:
        return len(self.get_by_entity(entity_type, entity_id))

    def get_reply_count(self, comment_id: str) -> int:
        return sum(1 for c in self._visible() if c.parent_id == comment_id)

    def get_recent(self, limit: int = 10) -> List[Comment]:
        return self._visible()[:limit]

    def search(self, query: str) -> List[Comment]:
        """Case-insensitive match on content or author name; empty query finds nothing."""
        if not query.strip():
            return []

        q = query.lower()
        return [c for c in self._visible() if q in c.content.lower() or q in c.user_name.lower()]


# Singleton
_comment_repository: Optional[CommentRepository] = None


def get_comment_repository(storage: Optional[StorageAdapter] = None) -> CommentRepository:
    """Get the comment repository singleton."""
    global _comment_repository
    if _comment_repository is None:
        _comment_repository = CommentRepository(storage)
    return _comment_repository
