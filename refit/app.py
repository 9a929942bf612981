"""
Application facade.

RefitApp wires every repository to one storage adapter and adds the few
operations that span several of them (assignment, comments with mentions,
automatic checks, snapshots).
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .exceptions import EntityNotFoundError, MemberOverloadedError, NotificationSuppressedError
from .models import (
    ActivityTargetType,
    ActivityType,
    Comment,
    NotificationType,
    TaskEnhanced,
    TeamMember,
)
from .repositories import (
    ActivityRepository,
    AppointmentRepository,
    CommentRepository,
    ContractorRepository,
    DocumentRepository,
    LocationRepository,
    NotificationRepository,
    PaymentRepository,
    PaymentTemplateRepository,
    ProjectRepository,
    QuoteRepository,
    TaskRepository,
    TeamRepository,
)
from .services import AssignmentCandidate, filter_candidates, score_candidates, would_be_overloaded
from .services.automatic_notifications import AutomaticNotifier
from .state import AppState
from .storage import StorageAdapter, StorageInfo, get_storage
from .utils.validation import ValidationResult

logger = logging.getLogger(__name__)


class RefitApp:
    """All repositories over one storage adapter."""

    def __init__(self, storage: Optional[StorageAdapter] = None):
        self.storage = storage if storage is not None else get_storage()

        self.locations = LocationRepository(self.storage)
        self.projects = ProjectRepository(self.storage)
        self.contractors = ContractorRepository(self.storage)
        self.quotes = QuoteRepository(self.storage)
        self.documents = DocumentRepository(self.storage)
        self.payments = PaymentRepository(self.storage)
        self.payment_templates = PaymentTemplateRepository(self.storage)
        self.tasks = TaskRepository(self.storage)
        self.appointments = AppointmentRepository(self.storage)
        self.notifications = NotificationRepository(self.storage)
        self.comments = CommentRepository(self.storage, notifications=self.notifications)
        self.activities = ActivityRepository(self.storage)
        self.team = TeamRepository(self.storage)

        self.automatic_notifications = AutomaticNotifier(
            self.storage, self.tasks, self.team, self.notifications
        )

    # ==================== ASSIGNMENT ====================

    def suggest_assignees(self, task: TaskEnhanced, query: str = "") -> List[AssignmentCandidate]:
        """Ranked candidates for a task among active members with a matching skill."""
        members = self.team.get_available_members(task.required_skills)
        members = filter_candidates(members, query)
        return score_candidates(members, task.required_skills, task.estimated_hours, task.priority)

    def assign_task(self, task_id: str, member_id: str, assigned_by: Optional[TeamMember] = None) -> TaskEnhanced:
        """
        Assign a task to one member and tell them about it.

        Raises EntityNotFoundError for an unknown task or member, and
        MemberOverloadedError when the task's hours would push the member
        over the overload threshold.

        Previous assignees give the task's hours back. Assigning a task to
        its sole current assignee changes nothing.
        """
        task = self.tasks.require(task_id)
        member = self.team.require(member_id)

        previous = list(task.assigned_to)
        if previous == [member_id]:
            logger.debug(f"Task {task_id} already assigned to {member.name}")
            return task

        already_assigned = member_id in previous
        if not already_assigned and would_be_overloaded(member, task.estimated_hours):
            raise MemberOverloadedError(f"{member.name} cannot take {task.estimated_hours}h more")

        updated = self.tasks.assign(task_id, [member_id])
        if updated is None:
            raise EntityNotFoundError(f"Task {task_id} could not be assigned")

        for old_id in previous:
            if old_id != member_id:
                self.team.update_workload(old_id, -1, -task.estimated_hours)
        if not already_assigned:
            self.team.update_workload(member_id, 1, task.estimated_hours)

        try:
            self.notifications.add({
                "type": NotificationType.TASK_ASSIGNED,
                "priority": task.priority,
                "title": "New task assigned",
                "message": f"You have been assigned the task: {task.title}",
                "user_id": member_id,
                "metadata": {"user_id": member_id, "task_id": task_id},
            })
        except NotificationSuppressedError as e:
            logger.debug(f"Assignment notification for {member.name} suppressed: {e}")

        if assigned_by is not None:
            self.activities.add({
                "type": ActivityType.TASK_ASSIGNED,
                "user_id": assigned_by.id,
                "user_name": assigned_by.name,
                "action": "assigned the task",
                "target_type": ActivityTargetType.TASK,
                "target_id": task_id,
                "target_name": task.title,
                "description": f"Assigned to {member.name}",
            })

        logger.info(f"Task {task_id} assigned to {member.name}")
        return updated

    # ==================== COMMENTS ====================

    def add_comment(self, data: Dict[str, Any]) -> Optional[Comment]:
        """Add a comment, resolving @mentions against the current team."""
        return self.comments.add(data, team_members=self.team.list_all())

    # ==================== CHECKS ====================

    def run_automatic_checks(self, now: Optional[datetime] = None):
        return self.automatic_notifications.run_all(now)

    # ==================== STATE ====================

    def load_state(self) -> AppState:
        return AppState.load_state(self.storage)

    def save_state(self, state: AppState) -> bool:
        return state.save_state(self.storage)

    # ==================== STORAGE ====================

    def export_data(self) -> str:
        return self.storage.export_data()

    def import_data(self, json_data: str) -> bool:
        return self.storage.import_data(json_data)

    def reset_all_data(self) -> bool:
        """Development only; raises DataResetNotAllowedError elsewhere."""
        return self.storage.reset_all_data()

    def get_storage_info(self) -> StorageInfo:
        return self.storage.get_storage_info()

    def validate_data(self) -> ValidationResult:
        return self.storage.validate_data()
