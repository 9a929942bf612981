"""
Repository classes over the storage adapter.

Each repository handles CRUD and filtered queries for its entity type.
"""

from .base import BaseRepository
from .locations import LocationRepository, get_location_repository
from .projects import ProjectRepository, get_project_repository
from .contractors import ContractorRepository, ContractorReviewRepository, get_contractor_repository
from .quotes import QuoteRepository, get_quote_repository
from .payments import (
    PaymentRepository,
    PaymentTemplateRepository,
    default_payment_templates,
    get_payment_repository,
    get_payment_template_repository,
)
from .tasks import TaskRepository, get_task_repository
from .appointments import AppointmentRepository, get_appointment_repository
from .notifications import NotificationRepository, get_notification_repository
from .comments import CommentRepository, get_comment_repository
from .documents import DocumentRepository, get_document_repository
from .activities import ActivityRepository, get_activity_repository
from .team import TeamRepository, TeamWorkload, get_team_repository

__all__ = [
    "BaseRepository",
    "LocationRepository",
    "get_location_repository",
    "ProjectRepository",
    "get_project_repository",
    "ContractorRepository",
    "ContractorReviewRepository",
    "get_contractor_repository",
    "QuoteRepository",
    "get_quote_repository",
    "PaymentRepository",
    "PaymentTemplateRepository",
    "default_payment_templates",
    "get_payment_repository",
    "get_payment_template_repository",
    "TaskRepository",
    "get_task_repository",
    "AppointmentRepository",
    "get_appointment_repository",
    "NotificationRepository",
    "get_notification_repository",
    "CommentRepository",
    "get_comment_repository",
    "DocumentRepository",
    "get_document_repository",
    "ActivityRepository",
    "get_activity_repository",
    "TeamRepository",
    "TeamWorkload",
    "get_team_repository",
]
