from .base import RefitModel, Priority, UtcDatetime, DateOnly
from .location import Location, LocationType, LocationStatus, Address, Coordinates, LocationContacts, OpeningHours
from .project import ACTIVE_PROJECT_STATUSES, Project, ProjectPhase, ProjectType, ProjectStatus, PhaseStatus, Budget, ProjectDates
from .contractor import (
    Contractor,
    ContractorStatus,
    ContractorContacts,
    ContractorRating,
    ContractorProjects,
    ContractorReview,
    Certification,
)
from .quote import (
    PENDING_QUOTE_STATUSES,
    Quote,
    QuoteStatus,
    QuoteItem,
    QuoteApproval,
    PaymentConfig,
    PaymentTerm,
    PaymentTermType,
    Payment,
    PaymentStatus,
    PaymentMethod,
    PaymentTemplate,
    TemplateCategory,
    TriggerEvent,
)
from .task import TaskEnhanced, TaskStatus, TaskType, ChecklistItem, TaskReminder
from .appointment import (
    CLOSED_APPOINTMENT_STATUSES,
    Appointment,
    AppointmentType,
    AppointmentStatus,
    AppointmentLocation,
    AppointmentReminder,
    Participant,
)
from .notification import Notification, NotificationType, NotificationMetadata, NotificationPreferences, QuietHours
from .comment import DELETED_COMMENT_TEXT, Comment, CommentEntityType, CommentFilters, CommentAttachment, Reaction
from .document import (
    PROJECT_DOCUMENT_CATEGORIES,
    Document,
    DocumentType,
    DocumentRelatedType,
    DocumentCategoryInfo,
    ProjectDocumentCategory,
    RelatedEntity,
    categories_by_group,
    get_category_info,
    get_category_label,
)
from .activity import TeamActivity, ActivityType, ActivityTargetType, ActivityVisibility, ActivityFeedFilters
from .team import VacationPeriod, TeamMember, TeamMemberRole, TeamMemberStatus, Availability, Workload, Performance, MemberContacts
from .user import User, UserRole, Permission

__all__ = [
    "RefitModel",
    "Priority",
    "UtcDatetime",
    "DateOnly",
    "Location",
    "LocationType",
    "LocationStatus",
    "Address",
    "Coordinates",
    "LocationContacts",
    "OpeningHours",
    "ACTIVE_PROJECT_STATUSES",
    "Project",
    "ProjectPhase",
    "ProjectType",
    "ProjectStatus",
    "PhaseStatus",
    "Budget",
    "ProjectDates",
    "Contractor",
    "ContractorStatus",
    "ContractorContacts",
    "ContractorRating",
    "ContractorProjects",
    "ContractorReview",
    "Certification",
    "PENDING_QUOTE_STATUSES",
    "Quote",
    "QuoteStatus",
    "QuoteItem",
    "QuoteApproval",
    "PaymentConfig",
    "PaymentTerm",
    "PaymentTermType",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "PaymentTemplate",
    "TemplateCategory",
    "TriggerEvent",
    "TaskEnhanced",
    "TaskStatus",
    "TaskType",
    "ChecklistItem",
    "TaskReminder",
    "CLOSED_APPOINTMENT_STATUSES",
    "Appointment",
    "AppointmentType",
    "AppointmentStatus",
    "AppointmentLocation",
    "AppointmentReminder",
    "Participant",
    "Notification",
    "NotificationType",
    "NotificationMetadata",
    "NotificationPreferences",
    "QuietHours",
    "DELETED_COMMENT_TEXT",
    "Comment",
    "CommentEntityType",
    "CommentFilters",
    "CommentAttachment",
    "Reaction",
    "PROJECT_DOCUMENT_CATEGORIES",
    "Document",
    "DocumentType",
    "DocumentRelatedType",
    "DocumentCategoryInfo",
    "ProjectDocumentCategory",
    "RelatedEntity",
    "categories_by_group",
    "get_category_info",
    "get_category_label",
    "TeamActivity",
    "ActivityType",
    "ActivityTargetType",
    "ActivityVisibility",
    "ActivityFeedFilters",
    "VacationPeriod",
    "TeamMember",
    "TeamMemberRole",
    "TeamMemberStatus",
    "Availability",
    "Workload",
    "Performance",
    "MemberContacts",
    "User",
    "UserRole",
    "Permission",
]
