"""
Storage key names.

Every key is stored with the configured prefix (``refit_`` by default), so
``projects`` lives under ``refit_projects``. Array keys hold a JSON array
of flat entity objects; value keys hold a single JSON object.
"""


class StorageKeys:
    LOCATIONS = "locations"
    PROJECTS = "projects"
    CONTRACTORS = "contractors"
    CONTRACTOR_REVIEWS = "contractor_reviews"
    QUOTES = "quotes"
    DOCUMENTS = "documents"
    PHOTOS = "photos"
    USERS = "users"
    CURRENT_USER = "current_user"
    PAYMENTS = "payments"
    PAYMENT_TEMPLATES = "payment_templates"
    APPOINTMENTS = "appointments"
    TASKS = "tasks_enhanced"
    ACTIVITIES = "activity_log"
    NOTIFICATIONS = "notifications"
    NOTIFICATION_PREFERENCES = "notification_preferences"
    NOTIFICATION_CHECKS = "notification_checks"
    COMMENTS = "comments"
    TEAM_MEMBERS = "team_members"
    APP_STORE = "app_store"


ARRAY_KEYS = (
    StorageKeys.LOCATIONS,
    StorageKeys.PROJECTS,
    StorageKeys.CONTRACTORS,
    StorageKeys.CONTRACTOR_REVIEWS,
    StorageKeys.QUOTES,
    StorageKeys.DOCUMENTS,
    StorageKeys.PHOTOS,
    StorageKeys.USERS,
    StorageKeys.CURRENT_USER,
    StorageKeys.PAYMENTS,
    StorageKeys.PAYMENT_TEMPLATES,
    StorageKeys.APPOINTMENTS,
    StorageKeys.TASKS,
    StorageKeys.ACTIVITIES,
    StorageKeys.NOTIFICATIONS,
    StorageKeys.COMMENTS,
    StorageKeys.TEAM_MEMBERS,
)

VALUE_KEYS = (
    StorageKeys.NOTIFICATION_PREFERENCES,
    StorageKeys.NOTIFICATION_CHECKS,
    StorageKeys.APP_STORE,
)

ALL_KEYS = ARRAY_KEYS + VALUE_KEYS
