"""Utility modules for the refit project manager."""

from .datetime_utils import (
    get_local_tz,
    get_local_now,
    utc_now,
    ensure_utc,
    parse_iso,
    to_iso,
    utc_today,
    local_today,
    days_between,
    is_overdue,
)

from .validation import (
    ValidationResult,
    validate_email,
    validate_time,
    validate_priority,
    validate_location_data,
    validate_project_data,
    validate_contractor_data,
    validate_quote_data,
    validate_payment_terms,
    validate_task_data,
    validate_appointment_data,
    validate_team_member_data,
)

__all__ = [
    "get_local_tz",
    "get_local_now",
    "utc_now",
    "ensure_utc",
    "parse_iso",
    "to_iso",
    "utc_today",
    "local_today",
    "days_between",
    "is_overdue",
    "ValidationResult",
    "validate_email",
    "validate_time",
    "validate_priority",
    "validate_location_data",
    "validate_project_data",
    "validate_contractor_data",
    "validate_quote_data",
    "validate_payment_terms",
    "validate_task_data",
    "validate_appointment_data",
    "validate_team_member_data",
]
