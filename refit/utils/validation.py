"""
Form validation utilities.

Validates entity data before it is written so the caller can report
problems next to the offending field. Business-rule problems that must not
block a save (payment terms not adding up, quote items not matching the
total) are reported as warnings only.
"""

import re
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.01

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]
    field_errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, warnings: Optional[List[str]] = None) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failure(
        cls,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        field_errors: Optional[Dict[str, str]] = None,
    ) -> "ValidationResult":
        """Create a failed validation result."""
        return cls(is_valid=False, errors=errors, warnings=warnings or [], field_errors=field_errors or {})


class _Collector:
    """Accumulates field errors and warnings for one form."""

    def __init__(self):
        self.field_errors: Dict[str, str] = {}
        self.warnings: List[str] = []

    def error(self, field_name: str, message: str) -> None:
        # First error per field wins; that is the one shown inline
        self.field_errors.setdefault(field_name, message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def require(self, data: Mapping[str, Any], field_name: str, label: str) -> None:
        value = data.get(field_name)
        if value is None or (isinstance(value, str) and not value.strip()):
            self.error(field_name, f"{label} is required")

    def result(self) -> ValidationResult:
        if self.field_errors:
            return ValidationResult.failure(
                errors=list(self.field_errors.values()),
                warnings=self.warnings,
                field_errors=self.field_errors,
            )
        return ValidationResult.success(self.warnings)


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    # Basic email regex - not exhaustive but catches most issues
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_time(value: str) -> bool:
    """True for a 24h HH:MM clock time."""
    return bool(value) and bool(TIME_PATTERN.match(value))


def validate_priority(priority: str) -> bool:
    valid_priorities = {"low", "medium", "high", "urgent"}
    return priority.lower() in valid_priorities if priority else False


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_location_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a location form."""
    check = _Collector()
    check.require(data, "name", "Name")
    check.require(data, "code", "Code")

    address = data.get("address") or {}
    if not (_get(address, "city") or "").strip():
        check.error("address.city", "City is required")

    surface = _number(data.get("surface"))
    if data.get("surface") is not None and (surface is None or surface < 0):
        check.error("surface", "Surface must be a non-negative number")

    email = _get(data.get("contacts") or {}, "email")
    if email and not validate_email(email):
        check.warn(f"Email '{email}' may not be valid")

    return check.result()


def validate_project_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a project form."""
    check = _Collector()
    check.require(data, "name", "Project name")
    check.require(data, "location_id", "Location")

    dates = data.get("dates") or {}
    start = _get(dates, "start_planned")
    end = _get(dates, "end_planned")
    if start and end and str(end) < str(start):
        check.error("end_planned", "Planned end must not be before planned start")

    budget = data.get("budget") or {}
    for key in ("planned", "approved", "spent"):
        amount = _number(_get(budget, key, 0))
        if amount is None or amount < 0:
            check.error(f"budget.{key}", "Budget amounts must be non-negative numbers")

    approved = _number(_get(budget, "approved", 0)) or 0.0
    spent = _number(_get(budget, "spent", 0)) or 0.0
    if approved and spent > approved:
        check.warn("Spent amount exceeds the approved budget")

    return check.result()


def validate_contractor_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a contractor form."""
    check = _Collector()
    check.require(data, "company_name", "Company name")

    contacts = data.get("contacts") or {}
    contact_email = (_get(contacts, "email") or "").strip()
    if not contact_email:
        check.error("contacts.email", "Contact email is required")
    elif not validate_email(contact_email):
        check.error("contacts.email", "Contact email is not valid")

    if not data.get("vat_number"):
        check.warn("No VAT number provided")

    return check.result()


def validate_payment_terms(terms: Iterable[Any], total_amount: float) -> ValidationResult:
    """
    Check a quote's payment terms.

    A term needs exactly one of percentage / fixed amount. Terms that do
    not add up to 100% or to the quote total only produce a warning; the
    save goes ahead either way.
    """
    check = _Collector()
    total_percentage = 0.0
    total_fixed = 0.0

    for index, term in enumerate(terms):
        percentage = _get(term, "percentage")
        fixed_amount = _get(term, "fixed_amount")
        if not _get(term, "is_active", True):
            continue

        if percentage is None and fixed_amount is None:
            check.error(f"payment_terms.{index}", "Set a percentage or a fixed amount")
        elif percentage is not None and fixed_amount is not None:
            check.error(f"payment_terms.{index}", "Use either a percentage or a fixed amount, not both")

        if percentage is not None:
            if percentage <= 0 or percentage > 100:
                check.error(f"payment_terms.{index}.percentage", "Percentage must be between 0 and 100")
            total_percentage += percentage
        if fixed_amount is not None:
            if fixed_amount < 0:
                check.error(f"payment_terms.{index}.fixed_amount", "Amount must not be negative")
            total_fixed += fixed_amount

        trigger = _get(term, "trigger_event")
        if getattr(trigger, "value", trigger) == "custom_date" and not _get(term, "custom_due_date"):
            check.warn(f"Term {index + 1} uses a custom date but no date is set")

    percentage_ok = abs(total_percentage - 100) < AMOUNT_TOLERANCE
    fixed_ok = abs(total_fixed - total_amount) < AMOUNT_TOLERANCE
    if not percentage_ok and not fixed_ok:
        check.warn(
            f"Payment terms add up to {total_percentage:g}% and {total_fixed:.2f} in fixed amounts, "
            f"which matches neither 100% nor the quote total of {total_amount:.2f}"
        )

    return check.result()


def validate_quote_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a quote form."""
    check = _Collector()
    check.require(data, "project_id", "Project")
    check.require(data, "contractor_id", "Contractor")
    check.require(data, "quote_number", "Quote number")

    total = _number(data.get("total_amount", 0))
    if total is None or total < 0:
        check.error("total_amount", "Total amount must be a non-negative number")
        total = 0.0

    items = data.get("items") or []
    if items:
        items_total = sum(_number(_get(item, "total_price")) or 0.0 for item in items)
        if abs(items_total - total) >= AMOUNT_TOLERANCE:
            check.warn(f"Quote total {total:.2f} differs from the sum of its items {items_total:.2f}")

    return check.result()


def validate_task_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a task form."""
    check = _Collector()
    check.require(data, "title", "Task title")

    title = data.get("title") or ""
    if len(title) > 500:
        check.error("title", "Task title exceeds 500 characters")

    hours = _number(data.get("estimated_hours", 0))
    if hours is None or hours < 0:
        check.error("estimated_hours", "Estimated hours must be a non-negative number")

    priority = data.get("priority")
    if priority and not validate_priority(str(getattr(priority, "value", priority))):
        check.error("priority", f"Invalid priority '{priority}'. Valid: low, medium, high, urgent")

    if not data.get("project_id"):
        check.warn("Task is not linked to a project")

    return check.result()


def validate_appointment_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate an appointment form."""
    check = _Collector()
    check.require(data, "title", "Title")
    check.require(data, "scheduled_date", "Date")

    start = data.get("start_time") or ""
    end = data.get("end_time") or ""
    if not validate_time(start):
        check.error("start_time", "Start time must be HH:MM")
    if not validate_time(end):
        check.error("end_time", "End time must be HH:MM")
    if validate_time(start) and validate_time(end) and end <= start:
        check.error("end_time", "End time must be after start time")

    return check.result()


def validate_team_member_data(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a team member form."""
    check = _Collector()
    check.require(data, "name", "Member name")
    check.require(data, "email", "Member email")

    email = data.get("email")
    if email and email.strip() and not validate_email(email.strip()):
        check.error("email", "Member email is not valid")

    return check.result()


def _get(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict or a model."""
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    value = getattr(obj, name, default)
    return getattr(value, "value", value)
