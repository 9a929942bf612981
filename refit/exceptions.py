"""Custom exceptions for storage and domain operations."""

from typing import Dict, Optional


class RefitError(Exception):
    """Base exception for all refit errors."""
    pass


class StorageError(RefitError):
    """Key-value storage access failed."""
    pass


class StorageQuotaExceededError(StorageError):
    """Write would exceed the configured storage quota."""
    pass


class StorageSerializationError(StorageError):
    """Stored value could not be encoded or decoded as JSON."""
    pass


class EntityValidationError(RefitError):
    """Required field missing or malformed; nothing was written."""

    def __init__(self, field_errors: Dict[str, str], message: Optional[str] = None):
        self.field_errors = dict(field_errors)
        if message is None:
            message = "; ".join(f"{field}: {error}" for field, error in self.field_errors.items())
        super().__init__(message)


class DuplicateEntityError(RefitError):
    """An entity with the same unique value already exists."""
    pass


class EntityNotFoundError(RefitError):
    """Requested entity not found."""
    pass


class NotificationSuppressedError(RefitError):
    """Notification blocked by the user's preferences."""
    pass


class DataResetNotAllowedError(RefitError):
    """Data reset requested outside development mode."""
    pass


class MemberOverloadedError(RefitError):
    """Assignment would push the member over the overload threshold."""
    pass


class ImmutableEntityError(RefitError):
    """Entity cannot be changed once written."""
    pass
