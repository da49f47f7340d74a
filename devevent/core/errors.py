"""
Domain errors raised by the write path.

Every error carries a stable code and a message that is safe to show to a
caller as-is. Route layers map codes to status codes; nothing here knows HTTP.
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_DATE = "INVALID_DATE"
    INVALID_TIME = "INVALID_TIME"
    INVALID_EMAIL = "INVALID_EMAIL"
    DUPLICATE_SLUG = "DUPLICATE_SLUG"
    DUPLICATE_BOOKING = "DUPLICATE_BOOKING"
    REFERENCED_EVENT_NOT_FOUND = "REFERENCED_EVENT_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    CONNECTION_UNAVAILABLE = "CONNECTION_UNAVAILABLE"
    IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class MissingField(DomainError):
    """A required field is absent or blank after trimming."""

    code = ErrorCode.MISSING_FIELD

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required")
        self.field = field


class InvalidDate(DomainError):
    code = ErrorCode.INVALID_DATE

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid date format: {value!r}")
        self.value = value


class InvalidTime(DomainError):
    code = ErrorCode.INVALID_TIME

    def __init__(self, value: Any, reason: str = "expected HH:mm or h:mm am/pm") -> None:
        super().__init__(f"Invalid time {value!r} ({reason})")
        self.value = value


class InvalidEmail(DomainError):
    code = ErrorCode.INVALID_EMAIL

    def __init__(self, email: str) -> None:
        super().__init__("Please provide a valid email address")
        self.email = email


class DuplicateSlug(DomainError):
    """Another event already holds this slug."""

    code = ErrorCode.DUPLICATE_SLUG

    def __init__(self, slug: str) -> None:
        super().__init__(f"An event with slug '{slug}' already exists")
        self.slug = slug


class DuplicateBooking(DomainError):
    """This email already booked this event."""

    code = ErrorCode.DUPLICATE_BOOKING

    def __init__(self, event_id: int, email: str) -> None:
        super().__init__(f"{email} already has a booking for event {event_id}")
        self.event_id = event_id
        self.email = email


class ReferencedEventNotFound(DomainError):
    """A booking points at an event that does not exist or is not a valid id."""

    code = ErrorCode.REFERENCED_EVENT_NOT_FOUND

    def __init__(self, event_id: Any) -> None:
        super().__init__(f"Event with ID {event_id} does not exist")
        self.event_id = event_id


class EventNotFound(DomainError):
    code = ErrorCode.EVENT_NOT_FOUND

    def __init__(self, key: Any) -> None:
        super().__init__(f"Event {key} not found")
        self.key = key


class ConnectionUnavailable(DomainError):
    """The shared database handle could not be established. Retryable."""

    code = ErrorCode.CONNECTION_UNAVAILABLE

    def __init__(self, reason: str) -> None:
        super().__init__(f"Database unavailable: {reason}")
        self.reason = reason


class ImageUploadFailed(DomainError):
    code = ErrorCode.IMAGE_UPLOAD_FAILED

    def __init__(self, reason: str) -> None:
        super().__init__(f"Image upload failed: {reason}")
        self.reason = reason
