"""
Domain-specific exception hierarchy for the availability engine.
"""

from dataclasses import dataclass
from typing import List, Sequence


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeFormat(AvailabilityError):
    """Raised when a wall-clock value cannot be parsed."""

    def __init__(self, value: str):
        super().__init__(f"Invalid time value: {value!r}")
        self.value = value


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation message."""
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(AvailabilityError):
    """Raised at the repository boundary when a schedule fails save-time checks."""

    def __init__(self, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        message = "; ".join(error.message for error in self.errors) or "Invalid schedule"
        super().__init__(message)


class DuplicateDateError(AvailabilityError):
    """Raised when an override targets a date already owned by another override."""

    def __init__(self, date: str):
        super().__init__("An override for this date already exists")
        self.date = date


class ConflictError(AvailabilityError):
    """Raised when a schedule cannot be deleted."""

    DEFAULT = "default"
    IN_USE = "in_use"

    MESSAGES = {
        DEFAULT: "Cannot delete the default schedule",
        IN_USE: "Cannot delete schedule that is in use by event types",
    }

    def __init__(self, reason: str, message: str | None = None):
        super().__init__(message or self.MESSAGES.get(reason, "Failed to delete schedule"))
        self.reason = reason


class NotFoundError(AvailabilityError):
    """Raised when a schedule id does not exist."""

    def __init__(self, schedule_id: str):
        super().__init__(f"Schedule not found: {schedule_id}")
        self.schedule_id = schedule_id


class RepositoryError(AvailabilityError):
    """Raised when the schedule store cannot be reached or answers unexpectedly."""
