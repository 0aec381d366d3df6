"""Domain errors raised by the service layer.

Every error carries an ``ErrorKind``; the HTTP layer maps kinds to status
codes in one place (``core.error_handlers``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INTERNAL = "INTERNAL_ERROR"


@dataclass
class FieldError:
    """A single per-field validation message."""

    field: str
    message: str
    value: Any = None


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with a kind and a user-safe message."""

    message: str
    kind: ErrorKind = ErrorKind.INTERNAL
    errors: list[FieldError] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ValidationError(DomainError):
    def __init__(self, message: str = "Validation failed", errors: list[FieldError] | None = None) -> None:
        super().__init__(message=message, kind=ErrorKind.VALIDATION, errors=errors or [])

    @classmethod
    def for_field(cls, field_name: str, message: str, value: Any = None) -> "ValidationError":
        return cls(errors=[FieldError(field_name, message, value)])


class NotFoundError(DomainError):
    """Raised when a referenced resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", kind=ErrorKind.NOT_FOUND)
        self.resource = resource


class ConflictError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message=message, kind=ErrorKind.CONFLICT)


class DuplicateRegistrationError(ConflictError):
    def __init__(self) -> None:
        super().__init__("Participant already registered for this event")


class CapacityExceededError(DomainError):
    def __init__(self) -> None:
        super().__init__(message="Event has reached maximum capacity", kind=ErrorKind.CAPACITY_EXCEEDED)


class InternalError(DomainError):
    def __init__(self, message: str = "Internal Server Error") -> None:
        super().__init__(message=message, kind=ErrorKind.INTERNAL)
