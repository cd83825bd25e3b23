"""Application error taxonomy.

Every failure a client can cause is raised as an ``AppError`` subclass
carrying its HTTP status.  Handlers never format error responses
themselves; ``saintshub_api.api.errors`` turns these into the uniform
``{status, message, errors?}`` envelope.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Violation:
    """A single validation failure.

    Attributes:
        path: Dotted path of the offending field (``securities.deacons.0.names``).
        message: Human-readable reason.
    """

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class AppError(Exception):
    """Base class for operational (client-caused or expected) errors."""

    status_code: int = 500
    code: str = "APP_ERROR"
    default_message: str = "An unexpected error occurred."
    is_operational: bool = True

    def __init__(self, message: str | None = None, *, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    @property
    def status(self) -> str:
        """``fail`` for 4xx, ``error`` for 5xx."""
        return "fail" if 400 <= self.status_code < 500 else "error"


class BadRequest(AppError):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad request."


class ValidationFailed(AppError):
    """Payload did not satisfy its contract; carries every violation found."""

    status_code = 400
    code = "VALIDATION_FAILED"
    default_message = "Invalid input data"

    def __init__(self, violations: list[Violation], message: str | None = None) -> None:
        self.violations = list(violations)
        if message is None:
            details = "; ".join(f"{v.path} - {v.message}" if v.path else v.message for v in self.violations)
            message = f"{self.default_message}: {details}" if details else self.default_message
        super().__init__(message, errors=[v.to_dict() for v in self.violations])


class Unauthenticated(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "You are not logged in. Please log in to get access."


class InvalidCredential(AppError):
    status_code = 401
    code = "INVALID_CREDENTIAL"
    default_message = "Invalid token. Please log in again."


class ExpiredCredential(AppError):
    status_code = 401
    code = "EXPIRED_CREDENTIAL"
    default_message = "Your token has expired. Please log in again."


class UnknownSubject(AppError):
    status_code = 401
    code = "UNKNOWN_SUBJECT"
    default_message = "The user belonging to this token no longer exists."


class SubjectNotFound(AppError):
    status_code = 401
    code = "SUBJECT_NOT_FOUND"
    default_message = "User not found."


class AuthenticationFailed(AppError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"
    default_message = "Incorrect email or password"


class InsufficientPrivilege(AppError):
    status_code = 403
    code = "INSUFFICIENT_PRIVILEGE"
    default_message = "You do not have permission to perform this action."


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found."


class Conflict(AppError):
    status_code = 400
    code = "CONFLICT"
    default_message = "Duplicate field value. Please use another value!"


class InvalidIndex(AppError):
    status_code = 400
    code = "INVALID_INDEX"
    default_message = "Invalid index."


class InvalidFieldType(AppError):
    """A nested collection is missing or not a list on the stored record."""

    status_code = 400
    code = "INVALID_FIELD_TYPE"
    default_message = "Data not found or invalid."


class UploadFailed(AppError):
    status_code = 500
    code = "UPLOAD_FAILED"
    default_message = "Image upload failed."
