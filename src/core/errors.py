"""Typed failures raised by the access-control and review layers.

Each error carries the HTTP status it maps to; the API layer turns them into
responses in one place (see ``src.api.errors``).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class ServiceError(Exception):
    """Base class for failures that carry their own response status."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    """Raised with every violated field, never only the first one."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors)

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]


class AuthenticationRequired(ServiceError):
    status_code = 401
    default_message = "Please log in to access this resource"


class AuthenticationFailed(ServiceError):
    status_code = 401
    default_message = "Authentication failed"


class ExpiredCredential(ServiceError):
    """Kept apart from other auth failures so clients can prompt a fresh login."""

    status_code = 406
    default_message = "Your token has expired. Please log in again"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Resource not found"


class DependencyFailure(ServiceError):
    """Storage or verifier failure that is not otherwise classified."""

    status_code = 503
    default_message = "Database query failed"
