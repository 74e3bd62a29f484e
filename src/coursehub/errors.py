"""Domain errors shared by every service.

Services raise these; API routes translate them to HTTP responses with
to_http_exception(). Each class carries a stable machine-readable code
so clients can tell e.g. "already enrolled" from "email taken" even
though both are 409s.
"""

from fastapi import HTTPException


class CoursehubError(Exception):
    """Base class for all expected, caller-visible failures."""

    code = "error"
    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInput(CoursehubError):
    code = "invalid_input"
    status_code = 422
    default_message = "Invalid input"


class Unauthorized(CoursehubError):
    code = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class InvalidToken(Unauthorized):
    code = "invalid_token"
    default_message = "Invalid session token"


class ExpiredToken(Unauthorized):
    code = "expired_token"
    default_message = "Session token has expired"


class InvalidCredentials(Unauthorized):
    """Login failure. Same message for unknown email and wrong password."""

    code = "invalid_credentials"
    default_message = "Invalid email or password"


class Forbidden(CoursehubError):
    code = "forbidden"
    status_code = 403
    default_message = "Not allowed"


class NotFound(CoursehubError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class AlreadyEnrolled(CoursehubError):
    code = "already_enrolled"
    status_code = 409
    default_message = "Already enrolled in this course"


class EmailTaken(CoursehubError):
    code = "email_taken"
    status_code = 409
    default_message = "Email already registered"


class StorageUnavailable(CoursehubError):
    code = "storage_unavailable"
    status_code = 503
    default_message = "Storage unavailable"


def to_http_exception(exc: CoursehubError) -> HTTPException:
    """Map a domain error onto an HTTPException with a typed detail body."""
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(
        status_code=exc.status_code,
        detail={"code": exc.code, "message": exc.message},
        headers=headers,
    )
