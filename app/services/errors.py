"""
Service-layer exceptions.

These do not depend on FastAPI; app.api.error_handling maps each one to its
status_code and error_code inside the uniform error envelope.
"""

from typing import Any


class ServiceError(Exception):
    """Base class for service errors that carry an HTTP status and stable code."""

    status_code: int = 400
    error_code: str = "BAD_REQUEST"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ServiceError):
    """Malformed input that passed schema validation but not a business rule (400)."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class AuthenticationError(ServiceError):
    """Bad credentials, inactive account or missing identity (401)."""

    status_code = 401
    error_code = "UNAUTHORIZED"


class InvalidTokenError(AuthenticationError):
    """Token signature, type, claims or expiry check failed (401)."""


class AuthorizationError(ServiceError):
    """Authenticated, but the role is not allowed on this route (403)."""

    status_code = 403
    error_code = "FORBIDDEN"


class NotFoundError(ServiceError):
    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Unique field already in use, e.g. duplicate email or username (409)."""

    status_code = 409
    error_code = "CONFLICT"
