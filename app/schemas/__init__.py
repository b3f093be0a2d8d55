"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    RefreshResponse,
    RegisterRequest,
    UserIdentity,
)
from app.schemas.common import ErrorBody, ErrorEnvelope, ErrorMeta
from app.schemas.health import HealthResponse
from app.schemas.users import UsersPage

__all__ = [
    "AuthResponse",
    "ErrorBody",
    "ErrorEnvelope",
    "ErrorMeta",
    "HealthResponse",
    "LoginRequest",
    "LogoutResponse",
    "RefreshResponse",
    "RegisterRequest",
    "UserIdentity",
    "UsersPage",
]
