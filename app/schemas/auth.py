"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import Field

from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.models.user import UserRole
from app.schemas.common import CamelModel

# Deliberately loose: one "@", a dotted domain, no whitespace.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class LoginRequest(CamelModel):
    """Credentials for login."""

    username: str = Field(
        ..., min_length=1, max_length=USERNAME_MAX_LEN, description="Username", examples=["johndoe"]
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RegisterRequest(CamelModel):
    """New account details. Self-registered accounts always get the CUSTOMER role."""

    email: str = Field(
        ...,
        max_length=EMAIL_MAX_LEN,
        pattern=EMAIL_PATTERN,
        description="Email address",
        examples=["john.doe@example.com"],
    )
    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=r"^\S+$",
        description="Username",
        examples=["johndoe"],
    )
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    first_name: str = Field(
        ..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN, examples=["John"]
    )
    last_name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN, examples=["Doe"])


class UserIdentity(CamelModel):
    """Authenticated user as exposed to handlers and clients (never any hashes)."""

    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthResponse(CamelModel):
    """Returned by register and login; the refresh token travels in a cookie."""

    access_token: str = Field(..., description="JWT access token")
    user: UserIdentity


class RefreshResponse(CamelModel):
    access_token: str = Field(..., description="New JWT access token")


class LogoutResponse(CamelModel):
    success: bool = True
