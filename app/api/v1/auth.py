"""Auth endpoints: register, login, refresh, logout and current user."""

from fastapi import APIRouter, Request, Response, status

from app.api.deps import CurrentUser, SessionServiceDep, SettingsDep
from app.core.config import Settings
from app.core.limiter import rate_limited
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    RefreshResponse,
    RegisterRequest,
    UserIdentity,
)
from app.schemas.common import ErrorEnvelope
from app.services.errors import AuthenticationError

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorEnvelope, "description": "Invalid input data"},
    401: {"model": ErrorEnvelope, "description": "Not authenticated"},
}


def set_refresh_cookie(response: Response, refresh_token: str, settings: Settings) -> None:
    """
    Write the refresh token as an httpOnly cookie scoped to the refresh endpoint.

    max_age matches the refresh token lifetime so both expire together.
    """
    response.set_cookie(
        settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.JWT_REFRESH_EXPIRE_DAYS * 24 * 60 * 60,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.cookies_secure,
        samesite=settings.REFRESH_COOKIE_SAMESITE,
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        settings.REFRESH_COOKIE_NAME,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.cookies_secure,
        samesite=settings.REFRESH_COOKIE_SAMESITE,
    )


@router.post(
    "/register",
    name="auth.register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERRORS, 409: {"model": ErrorEnvelope, "description": "Email or username taken"}},
)
@rate_limited
def register(
    request: Request,
    body: RegisterRequest,
    response: Response,
    sessions: SessionServiceDep,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Create a CUSTOMER account and log it in.

    Returns the access token and user; the refresh token is set as an httpOnly cookie.
    """
    session = sessions.register(
        email=body.email,
        username=body.username,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    set_refresh_cookie(response, session.tokens.refresh_token, settings)
    return AuthResponse(access_token=session.tokens.access_token, user=session.user)


@router.post("/login", name="auth.login", response_model=AuthResponse, responses=_ERRORS)
@rate_limited
def login(
    request: Request,
    body: LoginRequest,
    response: Response,
    sessions: SessionServiceDep,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Authenticate with username and password.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    session = sessions.login(body.username, body.password)
    set_refresh_cookie(response, session.tokens.refresh_token, settings)
    return AuthResponse(access_token=session.tokens.access_token, user=session.user)


@router.post("/refresh", name="auth.refresh", response_model=RefreshResponse, responses=_ERRORS)
@rate_limited
def refresh(
    request: Request,
    response: Response,
    sessions: SessionServiceDep,
    settings: SettingsDep,
) -> RefreshResponse:
    """Exchange the refresh cookie for a new access token; the cookie is rotated."""
    presented = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not presented:
        raise AuthenticationError("Refresh token missing")
    tokens = sessions.refresh(presented)
    set_refresh_cookie(response, tokens.refresh_token, settings)
    return RefreshResponse(access_token=tokens.access_token)


@router.post("/logout", name="auth.logout", response_model=LogoutResponse, responses=_ERRORS)
@rate_limited
def logout(
    request: Request,
    current_user: CurrentUser,
    response: Response,
    sessions: SessionServiceDep,
    settings: SettingsDep,
) -> LogoutResponse:
    """End the session: the stored refresh hash is cleared and the cookie removed."""
    sessions.logout(current_user.id)
    clear_refresh_cookie(response, settings)
    return LogoutResponse(success=True)


@router.get("/me", name="auth.me", response_model=UserIdentity, responses=_ERRORS)
@rate_limited
def me(request: Request, current_user: CurrentUser) -> UserIdentity:
    """Return the authenticated user (no password or token hashes)."""
    return current_user
