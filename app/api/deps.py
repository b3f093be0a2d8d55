"""
FastAPI dependencies: service construction and the auth gate.

Services are built per request from their collaborators; nothing here holds
state across requests. enforce_route_access is mounted on the whole v1 router,
so every v1 route passes the gate before its handler runs.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.api.access import access_for_route
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.repositories.users import UserRepository
from app.schemas.auth import UserIdentity
from app.services.auth_gate import AuthGate
from app.services.credentials import CredentialVerifier
from app.services.errors import AuthenticationError
from app.services.refresh_store import RefreshTokenStore
from app.services.session import SessionService
from app.services.tokens import TokenIssuer

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_repository(db: Annotated[Session, Depends(get_db)]) -> UserRepository:
    return UserRepository(db)


def get_token_issuer(settings: Annotated[Settings, Depends(get_settings)]) -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


def get_auth_gate(
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> AuthGate:
    return AuthGate(issuer=issuer, users=users)


def get_session_service(
    settings: Annotated[Settings, Depends(get_settings)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> SessionService:
    return SessionService(
        users=users,
        verifier=CredentialVerifier(users),
        issuer=issuer,
        refresh_store=RefreshTokenStore(users, rounds=settings.REFRESH_TOKEN_BCRYPT_ROUNDS),
        password_rounds=settings.PASSWORD_BCRYPT_ROUNDS,
    )


def enforce_route_access(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    gate: Annotated[AuthGate, Depends(get_auth_gate)],
) -> None:
    """Run the gate for the matched route and attach the identity to request.state."""
    route = request.scope.get("route")
    access = access_for_route(getattr(route, "name", None))
    token = credentials.credentials if credentials is not None else None
    request.state.user = gate.admit(access, token)


def get_current_user(request: Request) -> UserIdentity:
    """Identity attached by the gate; raises 401 if the route was not gated."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise AuthenticationError("Authentication required")
    return user


CurrentUser = Annotated[UserIdentity, Depends(get_current_user)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
