"""
Session lifecycle: register, login, refresh (with rotation) and logout.

Every successful register/login/refresh stores the hash of the refresh token it
just issued, overwriting the previous one. Only the most recently issued
refresh token is therefore usable. Presenting an older one fails closed and is
logged as possible reuse. There is no token-family revocation beyond that.
"""

import logging
from dataclasses import dataclass

from app.core.security import BCRYPT_ROUNDS, hash_password
from app.models.user import User, UserRole
from app.repositories.users import UserRepository
from app.schemas.auth import UserIdentity
from app.services.credentials import CredentialVerifier
from app.services.errors import AuthenticationError, ConflictError
from app.services.refresh_store import RefreshTokenStore
from app.services.tokens import TokenIssuer, TokenPair

logger = logging.getLogger(__name__)

INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass(frozen=True)
class AuthSession:
    """Result of register/login: the identity and its freshly issued tokens."""

    user: UserIdentity
    tokens: TokenPair


class SessionService:
    """Orchestrates the credential verifier, token issuer and refresh store."""

    def __init__(
        self,
        *,
        users: UserRepository,
        verifier: CredentialVerifier,
        issuer: TokenIssuer,
        refresh_store: RefreshTokenStore,
        password_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        self._users = users
        self._verifier = verifier
        self._issuer = issuer
        self._refresh_store = refresh_store
        self._password_rounds = password_rounds

    def register(
        self,
        *,
        email: str,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> AuthSession:
        """Create a CUSTOMER account and open its first session."""
        conflicts = []
        if self._users.get_by_email(email) is not None:
            conflicts.append({"field": "email", "message": "Email is already registered"})
        if self._users.get_by_username(username) is not None:
            conflicts.append({"field": "username", "message": "Username is already taken"})
        if conflicts:
            logger.info(
                "Registration rejected",
                extra={"conflicts": [c["field"] for c in conflicts]},
            )
            raise ConflictError("User already exists", details=conflicts)

        user = self._users.create(
            email=email,
            username=username,
            password_hash=hash_password(password, rounds=self._password_rounds),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.CUSTOMER,
            is_active=True,
        )
        logger.info("User registered", extra={"user_id": user.id})
        return self._start_session(UserIdentity.model_validate(user))

    def login(self, username: str, password: str) -> AuthSession:
        identity = self._verifier.verify(username, password)
        logger.info("Login succeeded", extra={"user_id": identity.id})
        return self._start_session(identity)

    def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a valid refresh token for a new pair and rotate the stored hash.

        Every failure cause is reported as the same "Invalid refresh token".
        """
        try:
            user = self._refresh_owner(refresh_token)
        except AuthenticationError as exc:
            raise AuthenticationError(INVALID_REFRESH_TOKEN) from exc

        tokens = self._issuer.issue_pair(user)
        self._refresh_store.set_hash(user.id, tokens.refresh_token)
        logger.info("Refresh token rotated", extra={"user_id": user.id})
        return tokens

    def logout(self, user_id: str) -> None:
        """Clear the stored refresh hash. Idempotent."""
        self._refresh_store.clear_hash(user_id)
        logger.info("User logged out", extra={"user_id": user_id})

    def _refresh_owner(self, refresh_token: str) -> User:
        claims = self._issuer.verify_refresh(refresh_token)
        user = self._users.get_by_id(claims["sub"])
        if user is None:
            logger.warning("Refresh rejected: subject no longer exists")
            raise AuthenticationError(INVALID_REFRESH_TOKEN)
        if not user.is_active:
            logger.warning("Refresh rejected: account inactive", extra={"user_id": user.id})
            raise AuthenticationError(INVALID_REFRESH_TOKEN)
        if not self._refresh_store.matches(user, refresh_token):
            # Signed and unexpired but not the stored one: rotated away or logged out.
            logger.warning(
                "Refresh rejected: token is not the current one (possible reuse)",
                extra={"user_id": user.id},
            )
            raise AuthenticationError(INVALID_REFRESH_TOKEN)
        return user

    def _start_session(self, identity: UserIdentity) -> AuthSession:
        tokens = self._issuer.issue_pair(identity)
        self._refresh_store.set_hash(identity.id, tokens.refresh_token)
        return AuthSession(user=identity, tokens=tokens)
