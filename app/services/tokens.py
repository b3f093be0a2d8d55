"""
Access/refresh JWT issuance and verification.

Both tokens carry the same identity claims but are signed with different
secrets and carry a "typ" claim, so neither verifies as the other. Expiry is
checked against an injectable clock rather than PyJWT's wall-clock check so
that the expiry boundary is deterministic: a token is expired once now >= exp.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

import jwt

from app.models.user import UserRole
from app.services.errors import InvalidTokenError

if TYPE_CHECKING:
    from app.core.config import Settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_REQUIRED_CLAIMS = ["sub", "username", "email", "role", "iat", "exp", "typ", "jti"]

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class TokenSubject(Protocol):
    """Anything with the identity fields embedded in a token."""

    id: str
    username: str
    email: str
    role: UserRole | str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """Mint and verify signed access/refresh tokens. Pure: no I/O."""

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Access and refresh token secrets must be non-empty")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh token secrets must differ")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings", clock: Clock = utc_now) -> "TokenIssuer":
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET.get_secret_value(),
            refresh_secret=settings.JWT_REFRESH_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
            clock=clock,
        )

    def issue_pair(self, subject: TokenSubject) -> TokenPair:
        """Sign a fresh access token and a fresh refresh token for the same identity."""
        claims = {
            "sub": str(subject.id),
            "username": subject.username,
            "email": subject.email,
            "role": UserRole(subject.role).value,
        }
        return TokenPair(
            access_token=self._sign(claims, self._access_secret, self.access_ttl, ACCESS_TOKEN_TYPE),
            refresh_token=self._sign(
                claims, self._refresh_secret, self.refresh_ttl, REFRESH_TOKEN_TYPE
            ),
        )

    def verify_access(self, token: str) -> dict[str, Any]:
        """Return access-token claims. Raises InvalidTokenError on any failure."""
        return self._verify(token, self._access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> dict[str, Any]:
        """Return refresh-token claims. Raises InvalidTokenError on any failure."""
        return self._verify(token, self._refresh_secret, REFRESH_TOKEN_TYPE)

    def _sign(self, claims: dict[str, Any], secret: str, ttl: timedelta, token_type: str) -> str:
        issued_at = int(self._clock().timestamp())
        payload = {
            **claims,
            "typ": token_type,
            "jti": uuid.uuid4().hex,
            "iat": issued_at,
            "exp": issued_at + int(ttl.total_seconds()),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(self, token: str, secret: str, token_type: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("Invalid or expired token") from exc
        if claims.get("typ") != token_type:
            raise InvalidTokenError("Invalid or expired token")
        try:
            expires_at = int(claims["exp"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("Invalid or expired token") from exc
        if self._clock().timestamp() >= expires_at:
            raise InvalidTokenError("Invalid or expired token")
        return claims
