"""Server-side record of the one valid refresh token per user (hash only)."""

import hashlib
import logging

import bcrypt

from app.core.security import BCRYPT_ROUNDS
from app.models.user import User
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)


def _digest(refresh_token: str) -> bytes:
    # JWTs exceed bcrypt's 72-byte input limit and share long prefixes per user,
    # so bcrypt is applied to a fixed-length digest of the whole token.
    return hashlib.sha256(refresh_token.encode("utf-8")).hexdigest().encode("ascii")


def hash_refresh_token(refresh_token: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_digest(refresh_token), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class RefreshTokenStore:
    """Persist, compare and clear refresh-token hashes through the user repository."""

    def __init__(self, users: UserRepository, rounds: int = BCRYPT_ROUNDS) -> None:
        self._users = users
        self._rounds = rounds

    def set_hash(self, user_id: str, refresh_token: str) -> None:
        """Store the hash of refresh_token, invalidating whatever was stored before."""
        self._users.set_refresh_token_hash(user_id, hash_refresh_token(refresh_token, self._rounds))

    def clear_hash(self, user_id: str) -> None:
        self._users.set_refresh_token_hash(user_id, None)

    def matches(self, user: User, presented_token: str) -> bool:
        """True only if a hash is stored and it was made from presented_token."""
        stored = user.refresh_token_hash
        if not stored:
            return False
        try:
            return bcrypt.checkpw(_digest(presented_token), stored.encode("utf-8"))
        except (ValueError, TypeError):
            logger.warning("Stored refresh token hash is malformed", extra={"user_id": user.id})
            return False
