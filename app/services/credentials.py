"""Username/password verification."""

import logging

from app.core.security import dummy_password_hash, verify_password
from app.repositories.users import UserRepository
from app.schemas.auth import UserIdentity
from app.services.errors import AuthenticationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
ACCOUNT_INACTIVE = "Account is inactive"


class CredentialVerifier:
    """Check a username/password pair against the stored bcrypt hash. Read-only."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def verify(self, username: str, password: str) -> UserIdentity:
        """
        Return the matching identity without any hash fields.

        Unknown username and wrong password raise the same message. The inactive
        check only runs after the password matched, so a disabled account is
        reported as such to someone who knows its password.
        """
        user = self._users.get_by_username(username)
        if user is None:
            verify_password(password, dummy_password_hash())
            logger.info("Login rejected: unknown username")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info("Login rejected: wrong password", extra={"user_id": user.id})
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.is_active:
            logger.info("Login rejected: account inactive", extra={"user_id": user.id})
            raise AuthenticationError(ACCOUNT_INACTIVE)
        return UserIdentity.model_validate(user)
