"""Password hashing and input length limits for authentication."""

from functools import lru_cache

import bcrypt

# Default bcrypt cost; overridden by PASSWORD_BCRYPT_ROUNDS.
BCRYPT_ROUNDS = 10

# bcrypt ignores everything past 72 bytes of input.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for request validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
NAME_MIN_LEN = 2
NAME_MAX_LEN = 100
EMAIL_MAX_LEN = 255


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """
    Hash compared against when the username does not exist.

    Running one bcrypt check on that path keeps unknown-user and wrong-password
    logins at the same cost.
    """
    return hash_password("timing-equalization-dummy", rounds=BCRYPT_ROUNDS)
