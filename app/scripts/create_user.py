"""
Create a user directly (e.g. the first admin; self-registration only yields customers).
Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [--role ROLE]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password --role ADMIN
"""
import argparse
import re
import sys

from app.core.config import get_settings
from app.core.database import session_scope
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from app.models.user import UserRole
from app.repositories.users import UserRepository
from app.schemas.auth import EMAIL_PATTERN
from app.services.errors import ConflictError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a user account.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "--role",
        default=UserRole.CUSTOMER.value,
        choices=[role.value for role in UserRole],
    )
    parser.add_argument("--first-name", default="")
    parser.add_argument("--last-name", default="")
    parser.add_argument("--inactive", action="store_true", help="Create the account disabled")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    username = args.username.strip()
    email = args.email.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not re.match(EMAIL_PATTERN, email):
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    with session_scope() as db:
        users = UserRepository(db)
        if users.get_by_username(username) or users.get_by_email(email):
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        try:
            users.create(
                username=username,
                email=email,
                password_hash=hash_password(
                    args.password, rounds=get_settings().PASSWORD_BCRYPT_ROUNDS
                ),
                first_name=args.first_name,
                last_name=args.last_name,
                role=UserRole(args.role),
                is_active=not args.inactive,
            )
        except ConflictError:
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
