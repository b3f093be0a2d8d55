"""Persistence for User rows. Services never query the ORM directly."""

import logging
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User, utcnow
from app.services.errors import ConflictError

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Repository for User entities bound to one SQLAlchemy session.

    Writes commit immediately: each call is one row-level unit of work.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> User | None:
        """Exact, case-sensitive match."""
        return self.session.scalars(select(User).where(User.username == username)).first()

    def get_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive match."""
        return self.session.scalars(select(User).where(User.email == email)).first()

    def create(self, **fields: Any) -> User:
        """
        Insert a user and return it with generated columns populated.

        A unique-constraint violation (a concurrent registration won the race)
        is raised as ConflictError.
        """
        user = User(**fields)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("User insert rejected by unique constraint")
            raise ConflictError("User already exists") from exc
        self.session.refresh(user)
        return user

    def set_refresh_token_hash(self, user_id: str, token_hash: str | None) -> None:
        """Overwrite (or clear, with None) the stored refresh-token hash."""
        self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(refresh_token_hash=token_hash, updated_at=utcnow())
        )
        self.session.commit()

    def list_users(self, offset: int = 0, limit: int = 10, active_only: bool = False) -> list[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return list(self.session.scalars(stmt.offset(offset).limit(limit)))

    def count_users(self, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(User)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return self.session.scalar(stmt) or 0
