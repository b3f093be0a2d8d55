"""Engine and session factory (PostgreSQL in deployment, SQLite for local runs and tests)."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

logger = logging.getLogger(__name__)

_IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_options(url: str) -> dict[str, Any]:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    # Route handlers run in a thread pool; SQLite connections must be shareable.
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url in _IN_MEMORY_SQLITE_URLS:
        # One connection, otherwise every pooled connection sees a blank database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for code outside a request (scripts); always closed on exit."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    with session_scope() as session:
        yield session


def check_db_connected(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database connectivity check failed", exc_info=True)
        return False
    return True
