"""
Alembic environment bound to the application's settings and metadata.

The URL comes from DATABASE_URL unless overridden on the command line:
  alembic -x dburl=sqlite:///./local.db upgrade head
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from app.core.config import settings
from app.models import Base, User  # noqa: F401  (registers the users table)

config = context.config
if config.config_file_name is not None:
    try:
        fileConfig(config.config_file_name)
    except KeyError:
        # alembic.ini without [loggers]/[handlers]/[formatters]
        pass

target_metadata = Base.metadata


def database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("dburl") or settings.DATABASE_URL


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        # SQLite cannot ALTER constraints in place; batch mode copies the table.
        "render_as_batch": url.startswith("sqlite"),
    }


def run_offline(url: str) -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = create_engine(url, poolclass=NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_configure_options(url))
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline(database_url())
else:
    run_online(database_url())
