"""Settings, database session, logging and request correlation."""

from app.core.config import Settings, get_settings, settings
from app.core.database import SessionLocal, get_db
from app.core.logging_config import configure_logging
from app.core.request_id import REQUEST_ID_HEADER, current_request_id

__all__ = [
    "REQUEST_ID_HEADER",
    "SessionLocal",
    "Settings",
    "configure_logging",
    "current_request_id",
    "get_db",
    "get_settings",
    "settings",
]
