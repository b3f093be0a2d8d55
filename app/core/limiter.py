"""
Shared slowapi rate limiter.

Every route is decorated with `rate_limited` (below its router decorator, so
the wrapped function is what gets registered). The limit string is read from
settings on each request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings, settings


def default_rate_limit() -> str:
    return get_settings().RATE_LIMIT_DEFAULT


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)

rate_limited = limiter.limit(default_rate_limit)
