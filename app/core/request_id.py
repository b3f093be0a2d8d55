"""Per-request correlation IDs (X-Request-ID)."""

import re
import uuid
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# "-" outside of a request (startup, scripts).
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


def resolve_request_id(header_value: str | None) -> str:
    """Reuse the client's request ID only if it is a UUID; otherwise generate one."""
    if header_value and _UUID_RE.match(header_value):
        return header_value
    return str(uuid.uuid4())


def current_request_id() -> str:
    return request_id_var.get()
