"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handling import register_exception_handlers
from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.limiter import limiter, rate_limited
from app.core.logging_config import configure_logging
from app.core.request_id import REQUEST_ID_HEADER, request_id_var, resolve_request_id

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Limits are applied per route by the rate_limited decorator.
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)


def _log_request(request: Request, status_code: int, started: float) -> None:
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        status_code,
        (time.perf_counter() - started) * 1000,
    )


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Assign the request ID, echo it back, and log one line per request."""
    request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    request.state.request_id = request_id
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # Rendered by the outermost 500 handler, which sets the header itself.
        _log_request(request, 500, started)
        raise
    finally:
        request_id_var.reset(token)
    response.headers[REQUEST_ID_HEADER] = request_id
    _log_request(request, response.status_code, started)
    return response


register_exception_handlers(app)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/", include_in_schema=False)
@rate_limited
def root(request: Request) -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": settings.APP_NAME, "docs": "/docs"}
