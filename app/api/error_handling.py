"""Exception handlers that render every error in the same envelope."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.request_id import REQUEST_ID_HEADER, current_request_id
from app.schemas.common import ErrorBody, ErrorEnvelope, ErrorMeta
from app.services.errors import ServiceError

logger = logging.getLogger(__name__)

_STATUS_TO_CODE = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "TOO_MANY_REQUESTS",
    500: "INTERNAL_SERVER_ERROR",
}

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def error_code_for_status(status_code: int) -> str:
    if status_code in _STATUS_TO_CODE:
        return _STATUS_TO_CODE[status_code]
    return "INTERNAL_SERVER_ERROR" if status_code >= 500 else f"HTTP_{status_code}"


def error_response(
    request: Request,
    status_code: int,
    message: str,
    *,
    code: str | None = None,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Build the uniform error envelope response.

    The request ID header is set here as well, since the 500 handler runs
    outside the middleware that normally adds it.
    """
    assigned = getattr(request.state, "request_id", None)
    request_id = assigned or current_request_id()
    if assigned:
        headers = {**(headers or {}), REQUEST_ID_HEADER: assigned}
    envelope = ErrorEnvelope(
        error=ErrorBody(
            code=code or error_code_for_status(status_code),
            message=message,
            details=details,
        ),
        meta=ErrorMeta(
            status_code=status_code,
            path=request.url.path,
            request_id=request_id,
            timestamp=datetime.now(UTC).isoformat(),
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", by_alias=True),
        headers=headers,
    )


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for err in exc.errors():
        # loc is ("body", "email") etc.; drop the source prefix.
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for service errors, validation, HTTP, rate-limit and unexpected errors."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            "Request failed: %s %s -> %s %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.error_code,
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(
            request,
            exc.status_code,
            exc.message,
            code=exc.error_code,
            details=exc.details,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = _validation_details(exc)
        message = details[0]["message"] if details else "Request validation failed"
        return error_response(request, 400, message, code="VALIDATION_ERROR", details=details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(
            request,
            exc.status_code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RateLimitExceeded)
    async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Rate limit exceeded on %s %s", request.method, request.url.path)
        limit = getattr(exc, "limit", None)
        retry_after = limit.limit.get_expiry() if limit is not None else 60
        return error_response(
            request,
            429,
            "Too many requests",
            headers={"Retry-After": str(retry_after)},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        # Detail goes to the log only, never to the client.
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(request, 500, UNEXPECTED_ERROR_MESSAGE)
