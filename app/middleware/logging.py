"""Request logging with scanner correlation."""
import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
# Optional header scanner apps send to identify the physical device
SCANNER_ID_HEADER = "X-Scanner-ID"
MAX_REQUEST_ID_LENGTH = 128

# Load balancer probes hit these every few seconds; log them at debug only
QUIET_PATHS = frozenset({"/health"})


def resolve_request_id(incoming: Optional[str]) -> str:
    """
    Reuse the caller's request id when it sends a usable one.

    A scanner that retries after a timeout can resend the same id, so the
    original attempt and the retry (usually a 409) share one id in the logs.
    """
    if incoming:
        incoming = incoming.strip()
        if 0 < len(incoming) <= MAX_REQUEST_ID_LENGTH and incoming.isprintable():
            return incoming
    return str(uuid.uuid4())


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind request and scanner context for every log line, then log the outcome."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
            scanner_id=request.headers.get(SCANNER_ID_HEADER),
        )
        log = logger.debug if request.url.path in QUIET_PATHS else logger.info

        started = time.perf_counter()
        log("request_started", query_params=str(request.query_params) if request.query_params else None)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        log("request_completed", status_code=response.status_code, duration_ms=_elapsed_ms(started))
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
