"""Request logging middleware."""

import time
from typing import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

# Probe endpoints are polled constantly; log them at debug only
QUIET_PATHS = frozenset({"/health", "/readiness"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context for every log line and log one completion event."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        request_id = getattr(request.state, "request_id", "unknown")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                duration_ms=_elapsed_ms(start_time),
            )
            raise

        subject = getattr(request.state, "subject", None)
        fields = {
            "status_code": response.status_code,
            "duration_ms": _elapsed_ms(start_time),
            "user_id": str(subject.id) if subject is not None else None,
        }
        if request.url.path in QUIET_PATHS:
            logger.debug("request_completed", **fields)
        elif response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)
        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)
