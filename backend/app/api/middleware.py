"""Request Logging Middleware — one access-log line per HTTP request.

Invariants:
    - Logs "METHOD path - status (ms)" after the response is produced
    - 5xx logged at ERROR, 4xx at WARNING, everything else at INFO
    - Unhandled exceptions are logged as 500 and re-raised untouched

Design Decisions:
    - BaseHTTPMiddleware: non-HTTP scopes (WebSocket) pass straight through
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("app.http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with response time."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log_request(
                request, status_code, (time.perf_counter() - started) * 1000,
            )


def log_request(request: Request, status_code: int, duration_ms: float) -> None:
    if status_code >= 500:
        level = logging.ERROR
    elif status_code >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.log(
        level,
        "%s %s - %d (%.1fms)",
        request.method, request.url.path, status_code, duration_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 3),
            "user_agent": request.headers.get("user-agent"),
        },
    )
