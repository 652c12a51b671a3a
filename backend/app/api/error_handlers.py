"""Error Handlers — the single place where exceptions become HTTP error bodies.

Invariants:
    - AppError → its own to_response() with its own status
    - RequestValidationError → ValidationError body (field → messages)
    - Starlette HTTPException 404 → "Ruta no encontrada"; other codes same shape
    - Exception (catch-all) → InternalServerError; raw message only outside production
    - Every body: {type, title, status, detail, timestamp, context?, errors?}

Design Decisions:
    - Four-layer handler: domain (AppError), validation (Pydantic), routing
      (HTTPException), catch-all (Exception)
    - Unexpected errors logged once with full request context (method, url,
      user agent, ip, body/params/query when present)
"""

import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.errors import (
    AppError, ErrorSeverity, InternalServerError, ValidationError,
)

logger = logging.getLogger(__name__)

_HTTP_TITLES = {
    404: "Ruta no encontrada",
    405: "Método no permitido",
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_app_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def request_context(request: Request) -> dict:
    """Request facts worth logging next to an error."""
    context = {
        "method": request.method,
        "url": str(request.url.path)
        + (f"?{request.url.query}" if request.url.query else ""),
        "user_agent": request.headers.get("user-agent"),
        "ip": request.client.host if request.client else None,
    }
    payload = getattr(request.state, "payload", None)
    if payload:
        context["body"] = payload
    if request.path_params:
        context["params"] = dict(request.path_params)
    if request.query_params:
        context["query"] = dict(request.query_params)
    return context


def _register_app_error_handler(app: FastAPI) -> None:
    """Register domain error handler."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Handle all recognised domain errors."""
        log = logger.warning if exc.severity is ErrorSeverity.WARNING else logger.error
        log(
            f"Operational error: {exc.message}",
            extra={
                "error_code": type(exc).__name__,
                "path": request.url.path,
                "context": exc.context,
                "request_context": request_context(request),
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors in the domain error shape."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        error = ValidationError(errors=_field_errors(exc))
        return JSONResponse(
            status_code=error.http_status, content=error.to_response(),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register routing/HTTP error handler (unknown routes, wrong methods)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        if exc.status_code == 404:
            logger.warning(
                f"Route not found: {request.method} {request.url.path}",
                extra={"request_context": request_context(request)},
            )
            detail = f"La ruta {request.method} {request.url.path} no existe"
        else:
            detail = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "type": f"https://httpstatuses.com/{exc.status_code}",
                "title": _http_title(exc.status_code),
                "status": exc.status_code,
                "detail": detail,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — internals exposed only outside production."""
        logger.error(
            f"Unexpected error: {exc}",
            exc_info=exc,
            extra={"request_context": request_context(request)},
        )
        settings = getattr(request.app.state, "settings", None) or get_settings()
        if settings.is_production or not str(exc):
            error = InternalServerError()
        else:
            error = InternalServerError(str(exc))
        return JSONResponse(
            status_code=error.http_status, content=error.to_response(),
        )


def _http_title(status_code: int) -> str:
    if status_code in _HTTP_TITLES:
        return _HTTP_TITLES[status_code]
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error HTTP"


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for e in exc.errors():
        loc = [str(part) for part in e["loc"] if part not in ("body", "path", "query")]
        errors.setdefault(".".join(loc) or "body", []).append(e["msg"])
    return errors
