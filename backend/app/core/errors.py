"""Error Hierarchy — typed, categorized exceptions for every Tareas API failure mode.

Invariants:
    - Every error has status, type, title, detail, category, severity and a timestamp
    - to_response() produces the single wire shape:
      {type, title, status, detail, timestamp, context?, errors?}
    - 4xx errors are WARNING severity; 5xx errors are CRITICAL
    - DatabaseError never carries low-level driver text (only a safe message)

Design Decisions:
    - Single hierarchy with AppError base: one FastAPI handler catches all (ADR: uniform error shape)
    - Titles and messages in Spanish: the public API contract predates this codebase
    - Conflict/Unauthorized/Forbidden are declared but no endpoint raises them yet
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability (drives the log level)."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    INTERNAL = "internal"


def _http_status_type(status: int) -> str:
    return f"https://httpstatuses.com/{status}"


class AppError(Exception):
    """Base exception for all Tareas API errors."""

    http_status: int = 500
    type: str = "about:blank"
    title: str = "Error interno del servidor"
    category: ErrorCategory = ErrorCategory.INTERNAL
    severity: ErrorSeverity = ErrorSeverity.CRITICAL

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context
        self.timestamp = datetime.now(timezone.utc)

    def to_response(self) -> dict:
        """Convert to the standardized REST error body."""
        body: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "status": self.http_status,
            "detail": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.context:
            body["context"] = self.context
        return body


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(AppError):
    """Input failed one or more field constraints."""
    http_status = 400
    type = _http_status_type(400)
    title = "Datos de entrada inválidos"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str = "Los datos enviados no cumplen las validaciones requeridas",
        errors: dict[str, list[str]] | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.errors = errors

    def to_response(self) -> dict:
        body = super().to_response()
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundError(AppError):
    """Requested resource does not exist."""
    http_status = 404
    type = _http_status_type(404)
    title = "Recurso no encontrado"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    severity = ErrorSeverity.WARNING

    def __init__(self, resource: str, resource_id: int | str | None = None):
        if resource_id is not None:
            message = f"{resource} con ID {resource_id} no fue encontrado"
            context = {"resource": resource, "id": resource_id}
        else:
            message = f"{resource} no fue encontrado"
            context = {"resource": resource}
        super().__init__(message, context)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(AppError):
    """Resource state conflicts with the request."""
    http_status = 409
    type = _http_status_type(409)
    title = "Conflicto de recursos"
    category = ErrorCategory.CONFLICT
    severity = ErrorSeverity.WARNING


class UnauthorizedError(AppError):
    """Missing or invalid credentials."""
    http_status = 401
    type = _http_status_type(401)
    title = "No autorizado"
    category = ErrorCategory.AUTHENTICATION
    severity = ErrorSeverity.WARNING

    def __init__(self, message: str = "Credenciales inválidas o token expirado"):
        super().__init__(message)


class ForbiddenError(AppError):
    """Authenticated but not allowed."""
    http_status = 403
    type = _http_status_type(403)
    title = "Acceso prohibido"
    category = ErrorCategory.AUTHORIZATION
    severity = ErrorSeverity.WARNING

    def __init__(
        self, message: str = "No tiene permisos para realizar esta acción",
    ):
        super().__init__(message)


# ─── Server Errors (500-level) ──────────────────────────────────

class DatabaseError(AppError):
    """Storage operation failed. `message` must be safe to show to clients."""
    http_status = 500
    type = _http_status_type(500)
    title = "Error de base de datos"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        operation: str,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"Error en operación de base de datos: {message}",
            {"operation": operation, **(context or {})},
        )
        self.operation = operation


class InternalServerError(AppError):
    """Fallback for anything that is not a recognised domain error."""

    def __init__(self, message: str = "Ha ocurrido un error interno del servidor"):
        super().__init__(message)


def is_operational(exc: BaseException) -> bool:
    """True when exc is a recognised domain error (safe to render as-is)."""
    return isinstance(exc, AppError)
