"""Structured Logging — JSON formatter, setup, and the database-operation observer.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (task_id, operation, error_code, ...) surfaced when present
    - JSON format in production, human-readable in development
    - setup_logging is idempotent: calling it twice never duplicates handlers

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
    - log_database_operation is the default TaskService observer: debug on success,
      error (with the low-level exception) on failure
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "task_id", "operation", "table", "duration_ms", "error_code",
    "method", "path", "status_code", "user_agent", "client_ip",
    "previous_status", "new_status", "event", "subscribers", "context",
    "request_context",
)

_HANDLER_MARK = "_tareas_handler"

db_logger = logging.getLogger("app.database")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    for existing in list(logging.root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            logging.root.removeHandler(existing)
    handler = logging.StreamHandler()
    setattr(handler, _HANDLER_MARK, True)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


def log_database_operation(
    operation: str,
    table: str,
    duration_ms: float | None = None,
    error: BaseException | None = None,
) -> None:
    """Record one repository operation (timing on success, cause on failure)."""
    extra = {"operation": operation, "table": table}
    if error is not None:
        db_logger.error(
            "Database operation failed: %s on %s", operation, table,
            exc_info=(type(error), error, error.__traceback__),
            extra=extra,
        )
        return
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 3)
    db_logger.debug("Database operation: %s on %s", operation, table, extra=extra)
