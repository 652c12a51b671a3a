"""Tareas API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every exception to the structured JSON error body
    - CORS configured from settings (not hardcoded)
    - Database manager and broadcaster created once in the lifespan, stored on
      app.state, torn down once at shutdown (broadcaster first, then database)

Design Decisions:
    - create_app(settings) factory: tests build isolated apps with their own settings
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Process resources live on app.state, never in module globals
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.middleware import RequestLoggingMiddleware
from app.api.routes import health, realtime, tasks
from app.config import Settings, get_settings
from app.infrastructure.broadcaster import EventBroadcaster
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)

    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
    )
    if settings.database_auto_create:
        await db.create_schema()
    app.state.db = db
    app.state.broadcaster = EventBroadcaster(
        max_queue_size=settings.broadcast_queue_size,
        keepalive_seconds=settings.sse_keepalive_seconds,
    )
    logger.info(f"{settings.app_name} started ({settings.environment})")
    try:
        yield
    finally:
        logger.info(f"{settings.app_name} shutting down")
        await app.state.broadcaster.close()
        app.state.broadcaster = None
        await db.dispose()
        app.state.db = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application (composition root)."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name, version=settings.version, lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.db = None
    app.state.broadcaster = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)

    # Routes — explicit registration
    app.include_router(health.router)
    app.include_router(tasks.router)
    app.include_router(realtime.router)

    return app


app = create_app()
