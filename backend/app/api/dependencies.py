"""API Dependencies — wiring between FastAPI requests and process-owned resources.

Invariants:
    - Process resources (db manager, broadcaster, settings) are read from app.state only
    - get_db yields one AsyncSession per request, rolled back on any exception
    - validated_body/validated_params run before the route body: invalid input
      never reaches the service
    - The raw JSON body is stashed on request.state.payload for error logging

Design Decisions:
    - Dependency factories over middleware: each route declares exactly which
      schema it validates, in the order it should be validated (params first)
    - get_broadcaster returns None instead of raising: publishing degrades to a no-op
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.requests import HTTPConnection
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.errors import ValidationError
from app.core.validation import BODY_FIELD, Schema, validate
from app.infrastructure.broadcaster import EventBroadcaster
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.task_repository import SqlAlchemyTaskRepository
from app.services.task_service import TaskService

INVALID_JSON_MESSAGE = "El cuerpo de la petición no es JSON válido"


def get_app_settings(conn: HTTPConnection) -> Settings:
    return getattr(conn.app.state, "settings", None) or get_settings()


def get_db_manager(conn: HTTPConnection) -> DatabaseSessionManager:
    manager = getattr(conn.app.state, "db", None)
    if manager is None:
        raise RuntimeError("Database not initialized")
    return manager


async def get_db(
    manager: DatabaseSessionManager = Depends(get_db_manager),
) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with manager.session() as session:
        yield session


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(SqlAlchemyTaskRepository(db))


def get_broadcaster(conn: HTTPConnection) -> EventBroadcaster | None:
    return getattr(conn.app.state, "broadcaster", None)


def validated_body(schema: Schema):
    """Dependency factory: parse the JSON body and validate it against schema."""

    async def dependency(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationError(errors={BODY_FIELD: [INVALID_JSON_MESSAGE]})
        request.state.payload = payload
        return validate(schema, payload)

    dependency.__name__ = f"validated_{schema.name}_body"
    return dependency


def validated_params(schema: Schema):
    """Dependency factory: validate (and coerce) path parameters against schema."""

    async def dependency(request: Request):
        return validate(schema, dict(request.path_params))

    dependency.__name__ = f"validated_{schema.name}_params"
    return dependency
