"""Task Mapper — entity to wire shapes, and status vocabulary in both directions.

Invariants:
    - to_detail() includes every public field; descripcion passed through as-is
    - to_list_item() never carries descripcion (the key is absent, not null)
    - Timestamps render as UTC ISO-8601; naive datetimes are read as UTC
    - Status mapping is a bijection between TaskStatus and PublicTaskStatus

Design Decisions:
    - One function per shape over deriving shapes by introspection
    - Pure module: no IO, safe to call from routes and the broadcaster alike
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from app.core.domain_types import PublicTaskStatus, TaskStatus
from app.core.repository_protocols import TaskLike
from app.schemas.task import (
    TaskDeletedEvent, TaskListItem, TaskResponse, TaskUpdatedEvent,
)

_TO_PUBLIC = {
    TaskStatus.PENDING: PublicTaskStatus.PENDIENTE,
    TaskStatus.COMPLETED: PublicTaskStatus.COMPLETADA,
    TaskStatus.CANCELLED: PublicTaskStatus.CANCELADA,
}
_TO_INTERNAL = {public: internal for internal, public in _TO_PUBLIC.items()}


def to_public_status(status: TaskStatus | str) -> PublicTaskStatus:
    return _TO_PUBLIC[TaskStatus(status)]


def to_internal_status(status: PublicTaskStatus | str) -> TaskStatus:
    return _TO_INTERNAL[PublicTaskStatus(status)]


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with microseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def to_detail(task: TaskLike) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        titulo=task.title,
        descripcion=task.description,
        status=to_public_status(task.status),
        fechaCreacion=format_timestamp(task.created_at),
        fechaActualizacion=format_timestamp(task.updated_at),
    )


def to_list_item(task: TaskLike) -> TaskListItem:
    return TaskListItem(
        id=task.id,
        titulo=task.title,
        status=to_public_status(task.status),
        fechaCreacion=format_timestamp(task.created_at),
        fechaActualizacion=format_timestamp(task.updated_at),
    )


def to_detail_list(tasks: Iterable[TaskLike]) -> list[TaskResponse]:
    return [to_detail(task) for task in tasks]


def to_list_items(tasks: Iterable[TaskLike]) -> list[TaskListItem]:
    return [to_list_item(task) for task in tasks]


def to_updated_event(task: TaskLike) -> TaskUpdatedEvent:
    return TaskUpdatedEvent(id=task.id, status=to_public_status(task.status))


def to_deleted_event(task_id: int) -> TaskDeletedEvent:
    return TaskDeletedEvent(id=task_id)
