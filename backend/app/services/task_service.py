"""Task Service — repository orchestration with timing and domain-error translation.

Invariants:
    - list() returns tasks most-recent-first (repository ordering)
    - create() always persists status=pending; description trimmed, blank -> None
    - update_status()/remove() look the task up first; a missing task raises
      NotFoundError("Tarea", id) before any write is attempted
    - NotFoundError (any AppError) passes through unchanged, never recast
    - Any other failure becomes DatabaseError tagged with the operation name
      (list, create, updateStatus, remove, findById); driver text is logged only
    - Every repository call reports to the observer; observer failures are ignored
    - A NotFound outcome reports the lookup (SELECT) that found nothing

Design Decisions:
    - Repository and observer injected: the service never touches sessions or globals
    - Operation tags keep the public camelCase names clients already see in error context
    - No locking between lookup and write (single process, accepted race)
"""

import logging
import time

from app.core.domain_types import (
    TASK_RESOURCE_NAME, TASKS_TABLE, TaskId, TaskStatus,
)
from app.core.errors import AppError, DatabaseError, NotFoundError
from app.core.repository_protocols import (
    OperationObserver, TaskLike, TaskRepository,
)
from app.infrastructure.observability import log_database_operation

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    "list": "Error al obtener la lista de tareas",
    "create": "Error al crear la tarea",
    "updateStatus": "Error al actualizar la tarea",
    "remove": "Error al eliminar la tarea",
    "findById": "Error al obtener la tarea",
}


def normalize_description(description: str | None) -> str | None:
    """Trim; blank collapses to None (never "")."""
    if description is None:
        return None
    return description.strip() or None


class TaskService:
    """Business operations on Task."""

    def __init__(
        self,
        repository: TaskRepository,
        observer: OperationObserver = log_database_operation,
    ):
        self.repository = repository
        self.observer = observer

    async def list(self) -> list[TaskLike]:
        started = time.perf_counter()
        try:
            tasks = await self.repository.find_all_ordered()
        except Exception as e:
            raise self._storage_failure("list", "SELECT", e) from e
        self._observe("SELECT", started)
        return tasks

    async def create(
        self, title: str, description: str | None = None,
    ) -> TaskLike:
        started = time.perf_counter()
        try:
            task = await self.repository.insert(
                title.strip(), normalize_description(description),
            )
        except Exception as e:
            raise self._storage_failure("create", "INSERT", e) from e
        self._observe("INSERT", started)
        logger.info(
            f"Nueva tarea creada: {task.title}", extra={"task_id": task.id},
        )
        return task

    async def update_status(
        self, task_id: TaskId, status: TaskStatus,
    ) -> TaskLike:
        started = time.perf_counter()
        try:
            existing = await self.repository.find_by_id(task_id)
            if existing is None:
                self._observe("SELECT", started)
                raise NotFoundError(TASK_RESOURCE_NAME, task_id)
            previous_status = existing.status
            existing.status = TaskStatus(status).value
            updated = await self.repository.update(existing)
        except AppError:
            raise
        except Exception as e:
            raise self._storage_failure("updateStatus", "UPDATE", e) from e
        self._observe("UPDATE", started)
        logger.info(
            f"Tarea actualizada: {updated.title}",
            extra={
                "task_id": task_id,
                "previous_status": previous_status,
                "new_status": updated.status,
            },
        )
        return updated

    async def remove(self, task_id: TaskId) -> None:
        started = time.perf_counter()
        try:
            existing = await self.repository.find_by_id(task_id)
            if existing is None:
                self._observe("SELECT", started)
                raise NotFoundError(TASK_RESOURCE_NAME, task_id)
            await self.repository.delete(existing)
        except AppError:
            raise
        except Exception as e:
            raise self._storage_failure("remove", "DELETE", e) from e
        self._observe("DELETE", started)
        logger.info(
            f"Tarea eliminada: {existing.title}", extra={"task_id": task_id},
        )

    async def find_by_id(self, task_id: TaskId) -> TaskLike:
        started = time.perf_counter()
        try:
            task = await self.repository.find_by_id(task_id)
        except Exception as e:
            raise self._storage_failure("findById", "SELECT", e) from e
        self._observe("SELECT", started)
        if task is None:
            raise NotFoundError(TASK_RESOURCE_NAME, task_id)
        return task

    # -- helpers ---------------------------------------------------------------

    def _observe(
        self,
        verb: str,
        started: float | None = None,
        error: BaseException | None = None,
    ) -> None:
        duration_ms = (
            (time.perf_counter() - started) * 1000 if started is not None else None
        )
        try:
            self.observer(verb, TASKS_TABLE, duration_ms, error)
        except Exception:
            # observability must never change an operation's outcome
            pass

    def _storage_failure(
        self, operation: str, verb: str, error: Exception,
    ) -> DatabaseError:
        self._observe(verb, error=error)
        return DatabaseError(_FAILURE_MESSAGES[operation], operation)
