"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO
    - Repository returns None for missing rows; turning that into NotFound is the service's job
"""

from datetime import datetime
from typing import Protocol

from app.core.domain_types import TaskId, TaskStatus


class TaskLike(Protocol):
    """Structural contract for Task objects crossing the service boundary.

    Avoids coupling services and mappers to the ORM model while giving
    type checkers real information (unlike Any).
    """
    id: int
    title: str
    description: str | None
    status: TaskStatus | str
    created_at: datetime
    updated_at: datetime


class TaskRepository(Protocol):
    """Contract for task persistence — implemented by shell."""
    async def find_all_ordered(self) -> list[TaskLike]: ...
    async def find_by_id(self, task_id: TaskId) -> TaskLike | None: ...
    async def insert(self, title: str, description: str | None) -> TaskLike: ...
    async def update(self, task: TaskLike) -> TaskLike: ...
    async def delete(self, task: TaskLike) -> None: ...


class OperationObserver(Protocol):
    """Timing/outcome hook called once per repository operation."""
    def __call__(
        self,
        operation: str,
        table: str,
        duration_ms: float | None = None,
        error: BaseException | None = None,
    ) -> None: ...
