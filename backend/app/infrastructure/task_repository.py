"""Task Repository — SQLAlchemy implementation of the TaskRepository protocol.

Invariants:
    - find_all_ordered: created_at DESC, ties broken by id DESC (stable per snapshot)
    - insert stamps created_at and updated_at from one clock reading
    - update always refreshes updated_at before committing
    - Every write commits; failures propagate raw (the service translates them)

Design Decisions:
    - One repository per request session: no shared state between requests
    - Returns ORM instances directly; they satisfy TaskLike structurally
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import TaskId, TaskStatus
from app.models.task import Task, utcnow


class SqlAlchemyTaskRepository:
    """Task persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all_ordered(self) -> list[Task]:
        result = await self.db.execute(
            select(Task).order_by(Task.created_at.desc(), Task.id.desc()),
        )
        return list(result.scalars().all())

    async def find_by_id(self, task_id: TaskId) -> Task | None:
        return await self.db.get(Task, task_id)

    async def insert(self, title: str, description: str | None) -> Task:
        now = utcnow()
        task = Task(
            title=title,
            description=description,
            status=TaskStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(task)
        await self.db.commit()
        return task

    async def update(self, task: Task) -> Task:
        task.updated_at = utcnow()
        await self.db.commit()
        return task

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.commit()
