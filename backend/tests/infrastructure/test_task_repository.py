"""SQLAlchemy Task Repository — persistence semantics against real SQLite.

Invariants:
    - insert: id assigned, status pending, created_at == updated_at
    - find_all_ordered: created_at DESC, id DESC on ties
    - update: refreshes updated_at, persists across sessions
    - delete: row gone for later sessions
"""

from datetime import datetime, timezone

from app.core.domain_types import TaskStatus
from app.infrastructure.task_repository import SqlAlchemyTaskRepository
from app.models.task import Task


async def test_insert_assigns_id_and_pending(db_manager):
    async with db_manager.session() as db:
        task = await SqlAlchemyTaskRepository(db).insert("Comprar pan", None)
    assert task.id == 1
    assert task.status == TaskStatus.PENDING
    assert task.description is None
    assert task.created_at == task.updated_at


async def test_find_by_id_from_new_session(db_manager):
    async with db_manager.session() as db:
        created = await SqlAlchemyTaskRepository(db).insert("Leer", "Un libro")
    async with db_manager.session() as db:
        found = await SqlAlchemyTaskRepository(db).find_by_id(created.id)
    assert found is not None
    assert (found.title, found.description) == ("Leer", "Un libro")


async def test_find_by_id_missing(db_manager):
    async with db_manager.session() as db:
        assert await SqlAlchemyTaskRepository(db).find_by_id(42) is None


async def test_find_all_ordered_most_recent_first(db_manager):
    async with db_manager.session() as db:
        repo = SqlAlchemyTaskRepository(db)
        for title in ("a", "b", "c"):
            await repo.insert(title, None)
    async with db_manager.session() as db:
        tasks = await SqlAlchemyTaskRepository(db).find_all_ordered()
    assert [t.title for t in tasks] == ["c", "b", "a"]


async def test_find_all_ordered_ties_broken_by_id(db_manager):
    same = datetime(2026, 1, 1, tzinfo=timezone.utc)
    async with db_manager.session() as db:
        db.add_all([
            Task(title="first", status="pending", created_at=same, updated_at=same),
            Task(title="second", status="pending", created_at=same, updated_at=same),
        ])
        await db.commit()
    async with db_manager.session() as db:
        tasks = await SqlAlchemyTaskRepository(db).find_all_ordered()
    assert [t.title for t in tasks] == ["second", "first"]


async def test_update_refreshes_updated_at(db_manager):
    async with db_manager.session() as db:
        created = await SqlAlchemyTaskRepository(db).insert("a", None)
        created_at = created.created_at
    async with db_manager.session() as db:
        repo = SqlAlchemyTaskRepository(db)
        task = await repo.find_by_id(created.id)
        task.status = TaskStatus.COMPLETED.value
        await repo.update(task)
    async with db_manager.session() as db:
        reloaded = await SqlAlchemyTaskRepository(db).find_by_id(created.id)
    assert reloaded.status == "completed"
    assert reloaded.updated_at > reloaded.created_at
    assert reloaded.created_at.replace(tzinfo=None) == created_at.replace(tzinfo=None)


async def test_delete_removes_row(db_manager):
    async with db_manager.session() as db:
        created = await SqlAlchemyTaskRepository(db).insert("a", None)
    async with db_manager.session() as db:
        repo = SqlAlchemyTaskRepository(db)
        await repo.delete(await repo.find_by_id(created.id))
    async with db_manager.session() as db:
        repo = SqlAlchemyTaskRepository(db)
        assert await repo.find_by_id(created.id) is None
        assert await repo.find_all_ordered() == []
