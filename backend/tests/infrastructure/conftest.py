"""Infrastructure fixtures — a real SQLite database per test.

Invariants:
    - Schema created through DatabaseSessionManager.create_schema (same path as startup)
    - Engine disposed after every test
"""

import pytest

from app.infrastructure.database import DatabaseSessionManager


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'repo.db'}")
    await manager.create_schema()
    yield manager
    await manager.dispose()
