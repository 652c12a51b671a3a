"""Root conftest — shared test configuration and app/client fixtures.

Invariants:
    - Every test gets its own SQLite file under tmp_path (no shared state)
    - The HTTP client runs the real lifespan (db manager + broadcaster on app.state)

Design Decisions:
    - httpx AsyncClient over ASGITransport does not run lifespan events, so the
      fixture enters app.router.lifespan_context explicitly
"""

import os

# Importing app.main builds a default app; keep it away from real databases.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        database_auto_create=True,
        log_level="WARNING",
        log_format="text",
        sse_keepalive_seconds=0.05,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
async def client(app):
    """FastAPI test client with the lifespan running."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as c:
            yield c
