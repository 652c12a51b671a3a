"""Service test fixtures — in-memory repository plus a recording observer.

Invariants:
    - Every test gets a fresh FakeTaskRepository (ids restart at 1)
    - observations records every (operation, table, duration_ms, error) the service reports

Design Decisions:
    - Fake repository over SQLite here: service rules (lookup before write,
      error translation) are tested without storage; the real repository has
      its own tests under tests/infrastructure
"""

import pytest

from app.services.task_service import TaskService
from tests.services.fake_repository import FakeClock, FakeTaskRepository


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(clock):
    return FakeTaskRepository(clock)


@pytest.fixture
def observations():
    return []


@pytest.fixture
def service(repository, observations):
    def observer(operation, table, duration_ms=None, error=None):
        observations.append((operation, table, duration_ms, error))

    return TaskService(repository, observer=observer)
