"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Task is the only persisted entity

Design Decisions:
    - One file per entity for locality
    - Models imported here so Base.metadata is complete before create_all / autogenerate
"""

from app.models.task import Task  # noqa: F401
