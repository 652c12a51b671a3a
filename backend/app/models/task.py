"""Task ORM — persists the single domain entity of the service.

Invariants:
    - id is an autoincrement integer primary key (never reused, never reassigned)
    - status is constrained to the internal TaskStatus values, default "pending"
    - created_at is written once; updated_at is refreshed on every UPDATE
    - description is nullable; blank descriptions are stored as NULL, never ""

Design Decisions:
    - Timestamps default in Python (one clock reading shared by both columns at insert)
      with server defaults as a backstop for rows written outside the ORM
    - onupdate hook refreshes updated_at even when callers forget to
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.domain_types import (
    DESCRIPTION_MAX_LENGTH, TASKS_TABLE, TITLE_MAX_LENGTH, TaskStatus,
)
from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


_STATUS_CHECK = "status IN ({})".format(
    ", ".join(f"'{s.value}'" for s in TaskStatus),
)


class Task(Base):
    """Task row."""
    __tablename__ = TASKS_TABLE
    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="ck_tasks_status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH), nullable=False, index=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False,
        default=TaskStatus.PENDING.value,
        server_default=TaskStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=utcnow, server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=utcnow, server_default=func.now(), onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Task id={self.id} status={self.status}>"
