"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - TaskId wraps int — ids are assigned by storage, never by callers
    - Valid ids lie in [TASK_ID_MIN, TASK_ID_MAX]; anything else is rejected at the boundary
    - TaskStatus is the stored (internal) vocabulary; PublicTaskStatus is the wire vocabulary
    - Every internal status has exactly one public counterpart and vice versa

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Two status enums: the public API speaks Spanish, storage does not
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

TaskId = NewType("TaskId", int)


# ─── Value Bounds ────────────────────────────────────────────────

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
TASK_ID_MIN = 1
TASK_ID_MAX = 2**63 - 1  # signed 64-bit INTEGER column
TASK_RESOURCE_NAME = "Tarea"
TASKS_TABLE = "tasks"


# ─── Enums ───────────────────────────────────────────────────────

class TaskStatus(str, Enum):
    """Task lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PublicTaskStatus(str, Enum):
    """Task states as exposed over HTTP and the real-time channel."""
    PENDIENTE = "pendiente"
    COMPLETADA = "completada"
    CANCELADA = "cancelada"


class TaskEvent(str, Enum):
    """Real-time event names broadcast after successful mutations."""
    NEW_TASK = "newTask"
    TASK_UPDATED = "taskUpdated"
    TASK_DELETED = "taskDeleted"
