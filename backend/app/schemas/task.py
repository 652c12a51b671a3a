"""Task Schemas — input rule tables and typed input/output shapes for the API boundary.

Invariants:
    - TASK_CREATE: titulo required 1-100 chars, descripcion optional 0-500 chars
    - TASK_STATUS_UPDATE: status required, one of the public status values
    - TASK_PARAMS: id required, integer within the storable range (path params
      arrive as strings)
    - TaskResponse (detail) and TaskListItem are declared separately; the list
      item has no descripcion field at all

Design Decisions:
    - Rule tables live next to the models they produce: one file per resource
    - Input models forbid extras; validate() already rejects unknown keys, the
      model keeps the typed shape honest when built directly
    - English aliases accepted for create fields; wire names stay Spanish
"""

from pydantic import BaseModel, ConfigDict, Field

from app.core.domain_types import (
    DESCRIPTION_MAX_LENGTH, PublicTaskStatus, TASK_ID_MAX, TASK_ID_MIN,
    TITLE_MAX_LENGTH,
)
from app.core.validation import Constraint, Rule, Schema


# --- Input shapes --------------------------------------------------------------

class TaskCreate(BaseModel):
    """Validated create payload."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    titulo: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    descripcion: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)


class TaskStatusUpdate(BaseModel):
    """Validated status-update payload."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    status: PublicTaskStatus


class TaskParams(BaseModel):
    """Validated path parameters."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int


_STATUS_VALUES = tuple(s.value for s in PublicTaskStatus)

TASK_CREATE = Schema(
    name="TaskCreate",
    model=TaskCreate,
    rules=(
        Rule("titulo", Constraint.REQUIRED, "El título es obligatorio"),
        Rule("titulo", Constraint.STRING, "El título debe ser un texto"),
        Rule(
            "titulo", Constraint.LENGTH,
            f"El título debe tener entre 1 y {TITLE_MAX_LENGTH} caracteres",
            (1, TITLE_MAX_LENGTH),
        ),
        Rule("descripcion", Constraint.STRING, "La descripción debe ser un texto"),
        Rule(
            "descripcion", Constraint.LENGTH,
            f"La descripción no puede exceder {DESCRIPTION_MAX_LENGTH} caracteres",
            (0, DESCRIPTION_MAX_LENGTH),
        ),
    ),
    aliases={"title": "titulo", "description": "descripcion"},
)

TASK_STATUS_UPDATE = Schema(
    name="TaskStatusUpdate",
    model=TaskStatusUpdate,
    rules=(
        Rule("status", Constraint.REQUIRED, "El status es obligatorio"),
        Rule(
            "status", Constraint.ONE_OF,
            "El status debe ser: pendiente, completada o cancelada",
            _STATUS_VALUES,
        ),
    ),
)

TASK_PARAMS = Schema(
    name="TaskParams",
    model=TaskParams,
    rules=(
        Rule("id", Constraint.REQUIRED, "ID es obligatorio"),
        Rule(
            "id", Constraint.INTEGER, "ID debe ser un número válido",
            (TASK_ID_MIN, TASK_ID_MAX),
        ),
    ),
)


# --- Output shapes -------------------------------------------------------------

class TaskResponse(BaseModel):
    """Detail shape — every public field."""
    id: int
    titulo: str
    descripcion: str | None
    status: PublicTaskStatus
    fechaCreacion: str
    fechaActualizacion: str


class TaskListItem(BaseModel):
    """List-item shape — detail minus descripcion (payload size)."""
    id: int
    titulo: str
    status: PublicTaskStatus
    fechaCreacion: str
    fechaActualizacion: str


class TaskUpdatedEvent(BaseModel):
    """taskUpdated payload: id and new public status only."""
    id: int
    status: PublicTaskStatus


class TaskDeletedEvent(BaseModel):
    """taskDeleted payload: id only."""
    id: int
