"""Task Routes — HTTP surface for the Task resource.

Invariants:
    - Each handler is the pipeline: validate → service → mapper → broadcast → respond
    - Path params validated before the body (PUT)
    - Broadcast happens only after the service call returned successfully
    - Errors are never handled here; they propagate to the central handlers

Design Decisions:
    - GET /tasks uses the list-item shape (no descripcion), everything else the detail shape
    - DELETE answers 204 with an empty body
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import (
    get_broadcaster, get_task_service, validated_body, validated_params,
)
from app.core.domain_types import TaskId
from app.infrastructure.broadcaster import EventBroadcaster
from app.schemas.task import (
    TASK_CREATE, TASK_PARAMS, TASK_STATUS_UPDATE,
    TaskCreate, TaskListItem, TaskParams, TaskResponse, TaskStatusUpdate,
)
from app.services import task_events, task_mapper
from app.services.task_service import TaskService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskListItem])
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """List all tasks, most recent first."""
    tasks = await service.list()
    logger.info(f"Lista de tareas obtenida: {len(tasks)} tareas")
    return task_mapper.to_list_items(tasks)


@router.post(
    "", response_model=TaskResponse, status_code=status.HTTP_201_CREATED,
)
async def create_task(
    body: TaskCreate = Depends(validated_body(TASK_CREATE)),
    service: TaskService = Depends(get_task_service),
    broadcaster: EventBroadcaster | None = Depends(get_broadcaster),
):
    """Create a task (status starts as pendiente)."""
    created = await service.create(body.titulo, body.descripcion)
    response = task_mapper.to_detail(created)
    task_events.publish_new_task(broadcaster, response)
    return response


@router.get("/{id}", response_model=TaskResponse)
async def get_task(
    params: TaskParams = Depends(validated_params(TASK_PARAMS)),
    service: TaskService = Depends(get_task_service),
):
    """Get one task."""
    task = await service.find_by_id(TaskId(params.id))
    return task_mapper.to_detail(task)


@router.put("/{id}", response_model=TaskResponse)
async def update_task_status(
    params: TaskParams = Depends(validated_params(TASK_PARAMS)),
    body: TaskStatusUpdate = Depends(validated_body(TASK_STATUS_UPDATE)),
    service: TaskService = Depends(get_task_service),
    broadcaster: EventBroadcaster | None = Depends(get_broadcaster),
):
    """Change a task's status."""
    updated = await service.update_status(
        TaskId(params.id), task_mapper.to_internal_status(body.status),
    )
    task_events.publish_task_updated(
        broadcaster, task_mapper.to_updated_event(updated),
    )
    return task_mapper.to_detail(updated)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    params: TaskParams = Depends(validated_params(TASK_PARAMS)),
    service: TaskService = Depends(get_task_service),
    broadcaster: EventBroadcaster | None = Depends(get_broadcaster),
):
    """Delete a task permanently."""
    await service.remove(TaskId(params.id))
    task_events.publish_task_deleted(
        broadcaster, task_mapper.to_deleted_event(params.id),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
