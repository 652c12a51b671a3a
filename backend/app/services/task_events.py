"""Task Events — publish task mutations to the real-time broadcaster.

Invariants:
    - Called only after the mutation succeeded
    - broadcaster=None (transport not started) is a silent no-op
    - Never raises: a broadcast problem is logged and the request carries on

Design Decisions:
    - One function per event so route handlers read as a straight pipeline
    - Payloads are the public shapes (detail / {id, status} / {id})
"""

import logging

from app.core.domain_types import TaskEvent
from app.infrastructure.broadcaster import EventBroadcaster
from app.schemas.task import TaskDeletedEvent, TaskResponse, TaskUpdatedEvent

logger = logging.getLogger(__name__)


def publish_new_task(
    broadcaster: EventBroadcaster | None, task: TaskResponse,
) -> int:
    return _publish(broadcaster, TaskEvent.NEW_TASK, task.model_dump(mode="json"))


def publish_task_updated(
    broadcaster: EventBroadcaster | None, payload: TaskUpdatedEvent,
) -> int:
    return _publish(
        broadcaster, TaskEvent.TASK_UPDATED, payload.model_dump(mode="json"),
    )


def publish_task_deleted(
    broadcaster: EventBroadcaster | None, payload: TaskDeletedEvent,
) -> int:
    return _publish(
        broadcaster, TaskEvent.TASK_DELETED, payload.model_dump(mode="json"),
    )


def _publish(
    broadcaster: EventBroadcaster | None, event: TaskEvent, data: dict,
) -> int:
    if broadcaster is None:
        return 0
    try:
        return broadcaster.publish(event.value, data)
    except Exception:
        logger.warning(
            "Broadcast of %s failed", event.value,
            exc_info=True, extra={"event": event.value, "task_id": data.get("id")},
        )
        return 0
