"""Real-time Routes — subscription endpoints for task change events.

Invariants:
    - /ws is the persistent bidirectional transport (WebSocket)
    - /events is the HTTP fallback (Server-Sent Events)
    - No broadcaster (not started / already shut down) → WebSocket closed with
      1013 (try again later), SSE answered with 503; never a 500

Design Decisions:
    - Routes only hand the connection to the broadcaster: transport logic
      lives in infrastructure/broadcaster.py
"""

import logging

from fastapi import APIRouter, Depends, WebSocket, status
from fastapi.responses import JSONResponse, StreamingResponse

from app.api.dependencies import get_broadcaster
from app.infrastructure.broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)
router = APIRouter(tags=["realtime"])

# SSE headers prevent proxy/browser buffering of streamed events.
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}

_UNAVAILABLE = {"status": "unavailable", "reason": "realtime_not_started"}


@router.websocket("/ws")
async def task_events_websocket(websocket: WebSocket):
    """WebSocket stream of newTask / taskUpdated / taskDeleted events."""
    broadcaster = getattr(websocket.app.state, "broadcaster", None)
    if broadcaster is None or broadcaster.closed:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return
    await broadcaster.serve_websocket(websocket)


@router.get("/events")
async def task_events_stream(
    broadcaster: EventBroadcaster | None = Depends(get_broadcaster),
):
    """Server-Sent Events stream for clients that cannot use WebSocket."""
    if broadcaster is None or broadcaster.closed:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=_UNAVAILABLE,
        )
    return StreamingResponse(
        broadcaster.sse_stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/events/status")
async def task_events_status(
    broadcaster: EventBroadcaster | None = Depends(get_broadcaster),
):
    """Subscriber counts and totals."""
    if broadcaster is None:
        return {"running": False, "active_connections": 0}
    return {"running": not broadcaster.closed, **broadcaster.stats}
