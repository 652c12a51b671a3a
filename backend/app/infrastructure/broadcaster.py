"""Event Broadcaster — fan-out of task change events to WebSocket and SSE subscribers.

Architecture:
    route handler ──publish()──▶ EventBroadcaster
                                      │  put_nowait per subscriber
                          ┌───────────┼───────────┐
                          ▼           ▼           ▼
                     ws queue     ws queue    sse queue
                          │           │           │
                     writer task  writer task  sse_stream()

Invariants:
    - publish() is synchronous, never awaits and never raises for delivery problems
    - No backlog: a subscriber only sees events published after it subscribed
    - Each subscriber has a bounded queue; when full, the event is dropped for that subscriber
    - close() ends every open stream; publish() after close() is a no-op

Design Decisions:
    - Per-subscriber asyncio.Queue decouples slow clients from the HTTP request
      that triggered the event (fire-and-forget)
    - WebSocket is the persistent bidirectional mode; SSE is the HTTP fallback for
      clients that cannot upgrade. Both share one subscriber registry.
    - WebSocket reader and writer run in one anyio task group: whichever ends
      first cancels the other, inside the server's cancel scope
"""

import asyncio
import itertools
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

import anyio
from starlette.websockets import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

# Queue sentinel: stream must terminate.
_CLOSE = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class BroadcastEvent:
    """A single event pushed to connected clients."""

    name: str
    data: dict
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict:
        return {"event": self.name, "data": self.data, "timestamp": self.timestamp}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def to_sse(self) -> str:
        """Format as Server-Sent Event."""
        return f"event: {self.name}\ndata: {self.to_json()}\n\n"


class EventBroadcaster:
    """Registry of live subscribers plus the publish entry point."""

    def __init__(self, max_queue_size: int = 100, keepalive_seconds: float = 15.0):
        self._subscribers: dict[str, asyncio.Queue] = {}
        self._ids = itertools.count(1)
        self._max_queue_size = max_queue_size
        self._keepalive_seconds = keepalive_seconds
        self._closed = False
        self._stats = {
            "total_connections": 0,
            "total_events_published": 0,
            "total_messages_queued": 0,
            "total_messages_dropped": 0,
        }

    @property
    def active_connections(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stats(self) -> dict:
        return {**self._stats, "active_connections": self.active_connections}

    # ------------------------------------------------------------------
    # Subscriber registry
    # ------------------------------------------------------------------

    def subscribe(self, kind: str = "ws") -> tuple[str, asyncio.Queue]:
        """Register a subscriber and return its id and queue."""
        subscriber_id = f"{kind}-{next(self._ids)}"
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[subscriber_id] = queue
        self._stats["total_connections"] += 1
        logger.info(
            "Subscriber connected. Active: %d", self.active_connections,
            extra={"event": "connect", "subscribers": self.active_connections},
        )
        return subscriber_id, queue

    def unsubscribe(self, subscriber_id: str) -> None:
        if self._subscribers.pop(subscriber_id, None) is not None:
            logger.info(
                "Subscriber disconnected. Active: %d", self.active_connections,
                extra={"event": "disconnect", "subscribers": self.active_connections},
            )

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def publish(self, name: str, data: dict) -> int:
        """Queue an event for every current subscriber.

        Returns the number of subscribers the event was queued for.
        """
        if self._closed:
            return 0
        event = BroadcastEvent(name=name, data=data)
        self._stats["total_events_published"] += 1
        queued = 0
        for subscriber_id, queue in list(self._subscribers.items()):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                self._stats["total_messages_dropped"] += 1
                logger.warning(
                    "Subscriber %s queue full, dropping %s", subscriber_id, name,
                    extra={"event": name},
                )
                continue
            queued += 1
        self._stats["total_messages_queued"] += queued
        logger.info(
            "Broadcast %s to %d subscriber(s)", name, queued,
            extra={"event": name, "subscribers": queued},
        )
        return queued

    async def close(self) -> None:
        """Stop accepting events and end every open stream."""
        self._closed = True
        for queue in list(self._subscribers.values()):
            _force_put(queue, _CLOSE)
        logger.info("Broadcaster closed")

    # ------------------------------------------------------------------
    # WebSocket transport
    # ------------------------------------------------------------------

    async def serve_websocket(self, websocket: WebSocket) -> None:
        """Run one WebSocket connection until the client leaves or we close.

        Protocol (JSON):
            ← {"event": "connected", "data": {...}, "timestamp": "..."}
            → {"action": "ping"}
            ← {"event": "pong", "timestamp": "..."}
            ← {"event": "newTask" | "taskUpdated" | "taskDeleted", "data": {...}, "timestamp": "..."}
        """
        await websocket.accept()
        subscriber_id, queue = self.subscribe("ws")
        welcome = BroadcastEvent(
            name="connected",
            data={"subscriber_id": subscriber_id, "active_clients": self.active_connections},
        )
        try:
            await websocket.send_text(welcome.to_json())
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._drain_to_websocket, websocket, queue, tg.cancel_scope)
                tg.start_soon(self._read_from_websocket, websocket, tg.cancel_scope)
        except WebSocketDisconnect:
            pass
        finally:
            self.unsubscribe(subscriber_id)

    async def _drain_to_websocket(
        self, websocket: WebSocket, queue: asyncio.Queue, scope: anyio.CancelScope,
    ) -> None:
        """Forward queued events; the close sentinel ends the connection."""
        try:
            while True:
                event = await queue.get()
                if event is _CLOSE:
                    await websocket.close()
                    return
                await websocket.send_text(event.to_json())
        except WebSocketDisconnect:
            pass
        finally:
            scope.cancel()

    async def _read_from_websocket(
        self, websocket: WebSocket, scope: anyio.CancelScope,
    ) -> None:
        """Answer client frames until the client disconnects."""
        try:
            while True:
                raw = await websocket.receive_text()
                await websocket.send_text(json.dumps(handle_client_message(raw)))
        except WebSocketDisconnect:
            pass
        finally:
            scope.cancel()

    # ------------------------------------------------------------------
    # SSE transport
    # ------------------------------------------------------------------

    async def sse_stream(self) -> AsyncGenerator[str, None]:
        """Yield Server-Sent Events until close() (or the client goes away)."""
        subscriber_id, queue = self.subscribe("sse")
        try:
            yield ": connected\n\n"
            while True:
                try:
                    event = await asyncio.wait_for(
                        queue.get(), timeout=self._keepalive_seconds,
                    )
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                if event is _CLOSE:
                    return
                yield event.to_sse()
        finally:
            self.unsubscribe(subscriber_id)


def handle_client_message(raw: str) -> dict[str, Any]:
    """Build the reply for one inbound WebSocket frame.

    Supported commands:
        {"action": "ping"}
    """
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        return {"error": "Invalid JSON"}
    action = msg.get("action", "") if isinstance(msg, dict) else ""
    if action == "ping":
        return {"event": "pong", "timestamp": _now_iso()}
    return {"error": f"Unknown action: {action}", "supported": ["ping"]}


def _force_put(queue: asyncio.Queue, item: Any) -> None:
    """put_nowait, evicting the oldest item if the queue is full."""
    try:
        queue.put_nowait(item)
    except asyncio.QueueFull:
        queue.get_nowait()
        queue.put_nowait(item)
