# src/plump_rest/infra/change_listener.py
"""
Server-pushed change notifications -> invalidation signals.

SocketChannel owns the Socket.IO connection and only enqueues payloads.
ChangeListener drains the queue and fires one InvalidationSignal per
recognised event. A bad payload is logged and dropped; it never stops the
listener.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import socketio
from pydantic import ValidationError

from plump_rest.errors import MalformedPushEvent
from plump_rest.models import (
    InvalidationSignal,
    PushEvent,
    PUSH_EVENT_NAME,
    PUSH_EVENT_TYPES,
    RELATIONSHIP_EVENTS,
)
from plump_rest.ports.storage import UpdateSink

logger = logging.getLogger(__name__)


def signal_for(payload: Dict[str, Any]) -> Optional[InvalidationSignal]:
    """Translate one push payload. Unknown event types give None; broken payloads raise."""
    if not isinstance(payload, dict):
        raise MalformedPushEvent(f"push payload must be an object, got {type(payload).__name__}")
    if payload.get("eventType") not in PUSH_EVENT_TYPES:
        return None
    try:
        event = PushEvent.model_validate(payload)
    except ValidationError as e:
        raise MalformedPushEvent(str(e)) from e

    if event.event_type == "update":
        return InvalidationSignal(type=event.type, id=event.id, invalidate=["attributes"])
    if event.event_type in RELATIONSHIP_EVENTS:
        if not event.field:
            raise MalformedPushEvent(f"{event.event_type} without field")
        return InvalidationSignal(type=event.type, id=event.id, invalidate=[event.field])
    return None


class ChangeListener:
    def __init__(self, sink: UpdateSink) -> None:
        self._sink = sink

    def on_push(self, payload: Any) -> Optional[InvalidationSignal]:
        try:
            signal = signal_for(payload)
            if signal is not None:
                self._sink.fire_write_update(signal)
            return signal
        except Exception:
            logger.exception("failed to handle push event: %r", payload)
            return None

    async def run(self, queue: "asyncio.Queue[Any]") -> None:
        """Drain queue until cancelled."""
        while True:
            payload = await queue.get()
            try:
                self.on_push(payload)
            finally:
                queue.task_done()


class SocketChannel:
    """Socket.IO push channel; reconnection is handled by the client library."""

    def __init__(
        self,
        url: str,
        queue: "asyncio.Queue[Any]",
        api_key: Optional[str] = None,
        client: Optional[socketio.AsyncClient] = None,
    ) -> None:
        self.url = url
        self.queue = queue
        self.api_key = api_key
        self.sio = client or socketio.AsyncClient(reconnection=True)
        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)
        self.sio.on(PUSH_EVENT_NAME, self._on_update)

    async def _on_connect(self) -> None:
        logger.info("connected to socket %s", self.url)

    async def _on_disconnect(self, *args: Any) -> None:
        logger.info("disconnected from socket %s", self.url)

    async def _on_update(self, data: Any) -> None:
        self.queue.put_nowait(data)

    async def connect(self) -> bool:
        """Connect, retrying with the client's reconnection policy. Failure is logged, not raised."""
        auth = {"apiKey": self.api_key} if self.api_key else None
        try:
            await self.sio.connect(self.url, transports=["websocket"], auth=auth, retry=True)
        except socketio.exceptions.ConnectionError as e:
            logger.warning("could not connect to socket %s: %s", self.url, e)
            return False
        return True

    async def disconnect(self) -> None:
        if self.sio.connected:
            await self.sio.disconnect()
