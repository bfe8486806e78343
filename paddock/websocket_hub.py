from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from fastapi import WebSocket

if TYPE_CHECKING:
    from paddock.runtime import SessionRuntime

logger = logging.getLogger(__name__)


class SessionWebSocketHub:
    """Sockets watching a navigation session, keyed by session_id.

    Every render of a session is pushed to its sockets as a `render` message
    naming the screen now showing. Sockets that fail a send are dropped; a
    deleted session has its sockets closed.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    def connection_count(self, session_id: str) -> int:
        return len(self._watchers.get(session_id, ()))

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._watchers[session_id].add(websocket)

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            watchers = self._watchers.get(session_id)
            if watchers is None:
                return
            watchers.discard(websocket)
            if not watchers:
                del self._watchers[session_id]

    async def publish(self, session_id: str, message: dict[str, object]) -> int:
        """Send `message` to every socket of the session; returns how many got it."""

        async with self._lock:
            watchers = tuple(self._watchers.get(session_id, ()))

        delivered = 0
        for ws in watchers:
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping socket of session %s after a failed send", session_id)
                await self.disconnect(session_id, ws)
            else:
                delivered += 1
        return delivered

    async def close_session(self, session_id: str) -> int:
        async with self._lock:
            watchers = self._watchers.pop(session_id, set())

        for ws in watchers:
            try:
                await ws.close(code=1000)
            except Exception:
                logger.debug("Socket of session %s was already closed", session_id)
        return len(watchers)


class HubRenderer:
    """Renderer that pushes the session's current screen to its sockets."""

    def __init__(self, hub: SessionWebSocketHub) -> None:
        self.hub = hub
        self.runtime: SessionRuntime | None = None

    def bind(self, runtime: SessionRuntime) -> None:
        self.runtime = runtime

    def render_message(self) -> dict[str, object]:
        assert self.runtime is not None
        machine = self.runtime.machine
        return {
            "type": "render",
            "session_id": machine.session_id,
            "current_state": machine.current_state,
            "history_depth": len(machine.history),
            "text_buffer": self.runtime.handler.text_buffer,
        }

    async def render(self) -> None:
        if self.runtime is None:
            return
        await self.hub.publish(self.runtime.session_id, self.render_message())


hub = SessionWebSocketHub()
