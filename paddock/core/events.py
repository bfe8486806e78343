from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Literal

logger = logging.getLogger(__name__)

EventType = Literal[
    "stateChanged",
    "customAction",
    "quit",
    "reset",
    "inputProcessed",
    "render",
]


@dataclass(frozen=True, slots=True)
class NavEvent:
    type: str
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: str, payload: dict[str, Any]) -> "NavEvent":
        return NavEvent(type=type, payload=payload, ts=datetime.now(timezone.utc))


Listener = Callable[[NavEvent], Any]


class EventBus:
    """Synchronous in-process pub/sub keyed by event name.

    Contract:
      - `subscribe` has set semantics; registering the same callable twice is a no-op.
      - `publish` calls every listener once, in registration order.
      - a raising listener is logged and skipped; its siblings still run.
    """

    def __init__(self) -> None:
        # dict keys act as an insertion-ordered set.
        self._by_event: dict[str, dict[Listener, None]] = defaultdict(dict)

    def subscribe(self, event: str, listener: Listener) -> None:
        self._by_event[event].setdefault(listener, None)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        listeners = self._by_event.get(event)
        if not listeners:
            return
        listeners.pop(listener, None)
        if not listeners:
            self._by_event.pop(event, None)

    def listeners(self, event: str) -> tuple[Listener, ...]:
        return tuple(self._by_event.get(event, ()))

    def publish(self, event: str, payload: dict[str, Any]) -> int:
        """Notify listeners; returns how many of them failed."""

        listeners = self.listeners(event)
        if not listeners:
            return 0

        evt = NavEvent.now(type=event, payload=payload)
        failed = 0
        for listener in listeners:
            try:
                listener(evt)
            except Exception:
                failed += 1
                logger.exception("Listener %r failed for event '%s'", listener, event)
        return failed
