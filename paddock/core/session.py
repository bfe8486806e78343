from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from paddock.models import SessionSnapshot


@dataclass(slots=True)
class Session:
    """The live navigation state of one player.

    Only `NavigationMachine` mutates this; everything else gets a `SessionSnapshot`.
    """

    session_id: str = field(default_factory=lambda: str(uuid4()))
    current_state: str | None = None
    # LIFO; bounded by navigation depth only.
    history: list[str] = field(default_factory=list)

    def snapshot(self, **metadata: str) -> SessionSnapshot:
        return SessionSnapshot(
            current_state=self.current_state,
            history=tuple(self.history),
            taken_at=datetime.now(tz=UTC),
            metadata=dict(metadata),
        )
