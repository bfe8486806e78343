from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import redis

from paddock.career import CareerActions
from paddock.collaborators import Renderer
from paddock.config import Settings
from paddock.graph import TransitionTable
from paddock.input.handler import UnifiedInputHandler
from paddock.names import NameGenerator
from paddock.navigation import NavigationMachine

logger = logging.getLogger(__name__)

_DEFAULT_TABLE: TransitionTable | None = None


def default_table() -> TransitionTable:
    """Build the default transition table once and share it (it is immutable)."""

    global _DEFAULT_TABLE
    if _DEFAULT_TABLE is None:
        _DEFAULT_TABLE = TransitionTable.default()
    return _DEFAULT_TABLE


@dataclass(slots=True)
class SessionRuntime:
    machine: NavigationMachine
    handler: UnifiedInputHandler
    career: CareerActions

    @property
    def session_id(self) -> str:
        return self.machine.session_id


def create_runtime(
    *,
    r: redis.Redis | None = None,
    settings: Settings | None = None,
    renderer: Renderer | None = None,
    profile: str = "default",
    seed: int | None = None,
    table: TransitionTable | None = None,
) -> SessionRuntime:
    """Wire a machine, its input handler and the career collaborator; bootstraps the initial state."""

    cfg = settings or Settings.from_env()
    machine = NavigationMachine(table or default_table())
    career = CareerActions(r=r, profile=profile, snapshot=machine.snapshot)
    handler = UnifiedInputHandler(
        machine,
        actions=career.register(),
        renderer=renderer,
        names=NameGenerator(seed=seed, max_length=cfg.name_max_length),
        settings=cfg,
    )
    machine.transition_to(machine.table.initial_state, {"bootstrap": True})
    return SessionRuntime(machine=machine, handler=handler, career=career)


class SessionRegistry:
    """In-process live sessions keyed by session id."""

    def __init__(self) -> None:
        self._by_id: dict[str, SessionRuntime] = {}
        self._lock = asyncio.Lock()

    async def add(self, runtime: SessionRuntime) -> None:
        async with self._lock:
            self._by_id[runtime.session_id] = runtime
        logger.info("Session %s started in %s", runtime.session_id, runtime.machine.current_state)

    async def remove(self, session_id: str) -> SessionRuntime | None:
        async with self._lock:
            return self._by_id.pop(session_id, None)

    def get(self, session_id: str) -> SessionRuntime | None:
        return self._by_id.get(session_id)

    def __len__(self) -> int:
        return len(self._by_id)


registry = SessionRegistry()
