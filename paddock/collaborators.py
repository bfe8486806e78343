"""Boundary contracts with the subsystems the navigation core does not own.

- game logic: named actions executed through `ActionRegistry`
- rendering: a bare "render now" signal (`Renderer`)
- name suggestions for the buffered name screen (`NameSuggester`)
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    """What a downstream action reports back.

    The boolean signals ask the pipeline for a follow-up transition (see FOLLOW_UP_SIGNALS).
    """

    success: bool
    error: str | None = None
    race_ready: bool = False
    career_complete: bool = False
    character_created: bool = False
    game_loaded: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def ok(**kwargs: Any) -> "ActionOutcome":
        return ActionOutcome(success=True, **kwargs)

    @staticmethod
    def failure(error: str, **kwargs: Any) -> "ActionOutcome":
        return ActionOutcome(success=False, error=error, **kwargs)


# Signal -> state entered after the action succeeds, checked in this order.
FOLLOW_UP_SIGNALS: tuple[tuple[str, str], ...] = (
    ("character_created", "training"),
    ("game_loaded", "training"),
    ("race_ready", "race_preview"),
    ("career_complete", "career_complete"),
)


def follow_up_targets(outcome: ActionOutcome) -> list[str]:
    return [target for signal, target in FOLLOW_UP_SIGNALS if getattr(outcome, signal)]


@dataclass(frozen=True, slots=True)
class ActionRequest:
    name: str
    state: str | None
    input: str = ""
    # Action-specific argument, e.g. the submitted name for create_character.
    argument: Any = None
    context: dict[str, Any] = field(default_factory=dict)


ActionHandler = Callable[[ActionRequest], Union[ActionOutcome, Awaitable[ActionOutcome]]]


class ActionRegistry:
    """Named action -> collaborator callable (sync or async)."""

    def __init__(self) -> None:
        self._handlers: dict[str, ActionHandler] = {}

    def register(self, name: str, handler: ActionHandler) -> None:
        self._handlers[name] = handler

    def action(self, name: str) -> Callable[[ActionHandler], ActionHandler]:
        def _decorate(fn: ActionHandler) -> ActionHandler:
            self.register(name, fn)
            return fn

        return _decorate

    def names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    async def execute(self, request: ActionRequest) -> ActionOutcome:
        handler = self._handlers.get(request.name)
        if handler is None:
            logger.warning("Unknown action: %s", request.name)
            return ActionOutcome.failure(f"Unknown action: {request.name}")

        outcome = handler(request)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome


class Renderer(Protocol):
    def render(self) -> Any:  # pragma: no cover
        ...


class NameSuggester(Protocol):
    def generate_options(self, count: int) -> list[str]:  # pragma: no cover
        ...
