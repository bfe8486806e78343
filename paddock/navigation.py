"""State machine over the declarative transition table.

All changes to the current state go through `transition_to`, `go_back` or
`reset`; input tokens resolve in constant time through the per-state dispatch
table instead of per-screen conditionals.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Any, Mapping

from paddock.core.events import EventBus, EventType, Listener
from paddock.core.results import ErrorKind, NavResult
from paddock.core.session import Session
from paddock.descriptors import (
    ActionDescriptor,
    Back,
    DirectState,
    NamedAction,
    Quit,
    StateWithData,
    descriptor_kind,
)
from paddock.graph import TransitionTable
from paddock.input.keys import ENTER, TEXT_TOKEN, is_text_input, normalize_token
from paddock.models import SessionSnapshot, StateMetadata

logger = logging.getLogger(__name__)


class NavigationMachine:
    def __init__(
        self,
        table: TransitionTable | None = None,
        *,
        session: Session | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.table = table or TransitionTable.default()
        self._session = session or Session()
        self._bus = bus or EventBus()

    # ---- accessors ----

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def current_state(self) -> str | None:
        return self._session.current_state

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._session.history)

    def snapshot(self, **metadata: str) -> SessionSnapshot:
        return self._session.snapshot(**metadata)

    def available_transitions(self, state: str | None = None) -> tuple[str, ...]:
        return self.table.successors(state if state is not None else self.current_state)

    def available_inputs(self, state: str | None = None) -> tuple[str, ...]:
        inputs = self.table.inputs(state if state is not None else self.current_state)
        if inputs is None:
            return ()
        return tuple(token for token in inputs if token != TEXT_TOKEN)

    def metadata(self, state: str | None = None) -> StateMetadata:
        return self.table.metadata(state if state is not None else self.current_state)

    def allows_empty_input(self, state: str | None = None) -> bool:
        return self.metadata(state).allow_empty

    def help_text(self) -> str:
        meta = self.metadata()
        lines = [meta.description or f"In {self.current_state} state"]
        if meta.allow_empty:
            lines.append("Press ENTER to continue")
        inputs = self.available_inputs()
        if inputs:
            lines.append(f"Available inputs: {', '.join(inputs)}")
        if meta.back_enabled:
            lines.append(f"Back returns to: {meta.back_target or 'previous screen'}")
        return "\n".join(lines)

    # ---- events ----

    def add_event_listener(self, event: EventType, listener: Listener) -> None:
        self._bus.subscribe(event, listener)

    def remove_event_listener(self, event: EventType, listener: Listener) -> None:
        self._bus.unsubscribe(event, listener)

    def fire_event(self, event: EventType, payload: dict[str, Any]) -> None:
        self._bus.publish(event, payload)

    # ---- navigation ----

    def transition_to(self, target: str, context: Mapping[str, Any] | None = None) -> NavResult:
        ctx = dict(context or {})
        current = self._session.current_state

        if current is None:
            # Bootstrap: the first transition is always accepted.
            self._session.current_state = target
            self.fire_event("stateChanged", {"from": None, "to": target, "context": ctx})
            return NavResult(success=True, action="transition", current_state=target)

        if not self.table.allows(current, target):
            allowed = self.table.successors(current)
            logger.debug("Rejected transition %s -> %s (allowed: %s)", current, target, ",".join(allowed))
            return NavResult.fail(
                ErrorKind.invalid_transition,
                f"Invalid transition from {current} to {target}",
                current_state=current,
                allowed_transitions=allowed,
            )

        self._session.history.append(current)
        self._session.current_state = target
        self.fire_event("stateChanged", {"from": current, "to": target, "context": ctx})
        return NavResult(success=True, action="transition", current_state=target)

    def go_back(self) -> NavResult:
        if not self._session.history:
            return NavResult.fail(
                ErrorKind.no_previous_state,
                "No previous state",
                current_state=self._session.current_state,
            )

        previous = self._session.history.pop()
        current = self._session.current_state
        self._session.current_state = previous
        self.fire_event("stateChanged", {"from": current, "to": previous, "context": {"back": True}})
        return NavResult(success=True, action="back", current_state=previous)

    def reset(self, initial_state: str | None = None) -> None:
        initial = initial_state or self.table.initial_state
        self._session.history.clear()
        self._session.current_state = initial
        self.fire_event("reset", {"initial_state": initial})

    # ---- input ----

    def resolve_input(self, token: str, state: str | None = None) -> ActionDescriptor | None:
        """Look up what a normalized token means in `state` (default: current)."""

        state = state if state is not None else self.current_state
        inputs = self.table.inputs(state)
        if inputs is None:
            return None

        descriptor = inputs.get(token)
        if descriptor is None and is_text_input(token):
            descriptor = inputs.get(TEXT_TOKEN)
        if descriptor is None and token == ENTER:
            meta = self.table.metadata(state)
            if meta.allow_empty and meta.auto_progress is not None:
                descriptor = DirectState(target=meta.auto_progress)
        return descriptor

    def handle_input(self, raw_input: object, context: Mapping[str, Any] | None = None) -> NavResult:
        state = self.current_state
        if self.table.inputs(state) is None:
            return NavResult.fail(
                ErrorKind.no_handler_for_input,
                f"No input handler for state {state}",
                current_state=state,
            )

        token = normalize_token(raw_input)
        descriptor = self.resolve_input(token, state)
        if descriptor is None:
            return NavResult.fail(
                ErrorKind.no_handler_for_input,
                f'Invalid input "{raw_input}" for state {state}',
                current_state=state,
                available_inputs=self.available_inputs(state),
            )

        return self._dispatch(descriptor, token=token, context=dict(context or {}))

    def _dispatch(self, descriptor: ActionDescriptor, *, token: str, context: dict[str, Any]) -> NavResult:
        kind = descriptor_kind(descriptor)

        if isinstance(descriptor, Back):
            return self.go_back()

        if isinstance(descriptor, Quit):
            self.fire_event("quit", {"context": context})
            return NavResult(success=True, action="quit", current_state=self.current_state, details={"kind": kind})

        if isinstance(descriptor, DirectState):
            return self.transition_to(descriptor.target, context)

        if isinstance(descriptor, StateWithData):
            result = self.transition_to(descriptor.target, {**context, "data": descriptor.data})
            if result.success:
                result = replace(result, data=descriptor.data)
            return result

        if isinstance(descriptor, NamedAction):
            self.fire_event("customAction", {"action": descriptor.name, "input": token, "context": context})
            return NavResult(
                success=True,
                action=descriptor.name,
                current_state=self.current_state,
                details={"kind": kind, "input": token},
            )

        raise TypeError(f"Unhandled action descriptor: {descriptor!r}")

    # ---- graph queries ----

    def find_path(self, source: str, target: str) -> list[str] | None:
        """Shortest path by BFS, inclusive of both ends; ties follow declared edge order."""

        if source == target:
            return [source]

        queue: deque[list[str]] = deque([[source]])
        visited = {source}
        while queue:
            path = queue.popleft()
            for neighbor in self.table.successors(path[-1]):
                if neighbor == target:
                    return [*path, neighbor]
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append([*path, neighbor])
        return None
