"""Action descriptors: the resolved meaning of an input token within a state.

The declarative graph writes these as plain strings or `{target, data}` dicts;
`parse_descriptor` resolves them once, when the dispatch table is built, so the
machine never has to inspect raw handler types at input time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

BACK = "back"
QUIT = "quit"


@dataclass(frozen=True, slots=True)
class DirectState:
    target: str


@dataclass(frozen=True, slots=True)
class StateWithData:
    target: str
    data: Any


@dataclass(frozen=True, slots=True)
class NamedAction:
    name: str


@dataclass(frozen=True, slots=True)
class Back:
    pass


@dataclass(frozen=True, slots=True)
class Quit:
    pass


ActionDescriptor = Union[DirectState, StateWithData, NamedAction, Back, Quit]


def descriptor_kind(descriptor: ActionDescriptor) -> str:
    if isinstance(descriptor, DirectState):
        return "direct-state"
    if isinstance(descriptor, StateWithData):
        return "state-with-data"
    if isinstance(descriptor, NamedAction):
        return "named-action"
    if isinstance(descriptor, Back):
        return "back"
    if isinstance(descriptor, Quit):
        return "quit"
    raise TypeError(f"Unknown action descriptor: {descriptor!r}")


def parse_descriptor(raw: str | Mapping[str, Any], *, state_ids: frozenset[str]) -> ActionDescriptor:
    """Resolve one declarative input-map entry.

    - "back" / "quit" -> Back / Quit
    - a declared state id -> DirectState
    - any other string -> NamedAction
    - {"target": ..., "data": ...} -> StateWithData (target must be a declared state)
    """

    if isinstance(raw, str):
        if raw == BACK:
            return Back()
        if raw == QUIT:
            return Quit()
        if raw in state_ids:
            return DirectState(target=raw)
        return NamedAction(name=raw)

    target = raw.get("target")
    if not isinstance(target, str) or target not in state_ids:
        raise ValueError(f"Descriptor target must be a declared state (got {target!r})")
    return StateWithData(target=target, data=raw.get("data"))
