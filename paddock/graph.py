from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import ValidationError

from paddock.descriptors import ActionDescriptor, parse_descriptor
from paddock.input.keys import TEXT_TOKEN, normalize_token
from paddock.models import StateConfig, StateGraphConfig, StateMetadata


class GraphConfigError(ValueError):
    pass


# The game's screens. Plain strings resolve to a state change when they name a
# declared state, to back/quit for those two words, and to a named action otherwise.
DEFAULT_STATE_GRAPH: dict[str, Any] = {
    "initial_state": "main_menu",
    "states": {
        "main_menu": {
            "transitions": ["character_creation", "load_game", "help", "training"],
            "inputs": {
                "1": "character_creation",
                "2": "load_game",
                "3": "help",
                "h": "help",
                "q": "quit",
            },
            "metadata": {"description": "Main game menu"},
        },
        "character_creation": {
            "transitions": ["training", "main_menu", "race_preview"],
            "inputs": {
                "text": "create_character",
                "g": "create_character",
                **{str(n): "create_character" for n in range(1, 7)},
                "q": "main_menu",
            },
            "metadata": {
                "description": "Create new character",
                "back_enabled": True,
                "back_target": "main_menu",
            },
        },
        "load_game": {
            "transitions": ["training", "main_menu"],
            "inputs": {
                "text": "load_game_by_number",
                **{str(n): "load_game_by_number" for n in range(1, 10)},
                "q": "main_menu",
            },
            "metadata": {
                "description": "Select save file to load",
                "back_enabled": True,
                "back_target": "main_menu",
            },
        },
        "training": {
            "transitions": ["race_preview", "help", "main_menu", "career_complete"],
            "inputs": {
                "1": "speed_training",
                "2": "stamina_training",
                "3": "power_training",
                "4": "rest_training",
                "5": "media_training",
                "s": "save_game",
                "h": "help",
                "q": "main_menu",
                "r": "show_races",
            },
            "metadata": {"description": "Training phase"},
        },
        "race_preview": {
            "transitions": ["horse_lineup"],
            "inputs": {"enter": "horse_lineup"},
            "metadata": {
                "description": "Pre-race information",
                "allow_empty": True,
                "auto_progress": "horse_lineup",
            },
        },
        "horse_lineup": {
            "transitions": ["strategy_select"],
            "inputs": {"enter": "strategy_select"},
            "metadata": {
                "description": "View competitors",
                "allow_empty": True,
                "auto_progress": "strategy_select",
            },
        },
        "strategy_select": {
            "transitions": ["race_running"],
            "inputs": {
                "1": {"target": "race_running", "data": "FRONT"},
                "2": {"target": "race_running", "data": "MID"},
                "3": {"target": "race_running", "data": "LATE"},
            },
            "metadata": {"description": "Choose racing strategy"},
        },
        "race_running": {
            "transitions": ["race_results"],
            "inputs": {"auto": "race_results"},
            "metadata": {
                "description": "Race in progress",
                "allow_empty": True,
                "auto_progress": "race_results",
            },
        },
        "race_results": {
            "transitions": ["training", "career_complete"],
            "inputs": {"enter": "training"},
            "metadata": {
                "description": "Combined race results and ceremony",
                "allow_empty": True,
                "auto_progress": "training",
            },
        },
        "podium": {
            "transitions": ["training", "career_complete"],
            "inputs": {"enter": "training"},
            "metadata": {
                "description": "Victory ceremony",
                "allow_empty": True,
                "auto_progress": "training",
            },
        },
        "help": {
            "transitions": ["training", "main_menu"],
            "inputs": {"enter": "back"},
            "metadata": {"description": "Help information", "allow_empty": True, "back_enabled": True},
        },
        "career_complete": {
            "transitions": ["main_menu", "character_creation"],
            "inputs": {"enter": "character_creation", "q": "main_menu"},
            "metadata": {
                "description": "Career completed",
                "allow_empty": True,
                "auto_progress": "character_creation",
            },
        },
    },
}


@dataclass(frozen=True, slots=True)
class StateEntry:
    name: str
    successors: tuple[str, ...]
    successor_set: frozenset[str]
    inputs: Mapping[str, ActionDescriptor]
    metadata: StateMetadata


@dataclass(frozen=True, slots=True)
class TransitionTable:
    """Immutable transition graph plus the per-state input dispatch table."""

    initial_state: str
    entries: Mapping[str, StateEntry]

    @staticmethod
    def from_config(config: StateGraphConfig | Mapping[str, Any]) -> "TransitionTable":
        if not isinstance(config, StateGraphConfig):
            try:
                config = StateGraphConfig.model_validate(config)
            except ValidationError as e:
                raise GraphConfigError(f"Invalid state graph: {e}") from e

        state_ids = frozenset(config.states)
        if config.initial_state not in state_ids:
            raise GraphConfigError(f"Unknown initial state: {config.initial_state}")

        entries: dict[str, StateEntry] = {}
        for name, state in config.states.items():
            entries[name] = _build_entry(name=name, state=state, state_ids=state_ids)

        return TransitionTable(initial_state=config.initial_state, entries=MappingProxyType(entries))

    @staticmethod
    def default() -> "TransitionTable":
        return TransitionTable.from_config(DEFAULT_STATE_GRAPH)

    def has_state(self, state: str | None) -> bool:
        return state is not None and state in self.entries

    def state_ids(self) -> tuple[str, ...]:
        return tuple(self.entries)

    def successors(self, state: str | None) -> tuple[str, ...]:
        entry = self.entries.get(state) if state is not None else None
        return entry.successors if entry else ()

    def allows(self, source: str, target: str) -> bool:
        entry = self.entries.get(source)
        return entry is not None and target in entry.successor_set

    def inputs(self, state: str | None) -> Mapping[str, ActionDescriptor] | None:
        entry = self.entries.get(state) if state is not None else None
        return entry.inputs if entry else None

    def metadata(self, state: str | None) -> StateMetadata:
        entry = self.entries.get(state) if state is not None else None
        return entry.metadata if entry else StateMetadata()


def _build_entry(*, name: str, state: StateConfig, state_ids: frozenset[str]) -> StateEntry:
    unknown = [t for t in state.transitions if t not in state_ids]
    if unknown:
        raise GraphConfigError(f"State '{name}' declares transitions to unknown states: {', '.join(unknown)}")

    meta = state.metadata
    for field_name in ("back_target", "auto_progress"):
        value = getattr(meta, field_name)
        if value is not None and value not in state_ids:
            raise GraphConfigError(f"State '{name}' {field_name} names unknown state: {value}")

    inputs: dict[str, ActionDescriptor] = {}
    for raw_token, raw_handler in state.inputs.items():
        token = TEXT_TOKEN if raw_token == TEXT_TOKEN else normalize_token(raw_token)
        if token in inputs:
            raise GraphConfigError(f"State '{name}' maps input '{token}' more than once")
        try:
            inputs[token] = parse_descriptor(raw_handler, state_ids=state_ids)
        except ValueError as e:
            raise GraphConfigError(f"State '{name}' input '{raw_token}': {e}") from e

    # dict.fromkeys keeps declared order while dropping repeats.
    successors = tuple(dict.fromkeys(state.transitions))
    return StateEntry(
        name=name,
        successors=successors,
        successor_set=frozenset(successors),
        inputs=MappingProxyType(inputs),
        metadata=meta,
    )
