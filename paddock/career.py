"""In-memory stand-in for the game-logic collaborator.

It computes no stats: it remembers the character name, counts training turns
and raises the race/career signals the input pipeline reacts to. Save and load
go through `paddock.session_store` when a Redis client is supplied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import redis

from paddock.collaborators import ActionOutcome, ActionRegistry, ActionRequest
from paddock.models import SessionSnapshot
from paddock.session_store import list_snapshots, load_snapshot, save_snapshot

logger = logging.getLogger(__name__)

TRAINING_ACTIONS: dict[str, str] = {
    "speed_training": "speed",
    "stamina_training": "stamina",
    "power_training": "power",
    "rest_training": "rest",
    "media_training": "media",
}


@dataclass(slots=True)
class CareerProgress:
    name: str
    turn: int = 1
    trainings: list[str] = field(default_factory=list)


class CareerActions:
    def __init__(
        self,
        *,
        race_turns: tuple[int, ...] = (4, 7, 10, 12),
        max_turns: int = 12,
        r: redis.Redis | None = None,
        profile: str = "default",
        snapshot: Callable[..., SessionSnapshot] | None = None,
    ) -> None:
        self.race_turns = race_turns
        self.max_turns = max_turns
        self.r = r
        self.profile = profile
        self.snapshot = snapshot
        self.progress: CareerProgress | None = None

    def register(self, registry: ActionRegistry | None = None) -> ActionRegistry:
        registry = registry or ActionRegistry()
        registry.register("create_character", self.create_character)
        for action in TRAINING_ACTIONS:
            registry.register(action, self.train)
        registry.register("show_races", self.show_races)
        registry.register("save_game", self.save_game)
        registry.register("load_game_by_number", self.load_game_by_number)
        return registry

    async def create_character(self, request: ActionRequest) -> ActionOutcome:
        name = str(request.argument or request.input).strip()
        if not name:
            return ActionOutcome.failure("A character needs a name")
        self.progress = CareerProgress(name=name)
        logger.info("Created character %s", name)
        return ActionOutcome.ok(character_created=True, metadata={"character": name})

    async def train(self, request: ActionRequest) -> ActionOutcome:
        if self.progress is None:
            return ActionOutcome.failure("No active character")

        if self.progress.turn > self.max_turns:
            return ActionOutcome.ok(career_complete=True, metadata={"turn": self.progress.turn})

        kind = TRAINING_ACTIONS[request.name]
        self.progress.trainings.append(kind)
        turn = self.progress.turn
        self.progress.turn += 1
        return ActionOutcome.ok(
            race_ready=turn in self.race_turns,
            career_complete=self.progress.turn > self.max_turns and turn not in self.race_turns,
            metadata={"training": kind, "turn": turn},
        )

    async def show_races(self, request: ActionRequest) -> ActionOutcome:  # noqa: ARG002
        current = self.progress.turn if self.progress else 1
        return ActionOutcome.ok(metadata={"upcoming_race_turns": [t for t in self.race_turns if t >= current]})

    async def save_game(self, request: ActionRequest) -> ActionOutcome:  # noqa: ARG002
        if self.r is None or self.snapshot is None:
            return ActionOutcome.failure("Saving is not configured")
        if self.progress is None:
            return ActionOutcome.failure("No active character")

        snap = self.snapshot(character=self.progress.name, turn=str(self.progress.turn))
        slot = save_snapshot(r=self.r, profile=self.profile, snapshot=snap)
        return ActionOutcome.ok(metadata={"slot": slot})

    async def load_game_by_number(self, request: ActionRequest) -> ActionOutcome:
        if self.r is None:
            return ActionOutcome.failure("Loading is not configured")

        try:
            slot = int(request.input)
        except ValueError:
            return ActionOutcome.failure("Invalid save file number")

        snap = load_snapshot(r=self.r, profile=self.profile, slot=slot)
        if snap is None:
            available = len(list_snapshots(r=self.r, profile=self.profile))
            return ActionOutcome.failure(f"No save in slot {slot} ({available} available)")

        name = snap.metadata.get("character", "")
        self.progress = CareerProgress(name=name, turn=int(snap.metadata.get("turn", "1")))
        return ActionOutcome.ok(game_loaded=True, metadata={"slot": slot, "character": name})
