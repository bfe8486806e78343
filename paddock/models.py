from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StateMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = ""
    allow_empty: bool = False
    back_enabled: bool = False
    back_target: str | None = None
    # Where Enter leads on screens that accept an empty input.
    auto_progress: str | None = None


class StateConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Declared order matters: it breaks ties between equal-length paths.
    transitions: list[str] = Field(default_factory=list)
    inputs: dict[str, str | dict[str, Any]] = Field(default_factory=dict)
    metadata: StateMetadata = Field(default_factory=StateMetadata)


class StateGraphConfig(BaseModel):
    """Declarative description of every screen of a session."""

    model_config = ConfigDict(frozen=True)

    initial_state: str
    states: dict[str, StateConfig]


class SessionSnapshot(BaseModel):
    """Read-only view of a session, handed to anything outside the core."""

    model_config = ConfigDict(frozen=True)

    current_state: str | None
    history: tuple[str, ...] = ()
    taken_at: datetime
    metadata: dict[str, str] = Field(default_factory=dict)
