from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from e


@dataclass(frozen=True, slots=True)
class Settings:
    # Capacity of the diagnostics ring buffer of recorded inputs.
    input_history_size: int = 100
    # Inputs arriving while one is in flight wait here; beyond this they are rejected.
    max_pending_inputs: int = 32

    name_min_length: int = 2
    name_max_length: int = 18
    name_options: int = 6

    redis_url: str = "redis://localhost:6379/0"

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            input_history_size=_env_int("PADDOCK_INPUT_HISTORY_SIZE", 100),
            max_pending_inputs=_env_int("PADDOCK_MAX_PENDING_INPUTS", 32),
            name_min_length=_env_int("PADDOCK_NAME_MIN_LENGTH", 2),
            name_max_length=_env_int("PADDOCK_NAME_MAX_LENGTH", 18),
            name_options=_env_int("PADDOCK_NAME_OPTIONS", 6),
            redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        )
