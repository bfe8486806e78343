from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class InputTag(StrEnum):
    direct = "direct"
    command = "command"
    selection = "selection"
    submission = "submission"
    buffer_update = "buffer_update"
    ignore = "ignore"
    invalid = "invalid"
    error = "error"


@dataclass(frozen=True, slots=True)
class TransformedInput:
    tag: InputTag
    value: Any
    # Canonical token the value was derived from.
    token: str = ""


@dataclass(frozen=True, slots=True)
class InputRecord:
    input: str
    timestamp: datetime
    state: str | None
