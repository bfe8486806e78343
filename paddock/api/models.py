from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SessionCreateRequest(BaseModel):
    profile: str = Field("default", min_length=1, max_length=64)
    # For reproducible name suggestions.
    seed: int | None = None


class InputRequest(BaseModel):
    input: str = Field("", max_length=256)


class SessionResponse(BaseModel):
    session_id: str
    current_state: str | None
    history: list[str]
    available_inputs: list[str]
    available_transitions: list[str]
    help_text: str
    text_buffer: str = ""
    option_list: list[str] = Field(default_factory=list)
    queue_depth: int = 0


class InputResultResponse(BaseModel):
    success: bool
    action: str | None = None
    error: str | None = None
    error_kind: str | None = None
    current_state: str | None = None
    allowed_transitions: list[str] = Field(default_factory=list)
    available_inputs: list[str] = Field(default_factory=list)
    suggestion: str | None = None
    data: Any = None
    queued: bool = False
    details: dict[str, Any] = Field(default_factory=dict)


class PathResponse(BaseModel):
    source: str | None
    target: str
    path: list[str] | None


class RecentInputsResponse(BaseModel):
    inputs: list[dict[str, Any]]
