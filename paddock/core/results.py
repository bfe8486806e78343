from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    invalid_transition = "InvalidTransition"
    no_handler_for_input = "NoHandlerForInput"
    validation_failure = "ValidationFailure"
    no_previous_state = "NoPreviousState"
    queued_input = "QueuedInput"
    pipeline_exception = "PipelineException"
    # Downstream collaborator reported success=False (or the action is not registered).
    action_failed = "ActionFailed"
    queue_full = "QueueFull"


@dataclass(frozen=True, slots=True)
class NavResult:
    """Outcome of any navigation or input operation.

    Failures are values: callers inspect `success` / `error_kind` instead of catching.
    """

    success: bool
    action: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    current_state: str | None = None
    allowed_transitions: tuple[str, ...] = ()
    available_inputs: tuple[str, ...] = ()
    suggestion: str | None = None
    data: Any = None
    queued: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def fail(kind: ErrorKind, error: str, **kwargs: Any) -> "NavResult":
        return NavResult(success=False, error=error, error_kind=kind, **kwargs)

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "action": self.action,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "current_state": self.current_state,
            "allowed_transitions": list(self.allowed_transitions),
            "available_inputs": list(self.available_inputs),
            "suggestion": self.suggestion,
            "data": self.data,
            "queued": self.queued,
            "details": dict(self.details),
        }
