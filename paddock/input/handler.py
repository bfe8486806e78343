"""The single entry point for raw input.

Every input, whatever its source, runs the same pipeline exactly once:

    record -> serialize -> normalize -> transform -> validate -> route -> post-process -> drain

Inputs that arrive while another one is in flight are queued (FIFO) and run
later on a dedicated drain task, never on the caller's stack.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from paddock.collaborators import (
    ActionOutcome,
    ActionRegistry,
    ActionRequest,
    NameSuggester,
    Renderer,
    follow_up_targets,
)
from paddock.config import Settings
from paddock.core.events import NavEvent
from paddock.core.results import ErrorKind, NavResult
from paddock.descriptors import NamedAction
from paddock.fsm import PipelineLifecycle
from paddock.input.grammar import DEFAULT_GRAMMARS, Grammar, grammar_for
from paddock.input.keys import TEXT_TOKEN, canonicalize
from paddock.input.types import InputRecord, InputTag, TransformedInput
from paddock.input.validators import (
    InputValidationError,
    ValidationContext,
    ValidatorPipeline,
    name_entry_pipeline,
    pipeline_for_state,
)
from paddock.names import NameGenerator
from paddock.navigation import NavigationMachine

logger = logging.getLogger(__name__)

INPUT_SUGGESTIONS: dict[str, str] = {
    "main_menu": "Try: 1 (New Career), 2 (Load Game), 3 or H (Help), Q (Quit)",
    "character_creation": "Try: Type a name, G (Generate names), Q (Back to menu)",
    "load_game": "Try: 1-9 (Save slot), Q (Back to menu)",
    "training": "Try: 1-5 (Training), S (Save), R (Races), H (Help), Q (Main menu)",
    "strategy_select": "Try: 1 (Front runner), 2 (Mid pack), 3 (Late closer)",
    "race_preview": "Press Enter to continue",
    "horse_lineup": "Press Enter to continue",
    "race_results": "Press Enter to continue",
    "podium": "Press Enter to continue",
    "help": "Press Enter to go back",
    "career_complete": "Press Enter to start a new career, Q for the main menu",
}
DEFAULT_SUGGESTION = "Check available inputs above"


class UnifiedInputHandler:
    def __init__(
        self,
        machine: NavigationMachine,
        *,
        actions: ActionRegistry | None = None,
        renderer: Renderer | None = None,
        names: NameSuggester | None = None,
        settings: Settings | None = None,
        grammars: dict[str, Grammar] | None = None,
        validators: dict[str, ValidatorPipeline] | None = None,
        suggestions: dict[str, str] | None = None,
    ) -> None:
        self.machine = machine
        self.actions = actions or ActionRegistry()
        self.renderer = renderer
        self.settings = settings or Settings()
        self.names = names or NameGenerator(max_length=self.settings.name_max_length)
        self.grammars = DEFAULT_GRAMMARS if grammars is None else grammars
        if validators is None:
            pipeline = name_entry_pipeline(
                min_length=self.settings.name_min_length,
                max_length=self.settings.name_max_length,
            )
            validators = {state: pipeline for state, g in self.grammars.items() if g.buffering}
        self.validators = validators
        self.suggestions = INPUT_SUGGESTIONS if suggestions is None else suggestions

        # Buffering-screen state; cleared on every exit from that screen.
        self._text_buffer = ""
        self._option_list: list[str] = []

        self._lifecycle = PipelineLifecycle()
        self._pending: deque[str] = deque()
        self._history: deque[InputRecord] = deque(maxlen=self.settings.input_history_size)
        self._drain_task: asyncio.Task[None] | None = None
        self._idle = asyncio.Event()
        self._idle.set()

        self.machine.add_event_listener("stateChanged", self._on_state_changed)
        self.machine.add_event_listener("reset", self._on_reset)

    # ---- diagnostics ----

    @property
    def text_buffer(self) -> str:
        return self._text_buffer

    @property
    def option_list(self) -> tuple[str, ...]:
        return tuple(self._option_list)

    @property
    def queue_depth(self) -> int:
        return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return self._lifecycle.busy

    def recent_inputs(self, limit: int = 10) -> list[InputRecord]:
        if limit <= 0:
            return []
        return list(self._history)[-limit:]

    def debug_info(self) -> dict[str, Any]:
        return {
            "current_state": self.machine.current_state,
            "is_processing": self.is_processing,
            "queue_depth": self.queue_depth,
            "text_buffer": self._text_buffer,
            "option_count": len(self._option_list),
            "recent_inputs": [
                {"input": r.input, "timestamp": r.timestamp.isoformat(), "state": r.state}
                for r in self.recent_inputs(5)
            ],
        }

    # ---- entry point ----

    async def process_input(self, raw_input: object) -> NavResult:
        raw = "" if raw_input is None else str(raw_input)
        self._record(raw)

        # Anything already waiting goes first, so a new input joins the back of the line.
        if self._lifecycle.busy or self._pending:
            if len(self._pending) >= self.settings.max_pending_inputs:
                return self._failure(ErrorKind.queue_full, "Too many pending inputs; try again", self.machine.current_state)
            self._pending.append(raw)
            self._idle.clear()
            return NavResult(
                success=False,
                error="Input queued",
                error_kind=ErrorKind.queued_input,
                current_state=self.machine.current_state,
                queued=True,
                details={"queue_depth": len(self._pending)},
            )

        return await self._run(raw)

    async def join(self) -> None:
        """Wait until the in-flight input and every queued one have been processed."""

        await self._idle.wait()

    def cancel_pending(self) -> int:
        """Drop queued inputs that have not started; returns how many were dropped."""

        dropped = len(self._pending)
        self._pending.clear()
        if not self._lifecycle.busy:
            self._idle.set()
        return dropped

    def clear_buffer(self) -> None:
        self._text_buffer = ""
        self._option_list = []

    # ---- serialization ----

    async def _run(self, raw: str) -> NavResult:
        self._lifecycle.begin()
        self._idle.clear()
        try:
            result = await self._pipeline(raw)
        except Exception as e:
            logger.exception("Input pipeline failed for %r in state %s", raw, self.machine.current_state)
            result = self._failure(
                ErrorKind.pipeline_exception,
                f"Input processing failed: {e}",
                self.machine.current_state,
            )
        finally:
            self._lifecycle.finish()
            if self._pending:
                self._schedule_drain()
            else:
                self._idle.set()

        self.machine.fire_event("inputProcessed", {"input": raw, "result": result})
        return result

    def _schedule_drain(self) -> None:
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending and not self._lifecycle.busy:
            await self._run(self._pending.popleft())
        if not self._pending and not self._lifecycle.busy:
            self._idle.set()

    def _record(self, raw: str) -> None:
        self._history.append(InputRecord(input=raw, timestamp=datetime.now(tz=UTC), state=self.machine.current_state))

    # ---- pipeline ----

    async def _pipeline(self, raw: str) -> NavResult:
        token = canonicalize(raw)
        state = self.machine.current_state

        item = self._transform(token, state)

        ctx = ValidationContext(state=state, option_count=len(self._option_list))
        try:
            pipeline_for_state(state, self.validators).validate(ctx=ctx, item=item)
        except InputValidationError as e:
            return self._failure(ErrorKind.validation_failure, str(e), state)

        result = await self._route(item, state)
        return await self._post_process(result, state)

    def _transform(self, token: str, state: str | None) -> TransformedInput:
        match = grammar_for(state, self.grammars).match(token)

        if match.rule == "direct":
            return TransformedInput(InputTag.direct, token, token)

        if match.rule == "submit":
            text = self._text_buffer.strip()
            if not text:
                return TransformedInput(InputTag.error, "Please enter a name first", token)
            return TransformedInput(InputTag.submission, text, token)

        if match.rule == "command":
            return TransformedInput(InputTag.command, match.value, token)

        if match.rule == "select":
            return TransformedInput(InputTag.selection, match.value, token)

        if match.rule == "backspace":
            if not self._text_buffer:
                return TransformedInput(InputTag.ignore, None, token)
            self._text_buffer = self._text_buffer[:-1]
            return TransformedInput(InputTag.buffer_update, "backspace", token)

        if match.rule == "append":
            self._text_buffer += match.value
            return TransformedInput(InputTag.buffer_update, "char_added", token)

        return TransformedInput(InputTag.invalid, token, token)

    async def _route(self, item: TransformedInput, state: str | None) -> NavResult:
        if item.tag == InputTag.command:
            return await self._handle_command(item.value, state)

        if item.tag == InputTag.selection:
            name = self._option_list[item.value]
            result = await self._run_buffer_action(state, token=item.token, argument=name)
            self.clear_buffer()
            return result

        if item.tag == InputTag.submission:
            result = await self._run_buffer_action(state, token=item.token, argument=item.value)
            self.clear_buffer()
            return result

        if item.tag == InputTag.buffer_update:
            return NavResult(
                success=True,
                action="buffer_update",
                current_state=state,
                details={"update": item.value, "buffer": self._text_buffer},
            )

        if item.tag == InputTag.ignore:
            return NavResult(success=True, action="ignore", current_state=state)

        if item.tag == InputTag.direct:
            return await self._handle_direct(item.token, state)

        return self._failure(ErrorKind.pipeline_exception, f"Unknown input type: {item.tag}", state)

    async def _handle_command(self, command: str, state: str | None) -> NavResult:
        if command == "g":
            self._option_list = self.names.generate_options(self.settings.name_options)
            return NavResult(
                success=True,
                action="generate_options",
                current_state=state,
                details={"options": list(self._option_list)},
            )

        if command == "q":
            self.clear_buffer()
            target = self.machine.metadata(state).back_target
            if target is None:
                return self.machine.go_back()
            return self.machine.transition_to(target, {"cancel": True})

        return self._failure(ErrorKind.no_handler_for_input, f'Command "{command}" not valid in {state}', state)

    async def _run_buffer_action(self, state: str | None, *, token: str, argument: Any) -> NavResult:
        # The screen's input map names the downstream action: the token's own
        # entry when it has one, otherwise the free-text wildcard.
        descriptor = self.machine.resolve_input(token.lower(), state)
        if not isinstance(descriptor, NamedAction):
            inputs = self.machine.table.inputs(state) or {}
            descriptor = inputs.get(TEXT_TOKEN)
        if not isinstance(descriptor, NamedAction):
            return self._failure(ErrorKind.no_handler_for_input, f"No action configured for {state}", state)

        return await self._execute_action(descriptor.name, state, token=token, argument=argument)

    async def _handle_direct(self, token: str, state: str | None) -> NavResult:
        result = self.machine.handle_input(token, {"session_id": self.machine.session_id})
        if result.success and result.details.get("kind") == "named-action":
            return await self._execute_action(
                str(result.action),
                state,
                token=str(result.details.get("input", token)),
                argument=None,
            )
        return result

    async def _execute_action(self, name: str, state: str | None, *, token: str, argument: Any) -> NavResult:
        request = ActionRequest(
            name=name,
            state=state,
            input=token,
            argument=argument,
            context={"session_id": self.machine.session_id},
        )
        outcome: ActionOutcome = await self.actions.execute(request)
        if not outcome.success:
            return self._failure(ErrorKind.action_failed, outcome.error or f"Action '{name}' failed", state)

        return NavResult(
            success=True,
            action=name,
            current_state=self.machine.current_state,
            data=argument,
            details={**outcome.metadata, "follow_ups": follow_up_targets(outcome)},
        )

    async def _post_process(self, result: NavResult, state: str | None) -> NavResult:
        if not result.success:
            return self._decorate_failure(result, state)

        for target in result.details.get("follow_ups", ()):
            follow = self.machine.transition_to(target, {"follow_up": True, "action": result.action})
            if not follow.success:
                logger.warning("Follow-up transition to %s after %s was rejected: %s", target, result.action, follow.error)

        await self.request_render()
        return replace(result, current_state=self.machine.current_state)

    async def request_render(self) -> None:
        self.machine.fire_event("render", {"state": self.machine.current_state})
        if self.renderer is None:
            return
        try:
            rendered = self.renderer.render()
            if inspect.isawaitable(rendered):
                await rendered
        except Exception:
            logger.exception("Renderer failed in state %s", self.machine.current_state)

    # ---- failures ----

    def suggestion_for(self, state: str | None) -> str:
        if state is None:
            return DEFAULT_SUGGESTION
        return self.suggestions.get(state, DEFAULT_SUGGESTION)

    def _failure(self, kind: ErrorKind, error: str, state: str | None) -> NavResult:
        return NavResult.fail(
            kind,
            error,
            current_state=state,
            available_inputs=self.machine.available_inputs(state),
            suggestion=self.suggestion_for(state),
        )

    def _decorate_failure(self, result: NavResult, state: str | None) -> NavResult:
        where = result.current_state if result.current_state is not None else state
        return replace(
            result,
            current_state=where,
            available_inputs=result.available_inputs or self.machine.available_inputs(where),
            suggestion=result.suggestion or self.suggestion_for(where),
        )

    # ---- listeners ----

    def _on_state_changed(self, event: NavEvent) -> None:
        source = event.payload.get("from")
        if source is None or source == event.payload.get("to"):
            return
        if grammar_for(source, self.grammars).buffering:
            self.clear_buffer()

    def _on_reset(self, event: NavEvent) -> None:  # noqa: ARG002
        self.clear_buffer()
