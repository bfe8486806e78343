from __future__ import annotations

from statemachine import State, StateMachine


class PipelineLifecycle(StateMachine):
    """In-flight guard for the input pipeline.

    - idle -> processing when an input starts its pipeline run
    - processing -> idle when it finishes (success, failure or exception)

    Starting a second run while one is active is a rejected transition
    (`TransitionNotAllowed`), so callers must queue instead of interleaving.
    """

    idle = State("idle", value="idle", initial=True)
    processing = State("processing", value="processing")

    begin = idle.to(processing)
    finish = processing.to(idle)

    @property
    def busy(self) -> bool:
        return self.current_state == self.processing
