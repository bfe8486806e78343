"""Drive a navigation session from the terminal.

Contract
- Inputs: one line of stdin per input event (an empty line is Enter). On the
  name screen a longer line is typed one character at a time, stopping at the
  first command letter or rejected character.
- Outputs: the current screen's help text after every successful input, and
  the error plus suggestion after every failed one.
- Save/load only work when REDIS_URL is set (a repo `.env` is honored).

Usage:
    uv run python scripts/play.py
"""

from __future__ import annotations

import asyncio
import os

from dotenv import load_dotenv

from paddock.core.results import NavResult
from paddock.infra.redis_client import create_redis
from paddock.input.grammar import grammar_for
from paddock.input.handler import UnifiedInputHandler
from paddock.input.keys import canonicalize
from paddock.navigation import NavigationMachine
from paddock.runtime import create_runtime


class PrintRenderer:
    def __init__(self) -> None:
        self.machine: NavigationMachine | None = None

    def render(self) -> None:
        if self.machine is None:
            return
        print(f"\n[{self.machine.current_state}]")
        print(self.machine.help_text())


async def send_line(handler: UnifiedInputHandler, line: str) -> list[NavResult]:
    grammar = grammar_for(handler.machine.current_state, handler.grammars)
    if not grammar.buffering or len(line) <= 1:
        return [await handler.process_input(line)]

    results: list[NavResult] = []
    for ch in line:
        if grammar.match(canonicalize(ch)).rule == "command":
            break
        result = await handler.process_input(ch)
        results.append(result)
        if not result.success:
            break
    return results


async def main() -> None:
    load_dotenv(override=False)
    renderer = PrintRenderer()
    r = create_redis() if os.environ.get("REDIS_URL") else None
    runtime = create_runtime(r=r, renderer=renderer)
    renderer.machine = runtime.machine
    renderer.render()

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        results = await send_line(runtime.handler, line)
        if not results:
            print("! Commands are typed on their own line")
            continue
        result = results[-1]
        if result.action == "quit":
            break
        if not result.success:
            print(f"! {result.error}")
            if result.suggestion:
                print(f"  {result.suggestion}")
        elif result.action == "buffer_update":
            print(f"  name: {runtime.handler.text_buffer}")
        elif result.action == "generate_options":
            for idx, name in enumerate(runtime.handler.option_list, start=1):
                print(f"  {idx}. {name}")


if __name__ == "__main__":
    asyncio.run(main())
