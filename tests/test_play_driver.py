from __future__ import annotations

import pytest

from paddock.input.handler import UnifiedInputHandler
from paddock.navigation import NavigationMachine
from scripts.play import send_line


def _handler(actions, state: str = "main_menu") -> UnifiedInputHandler:
    m = NavigationMachine()
    m.transition_to("main_menu")
    if state != "main_menu":
        m.transition_to(state)
    return UnifiedInputHandler(m, actions=actions.registry)


@pytest.mark.asyncio
async def test_a_typed_name_line_fills_the_buffer(actions) -> None:
    handler = _handler(actions, "character_creation")

    results = await send_line(handler, "Storm")
    assert [r.action for r in results] == ["buffer_update"] * 5
    assert handler.text_buffer == "Storm"

    [result] = await send_line(handler, "")
    assert result.success
    assert result.action == "create_character"
    assert [c.argument for c in actions.calls] == ["Storm"]
    assert handler.machine.current_state == "training"


@pytest.mark.asyncio
async def test_typing_stops_at_a_command_letter(actions) -> None:
    handler = _handler(actions, "character_creation")

    results = await send_line(handler, "Strong")
    assert len(results) == 5
    assert handler.text_buffer == "Stron"
    assert handler.option_list == ()


@pytest.mark.asyncio
async def test_typing_stops_at_the_first_rejected_character(actions) -> None:
    handler = _handler(actions, "character_creation")

    results = await send_line(handler, "ab!cd")
    assert len(results) == 3
    assert not results[-1].success
    assert handler.text_buffer == "ab"


@pytest.mark.asyncio
async def test_single_characters_and_other_screens_send_the_line_whole(actions) -> None:
    handler = _handler(actions, "character_creation")
    [result] = await send_line(handler, "g")
    assert result.action == "generate_options"

    handler = _handler(actions)
    [result] = await send_line(handler, "1")
    assert result.success
    assert handler.machine.current_state == "character_creation"
