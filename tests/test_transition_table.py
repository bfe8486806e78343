from __future__ import annotations

import pytest

from paddock.descriptors import Back, DirectState, NamedAction, Quit, StateWithData, descriptor_kind, parse_descriptor
from paddock.graph import DEFAULT_STATE_GRAPH, GraphConfigError, TransitionTable


def _graph(states: dict, initial: str = "a") -> dict:
    return {"initial_state": initial, "states": states}


def test_default_table_declares_every_screen() -> None:
    table = TransitionTable.default()

    assert table.initial_state == "main_menu"
    assert set(table.state_ids()) == set(DEFAULT_STATE_GRAPH["states"])
    assert table.successors("main_menu") == ("character_creation", "load_game", "help", "training")
    # podium is declared but nothing leads to it.
    assert all(not table.allows(s, "podium") for s in table.state_ids())


def test_default_inputs_resolve_to_descriptors() -> None:
    table = TransitionTable.default()

    assert table.inputs("main_menu")["1"] == DirectState("character_creation")
    assert table.inputs("main_menu")["q"] == Quit()
    assert table.inputs("help")["enter"] == Back()
    assert table.inputs("training")["1"] == NamedAction("speed_training")
    assert table.inputs("strategy_select")["2"] == StateWithData("race_running", "MID")
    assert table.inputs("character_creation")["text"] == NamedAction("create_character")


def test_unknown_state_lookups_are_empty() -> None:
    table = TransitionTable.default()

    assert table.successors("nowhere") == ()
    assert table.successors(None) == ()
    assert table.inputs("nowhere") is None
    assert table.allows("nowhere", "main_menu") is False
    assert table.metadata("nowhere").allow_empty is False


def test_rejects_transition_to_undeclared_state() -> None:
    with pytest.raises(GraphConfigError) as e:
        TransitionTable.from_config(_graph({"a": {"transitions": ["b"]}}))
    assert "unknown states: b" in str(e.value)


def test_rejects_unknown_initial_state() -> None:
    with pytest.raises(GraphConfigError) as e:
        TransitionTable.from_config(_graph({"a": {}}, initial="z"))
    assert "Unknown initial state" in str(e.value)


def test_rejects_unknown_back_target_and_auto_progress() -> None:
    with pytest.raises(GraphConfigError):
        TransitionTable.from_config(_graph({"a": {"metadata": {"back_target": "z"}}}))
    with pytest.raises(GraphConfigError):
        TransitionTable.from_config(_graph({"a": {"metadata": {"auto_progress": "z"}}}))


def test_rejects_data_descriptor_with_unknown_target() -> None:
    with pytest.raises(GraphConfigError) as e:
        TransitionTable.from_config(_graph({"a": {"inputs": {"1": {"target": "z", "data": 1}}}}))
    assert "input '1'" in str(e.value)


def test_rejects_tokens_that_collide_after_normalization() -> None:
    with pytest.raises(GraphConfigError) as e:
        TransitionTable.from_config(_graph({"a": {"inputs": {"Q": "quit", "q": "quit"}}}))
    assert "more than once" in str(e.value)


def test_malformed_config_is_a_graph_config_error() -> None:
    with pytest.raises(GraphConfigError):
        TransitionTable.from_config({"states": {"a": {}}})
    # Still a ValueError for callers that catch broadly.
    with pytest.raises(ValueError):
        TransitionTable.from_config(_graph({"a": {"transitions": "b"}}))


def test_duplicate_transitions_keep_first_position() -> None:
    table = TransitionTable.from_config(
        _graph({"a": {"transitions": ["c", "b", "c"]}, "b": {}, "c": {}})
    )
    assert table.successors("a") == ("c", "b")


def test_token_keys_are_normalized() -> None:
    table = TransitionTable.from_config(_graph({"a": {"inputs": {"H": "a", "": "a"}}}))
    assert set(table.inputs("a")) == {"h", "enter"}


def test_parse_descriptor_kinds() -> None:
    ids = frozenset({"a", "b"})

    assert parse_descriptor("back", state_ids=ids) == Back()
    assert parse_descriptor("quit", state_ids=ids) == Quit()
    assert parse_descriptor("b", state_ids=ids) == DirectState("b")
    assert parse_descriptor("do_thing", state_ids=ids) == NamedAction("do_thing")
    assert parse_descriptor({"target": "a", "data": [1]}, state_ids=ids) == StateWithData("a", [1])

    with pytest.raises(ValueError):
        parse_descriptor({"data": 1}, state_ids=ids)


def test_descriptor_kind_names() -> None:
    assert [descriptor_kind(d) for d in (DirectState("a"), StateWithData("a", 1), NamedAction("x"), Back(), Quit())] == [
        "direct-state",
        "state-with-data",
        "named-action",
        "back",
        "quit",
    ]
