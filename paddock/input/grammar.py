"""Per-screen input grammars.

A grammar is a small ordered list of token rules; the first rule whose pattern
matches wins and the fallback (always last) catches everything else. Matching
is pure: it never touches the text buffer, so each screen's behavior can be
enumerated and tested on its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Literal

from paddock.input.keys import BACKSPACE, ENTER

RuleName = Literal["submit", "command", "select", "backspace", "append", "direct", "invalid"]


@dataclass(frozen=True, slots=True)
class GrammarMatch:
    rule: RuleName
    value: Any
    token: str


def _keep(token: str) -> str:
    return token


def _nothing(token: str) -> None:  # noqa: ARG001
    return None


@dataclass(frozen=True, slots=True)
class TokenRule:
    rule: RuleName
    pattern: re.Pattern[str]
    convert: Callable[[str], Any] = _keep

    def match(self, token: str) -> GrammarMatch | None:
        if self.pattern.fullmatch(token) is None:
            return None
        return GrammarMatch(rule=self.rule, value=self.convert(token), token=token)


@dataclass(frozen=True, slots=True)
class Grammar:
    rules: tuple[TokenRule, ...]
    fallback: RuleName = "direct"

    def match(self, token: str) -> GrammarMatch:
        for rule in self.rules:
            hit = rule.match(token)
            if hit is not None:
                return hit
        return GrammarMatch(rule=self.fallback, value=token, token=token)

    @property
    def buffering(self) -> bool:
        return any(r.rule in ("append", "submit") for r in self.rules)


DIRECT_GRAMMAR = Grammar(rules=())


def name_entry_grammar(*, commands: tuple[str, ...] = ("g", "q"), charset: str = "A-Za-z ") -> Grammar:
    """Grammar of a buffered free-text name field.

    Order: Enter submits, single-letter commands (any case), digits 1-9 pick an
    offered option (zero-based value), Backspace, one allowed character is
    appended; anything else is invalid.

    Tokens arrive canonicalized, so a single space is SPACE and appends, while
    any longer all-whitespace input is Enter and submits the buffer.
    """

    command_pattern = "|".join(re.escape(c) for c in commands)
    return Grammar(
        rules=(
            TokenRule("submit", re.compile(re.escape(ENTER)), _nothing),
            TokenRule("command", re.compile(command_pattern, re.IGNORECASE), str.lower),
            TokenRule("select", re.compile(r"[1-9]"), lambda t: int(t) - 1),
            TokenRule("backspace", re.compile(re.escape(BACKSPACE)), _nothing),
            TokenRule("append", re.compile(f"[{charset}]")),
        ),
        fallback="invalid",
    )


NAME_ENTRY_GRAMMAR = name_entry_grammar()

# Screens not listed here pass their input straight to the navigation machine.
DEFAULT_GRAMMARS: dict[str, Grammar] = {
    "character_creation": NAME_ENTRY_GRAMMAR,
}


def grammar_for(state: str | None, grammars: dict[str, Grammar] | None = None) -> Grammar:
    table = DEFAULT_GRAMMARS if grammars is None else grammars
    if state is None:
        return DIRECT_GRAMMAR
    return table.get(state, DIRECT_GRAMMAR)
