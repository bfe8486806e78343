from __future__ import annotations

# Canonical tokens for named keys.
ENTER = "enter"
BACKSPACE = "backspace"
SPACE = " "

# Input-map wildcard consulted for free-form text.
TEXT_TOKEN = "text"

RESERVED_WORDS = frozenset({"enter", "back", "quit", "help"})

_NAMED_KEYS: dict[str, str] = {
    "": ENTER,
    "\n": ENTER,
    "\r": ENTER,
    "\r\n": ENTER,
    "enter": ENTER,
    "return": ENTER,
    " ": SPACE,
    "space": SPACE,
    "\b": BACKSPACE,
    "\x7f": BACKSPACE,
    "backspace": BACKSPACE,
    "delete": BACKSPACE,
}


def canonicalize(raw: object) -> str:
    """Map named keys and blank input to canonical tokens, keeping case otherwise.

    A lone space survives as SPACE so it can be typed into a name; any other
    all-whitespace input is Enter.
    """

    text = "" if raw is None else str(raw)
    named = _NAMED_KEYS.get(text.lower())
    if named is not None:
        return named

    stripped = text.strip()
    if not stripped:
        return ENTER
    return _NAMED_KEYS.get(stripped.lower(), stripped)


def normalize_token(raw: object) -> str:
    """Canonicalize, then lower-case: the form input maps are keyed by.

    Input maps are trimmed, so a lone space is Enter here; only the name entry
    grammar sees SPACE.
    """

    token = canonicalize(raw)
    if token == SPACE:
        return ENTER
    return token.lower()


def is_text_input(token: str) -> bool:
    """Free text: longer than one character, not numeric, not a reserved word."""

    return len(token) > 1 and not token.isdigit() and token not in RESERVED_WORDS
