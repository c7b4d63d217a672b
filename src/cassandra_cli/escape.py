"""Escaping between literal syntax and raw text."""

from __future__ import annotations

# raw character -> escape letter
_ESCAPES = {
    "\b": "b",
    "\t": "t",
    "\n": "n",
    "\f": "f",
    "\r": "r",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

_UNESCAPES = {letter: raw for raw, letter in _ESCAPES.items()}


def escape(text: str) -> str:
    """Replace each escapable character with its backslash sequence."""
    return "".join(f"\\{_ESCAPES[ch]}" if ch in _ESCAPES else ch for ch in text)


def unescape(text: str) -> str:
    """Decode backslash sequences, stripping one layer of surrounding single quotes.

    A backslash followed by a character outside the escape set is kept
    verbatim, as is a trailing lone backslash.
    """
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        text = text[1:-1]

    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt in _UNESCAPES:
                out.append(_UNESCAPES[nxt])
                i += 2
                continue
        out.append(ch)
        i += 1
    return "".join(out)
