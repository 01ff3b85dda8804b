"""Delimiters and escaping shared by the filter string format."""

from __future__ import annotations

BEGIN_GROUP = "<"
END_GROUP = ">"
ESCAPE = "\\"
CODE_SEPARATOR = ":"
OPTION_SEPARATOR = ","

_ESCAPED = {BEGIN_GROUP, END_GROUP, ESCAPE}
# Line breaks are escaped as letters; a filter string never spans lines.
_LINE_BREAKS = {"\n": "n", "\r": "r"}
_LINE_BREAK_LETTERS = {letter: ch for ch, letter in _LINE_BREAKS.items()}


def escape(text: str) -> str:
    """Escape the characters that delimit filters and the line breaks."""
    out = []
    for ch in text:
        if ch in _ESCAPED:
            out.append(ESCAPE + ch)
        elif ch in _LINE_BREAKS:
            out.append(ESCAPE + _LINE_BREAKS[ch])
        else:
            out.append(ch)
    return "".join(out)


def unescape(text: str) -> str:
    """
    Undo :func:`escape`.

    Raises:
        ValueError: If ``text`` ends with a lone escape character.
    """
    out = []
    chars = iter(text)
    for ch in chars:
        if ch == ESCAPE:
            nxt = next(chars, None)
            if nxt is None:
                raise ValueError("dangling escape character")
            out.append(_LINE_BREAK_LETTERS.get(nxt, nxt))
        else:
            out.append(ch)
    return "".join(out)


def join_options(options) -> str:
    """Join option values with commas, escaping commas and escapes inside values."""
    escaped = (
        option.replace(ESCAPE, ESCAPE + ESCAPE).replace(OPTION_SEPARATOR, ESCAPE + OPTION_SEPARATOR)
        for option in options
    )
    return OPTION_SEPARATOR.join(escaped)


def split_options(text: str) -> list[str]:
    """Inverse of :func:`join_options`; blank entries are dropped."""
    options: list[str] = []
    current: list[str] = []
    chars = iter(text)
    for ch in chars:
        if ch == ESCAPE:
            nxt = next(chars, None)
            if nxt is None:
                raise ValueError("dangling escape character")
            current.append(nxt)
        elif ch == OPTION_SEPARATOR:
            options.append("".join(current))
            current = []
        else:
            current.append(ch)
    options.append("".join(current))
    return [option.strip() for option in options if option.strip()]
