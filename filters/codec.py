"""
Filter string and structured (JSON) formats.

String form::

    <AND <cmc:≤3> <OR <c:contains any of"G"> <type:contains any of"land">>>

A leaf is ``<code:body>`` (``<*>`` and ``<0>`` take no body); a group is
``<AND ...>`` or ``<OR ...>`` followed by whitespace separated children.
Inside a body the characters ``<``, ``>`` and ``\\`` are escaped with a
backslash, and line breaks are written ``\\n`` and ``\\r``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from filters.attributes import CardAttribute, ValueKind
from filters.errors import FilterDeserializationError, MalformedFilterStringError
from filters.factory import create_filter
from filters.filter import Filter
from filters.grammar import BEGIN_GROUP, CODE_SEPARATOR, END_GROUP, ESCAPE, unescape
from filters.group import GROUP_TYPE, FilterGroup, GroupMode

_GROUP_HEAD = re.compile(r"^\s*(AND|OR)(?=\s|<|$)", re.IGNORECASE)


def serialize(filter: Filter) -> str:
    return str(filter)


def parse(text: str) -> Filter:
    """
    Parse a filter string.

    Raises:
        MalformedFilterStringError: If delimiters are unbalanced, a group is
            empty, or there is text outside of the filters.
        UnknownFieldError: If a leaf uses an unknown code.
        InvalidOperandError: If a leaf body does not parse for its attribute.
        InvalidContainmentModeError: If a leaf body starts with an unusable mode.
    """
    inner = _strip_enclosing(text)
    head = _GROUP_HEAD.match(inner)
    if head:
        children = [parse(child) for child in _split_children(text, inner[head.end() :])]
        if not children:
            raise MalformedFilterStringError(text, "empty group")
        return FilterGroup(children, GroupMode.parse(head.group(1)))
    return _parse_leaf(text, inner)


def _matching_end(text: str, start: int, original: str) -> int:
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE:
            if i + 1 >= len(text):
                raise MalformedFilterStringError(original, "dangling escape character")
            i += 2
            continue
        if ch == BEGIN_GROUP:
            depth += 1
        elif ch == END_GROUP:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise MalformedFilterStringError(original, f"unclosed {BEGIN_GROUP!r}")


def _strip_enclosing(text: str) -> str:
    stripped = text.strip()
    if not stripped.startswith(BEGIN_GROUP):
        raise MalformedFilterStringError(text, f"expected {BEGIN_GROUP!r}")
    end = _matching_end(stripped, 0, text)
    if end != len(stripped) - 1:
        raise MalformedFilterStringError(text, "unexpected text after the filter")
    return stripped[1:end]


def _split_children(original: str, body: str) -> list[str]:
    children = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch.isspace():
            i += 1
            continue
        if ch != BEGIN_GROUP:
            raise MalformedFilterStringError(original, f"unexpected {ch!r} between filters")
        end = _matching_end(body, i, original)
        children.append(body[i : end + 1])
        i = end + 1
    return children


def _parse_leaf(original: str, inner: str) -> Filter:
    code, separator, body = inner.partition(CODE_SEPARATOR)
    if not code.strip():
        raise MalformedFilterStringError(original, "missing filter type")
    leaf = create_filter(CardAttribute.from_code(code))
    if leaf.attribute.kind is ValueKind.BINARY:
        leaf.parse_content(body)
        return leaf
    if not separator:
        raise MalformedFilterStringError(original, f"missing {CODE_SEPARATOR!r} after {code!r}")
    try:
        body = unescape(body)
    except ValueError as exc:
        raise MalformedFilterStringError(original, str(exc)) from exc
    leaf.parse_content(body)
    return leaf


# ============= Structured form =============


def to_json(filter: Filter) -> dict[str, Any]:
    return filter.to_json()


def from_json(document: Any) -> Filter:
    """
    Rebuild a filter from its structured form.

    Raises:
        FilterDeserializationError: If the document does not have the shape of a filter.
        UnknownFieldError: If a leaf uses an unknown type code.
        InvalidOperandError: If a leaf operand does not parse for its attribute.
    """
    if not isinstance(document, Mapping):
        raise FilterDeserializationError(f"Expected an object, got {document!r}")
    kind = document.get("type")
    if not isinstance(kind, str):
        raise FilterDeserializationError(f"Missing filter type in {dict(document)!r}")
    if kind == GROUP_TYPE:
        children = document.get("children")
        if not isinstance(children, list) or not children:
            raise FilterDeserializationError("A filter group needs a non-empty children list")
        try:
            mode = GroupMode.parse(str(document.get("mode", GroupMode.AND.value)))
        except ValueError as exc:
            raise FilterDeserializationError(str(exc)) from exc
        return FilterGroup([from_json(child) for child in children], mode)
    leaf = create_filter(kind)
    leaf.load_json(document)
    return leaf


def dumps(filter: Filter, **kwargs: Any) -> str:
    return json.dumps(filter.to_json(), ensure_ascii=False, **kwargs)


def loads(text: str) -> Filter:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FilterDeserializationError(f"Invalid filter JSON: {exc}") from exc
    return from_json(document)
