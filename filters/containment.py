"""Set containment and numeric comparison modes used by filter leaves."""

from __future__ import annotations

import math
import operator
from collections import Counter
from collections.abc import Iterable
from enum import Enum


class Containment(Enum):
    """
    How a leaf's operand collection relates to a card's value collection.

    Collections are compared as multisets, which reduces to plain set logic
    when neither side repeats an element.
    """

    ANY_OF = "contains any of"
    ALL_OF = "contains all of"
    NONE_OF = "contains none of"
    NOT_ALL_OF = "contains not all of"
    EXACTLY = "contains exactly"
    NOT_EXACTLY = "contains not exactly"

    def test(self, value: Iterable, operand: Iterable) -> bool:
        have = Counter(value)
        want = Counter(operand)
        if self is Containment.ANY_OF:
            return any(key in have for key in want)
        if self is Containment.ALL_OF:
            return all(have[key] >= needed for key, needed in want.items())
        if self is Containment.NONE_OF:
            return not any(key in have for key in want)
        if self is Containment.NOT_ALL_OF:
            return not Containment.ALL_OF.test(have.elements(), want.elements())
        if self is Containment.EXACTLY:
            return have == want
        return have != want

    def test_found(self, found: int, wanted: int) -> bool:
        """Apply the mode to a count of operand items that were found in a value."""
        if self is Containment.ANY_OF:
            return found > 0
        if self is Containment.ALL_OF:
            return found == wanted
        if self is Containment.NONE_OF:
            return found == 0
        if self is Containment.NOT_ALL_OF:
            return found < wanted
        raise ValueError(f"{self.value} cannot be decided from a count")

    @classmethod
    def parse(cls, text: str) -> Containment:
        key = text.strip()
        for member in cls:
            if key.lower() == member.value or key.upper() == member.name:
                return member
        raise ValueError(f"Unknown containment {text!r}")

    @classmethod
    def split_prefix(cls, text: str) -> tuple[Containment, str]:
        """
        Split a leading containment phrase from ``text``.

        The longest phrase wins, so "contains not all of" is never read as
        "contains not exactly" or similar.

        Raises:
            ValueError: If ``text`` does not start with a containment phrase.
        """
        lowered = text.lower()
        for member in sorted(cls, key=lambda m: len(m.value), reverse=True):
            if lowered.startswith(member.value):
                return member, text[len(member.value) :]
        raise ValueError(f"No containment phrase at the start of {text!r}")

    def __str__(self) -> str:
        return self.value


class Comparison(Enum):
    LT = "<"
    LE = "≤"
    EQ = "="
    GE = "≥"
    GT = ">"
    NE = "≠"

    def test(self, value: float, operand: float) -> bool:
        if math.isnan(value) or math.isnan(operand):
            return False
        return _OPERATORS[self](value, operand)

    @classmethod
    def parse(cls, text: str) -> Comparison:
        key = text.strip()
        if key in _ALIASES:
            return _ALIASES[key]
        for member in cls:
            if key == member.value or key.upper() == member.name:
                return member
        raise ValueError(f"Unknown comparison {text!r}")

    @classmethod
    def split_prefix(cls, text: str) -> tuple[Comparison, str]:
        stripped = text.lstrip()
        for alias, member in _ALIASES.items():
            if stripped.startswith(alias):
                return member, stripped[len(alias) :]
        for member in cls:
            if stripped.startswith(member.value):
                return member, stripped[len(member.value) :]
        raise ValueError(f"No comparison at the start of {text!r}")

    def __str__(self) -> str:
        return self.value


_OPERATORS = {
    Comparison.LT: operator.lt,
    Comparison.LE: operator.le,
    Comparison.EQ: operator.eq,
    Comparison.GE: operator.ge,
    Comparison.GT: operator.gt,
    Comparison.NE: operator.ne,
}

_ALIASES = {
    "<=": Comparison.LE,
    ">=": Comparison.GE,
    "!=": Comparison.NE,
    "==": Comparison.EQ,
}
