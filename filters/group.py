"""Boolean combinations of filters."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any

from cards.card import Card
from filters.filter import Filter
from filters.grammar import BEGIN_GROUP, END_GROUP

GROUP_TYPE = "group"


class GroupMode(Enum):
    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, text: str) -> GroupMode:
        try:
            return cls(text.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown group mode {text!r}") from None

    @property
    def label(self) -> str:
        return "all of" if self is GroupMode.AND else "any of"


class FilterGroup(Filter):
    """
    An ordered, non-empty list of filters combined with AND or OR.

    Evaluation stops at the first child that decides the result.
    """

    def __init__(self, children: Iterable[Filter], mode: GroupMode = GroupMode.AND):
        self._children: list[Filter] = list(children)
        if not self._children:
            raise ValueError("A filter group needs at least one child")
        self.mode = mode

    @property
    def children(self) -> tuple[Filter, ...]:
        return tuple(self._children)

    def add_child(self, child: Filter) -> None:
        self._children.append(child)

    def remove_child(self, child: Filter) -> None:
        """
        Remove the first child equal to ``child``.

        Raises:
            ValueError: If ``child`` is not in the group or is its last child.
        """
        if len(self._children) == 1:
            raise ValueError("Cannot remove the last child of a filter group")
        self._children.remove(child)

    def replace_child(self, index: int, child: Filter) -> Filter:
        previous = self._children[index]
        self._children[index] = child
        return previous

    def matches(self, card: Card) -> bool:
        if self.mode is GroupMode.AND:
            return all(child.matches(card) for child in self._children)
        return any(child.matches(card) for child in self._children)

    def to_json(self) -> dict[str, Any]:
        return {
            "type": GROUP_TYPE,
            "mode": self.mode.value,
            "children": [child.to_json() for child in self._children],
        }

    def _key(self) -> tuple:
        return (self.mode, tuple(self._children))

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[Filter]:
        return iter(self._children)

    def __str__(self) -> str:
        children = " ".join(str(child) for child in self._children)
        return f"{BEGIN_GROUP}{self.mode.value} {children}{END_GROUP}"
