"""Base classes of the filter tree."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from cards.card import Card
from filters.attributes import CardAttribute, ValueKind
from filters.containment import Containment
from filters.errors import (
    FilterDeserializationError,
    InvalidContainmentModeError,
    InvalidOperandError,
)
from filters.grammar import BEGIN_GROUP, CODE_SEPARATOR, END_GROUP, escape


class Filter(ABC):
    """
    A predicate over cards.

    Filters compare structurally: two filters are equal when they have the
    same shape and operands. ``copy()`` returns a deep copy that shares no
    mutable state with the original.
    """

    @abstractmethod
    def matches(self, card: Card) -> bool:
        ...

    def __call__(self, card: Card) -> bool:
        return self.matches(card)

    def copy(self) -> Filter:
        return copy.deepcopy(self)

    @abstractmethod
    def to_json(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def _key(self) -> tuple:
        ...

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Filter):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class FilterLeaf(Filter):
    """
    A filter testing one card attribute.

    The leaf matches a card when any face of the card satisfies it.
    """

    kinds: tuple[ValueKind, ...] = ()

    def __init__(self, attribute: CardAttribute):
        if self.kinds and attribute.kind not in self.kinds:
            raise ValueError(f"{type(self).__name__} cannot filter by {attribute.label}")
        self._attribute = attribute

    @property
    def attribute(self) -> CardAttribute:
        return self._attribute

    @property
    def code(self) -> str:
        return self._attribute.code

    def matches(self, card: Card) -> bool:
        return any(self.test(value) for value in self._attribute.values(card))

    @abstractmethod
    def test(self, value: Any) -> bool:
        """Test a single value produced by the attribute's accessor."""

    @abstractmethod
    def content(self) -> str:
        """Unescaped body of the string form, after ``code:``."""

    @abstractmethod
    def parse_content(self, body: str) -> None:
        """
        Replace this leaf's operands with the ones encoded in ``body``.

        Raises:
            InvalidOperandError: If the operand does not parse for this attribute.
            InvalidContainmentModeError: If the body starts with an unusable mode.
        """

    @abstractmethod
    def _fields(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        ...

    def to_json(self) -> dict[str, Any]:
        return {"type": self.code, **self._fields()}

    def load_json(self, fields: Mapping[str, Any]) -> None:
        """
        Replace this leaf's operands with the ones in a structured document.

        Raises:
            InvalidOperandError: If an operand does not parse for this attribute.
            FilterDeserializationError: If a required key is missing or has the wrong type.
        """
        try:
            self._load_fields(fields)
        except (KeyError, TypeError, ValueError) as exc:
            raise FilterDeserializationError(f"Bad {self.code!r} filter fields {dict(fields)!r}: {exc}") from exc

    def invalid(self, operand: str, reason: str = "") -> InvalidOperandError:
        return InvalidOperandError(self.code, operand, reason)

    def check_mode(self, mode: object) -> None:
        if mode not in self._attribute.legal_modes:
            raise InvalidContainmentModeError(self.code, mode)

    def __str__(self) -> str:
        if self._attribute.kind is ValueKind.BINARY:
            return f"{BEGIN_GROUP}{self.code}{END_GROUP}"
        return f"{BEGIN_GROUP}{self.code}{CODE_SEPARATOR}{escape(self.content())}{END_GROUP}"


class ContainmentLeaf(FilterLeaf):
    """Leaf whose operand is a collection compared with a :class:`Containment`."""

    def __init__(self, attribute: CardAttribute, contain: Containment = Containment.ANY_OF):
        super().__init__(attribute)
        self.contain = contain

    @property
    def contain(self) -> Containment:
        return self._contain

    @contain.setter
    def contain(self, value: Containment) -> None:
        self.check_mode(value)
        self._contain = value

    def split_contain(self, body: str) -> tuple[Containment, str]:
        try:
            return Containment.split_prefix(body.lstrip())
        except ValueError:
            raise InvalidContainmentModeError(self.code, body) from None

    def load_contain(self, fields: Mapping[str, Any]) -> None:
        try:
            contain = Containment.parse(str(fields["contain"]))
        except ValueError:
            raise InvalidContainmentModeError(self.code, fields["contain"]) from None
        self.contain = contain
