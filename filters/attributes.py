"""Queryable card attributes and how each one reads its value from a card."""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum

from cards.card import Card, normalize_text
from filters.containment import Comparison, Containment
from filters.errors import UnknownFieldError

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")


class ValueKind(Enum):
    TEXT = "text"
    TYPE_LINE = "type line"
    MANA_COST = "mana cost"
    COLORS = "colors"
    NUMBER = "number"
    VARIABLE_NUMBER = "variable number"
    MULTI_OPTIONS = "multi options"
    SINGLETON_OPTIONS = "singleton options"
    LEGALITY = "legality"
    BINARY = "binary"


class CardAttribute(Enum):
    """Every card field a filter can test, keyed by its stable code."""

    NAME = ("Name", "n", ValueKind.TEXT)
    MANA_COST = ("Mana Cost", "m", ValueKind.MANA_COST)
    MANA_VALUE = ("Mana Value", "cmc", ValueKind.NUMBER)
    COLOR = ("Color", "c", ValueKind.COLORS)
    COLOR_IDENTITY = ("Color Identity", "ci", ValueKind.COLORS)
    TYPE_LINE = ("Type Line", "type", ValueKind.TYPE_LINE)
    SUPERTYPE = ("Supertype", "super", ValueKind.MULTI_OPTIONS)
    CARD_TYPE = ("Card Type", "cardtype", ValueKind.MULTI_OPTIONS)
    SUBTYPE = ("Subtype", "sub", ValueKind.MULTI_OPTIONS)
    EXPANSION = ("Expansion", "x", ValueKind.SINGLETON_OPTIONS)
    BLOCK = ("Block", "b", ValueKind.SINGLETON_OPTIONS)
    RARITY = ("Rarity", "r", ValueKind.SINGLETON_OPTIONS)
    RULES_TEXT = ("Rules Text", "o", ValueKind.TEXT)
    FLAVOR_TEXT = ("Flavor Text", "f", ValueKind.TEXT)
    POWER = ("Power", "p", ValueKind.VARIABLE_NUMBER)
    TOUGHNESS = ("Toughness", "t", ValueKind.VARIABLE_NUMBER)
    LOYALTY = ("Loyalty", "l", ValueKind.VARIABLE_NUMBER)
    ARTIST = ("Artist", "a", ValueKind.TEXT)
    CARD_NUMBER = ("Card Number", "#", ValueKind.NUMBER)
    FORMAT_LEGALITY = ("Format Legality", "legal", ValueKind.LEGALITY)
    ANY = ("<Any Card>", "*", ValueKind.BINARY)
    NONE = ("<No Card>", "0", ValueKind.BINARY)

    def __init__(self, label: str, code: str, kind: ValueKind):
        self.label = label
        self.code = code
        self.kind = kind

    @classmethod
    def from_code(cls, code: str) -> CardAttribute:
        """
        Look up an attribute by its code, ignoring case.

        Raises:
            UnknownFieldError: If no attribute uses ``code``.
        """
        key = code.strip().lower()
        for member in cls:
            if member.code == key:
                return member
        raise UnknownFieldError(code)

    @property
    def legal_modes(self) -> frozenset:
        if self.kind in (ValueKind.NUMBER, ValueKind.VARIABLE_NUMBER):
            return frozenset(Comparison)
        if self.kind is ValueKind.BINARY:
            return frozenset()
        return frozenset(Containment)

    def values(self, card: Card) -> tuple:
        """Values of this attribute for ``card``, one per face for per-face fields."""
        return _ACCESSORS[self](card)

    def __str__(self) -> str:
        return self.label


def collector_number(number: str) -> float | None:
    match = _LEADING_NUMBER.match(number)
    return float(match.group(1)) if match else None


_ACCESSORS: dict[CardAttribute, Callable[[Card], tuple]] = {
    CardAttribute.NAME: lambda card: card.normalized_names,
    CardAttribute.MANA_COST: lambda card: card.mana_costs,
    CardAttribute.MANA_VALUE: lambda card: (card.mana_value,),
    CardAttribute.COLOR: lambda card: card.colors_by_face,
    CardAttribute.COLOR_IDENTITY: lambda card: (card.color_identity,),
    CardAttribute.TYPE_LINE: lambda card: tuple(normalize_text(line) for line in card.type_lines),
    CardAttribute.SUPERTYPE: lambda card: card.supertypes_by_face,
    CardAttribute.CARD_TYPE: lambda card: card.types_by_face,
    CardAttribute.SUBTYPE: lambda card: card.subtypes_by_face,
    CardAttribute.EXPANSION: lambda card: (card.expansion.name,),
    CardAttribute.BLOCK: lambda card: (card.block,),
    CardAttribute.RARITY: lambda card: (card.rarity,),
    CardAttribute.RULES_TEXT: lambda card: card.normalized_oracle_texts,
    CardAttribute.FLAVOR_TEXT: lambda card: card.normalized_flavor_texts,
    CardAttribute.POWER: lambda card: card.powers,
    CardAttribute.TOUGHNESS: lambda card: card.toughnesses,
    CardAttribute.LOYALTY: lambda card: card.loyalties,
    CardAttribute.ARTIST: lambda card: tuple(normalize_text(artist) for artist in card.artists),
    CardAttribute.CARD_NUMBER: lambda card: tuple(collector_number(n) for n in card.numbers),
    CardAttribute.FORMAT_LEGALITY: lambda card: (card.legality,),
    CardAttribute.ANY: lambda card: (True,),
    CardAttribute.NONE: lambda card: (False,),
}
