"""Value types describing individual card characteristics."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

NO_BLOCK = "<No Block>"

_STAT_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
_VARIABLE_MARKERS = ("*", "X", "x", "?")


class ManaType(Enum):
    WHITE = "W"
    BLUE = "U"
    BLACK = "B"
    RED = "R"
    GREEN = "G"
    COLORLESS = "C"

    @classmethod
    def parse(cls, text: str) -> ManaType:
        key = text.strip().upper()
        for member in cls:
            if key in (member.value, member.name):
                return member
        raise ValueError(f"Illegal mana type string {text!r}")

    @classmethod
    def colors(cls) -> tuple[ManaType, ...]:
        return (cls.WHITE, cls.BLUE, cls.BLACK, cls.RED, cls.GREEN)

    @property
    def order(self) -> int:
        return list(ManaType).index(self)


def sort_colors(colors) -> tuple[ManaType, ...]:
    """Return ``colors`` deduplicated and in WUBRG order."""
    return tuple(sorted(set(colors), key=lambda color: color.order))


class Rarity(Enum):
    BASIC_LAND = "Basic Land"
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    MYTHIC_RARE = "Mythic Rare"
    SPECIAL = "Special"
    BONUS = "Bonus"

    @classmethod
    def parse(cls, text: str) -> Rarity:
        normalized = text.strip().lower().replace("_", " ")
        for member in cls:
            if normalized == member.value.lower():
                return member
        alias = _RARITY_ALIASES.get(normalized)
        if alias is None:
            raise ValueError(f"Illegal rarity string {text!r}")
        return alias

    def __str__(self) -> str:
        return self.value


_RARITY_ALIASES = {
    "basic": Rarity.BASIC_LAND,
    "land": Rarity.BASIC_LAND,
    "c": Rarity.COMMON,
    "u": Rarity.UNCOMMON,
    "r": Rarity.RARE,
    "m": Rarity.MYTHIC_RARE,
    "mythic": Rarity.MYTHIC_RARE,
    "s": Rarity.SPECIAL,
    "timeshifted": Rarity.SPECIAL,
    "b": Rarity.BONUS,
}


class Legality(Enum):
    BANNED = "Banned"
    LEGAL = "Legal"
    RESTRICTED = "Restricted"
    ILLEGAL = "Illegal"

    @property
    def is_legal(self) -> bool:
        return self in (Legality.LEGAL, Legality.RESTRICTED)

    @classmethod
    def parse(cls, text: str) -> Legality:
        normalized = text.strip().lower()
        if normalized in ("not legal", "not_legal", "illegal"):
            return cls.ILLEGAL
        for member in cls:
            if normalized == member.value.lower():
                return member
        raise ValueError(f"Illegal legality string {text!r}")


@dataclass(frozen=True)
class CombatStat:
    """
    Power, toughness or loyalty as printed on a card.

    ``value`` is ``None`` when the card has no such stat. Stats such as ``*``
    or ``1+*`` are variable; their numeric part (0 for a bare ``*``) is still
    exposed for comparisons.
    """

    expression: str = ""

    @property
    def exists(self) -> bool:
        return bool(self.expression.strip())

    @property
    def variable(self) -> bool:
        return any(marker in self.expression for marker in _VARIABLE_MARKERS)

    @property
    def value(self) -> float | None:
        text = self.expression.strip()
        if not text:
            return None
        if text == "∞":
            return float("inf")
        match = _STAT_NUMBER.search(text)
        if match:
            return float(match.group())
        return 0.0 if self.variable else None

    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class Expansion:
    name: str
    block: str = NO_BLOCK
    code: str = ""
    count: int = 0
    release_date: date | None = None

    def __str__(self) -> str:
        return self.name
