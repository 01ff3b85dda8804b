"""Deck construction rules for the supported formats."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FormatConstraints:
    deck_size: int = 60
    exact: bool = False
    max_copies: int = 4
    has_commander: bool = False


_SINGLETON_COMMANDER_60 = FormatConstraints(60, True, 1, True)
_SINGLETON_COMMANDER_100 = FormatConstraints(100, True, 1, True)
_CONSTRUCTED = FormatConstraints()

FORMAT_CONSTRAINTS: dict[str, FormatConstraints] = {
    "brawl": _SINGLETON_COMMANDER_60,
    "commander": _SINGLETON_COMMANDER_100,
    "duel": _SINGLETON_COMMANDER_100,
    "future": _CONSTRUCTED,
    "historic": _CONSTRUCTED,
    "legacy": _CONSTRUCTED,
    "modern": _CONSTRUCTED,
    "oldschool": _CONSTRUCTED,
    "pauper": _CONSTRUCTED,
    "penny": _CONSTRUCTED,
    "pioneer": _CONSTRUCTED,
    "standard": _CONSTRUCTED,
    "vintage": _CONSTRUCTED,
}

FORMAT_NAMES: tuple[str, ...] = tuple(sorted(FORMAT_CONSTRAINTS))


def constraints_for(format_name: str) -> FormatConstraints:
    """
    Look up the constraints of a format by case-insensitive name.

    Raises:
        KeyError: If the format is not known.
    """
    return FORMAT_CONSTRAINTS[format_name.strip().lower()]
