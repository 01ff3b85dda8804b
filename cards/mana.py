"""Mana cost parsing and comparison."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass

from cards.attributes import ManaType, sort_colors

_HYBRID_GENERIC = re.compile(r"^(\d+)/")
_ZERO_SYMBOLS = {"X", "Y", "Z"}
_HALF_SYMBOLS = {"½", "HW", "HU", "HB", "HR", "HG", "HC"}


def tokenize_mana_symbols(cost: str | None) -> list[str]:
    """
    Split a mana cost into its symbols.

    Accepts both the braced form (``{2}{G}{G}``) and a bare shorthand
    (``2GG``) where consecutive digits form one generic symbol.

    Raises:
        ValueError: If braces are unbalanced.
    """
    tokens: list[str] = []
    text = (cost or "").strip().upper()
    i = 0
    while i < len(text):
        ch = text[i]
        if ch.isspace() or ch in {",", ";"}:
            i += 1
            continue
        if ch == "{":
            end = text.find("}", i + 1)
            if end == -1:
                raise ValueError(f"Unclosed mana symbol in {cost!r}")
            token = text[i + 1 : end].strip()
            if not token or "{" in token:
                raise ValueError(f"Illegal mana symbol in {cost!r}")
            tokens.append(token)
            i = end + 1
            continue
        if ch == "}":
            raise ValueError(f"Unopened mana symbol in {cost!r}")
        if ch.isdigit():
            start = i
            while i < len(text) and text[i].isdigit():
                i += 1
            tokens.append(text[start:i])
            continue
        tokens.append(ch)
        i += 1
    return tokens


def symbol_value(symbol: str) -> float:
    """Mana value contributed by one symbol."""
    if symbol.isdigit():
        return float(int(symbol))
    if symbol in _ZERO_SYMBOLS:
        return 0.0
    if symbol in _HALF_SYMBOLS:
        return 0.5
    if symbol == "∞":
        return float("inf")
    hybrid = _HYBRID_GENERIC.match(symbol)
    if hybrid:
        return float(int(hybrid.group(1)))
    return 1.0


@dataclass(frozen=True)
class ManaCost:
    symbols: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str | None) -> ManaCost:
        return cls(tuple(tokenize_mana_symbols(text)))

    @property
    def mana_value(self) -> float:
        return sum(symbol_value(symbol) for symbol in self.symbols)

    @property
    def colors(self) -> tuple[ManaType, ...]:
        found = []
        for symbol in self.symbols:
            for part in symbol.split("/"):
                try:
                    color = ManaType.parse(part)
                except ValueError:
                    continue
                if color is not ManaType.COLORLESS:
                    found.append(color)
        return sort_colors(found)

    def counts(self) -> Counter:
        return Counter(self.symbols)

    def is_empty(self) -> bool:
        return not self.symbols

    def __len__(self) -> int:
        return len(self.symbols)

    def __str__(self) -> str:
        return "".join(f"{{{symbol}}}" for symbol in self.symbols)
