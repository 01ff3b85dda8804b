"""The loaded card collection and the option lists derived from it."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from cards.attributes import Expansion
from cards.card import Card


@dataclass(frozen=True)
class InventoryIndex:
    """Sorted values observed while loading, used for auto-completion and validation."""

    expansions: tuple[Expansion, ...] = ()
    blocks: tuple[str, ...] = ()
    supertypes: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    subtypes: tuple[str, ...] = ()
    formats: tuple[str, ...] = ()

    @classmethod
    def from_cards(cls, cards: Iterable[Card], expansions: Iterable[Expansion] = ()) -> InventoryIndex:
        expansion_set = set(expansions)
        supertypes: set[str] = set()
        types: set[str] = set()
        subtypes: set[str] = set()
        formats: set[str] = set()
        for card in cards:
            expansion_set.add(card.expansion)
            supertypes.update(card.supertypes)
            types.update(card.types)
            subtypes.update(card.subtypes)
            formats.update(card.legality)
        return cls(
            expansions=tuple(sorted(expansion_set, key=lambda e: e.name)),
            blocks=tuple(sorted({e.block for e in expansion_set})),
            supertypes=tuple(sorted(supertypes)),
            types=tuple(sorted(types)),
            subtypes=tuple(sorted(subtypes)),
            formats=tuple(sorted(formats)),
        )


class Inventory:
    """Ordered, read-only collection of every known card."""

    def __init__(self, cards: Iterable[Card] = (), index: InventoryIndex | None = None):
        self._cards: list[Card] = list(cards)
        self._by_id: dict[str, Card] = {card.id: card for card in self._cards}
        self.index = index if index is not None else InventoryIndex.from_cards(self._cards)

    def find(self, card_id: str) -> Card | None:
        return self._by_id.get(card_id)

    def get(self, index: int) -> Card:
        return self._cards[index]

    def __contains__(self, card: object) -> bool:
        return isinstance(card, Card) and card.id in self._by_id

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __repr__(self) -> str:
        return f"Inventory({len(self._cards)} cards)"
