"""Decks: card counts plus the categories that organize them."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from loguru import logger

from cards.card import Card
from decks.category import Category, CategorySpec
from decks.errors import CategoryNotFoundError
from filters.filter import Filter


@dataclass
class Entry:
    card: Card
    count: int


class Deck:
    """
    An ordered list of cards with copy counts, organized into categories.

    The deck keeps a reverse index from each of its cards to the categories
    that include it. Every mutation of the deck or of one of its categories
    leaves that index, each category's card list and the total and land
    counts consistent. A deck is not thread-safe; callers serialize access.
    """

    def __init__(self):
        self._entries: list[Entry] = []
        self._by_card: dict[Card, Entry] = {}
        self._categories: dict[str, Category] = {}
        self._memberships: dict[Card, set[Category]] = {}
        self._total = 0
        self._land = 0

    @classmethod
    def from_entries(cls, entries: Iterable[tuple[Card, int]]) -> Deck:
        deck = cls()
        for card, count in entries:
            deck.add(card, count)
        return deck

    # ============= Cards =============

    def add(self, card: Card, n: int = 1) -> bool:
        """
        Add ``n`` copies of ``card``.

        Returns:
            True if the deck changed (False when ``n`` < 1)
        """
        if n < 1:
            return False
        entry = self._by_card.get(card)
        if entry is None:
            entry = Entry(card, n)
            self._entries.append(entry)
            self._by_card[card] = entry
            memberships: set[Category] = set()
            for category in self._categories.values():
                if category.includes(card):
                    category._filtrate.append(card)
                    memberships.add(category)
            self._memberships[card] = memberships
        else:
            entry.count += n
        self._total += n
        if card.is_land:
            self._land += n
        logger.debug(f"Added {n}x {card} (now {entry.count})")
        return True

    def add_all(self, cards: Iterable[Card], n: int = 1) -> bool:
        changed = False
        for card in cards:
            changed = self.add(card, n) or changed
        return changed

    def remove(self, card: Card, n: int = 1) -> int:
        """
        Remove up to ``n`` copies of ``card``.

        When no copies remain the card leaves the deck and every category
        forgets it, including its white and black lists.

        Returns:
            The number of copies actually removed
        """
        if n < 1:
            return 0
        entry = self._by_card.get(card)
        if entry is None:
            return 0
        removed = min(n, entry.count)
        entry.count -= removed
        self._total -= removed
        if card.is_land:
            self._land -= removed
        if entry.count == 0:
            self._entries.remove(entry)
            del self._by_card[card]
            self._memberships.pop(card, None)
            for category in self._categories.values():
                category._forget(card)
        logger.debug(f"Removed {removed}x {card} (now {entry.count})")
        return removed

    def set_count(self, card: Card, n: int) -> bool:
        """
        Set the number of copies of ``card``; 0 or less removes it.

        Returns:
            True if the count changed
        """
        current = self.count(card)
        target = max(n, 0)
        if target == current:
            return False
        if target > current:
            return self.add(card, target - current)
        return self.remove(card, current - target) > 0

    def count(self, card: Card) -> int:
        entry = self._by_card.get(card)
        return entry.count if entry else 0

    def get(self, index: int) -> Card:
        return self._entries[index].card

    def index_of(self, card: Card) -> int:
        """Position of ``card`` in the deck, or -1."""
        entry = self._by_card.get(card)
        return self._entries.index(entry) if entry else -1

    def find(self, card_id: str) -> Card | None:
        for entry in self._entries:
            if entry.card.id == card_id:
                return entry.card
        return None

    def clear(self) -> None:
        """Remove every card and category; categories removed this way become inert."""
        for category in self._categories.values():
            category._filtrate.clear()
            category._whitelist.clear()
            category._blacklist.clear()
        self._entries.clear()
        self._by_card.clear()
        self._memberships.clear()
        self._categories.clear()
        self._total = 0
        self._land = 0

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def total(self) -> int:
        return self._total

    @property
    def land(self) -> int:
        return self._land

    @property
    def nonland(self) -> int:
        return self._total - self._land

    def is_empty(self) -> bool:
        return not self._entries

    def entries(self) -> list[tuple[Card, int]]:
        return [(entry.card, entry.count) for entry in self._entries]

    def __contains__(self, card: object) -> bool:
        return card in self._by_card

    def __iter__(self) -> Iterator[Card]:
        return iter([entry.card for entry in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Deck({len(self._entries)} cards, {self._total} total, {len(self._categories)} categories)"

    # ============= Categories =============

    def add_category(
        self,
        spec: CategorySpec | str,
        filter: Filter | None = None,
        color: str | tuple[int, ...] | None = None,
        resolve: Callable[[str], Card | None] | None = None,
    ) -> Category:
        """
        Add a category, or return the existing one with the same name unchanged.

        Args:
            spec: A category definition, or just its name
            filter: Filter to use when ``spec`` is a name
            color: Color to use when ``spec`` is a name; random when omitted
            resolve: Maps white/black list card ids to cards; defaults to
                looking the ids up among the deck's cards. Ids that cannot be
                resolved are dropped.

        Returns:
            The category registered under the spec's name
        """
        if not isinstance(spec, CategorySpec):
            if filter is None:
                raise ValueError("A filter is required when adding a category by name")
            spec = CategorySpec(spec, filter, color=color)
        existing = self._categories.get(spec.name)
        if existing is not None:
            return existing
        category = Category(self, spec.name, spec.filter, spec.color)
        lookup = resolve or self.find
        for card_id in spec.whitelist:
            card = lookup(card_id)
            if card is None:
                logger.debug(f"Dropping unknown whitelisted card {card_id} from '{spec.name}'")
            else:
                category._whitelist.add(card)
        for card_id in spec.blacklist:
            card = lookup(card_id)
            if card is None:
                logger.debug(f"Dropping unknown blacklisted card {card_id} from '{spec.name}'")
            else:
                category._blacklist.add(card)
        self._categories[spec.name] = category
        self._refresh_category(category)
        logger.debug(f"Added category '{spec.name}' with {category.size} cards")
        return category

    def remove_category(self, name: str) -> bool:
        category = self._categories.pop(name, None)
        if category is None:
            return False
        for memberships in self._memberships.values():
            memberships.discard(category)
        category._filtrate.clear()
        logger.debug(f"Removed category '{name}'")
        return True

    def get_category(self, name: str) -> Category:
        """
        Raises:
            CategoryNotFoundError: If no category uses ``name``.
        """
        try:
            return self._categories[name]
        except KeyError:
            raise CategoryNotFoundError(name) from None

    def contains_category(self, name: str) -> bool:
        return name in self._categories

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories.values())

    @property
    def category_names(self) -> tuple[str, ...]:
        return tuple(self._categories)

    def categories_of(self, card: Card) -> frozenset[Category]:
        return frozenset(self._memberships.get(card, ()))

    def category_specs(self) -> list[CategorySpec]:
        return [category.spec() for category in self._categories.values()]

    def _is_registered(self, category: Category) -> bool:
        return self._categories.get(category.name) is category

    def _update_membership(self, category: Category, card: Card) -> bool:
        if card not in self._by_card or not self._is_registered(category):
            return False
        memberships = self._memberships[card]
        should = category.includes(card)
        if should == (category in memberships):
            return False
        if should:
            memberships.add(category)
        else:
            memberships.discard(category)
        category._filtrate = [entry.card for entry in self._entries if category in self._memberships[entry.card]]
        return True

    def _refresh_category(self, category: Category) -> None:
        if not self._is_registered(category):
            return
        filtrate = []
        for entry in self._entries:
            memberships = self._memberships[entry.card]
            if category.includes(entry.card):
                memberships.add(category)
                filtrate.append(entry.card)
            else:
                memberships.discard(category)
        category._filtrate = filtrate

    def _rename_category(self, category: Category, new_name: str) -> None:
        self._categories = {
            (new_name if existing is category else name): existing for name, existing in self._categories.items()
        }

    # ============= Consistency =============

    def check_invariants(self) -> None:
        """
        Verify the cached counts, category card lists and reverse index.

        Raises:
            AssertionError: Describing the first inconsistency found.
        """
        total = sum(entry.count for entry in self._entries)
        if total != self._total:
            raise AssertionError(f"total is {self._total}, entries add up to {total}")
        land = sum(entry.count for entry in self._entries if entry.card.is_land)
        if land != self._land:
            raise AssertionError(f"land count is {self._land}, entries add up to {land}")
        for entry in self._entries:
            if entry.count < 1:
                raise AssertionError(f"{entry.card} has count {entry.count}")
        if set(self._memberships) != set(self._by_card):
            raise AssertionError("reverse index does not cover exactly the deck's cards")
        for category in self._categories.values():
            if category._whitelist & category._blacklist:
                raise AssertionError(f"'{category.name}' white and black lists overlap")
            expected = [entry.card for entry in self._entries if category.includes(entry.card)]
            if category._filtrate != expected:
                raise AssertionError(f"'{category.name}' card list is stale")
        for card, memberships in self._memberships.items():
            expected_categories = {c for c in self._categories.values() if c.includes(card)}
            if memberships != expected_categories:
                raise AssertionError(f"reverse index entry for {card} is stale")
