"""
Deck Service - Business logic for deck editing.

This module contains the workflows built on top of the deck model:
- Creating, opening and saving decks
- Adding categories from filter strings and presets
- Summaries and format checks
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from cards.attributes import Legality
from cards.formats import constraints_for
from decks.category import Category, CategorySpec
from decks.deck import Deck
from filters import codec
from repositories.card_repository import CardRepository, get_card_repository
from repositories.deck_repository import DeckFileFormat, DeckRepository, get_deck_repository


@dataclass
class CategorySummary:
    name: str
    color: str
    unique: int
    total: int


@dataclass
class DeckSummary:
    unique: int
    total: int
    land: int
    nonland: int
    categories: list[CategorySummary] = field(default_factory=list)

    def lines(self) -> list[str]:
        lines = [
            f"{self.total} cards ({self.unique} unique): {self.land} lands, {self.nonland} nonlands",
        ]
        for category in self.categories:
            lines.append(f"  {category.name}: {category.total} ({category.unique} unique)")
        return lines


class DeckService:
    """Service for deck editing workflows."""

    def __init__(
        self,
        deck_repository: DeckRepository | None = None,
        card_repository: CardRepository | None = None,
    ):
        """
        Initialize the deck service.

        Args:
            deck_repository: DeckRepository instance
            card_repository: CardRepository instance
        """
        self.deck_repo = deck_repository or get_deck_repository()
        self.card_repo = card_repository or get_card_repository()

    # ============= Deck Files =============

    def new_deck(self, presets: Iterable[CategorySpec] = ()) -> Deck:
        deck = Deck()
        for spec in presets:
            self.apply_preset(deck, spec)
        return deck

    def open_deck(self, path: Path | str, fmt: DeckFileFormat | None = None) -> Deck:
        """
        Open a deck file against the loaded inventory.

        Raises:
            RuntimeError: If no inventory is loaded
            DeckFormatError: If the file is malformed
        """
        return self.deck_repo.load_deck(path, self.card_repo.inventory, fmt)

    def save_deck(self, deck: Deck, path: Path | str, fmt: DeckFileFormat | None = None) -> Path:
        return self.deck_repo.save_deck(deck, path, fmt)

    # ============= Categories =============

    def add_category_from_string(
        self,
        deck: Deck,
        name: str,
        filter_text: str,
        color: str | None = None,
    ) -> Category:
        """
        Add a category whose filter is given as a filter string.

        Args:
            deck: Deck to add the category to
            name: Category name
            filter_text: Filter string such as ``<cardtype:contains any of{Creature}>``
            color: Color tag (random when omitted)

        Returns:
            The new category, or the existing one if ``name`` is taken

        Raises:
            FilterError: If ``filter_text`` does not parse
        """
        filter = codec.parse(filter_text)
        return deck.add_category(CategorySpec(name, filter, color=color))

    def apply_preset(self, deck: Deck, spec: CategorySpec) -> Category:
        if deck.contains_category(spec.name):
            logger.debug(f"Preset '{spec.name}' already present")
        return deck.add_category(spec, resolve=self.card_repo.find_card)

    def rename_category(self, deck: Deck, old_name: str, new_name: str) -> bool:
        """
        Raises:
            CategoryNotFoundError: If ``old_name`` is not a category of the deck
            DuplicateCategoryNameError: If ``new_name`` is taken
            InvalidCategoryNameError: If ``new_name`` is blank or cannot be saved
        """
        return deck.get_category(old_name).edit(name=new_name)

    # ============= Reports =============

    def summarize(self, deck: Deck) -> DeckSummary:
        return DeckSummary(
            unique=deck.size,
            total=deck.total,
            land=deck.land,
            nonland=deck.nonland,
            categories=[
                CategorySummary(category.name, category.color, category.size, category.total)
                for category in deck.categories
            ],
        )

    def check_format(self, deck: Deck, format_name: str) -> list[str]:
        """
        List the ways ``deck`` breaks the construction rules of a format.

        Args:
            deck: Deck to check
            format_name: Format name such as "modern" or "commander"

        Returns:
            One message per problem; empty when the deck is legal

        Raises:
            KeyError: If the format is unknown
        """
        constraints = constraints_for(format_name)
        problems: list[str] = []
        if constraints.exact and deck.total != constraints.deck_size:
            problems.append(f"Deck has {deck.total} cards; {format_name} requires exactly {constraints.deck_size}")
        elif deck.total < constraints.deck_size:
            problems.append(f"Deck has {deck.total} cards; {format_name} requires at least {constraints.deck_size}")
        for card, count in deck.entries():
            legality = card.legality_in(format_name)
            if not legality.is_legal:
                problems.append(f"{card} is not legal in {format_name}")
            elif legality is Legality.RESTRICTED and count > 1:
                problems.append(f"{card} is restricted in {format_name}")
            if count > constraints.max_copies and not card.supertype_contains("basic"):
                problems.append(f"{count} copies of {card}; {format_name} allows {constraints.max_copies}")
        return problems


_default_service = None


def get_deck_service() -> DeckService:
    """Get the default deck service instance."""
    global _default_service
    if _default_service is None:
        _default_service = DeckService()
    return _default_service


def reset_deck_service() -> None:
    """
    Reset the global deck service instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_service
    _default_service = None
