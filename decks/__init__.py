"""Deck and category model."""

from decks.category import Category, CategorySpec, normalize_color, random_color
from decks.deck import Deck
from decks.errors import CategoryNotFoundError, DeckError, DeckFormatError, DuplicateCategoryNameError

__all__ = [
    "Category",
    "CategoryNotFoundError",
    "CategorySpec",
    "Deck",
    "DeckError",
    "DeckFormatError",
    "DuplicateCategoryNameError",
    "normalize_color",
    "random_color",
]
