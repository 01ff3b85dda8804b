"""
Repositories package - Data access layer.

This package contains repository classes that handle all data persistence
and retrieval operations, isolating the editing logic from data access details.
"""

from repositories.card_repository import CardRepository, get_card_repository
from repositories.deck_repository import DeckFileFormat, DeckRepository, get_deck_repository

__all__ = [
    "CardRepository",
    "DeckFileFormat",
    "DeckRepository",
    "get_card_repository",
    "get_deck_repository",
]
