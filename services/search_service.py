"""
Search Service - Business logic for card search and filtering.

This module contains the logic for searching the loaded inventory:
- Filter-tree search (filter objects or filter strings)
- Name search
- Option lists and operand validation for filter editors
"""

from __future__ import annotations

from loguru import logger

from cards.card import Card
from filters import codec
from filters.attributes import CardAttribute
from filters.containment import Containment
from filters.filter import Filter
from filters.leaves import TextFilter
from filters.registry import AttributeRegistry
from repositories.card_repository import CardRepository, get_card_repository


class SearchService:
    """Service for card search and filtering logic."""

    def __init__(self, card_repository: CardRepository | None = None):
        """
        Initialize the search service.

        Args:
            card_repository: CardRepository instance
        """
        self.card_repo = card_repository or get_card_repository()

    # ============= Filter Search =============

    def parse_query(self, query: Filter | str) -> Filter:
        """
        Turn a filter string into a filter; filters are returned unchanged.

        Raises:
            FilterError: If the string does not parse
        """
        if isinstance(query, Filter):
            return query
        return codec.parse(query)

    def search(self, query: Filter | str, limit: int | None = None) -> list[Card]:
        """
        Find inventory cards matching a filter.

        Args:
            query: Filter, or filter string
            limit: Maximum number of results to return

        Returns:
            Matching cards in inventory order, or an empty list if no inventory is loaded

        Raises:
            FilterError: If ``query`` is a string that does not parse
        """
        filter = self.parse_query(query)
        if not self.card_repo.is_loaded():
            logger.warning("Card inventory not loaded")
            return []
        results: list[Card] = []
        for card in self.card_repo.inventory:
            if filter.matches(card):
                results.append(card)
                if limit and len(results) >= limit:
                    break
        logger.debug(f"Search {filter} matched {len(results)} cards")
        return results

    # ============= Basic Search =============

    def search_by_name(self, query: str, limit: int = 50) -> list[Card]:
        """
        Search for cards whose name contains every word of ``query``.

        Args:
            query: Text to search for in card names
            limit: Maximum number of results to return

        Returns:
            List of matching cards
        """
        if not query or not query.strip():
            return []
        return self.search(TextFilter(CardAttribute.NAME, Containment.ALL_OF, query), limit)

    # ============= Filter Editing Support =============

    def registry(self) -> AttributeRegistry:
        return AttributeRegistry(self.card_repo.inventory.index)

    def options(self, attribute: CardAttribute) -> tuple[str, ...]:
        if not self.card_repo.is_loaded():
            return ()
        return self.registry().options(attribute)

    def validate(self, filter: Filter) -> None:
        """
        Raises:
            InvalidOperandError: If ``filter`` selects an option the inventory never uses
        """
        self.registry().validate(filter)


_default_service = None


def get_search_service() -> SearchService:
    """Get the default search service instance."""
    global _default_service
    if _default_service is None:
        _default_service = SearchService()
    return _default_service


def reset_search_service() -> None:
    """
    Reset the global search service instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_service
    _default_service = None
