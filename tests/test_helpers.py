"""Test helper utilities for managing global state in tests.

Tests share module level singletons (card inventory, deck files, services);
these helpers put them back to their unloaded state.
"""

import sys
from pathlib import Path

# Add parent directory to sys.path to enable imports from the project packages
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

# ruff: noqa: E402
from repositories.card_repository import reset_card_repository
from repositories.deck_repository import reset_deck_repository
from services.deck_service import reset_deck_service
from services.search_service import reset_search_service
from services.state_service import reset_state_service


def reset_all_services() -> None:
    """Reset all global service instances."""
    reset_deck_service()
    reset_search_service()
    reset_state_service()


def reset_all_repositories() -> None:
    """Reset all global repository instances."""
    reset_card_repository()
    reset_deck_repository()


def reset_all_globals() -> None:
    """Reset every module level service and repository instance."""
    reset_all_services()
    reset_all_repositories()
