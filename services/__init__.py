"""
Services package - deck editing, inventory search and settings.

Names are resolved on first access so importing the package stays cheap.
"""

from importlib import import_module
from typing import Any

_LAZY_MODULES = {
    "CategorySummary": "services.deck_service",
    "DeckService": "services.deck_service",
    "DeckSummary": "services.deck_service",
    "get_deck_service": "services.deck_service",
    "SearchService": "services.search_service",
    "get_search_service": "services.search_service",
    "EditorSettings": "services.state_service",
    "StateService": "services.state_service",
    "get_state_service": "services.state_service",
}

__all__ = sorted(_LAZY_MODULES)


def __getattr__(name: str) -> Any:
    try:
        module_name = _LAZY_MODULES[name]
    except KeyError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from None
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value
