"""Attribute options and operand validation backed by the loaded inventory."""

from __future__ import annotations

from cards.attributes import Rarity
from cards.formats import FORMAT_NAMES
from cards.inventory import InventoryIndex
from filters.attributes import CardAttribute
from filters.filter import Filter
from filters.group import FilterGroup
from filters.leaves import OptionsFilter


class AttributeRegistry:
    """
    Answer which option values an attribute can take.

    The registry reads the inventory index it was given and never copies it,
    so a registry built for one inventory always reflects that inventory.
    """

    def __init__(self, index: InventoryIndex):
        self._index = index

    @property
    def index(self) -> InventoryIndex:
        return self._index

    def options(self, attribute: CardAttribute) -> tuple[str, ...]:
        """
        Known values for an options attribute, for auto-completion.

        Returns:
            Sorted option strings, or an empty tuple for attributes without options
        """
        if attribute is CardAttribute.SUPERTYPE:
            return self._index.supertypes
        if attribute is CardAttribute.CARD_TYPE:
            return self._index.types
        if attribute is CardAttribute.SUBTYPE:
            return self._index.subtypes
        if attribute is CardAttribute.EXPANSION:
            return tuple(expansion.name for expansion in self._index.expansions)
        if attribute is CardAttribute.BLOCK:
            return self._index.blocks
        if attribute is CardAttribute.RARITY:
            return tuple(rarity.value for rarity in Rarity)
        if attribute is CardAttribute.FORMAT_LEGALITY:
            return self._index.formats or FORMAT_NAMES
        return ()

    def validate(self, filter: Filter) -> None:
        """
        Check that every option operand in ``filter`` names a known value.

        Raises:
            InvalidOperandError: For the first leaf selecting an unknown option.
        """
        if isinstance(filter, FilterGroup):
            for child in filter:
                self.validate(child)
            return
        if not isinstance(filter, OptionsFilter):
            return
        known = {option.casefold() for option in self.options(filter.attribute)}
        unknown = [option for option in filter.option_strings() if option.casefold() not in known]
        if unknown:
            raise filter.invalid(", ".join(unknown), f"unknown {filter.attribute.label.lower()}")
