"""Choose the leaf class for an attribute."""

from __future__ import annotations

from filters.attributes import CardAttribute, ValueKind
from filters.filter import FilterLeaf
from filters.leaves import (
    BinaryFilter,
    ColorFilter,
    LegalityFilter,
    ManaCostFilter,
    NumberFilter,
    OptionsFilter,
    RarityFilter,
    SingletonOptionsFilter,
    TextFilter,
    TypeLineFilter,
    VariableNumberFilter,
)

_LEAF_BY_KIND: dict[ValueKind, type[FilterLeaf]] = {
    ValueKind.TEXT: TextFilter,
    ValueKind.TYPE_LINE: TypeLineFilter,
    ValueKind.MANA_COST: ManaCostFilter,
    ValueKind.COLORS: ColorFilter,
    ValueKind.NUMBER: NumberFilter,
    ValueKind.VARIABLE_NUMBER: VariableNumberFilter,
    ValueKind.MULTI_OPTIONS: OptionsFilter,
    ValueKind.SINGLETON_OPTIONS: SingletonOptionsFilter,
    ValueKind.LEGALITY: LegalityFilter,
    ValueKind.BINARY: BinaryFilter,
}

_LEAF_BY_ATTRIBUTE: dict[CardAttribute, type[FilterLeaf]] = {
    CardAttribute.RARITY: RarityFilter,
}


def leaf_class(attribute: CardAttribute) -> type[FilterLeaf]:
    return _LEAF_BY_ATTRIBUTE.get(attribute) or _LEAF_BY_KIND[attribute.kind]


def create_filter(attribute: CardAttribute | str) -> FilterLeaf:
    """
    Create a leaf with default operands for ``attribute``.

    Args:
        attribute: The attribute or its code

    Returns:
        A new leaf of the class registered for the attribute's value kind

    Raises:
        UnknownFieldError: If a code is given that no attribute uses.
    """
    if isinstance(attribute, str):
        attribute = CardAttribute.from_code(attribute)
    return leaf_class(attribute)(attribute)
