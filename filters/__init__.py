"""Card filters: attributes, leaves, groups and their string and JSON forms."""

from filters.attributes import CardAttribute, ValueKind
from filters.codec import dumps, from_json, loads, parse, serialize, to_json
from filters.containment import Comparison, Containment
from filters.errors import (
    FilterDeserializationError,
    FilterError,
    InvalidContainmentModeError,
    InvalidOperandError,
    MalformedFilterStringError,
    UnknownFieldError,
)
from filters.factory import create_filter
from filters.filter import Filter, FilterLeaf
from filters.group import FilterGroup, GroupMode
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
from filters.registry import AttributeRegistry

__all__ = [
    "AttributeRegistry",
    "BinaryFilter",
    "CardAttribute",
    "ColorFilter",
    "Comparison",
    "Containment",
    "Filter",
    "FilterDeserializationError",
    "FilterError",
    "FilterGroup",
    "FilterLeaf",
    "GroupMode",
    "InvalidContainmentModeError",
    "InvalidOperandError",
    "LegalityFilter",
    "MalformedFilterStringError",
    "ManaCostFilter",
    "NumberFilter",
    "OptionsFilter",
    "RarityFilter",
    "SingletonOptionsFilter",
    "TextFilter",
    "TypeLineFilter",
    "UnknownFieldError",
    "ValueKind",
    "VariableNumberFilter",
    "create_filter",
    "dumps",
    "from_json",
    "loads",
    "parse",
    "serialize",
    "to_json",
]
