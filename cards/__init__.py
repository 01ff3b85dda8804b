"""Card data interface consumed by filters and decks."""

from cards.attributes import NO_BLOCK, CombatStat, Expansion, Legality, ManaType, Rarity
from cards.card import Card, CardFace, CardLayout, join_faces, meld
from cards.formats import FORMAT_CONSTRAINTS, FORMAT_NAMES, FormatConstraints
from cards.inventory import Inventory, InventoryIndex
from cards.mana import ManaCost

__all__ = [
    "NO_BLOCK",
    "Card",
    "CardFace",
    "CardLayout",
    "CombatStat",
    "Expansion",
    "FORMAT_CONSTRAINTS",
    "FORMAT_NAMES",
    "FormatConstraints",
    "Inventory",
    "InventoryIndex",
    "Legality",
    "ManaCost",
    "ManaType",
    "Rarity",
    "join_faces",
    "meld",
]
