"""Immutable card records as produced by the inventory loader."""

from __future__ import annotations

import dataclasses
import unicodedata
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType

from cards.attributes import CombatStat, Expansion, Legality, ManaType, Rarity, sort_colors
from cards.mana import ManaCost

FACE_SEPARATOR = " // "


class CardLayout(Enum):
    NORMAL = "normal"
    SPLIT = "split"
    AFTERMATH = "aftermath"
    ADVENTURE = "adventure"
    FLIP = "flip"
    TRANSFORM = "transform"
    MODAL_DFC = "modal_dfc"
    MELD = "meld"
    LEVELER = "leveler"
    SAGA = "saga"
    CLASS = "class"
    CASE = "case"
    MUTATE = "mutate"
    PROTOTYPE = "prototype"
    BATTLE = "battle"
    REVERSIBLE_CARD = "reversible_card"
    HOST = "host"
    AUGMENT = "augment"
    PLANAR = "planar"
    SCHEME = "scheme"
    VANGUARD = "vanguard"

    @classmethod
    def parse(cls, text: str) -> CardLayout:
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown card layout {text!r}") from None

    @property
    def is_split(self) -> bool:
        return self in (CardLayout.SPLIT, CardLayout.AFTERMATH, CardLayout.ADVENTURE)

    @property
    def is_double(self) -> bool:
        return self in (CardLayout.FLIP, CardLayout.TRANSFORM, CardLayout.MODAL_DFC)

    @property
    def is_multi_faced(self) -> bool:
        return self.is_split or self.is_double or self is CardLayout.MELD


def normalize_text(text: str) -> str:
    """Lower-case ``text`` and strip accents so searches ignore them."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("’", "'").replace("Æ", "Ae").replace("æ", "ae").lower()


@dataclass(frozen=True)
class CardFace:
    name: str
    mana_cost: ManaCost = ManaCost()
    mana_value: float = 0.0
    colors: tuple[ManaType, ...] = ()
    type_line: str = ""
    supertypes: frozenset[str] = frozenset()
    types: frozenset[str] = frozenset()
    subtypes: frozenset[str] = frozenset()
    oracle_text: str = ""
    flavor_text: str = ""
    power: CombatStat = CombatStat()
    toughness: CombatStat = CombatStat()
    loyalty: CombatStat = CombatStat()
    artist: str = ""
    number: str = ""


@dataclass(frozen=True, eq=False)
class Card:
    """
    A single printing of a card.

    Cards compare and hash by ``id`` only. Per-face accessors return one value
    per face in face order; card-wide accessors describe the whole card.
    """

    id: str
    faces: tuple[CardFace, ...]
    expansion: Expansion
    rarity: Rarity = Rarity.COMMON
    layout: CardLayout = CardLayout.NORMAL
    mana_value: float = 0.0
    color_identity: tuple[ManaType, ...] = ()
    legality: Mapping[str, Legality] = field(default_factory=dict)
    multiverse_id: int | None = None

    def __post_init__(self) -> None:
        faces = tuple(self.faces)
        if not faces:
            raise ValueError(f"Card {self.id} has no faces")
        object.__setattr__(self, "faces", faces)
        object.__setattr__(self, "color_identity", sort_colors(self.color_identity))
        legality = {name.lower(): value for name, value in self.legality.items()}
        object.__setattr__(self, "legality", MappingProxyType(legality))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Card({self.name!r}, {self.expansion.code or self.expansion.name}, id={self.id})"

    # ============= Per-face values =============

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(face.name for face in self.faces)

    @property
    def mana_costs(self) -> tuple[ManaCost, ...]:
        return tuple(face.mana_cost for face in self.faces)

    @property
    def colors_by_face(self) -> tuple[tuple[ManaType, ...], ...]:
        return tuple(face.colors for face in self.faces)

    @property
    def type_lines(self) -> tuple[str, ...]:
        return tuple(face.type_line for face in self.faces)

    @property
    def supertypes_by_face(self) -> tuple[frozenset[str], ...]:
        return tuple(face.supertypes for face in self.faces)

    @property
    def types_by_face(self) -> tuple[frozenset[str], ...]:
        return tuple(face.types for face in self.faces)

    @property
    def subtypes_by_face(self) -> tuple[frozenset[str], ...]:
        return tuple(face.subtypes for face in self.faces)

    @property
    def oracle_texts(self) -> tuple[str, ...]:
        return tuple(face.oracle_text for face in self.faces)

    @property
    def flavor_texts(self) -> tuple[str, ...]:
        return tuple(face.flavor_text for face in self.faces)

    @property
    def powers(self) -> tuple[CombatStat, ...]:
        return tuple(face.power for face in self.faces)

    @property
    def toughnesses(self) -> tuple[CombatStat, ...]:
        return tuple(face.toughness for face in self.faces)

    @property
    def loyalties(self) -> tuple[CombatStat, ...]:
        return tuple(face.loyalty for face in self.faces)

    @property
    def artists(self) -> tuple[str, ...]:
        return tuple(face.artist for face in self.faces)

    @property
    def numbers(self) -> tuple[str, ...]:
        return tuple(face.number for face in self.faces)

    # ============= Derived values =============

    @cached_property
    def name(self) -> str:
        return FACE_SEPARATOR.join(self.names)

    @cached_property
    def normalized_names(self) -> tuple[str, ...]:
        return tuple(normalize_text(name) for name in self.names)

    @cached_property
    def normalized_oracle_texts(self) -> tuple[str, ...]:
        return tuple(normalize_text(text) for text in self.oracle_texts)

    @cached_property
    def normalized_flavor_texts(self) -> tuple[str, ...]:
        return tuple(normalize_text(text) for text in self.flavor_texts)

    @cached_property
    def colors(self) -> tuple[ManaType, ...]:
        return sort_colors(color for face in self.faces for color in face.colors)

    @cached_property
    def supertypes(self) -> frozenset[str]:
        return frozenset().union(*self.supertypes_by_face)

    @cached_property
    def types(self) -> frozenset[str]:
        return frozenset().union(*self.types_by_face)

    @cached_property
    def subtypes(self) -> frozenset[str]:
        return frozenset().union(*self.subtypes_by_face)

    @cached_property
    def legal_in(self) -> tuple[str, ...]:
        return tuple(sorted(name for name, value in self.legality.items() if value.is_legal))

    @property
    def block(self) -> str:
        return self.expansion.block

    def legality_in(self, format_name: str) -> Legality:
        return self.legality.get(format_name.lower(), Legality.ILLEGAL)

    def is_legal_in(self, format_name: str) -> bool:
        return self.legality_in(format_name).is_legal

    def type_contains(self, type_name: str) -> bool:
        wanted = type_name.lower()
        return any(t.lower() == wanted for t in self.types)

    def supertype_contains(self, supertype: str) -> bool:
        wanted = supertype.lower()
        return any(s.lower() == wanted for s in self.supertypes)

    @property
    def is_land(self) -> bool:
        return self.type_contains("land")


def join_faces(parts: Sequence[Card], layout: CardLayout) -> Card:
    """
    Build a multi-faced card from single-faced records, in face order.

    The component records are left untouched. Split-style cards add up the
    mana values of their halves; other layouts keep the front face's.
    """
    if len(parts) < 2:
        raise ValueError(f"A {layout.value} card needs at least two faces")
    front = parts[0]
    faces = tuple(face for part in parts for face in part.faces)
    if layout.is_split:
        mana_value = sum(face.mana_value for face in faces)
    else:
        mana_value = front.mana_value
    return dataclasses.replace(
        front,
        faces=faces,
        layout=layout,
        mana_value=mana_value,
        color_identity=_union_identity(parts),
    )


def meld(front: Card, back: Card) -> Card:
    """Pair a meld front face with the melded back face."""
    back_face = dataclasses.replace(back.faces[0], mana_cost=ManaCost(), mana_value=front.mana_value)
    return dataclasses.replace(
        front,
        faces=(front.faces[0], back_face),
        layout=CardLayout.MELD,
        mana_value=front.mana_value,
        color_identity=_union_identity((front, back)),
    )


def _union_identity(parts: Iterable[Card]) -> tuple[ManaType, ...]:
    return sort_colors(color for part in parts for color in part.color_identity)
