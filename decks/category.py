"""Deck categories and their detached definitions."""

from __future__ import annotations

import colorsys
import math
import random
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger
from PIL import ImageColor

from cards.card import Card
from decks.errors import DeckFormatError, DuplicateCategoryNameError, InvalidCategoryNameError
from filters import codec
from filters.errors import FilterDeserializationError, FilterError
from filters.filter import Filter

if TYPE_CHECKING:
    from decks.deck import Deck

EXCEPTION_SEPARATOR = ":"
LEGACY_PATTERN = re.compile(r"^([^<]+)<([^>]*)>\s*<([^>]*)>\s*(<.*)$")


def normalize_color(color: str | tuple[int, ...]) -> str:
    """
    Normalize a color name, hex string or RGB tuple to ``#rrggbb``.

    Raises:
        ValueError: If the color cannot be understood.
    """
    if isinstance(color, tuple):
        rgb = color[:3]
        if len(rgb) != 3 or any(not 0 <= int(c) <= 255 for c in rgb):
            raise ValueError(f"Invalid RGB color {color!r}")
    else:
        rgb = ImageColor.getrgb(color)[:3]
    return "#{:02x}{:02x}{:02x}".format(*(int(c) for c in rgb))


def random_color(rng: random.Random | None = None) -> str:
    """Random color tag, biased toward brighter colors."""
    rng = rng or random
    red, green, blue = colorsys.hsv_to_rgb(rng.random(), rng.random(), math.sqrt(rng.random()))
    return normalize_color((round(red * 255), round(green * 255), round(blue * 255)))


def normalize_category_name(name: str) -> str:
    """
    Strip a category name and check that every deck file format can hold it.

    Raises:
        InvalidCategoryNameError: If the name is blank or contains "<" or a line break.
    """
    stripped = name.strip()
    if not stripped:
        raise InvalidCategoryNameError(name, "must not be empty")
    if "<" in stripped:
        raise InvalidCategoryNameError(name, "must not contain '<'")
    if "\n" in stripped or "\r" in stripped:
        raise InvalidCategoryNameError(name, "must fit on one line")
    return stripped


# ============= Category =============


class Category:
    """
    A named, filtered view over a deck.

    A card belongs to the category when it is not blacklisted and either
    passes the filter or is whitelisted. Categories are created and owned by
    a :class:`~decks.deck.Deck`; the cards in the view (its filtrate) keep the
    deck's order.
    """

    def __init__(self, deck: Deck, name: str, filter: Filter, color: str | tuple[int, ...] | None = None):
        self._deck = deck
        self._name = name
        self._filter = filter.copy()
        self._color = normalize_color(color) if color is not None else random_color()
        self._whitelist: set[Card] = set()
        self._blacklist: set[Card] = set()
        self._filtrate: list[Card] = []

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def name(self) -> str:
        return self._name

    @property
    def color(self) -> str:
        return self._color

    @property
    def filter(self) -> Filter:
        """A copy of the filter; use :meth:`edit` to change it."""
        return self._filter.copy()

    @property
    def whitelist(self) -> frozenset[Card]:
        return frozenset(self._whitelist)

    @property
    def blacklist(self) -> frozenset[Card]:
        return frozenset(self._blacklist)

    def set_color(self, color: str | tuple[int, ...]) -> bool:
        normalized = normalize_color(color)
        if normalized == self._color:
            return False
        self._color = normalized
        return True

    # ============= Membership =============

    def includes(self, card: Card) -> bool:
        if card in self._blacklist:
            return False
        return card in self._whitelist or self._filter.matches(card)

    def include(self, card: Card) -> bool:
        """
        Make ``card`` part of this category, whitelisting it if the filter rejects it.

        Returns:
            True if the blacklist, whitelist or filtrate changed
        """
        changed = card in self._blacklist
        self._blacklist.discard(card)
        if not self._filter.matches(card) and card not in self._whitelist:
            self._whitelist.add(card)
            changed = True
        if self._deck._update_membership(self, card):
            changed = True
        if changed:
            logger.debug(f"Included {card} in category '{self._name}'")
        return changed

    def exclude(self, card: Card) -> bool:
        """
        Keep ``card`` out of this category, blacklisting it if the filter accepts it.

        Returns:
            True if the blacklist, whitelist or filtrate changed
        """
        changed = card in self._whitelist
        self._whitelist.discard(card)
        if self._filter.matches(card) and card not in self._blacklist:
            self._blacklist.add(card)
            changed = True
        if self._deck._update_membership(self, card):
            changed = True
        if changed:
            logger.debug(f"Excluded {card} from category '{self._name}'")
        return changed

    def edit(self, name: str | None = None, filter: Filter | None = None) -> bool:
        """
        Rename the category and/or replace its filter.

        Args:
            name: New name, or None to keep the current one
            filter: New filter, or None to keep the current one

        Returns:
            False if nothing changed, True otherwise

        Raises:
            InvalidCategoryNameError: If ``name`` is blank or cannot be saved.
            DuplicateCategoryNameError: If another category of the deck already uses ``name``.
        """
        new_name = self._name if name is None else normalize_category_name(name)
        new_filter = self._filter if filter is None else filter
        if new_name == self._name and new_filter == self._filter:
            return False
        if new_name != self._name and self._deck.contains_category(new_name):
            raise DuplicateCategoryNameError(new_name)
        if new_name != self._name:
            self._deck._rename_category(self, new_name)
            self._name = new_name
        if new_filter is not self._filter:
            self._filter = new_filter.copy()
            self._deck._refresh_category(self)
        return True

    def _forget(self, card: Card) -> None:
        self._whitelist.discard(card)
        self._blacklist.discard(card)
        if card in self._filtrate:
            self._filtrate.remove(card)

    # ============= Deck view =============

    @property
    def size(self) -> int:
        return len(self._filtrate)

    @property
    def total(self) -> int:
        return sum(self._deck.count(card) for card in self._filtrate)

    def count(self, card: Card) -> int:
        return self._deck.count(card) if card in self else 0

    def get(self, index: int) -> Card:
        return self._filtrate[index]

    def index_of(self, card: Card) -> int:
        """Position of ``card`` in this category, or -1."""
        try:
            return self._filtrate.index(card)
        except ValueError:
            return -1

    def is_empty(self) -> bool:
        return not self._filtrate

    def add(self, card: Card, n: int = 1) -> bool:
        """Add copies to the deck, but only of cards this category would include."""
        return self.includes(card) and self._deck.add(card, n)

    def remove(self, card: Card, n: int = 1) -> int:
        """Remove copies from the deck, but only of cards in this category."""
        return self._deck.remove(card, n) if card in self else 0

    def spec(self) -> CategorySpec:
        return CategorySpec(
            name=self._name,
            filter=self._filter,
            whitelist=frozenset(card.id for card in self._whitelist),
            blacklist=frozenset(card.id for card in self._blacklist),
            color=self._color,
        )

    def __contains__(self, card: object) -> bool:
        return isinstance(card, Card) and self in self._deck.categories_of(card)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._filtrate))

    def __len__(self) -> int:
        return len(self._filtrate)

    def __repr__(self) -> str:
        return f"Category({self._name!r}, {self._filter}, {len(self._filtrate)} cards)"


# ============= Detached definition =============


@dataclass(frozen=True)
class CategorySpec:
    """
    A category definition that is not attached to any deck.

    Cards in the white and black lists are referred to by id. Used for
    presets and for saving categories to disk.
    """

    name: str
    filter: Filter
    whitelist: frozenset[str] = field(default_factory=frozenset)
    blacklist: frozenset[str] = field(default_factory=frozenset)
    color: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", normalize_category_name(self.name))
        object.__setattr__(self, "filter", self.filter.copy())
        object.__setattr__(self, "whitelist", frozenset(self.whitelist))
        object.__setattr__(self, "blacklist", frozenset(self.blacklist))
        overlap = self.whitelist & self.blacklist
        if overlap:
            raise ValueError(f"Cards {sorted(overlap)} are both whitelisted and blacklisted")
        if self.color is not None:
            object.__setattr__(self, "color", normalize_color(self.color))

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "filter": self.filter.to_json(),
            "whitelist": sorted(self.whitelist),
            "blacklist": sorted(self.blacklist),
            "color": self.color,
        }

    @classmethod
    def from_json(cls, document: Mapping[str, Any]) -> CategorySpec:
        """
        Rebuild a spec from :meth:`to_json` output.

        Raises:
            FilterDeserializationError: If the document or its filter cannot be decoded.
        """
        if not isinstance(document, Mapping):
            raise FilterDeserializationError(f"Expected a category object, got {document!r}")
        name = document.get("name")
        if not isinstance(name, str):
            raise FilterDeserializationError(f"Category name must be a string, got {name!r}")
        color = document.get("color")
        if color is not None and not isinstance(color, str):
            raise FilterDeserializationError(f"Category color must be a string, got {color!r}")
        try:
            filter = codec.from_json(document["filter"])
            return cls(
                name=name,
                filter=filter,
                whitelist=_id_set(document.get("whitelist", ())),
                blacklist=_id_set(document.get("blacklist", ())),
                color=color,
            )
        except FilterDeserializationError:
            raise
        except (FilterError, KeyError, TypeError, ValueError) as exc:
            raise FilterDeserializationError(f"Cannot decode category {name!r}: {exc}") from exc

    def to_legacy_string(self) -> str:
        """``name <white:ids> <black:ids> <filter>``; color is not part of this form."""
        whitelist = EXCEPTION_SEPARATOR.join(sorted(self.whitelist))
        blacklist = EXCEPTION_SEPARATOR.join(sorted(self.blacklist))
        return f"{self.name} <{whitelist}> <{blacklist}> {self.filter}"

    @classmethod
    def parse_legacy(cls, text: str, color: str | None = None) -> CategorySpec:
        """
        Parse :meth:`to_legacy_string` output.

        Raises:
            DeckFormatError: If the line does not have the legacy category shape.
            FilterError: If the filter part does not parse.
        """
        match = LEGACY_PATTERN.match(text.strip())
        if not match:
            raise DeckFormatError(f"Illegal category string {text!r}")
        name, whitelist, blacklist, filter_text = match.groups()
        try:
            return cls(
                name=name.strip(),
                filter=codec.parse(filter_text),
                whitelist=_split_ids(whitelist),
                blacklist=_split_ids(blacklist),
                color=color,
            )
        except ValueError as exc:
            raise DeckFormatError(str(exc)) from exc


def _split_ids(text: str) -> frozenset[str]:
    return frozenset(part.strip() for part in text.split(EXCEPTION_SEPARATOR) if part.strip())


def _id_set(values: Iterable[Any]) -> frozenset[str]:
    if isinstance(values, str):
        raise TypeError("card id lists must be lists")
    return frozenset(str(value) for value in values)
