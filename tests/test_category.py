"""Tests for deck categories and their detached definitions."""

import random
import re

import pytest

from decks.category import CategorySpec, normalize_category_name, normalize_color, random_color
from decks.deck import Deck
from decks.errors import (
    CategoryNotFoundError,
    DeckFormatError,
    DuplicateCategoryNameError,
    InvalidCategoryNameError,
)
from filters.attributes import CardAttribute
from filters.containment import Comparison, Containment
from filters.errors import FilterDeserializationError, FilterError
from filters.leaves import NumberFilter, OptionsFilter, TextFilter


def creature_filter():
    return OptionsFilter(CardAttribute.CARD_TYPE, Containment.ANY_OF, {"Creature"})


@pytest.fixture
def deck(forest, bolt, bears, elves):
    return Deck.from_entries([(forest, 10), (bolt, 4), (bears, 3), (elves, 4)])


@pytest.fixture
def creatures(deck):
    return deck.add_category("Creatures", creature_filter(), color="green")


# ============= Colors =============


def test_normalize_color():
    assert normalize_color("red") == "#ff0000"
    assert normalize_color("#ABC") == "#aabbcc"
    assert normalize_color((0, 128, 255)) == "#0080ff"
    with pytest.raises(ValueError):
        normalize_color("not a color")
    with pytest.raises(ValueError):
        normalize_color((300, 0, 0))


def test_random_color_is_a_hex_color():
    color = random_color(random.Random(7))
    assert re.fullmatch(r"#[0-9a-f]{6}", color)
    assert random_color(random.Random(7)) == color


# ============= Membership =============


def test_category_view_keeps_deck_order(creatures, bears, elves):
    assert list(creatures) == [bears, elves]
    assert creatures.size == 2
    assert creatures.total == 7
    assert creatures.color == "#008000"
    assert creatures.get(1) == elves
    assert creatures.index_of(elves) == 1


def test_category_lookups_for_absent_cards(creatures, bolt, tarmogoyf):
    assert creatures.index_of(bolt) == -1
    assert creatures.count(bolt) == 0
    assert creatures.count(tarmogoyf) == 0
    assert bolt not in creatures


def test_include_whitelists_rejected_card(deck, creatures, bolt, bears, elves):
    assert creatures.include(bolt)
    assert bolt in creatures.whitelist
    assert list(creatures) == [bolt, bears, elves]
    assert creatures in deck.categories_of(bolt)
    assert not creatures.include(bolt)
    deck.check_invariants()


def test_include_of_matching_card_does_not_whitelist(creatures, bears):
    assert not creatures.include(bears)
    assert creatures.whitelist == frozenset()


def test_exclude_blacklists_matching_card(deck, creatures, bears, elves):
    assert creatures.exclude(bears)
    assert bears in creatures.blacklist
    assert list(creatures) == [elves]
    assert not creatures.includes(bears)
    assert not creatures.exclude(bears)
    deck.check_invariants()


def test_include_and_exclude_undo_each_other(deck, creatures, bolt, bears):
    creatures.exclude(bears)
    creatures.include(bears)
    assert creatures.blacklist == frozenset()
    assert creatures.whitelist == frozenset()

    creatures.include(bolt)
    creatures.exclude(bolt)
    assert creatures.whitelist == frozenset()
    assert creatures.blacklist == frozenset()
    assert bolt not in creatures
    deck.check_invariants()


def test_lists_never_overlap(creatures, bolt, bears):
    for card in (bolt, bears, bolt, bears):
        creatures.include(card)
        creatures.exclude(card)
        creatures.include(card)
        assert not creatures.whitelist & creatures.blacklist


def test_category_add_and_remove(deck, creatures, bolt, bears, tarmogoyf):
    assert not creatures.add(bolt)
    assert deck.count(bolt) == 4
    assert creatures.add(tarmogoyf, 2)
    assert list(creatures)[-1] == tarmogoyf
    assert creatures.remove(bolt) == 0
    assert creatures.remove(bears, 2) == 2
    assert deck.count(bears) == 1


# ============= Editing =============


def test_filter_property_returns_a_copy(creatures, bears):
    creatures.filter.selected.add("Instant")
    assert creatures.filter == creature_filter()


def test_edit_filter_refreshes_members(deck, creatures, bolt, forest):
    cheap = NumberFilter(CardAttribute.MANA_VALUE, Comparison.LE, 1)
    assert creatures.edit(filter=cheap)
    assert list(creatures) == [forest, bolt, deck.get(3)]
    deck.check_invariants()


def test_edit_without_changes_returns_false(creatures):
    assert not creatures.edit()
    assert not creatures.edit(name="Creatures", filter=creature_filter())


def test_rename(deck, creatures):
    deck.add_category("Spells", TextFilter(CardAttribute.NAME, Containment.ANY_OF, "bolt"))
    assert creatures.edit(name="Beasts")
    assert deck.category_names == ("Beasts", "Spells")
    assert deck.get_category("Beasts") is creatures
    with pytest.raises(CategoryNotFoundError):
        deck.get_category("Creatures")


def test_rename_to_taken_name_fails(deck, creatures):
    deck.add_category("Spells", TextFilter(CardAttribute.NAME, Containment.ANY_OF, "bolt"))
    with pytest.raises(DuplicateCategoryNameError):
        creatures.edit(name="Spells", filter=NumberFilter())
    assert creatures.name == "Creatures"
    assert creatures.filter == creature_filter()


@pytest.mark.parametrize("name", ["", "   ", "A <b>", "two\nlines", "old\rmac"])
def test_rename_to_unsaveable_name_fails(deck, creatures, name):
    with pytest.raises(InvalidCategoryNameError):
        creatures.edit(name=name, filter=NumberFilter())
    assert creatures.name == "Creatures"
    assert creatures.filter == creature_filter()
    assert deck.category_names == ("Creatures",)


def test_rename_strips_the_name(deck, creatures):
    assert creatures.edit(name="  Beasts ")
    assert creatures.name == "Beasts"
    assert deck.get_category("Beasts") is creatures
    assert not creatures.edit(name=" Beasts")


def test_normalize_category_name():
    assert normalize_category_name(" Lands\t") == "Lands"
    assert normalize_category_name("Big > Small") == "Big > Small"
    with pytest.raises(InvalidCategoryNameError):
        normalize_category_name("\n")


def test_set_color(creatures):
    assert not creatures.set_color("green")
    assert creatures.set_color((255, 255, 255))
    assert creatures.color == "#ffffff"


def test_removed_category_is_inert(deck, creatures, bolt):
    deck.remove_category("Creatures")
    creatures.include(bolt)
    assert creatures.is_empty()
    assert creatures not in deck.categories_of(bolt)
    deck.check_invariants()


# ============= Specs =============


def test_spec_captures_the_category(creatures, bolt, bears):
    creatures.include(bolt)
    creatures.exclude(bears)
    spec = creatures.spec()

    assert spec.name == "Creatures"
    assert spec.filter == creature_filter()
    assert spec.whitelist == frozenset({"bolt"})
    assert spec.blacklist == frozenset({"bears"})
    assert spec.color == "#008000"


def test_spec_validation():
    with pytest.raises(InvalidCategoryNameError):
        CategorySpec(" ", creature_filter())
    with pytest.raises(ValueError):
        CategorySpec("Both", creature_filter(), whitelist={"a"}, blacklist={"a"})


def test_spec_names_are_stripped():
    spec = CategorySpec(" Lands ", creature_filter())

    assert spec.name == "Lands"
    assert spec == CategorySpec("Lands", creature_filter())
    assert CategorySpec.parse_legacy(spec.to_legacy_string()).name == "Lands"


def test_spec_json_round_trip():
    spec = CategorySpec("Creatures", creature_filter(), {"b", "a"}, {"c"}, "#123456")
    document = spec.to_json()

    assert document["whitelist"] == ["a", "b"]
    assert CategorySpec.from_json(document) == spec


@pytest.mark.parametrize(
    "document",
    [
        "Creatures",
        {"filter": {"type": "*"}},
        {"name": 3, "filter": {"type": "*"}},
        {"name": "x", "filter": {"type": "*"}, "color": 5},
        {"name": "x", "filter": {"type": "*"}, "color": "no such color"},
        {"name": "x"},
        {"name": "x", "filter": {"type": "*"}, "whitelist": "abc"},
        {"name": "x", "filter": {"type": "*"}, "whitelist": ["a"], "blacklist": ["a"]},
        {"name": "x", "filter": {"type": "cmc", "operation": "≤", "operand": "many"}},
    ],
)
def test_spec_from_bad_json(document):
    with pytest.raises(FilterDeserializationError):
        CategorySpec.from_json(document)


def test_legacy_string_round_trip():
    spec = CategorySpec("Big Creatures", creature_filter(), {"bears", "elves"}, {"goyf"}, "#00ff00")
    text = spec.to_legacy_string()

    assert text == "Big Creatures <bears:elves> <goyf> <cardtype:contains any of{Creature}>"
    parsed = CategorySpec.parse_legacy(text)
    assert parsed.name == spec.name
    assert parsed.filter == spec.filter
    assert parsed.whitelist == spec.whitelist
    assert parsed.blacklist == spec.blacklist


def test_legacy_string_without_exceptions():
    parsed = CategorySpec.parse_legacy("Lands <> <> <cardtype:contains any of{Land}>", color="brown")
    assert parsed.whitelist == frozenset()
    assert parsed.color == "#a52a2a"


def test_legacy_string_errors():
    with pytest.raises(DeckFormatError):
        CategorySpec.parse_legacy("just a name")
    with pytest.raises(DeckFormatError):
        CategorySpec.parse_legacy("Both <a> <a> <*>")
    with pytest.raises(FilterError):
        CategorySpec.parse_legacy("Broken <> <> <cmc:≤three>")
    with pytest.raises(InvalidCategoryNameError):
        CategorySpec("A <b>", creature_filter())
