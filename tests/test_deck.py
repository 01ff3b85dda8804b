"""Tests for deck card counts, categories and the consistency of their indexes."""

import pytest

from decks.category import CategorySpec
from decks.deck import Deck
from decks.errors import CategoryNotFoundError
from filters.attributes import CardAttribute
from filters.containment import Comparison, Containment
from filters.leaves import BinaryFilter, NumberFilter, OptionsFilter


def lands_filter():
    return OptionsFilter(CardAttribute.CARD_TYPE, Containment.ANY_OF, {"Land"})


def creature_filter():
    return OptionsFilter(CardAttribute.CARD_TYPE, Containment.ANY_OF, {"Creature"})


# ============= Cards =============


def test_land_counts_follow_removals(forest):
    """Four lands minus one leaves three copies, all counted as land."""
    deck = Deck()
    assert deck.add(forest, 4)
    assert deck.remove(forest, 1) == 1

    assert deck.count(forest) == 3
    assert deck.total == 3
    assert deck.land == 3
    assert deck.nonland == 0
    deck.check_invariants()


def test_add_and_remove_ignore_non_positive_counts(forest, bolt):
    deck = Deck()
    assert not deck.add(forest, 0)
    assert not deck.add(forest, -2)
    assert deck.is_empty()

    deck.add(bolt, 2)
    assert deck.remove(bolt, 0) == 0
    assert deck.remove(forest) == 0
    assert deck.count(bolt) == 2


def test_remove_more_than_present(bolt):
    deck = Deck.from_entries([(bolt, 2)])
    assert deck.remove(bolt, 5) == 2
    assert bolt not in deck
    assert deck.total == 0
    deck.check_invariants()


def test_card_order_and_lookup(forest, bolt, bears):
    deck = Deck.from_entries([(bolt, 4), (forest, 20), (bears, 2)])
    deck.add(bolt, 1)

    assert list(deck) == [bolt, forest, bears]
    assert deck.entries() == [(bolt, 5), (forest, 20), (bears, 2)]
    assert deck.get(2) == bears
    assert deck.index_of(forest) == 1
    assert deck.find("bears") == bears
    assert deck.find("nope") is None
    assert deck.size == len(deck) == 3
    assert deck.total == 27
    assert deck.land == 20
    assert deck.nonland == 7


def test_index_of_absent_card(bolt, bears):
    deck = Deck.from_entries([(bolt, 1)])
    assert deck.index_of(bears) == -1
    assert deck.count(bears) == 0


def test_set_count(bolt):
    deck = Deck()
    assert deck.set_count(bolt, 3)
    assert deck.count(bolt) == 3
    assert not deck.set_count(bolt, 3)
    assert deck.set_count(bolt, 1)
    assert deck.total == 1
    assert deck.set_count(bolt, -1)
    assert bolt not in deck
    assert not deck.set_count(bolt, 0)


def test_clear(forest, bolt):
    deck = Deck.from_entries([(forest, 2), (bolt, 1)])
    lands = deck.add_category("Lands", lands_filter())
    lands.include(bolt)
    deck.clear()

    assert deck.is_empty()
    assert deck.total == 0
    assert deck.land == 0
    assert deck.categories == ()
    assert lands.size == 0
    assert list(lands) == []
    assert lands.whitelist == frozenset()
    assert lands.blacklist == frozenset()
    assert forest not in lands


# ============= Categories =============


def test_category_sees_cards_added_later(forest, bolt):
    deck = Deck()
    lands = deck.add_category("Lands", lands_filter())
    deck.add(bolt)
    deck.add(forest, 3)

    assert list(lands) == [forest]
    assert lands.total == 3
    assert deck.categories_of(forest) == {lands}
    assert deck.categories_of(bolt) == frozenset()


def test_card_in_several_categories(forest, bears, elves):
    deck = Deck.from_entries([(forest, 1), (bears, 1), (elves, 1)])
    creatures = deck.add_category("Creatures", creature_filter())
    cheap = deck.add_category("Cheap", NumberFilter(CardAttribute.MANA_VALUE, Comparison.LE, 1))

    assert deck.categories_of(elves) == {creatures, cheap}
    assert deck.categories_of(bears) == {creatures}
    assert deck.categories_of(forest) == {cheap}
    assert elves in creatures and elves in cheap
    deck.check_invariants()


def test_full_removal_purges_white_and_black_lists(forest, bolt, bears):
    deck = Deck.from_entries([(bolt, 4), (bears, 2), (forest, 10)])
    creatures = deck.add_category("Creatures", creature_filter())
    creatures.include(bolt)
    creatures.exclude(bears)

    deck.remove(bolt, 3)
    assert bolt in creatures.whitelist

    deck.remove(bolt, 1)
    deck.remove(bears, 2)
    assert creatures.whitelist == frozenset()
    assert creatures.blacklist == frozenset()
    assert deck.categories_of(bolt) == frozenset()

    deck.add(bolt)
    deck.add(bears)
    assert list(creatures) == [bears]
    deck.check_invariants()


def test_add_category_with_existing_name_returns_existing(bolt):
    deck = Deck.from_entries([(bolt, 1)])
    first = deck.add_category("Everything", BinaryFilter(), color="red")
    second = deck.add_category(CategorySpec("Everything", BinaryFilter(CardAttribute.NONE), color="blue"))

    assert second is first
    assert first.filter == BinaryFilter()
    assert first.color == "#ff0000"
    assert list(first) == [bolt]


def test_add_category_by_name_needs_a_filter():
    with pytest.raises(ValueError):
        Deck().add_category("Lands")


def test_add_category_resolves_listed_ids(inventory, forest, bolt, bears):
    deck = Deck.from_entries([(forest, 1), (bolt, 1)])
    spec = CategorySpec("Creatures", creature_filter(), whitelist={"bolt", "missing"}, blacklist={"bears"})
    creatures = deck.add_category(spec)

    assert creatures.whitelist == frozenset({bolt})
    assert creatures.blacklist == frozenset()

    other = Deck().add_category(spec, resolve=inventory.find)
    assert other.blacklist == frozenset({bears})
    assert other.whitelist == frozenset({bolt})


def test_add_category_copies_the_filter(bears):
    deck = Deck.from_entries([(bears, 1)])
    filter = creature_filter()
    creatures = deck.add_category("Creatures", filter)

    filter.selected.clear()
    assert creatures.filter == creature_filter()
    assert list(creatures) == [bears]


def test_remove_category(forest):
    deck = Deck.from_entries([(forest, 1)])
    lands = deck.add_category("Lands", lands_filter())

    assert deck.remove_category("Lands")
    assert not deck.remove_category("Lands")
    assert not deck.contains_category("Lands")
    assert deck.categories_of(forest) == frozenset()
    assert lands.is_empty()
    deck.check_invariants()


def test_get_category_not_found():
    deck = Deck()
    with pytest.raises(CategoryNotFoundError):
        deck.get_category("Missing")
    with pytest.raises(KeyError):
        deck.get_category("Missing")


def test_category_specs_in_insertion_order(bolt):
    deck = Deck.from_entries([(bolt, 1)])
    deck.add_category("B", BinaryFilter())
    deck.add_category("A", lands_filter())

    assert [spec.name for spec in deck.category_specs()] == ["B", "A"]
    assert deck.category_names == ("B", "A")


# ============= Consistency =============


def test_invariants_hold_through_mixed_edits(sample_cards):
    deck = Deck()
    creatures = deck.add_category("Creatures", creature_filter())
    cheap = deck.add_category("Cheap", NumberFilter(CardAttribute.MANA_VALUE, Comparison.LT, 2))
    for n, card in enumerate(sample_cards, start=1):
        deck.add(card, n)
        deck.check_invariants()

    forest, bolt, bears = sample_cards[:3]
    creatures.include(bolt)
    cheap.exclude(forest)
    deck.check_invariants()
    deck.set_count(bears, 0)
    cheap.edit(filter=NumberFilter(CardAttribute.MANA_VALUE, Comparison.GE, 2))
    creatures.edit(name="Beings")
    deck.check_invariants()
    deck.remove(bolt, 10)
    deck.remove_category("Cheap")
    deck.check_invariants()


def test_check_invariants_detects_corruption(forest):
    deck = Deck.from_entries([(forest, 2)])
    deck._land = 5
    with pytest.raises(AssertionError):
        deck.check_invariants()


def test_add_all(forest, bolt):
    deck = Deck()
    assert deck.add_all([forest, bolt], 2)
    assert deck.entries() == [(forest, 2), (bolt, 2)]
    assert not deck.add_all([forest, bolt], 0)
    assert not deck.add_all([])
