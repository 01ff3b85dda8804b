"""Root-level pytest fixtures for all tests.

This module provides fixtures that are available to all tests in the project.
"""

import pytest
from test_helpers import reset_all_globals

from factories import INNISTRAD, make_card

from cards.attributes import ManaType, Rarity
from cards.card import CardLayout, join_faces
from cards.inventory import Inventory


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def forest():
    return make_card(
        "Forest",
        types=("Land",),
        supertypes=("Basic",),
        subtypes=("Forest",),
        colors=(),
        rarity=Rarity.BASIC_LAND,
        card_id="forest",
    )


@pytest.fixture
def bolt():
    return make_card(
        "Lightning Bolt",
        cost="{R}",
        types=("Instant",),
        text="Lightning Bolt deals 3 damage to any target.",
        artist="Christopher Rush",
        card_id="bolt",
    )


@pytest.fixture
def bears():
    return make_card(
        "Grizzly Bears",
        cost="{1}{G}",
        subtypes=("Bear",),
        power="2",
        toughness="2",
        flavor="Don't try to outrun one of Dominaria's grizzlies.",
        card_id="bears",
    )


@pytest.fixture
def elves():
    return make_card(
        "Llanowar Elves",
        cost="{G}",
        subtypes=("Elf", "Druid"),
        text="{T}: Add {G}.",
        power="1",
        toughness="1",
        card_id="elves",
    )


@pytest.fixture
def tarmogoyf():
    return make_card(
        "Tarmogoyf",
        cost="{1}{G}",
        subtypes=("Lhurgoyf",),
        power="*",
        toughness="1+*",
        rarity=Rarity.MYTHIC_RARE,
        card_id="goyf",
    )


@pytest.fixture
def delver():
    """Transform card: a blue creature whose back face is a flying Insect."""
    front = make_card(
        "Delver of Secrets",
        cost="{U}",
        subtypes=("Human", "Wizard"),
        power="1",
        toughness="1",
        expansion=INNISTRAD,
        card_id="delver",
    )
    back = make_card(
        "Insectile Aberration",
        types=("Creature",),
        subtypes=("Human", "Insect"),
        colors=(ManaType.BLUE,),
        text="Flying",
        power="3",
        toughness="2",
        expansion=INNISTRAD,
        card_id="delver",
    )
    return join_faces([front, back], CardLayout.TRANSFORM)


@pytest.fixture
def fire_ice():
    """Split card with a red and a blue half."""
    fire = make_card("Fire", cost="{1}{R}", types=("Instant",), card_id="fire-ice")
    ice = make_card("Ice", cost="{1}{U}", types=("Instant",), text="Draw a card.", card_id="fire-ice")
    return join_faces([fire, ice], CardLayout.SPLIT)


@pytest.fixture
def sample_cards(forest, bolt, bears, elves, tarmogoyf, delver, fire_ice):
    return [forest, bolt, bears, elves, tarmogoyf, delver, fire_ice]


@pytest.fixture
def inventory(sample_cards):
    return Inventory(sample_cards)


@pytest.fixture(autouse=True)
def reset_global_state():
    """Automatically reset all global service and repository instances after each test.

    This fixture ensures test isolation by resetting all singleton instances
    to None after each test completes, preventing state leakage between tests.
    """
    yield
    reset_all_globals()
