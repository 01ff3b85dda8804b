"""Tests for CardRepository data access layer."""

import json
import threading

import pytest

from cards.inventory import Inventory
from repositories.card_repository import CardRepository, get_card_repository, reset_card_repository
from utils.background_worker import BackgroundWorker
from utils.card_data import InventoryError


def write_dump(path, cards):
    """Write a minimal MTGJSON v5 dump containing ``cards``."""
    document = {
        "meta": {"version": "5.2.2"},
        "data": {"TST": {"name": "Test Set", "code": "TST", "cards": cards}},
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def raw(name, number):
    return {
        "name": name,
        "uuid": f"u-{number}",
        "identifiers": {"multiverseId": str(number), "scryfallId": f"s-{number}"},
        "manaCost": "{1}",
        "manaValue": 1,
        "type": "Artifact",
        "types": ["Artifact"],
        "rarity": "rare",
        "legalities": {"vintage": "Legal"},
    }


@pytest.fixture
def dump_file(tmp_path):
    return write_dump(tmp_path / "AllPrintings.json", [raw("Sol Ring", 1), raw("Mox Pearl", 2)])


# ============= Inventory State Tests =============


def test_inventory_before_loading_raises():
    """Test that accessing the inventory before loading raises."""
    repo = CardRepository()

    assert not repo.is_loaded()
    with pytest.raises(RuntimeError):
        _ = repo.inventory


def test_set_inventory(sample_cards):
    """Test installing an already built inventory."""
    repo = CardRepository()
    inventory = Inventory(sample_cards)
    repo.set_inventory(inventory)

    assert repo.is_loaded()
    assert repo.inventory is inventory
    assert repo.cards() == sample_cards


def test_find_card(inventory, bolt):
    """Test looking up cards by id."""
    repo = CardRepository(inventory)

    assert repo.find_card("bolt") == bolt
    assert repo.find_card("missing") is None


def test_find_card_without_inventory():
    """Test that lookups without an inventory return None."""
    assert CardRepository().find_card("bolt") is None


# ============= Loading Tests =============


def test_load_inventory(dump_file):
    """Test loading an inventory from a file."""
    repo = CardRepository()
    inventory = repo.load_inventory(dump_file)

    assert repo.inventory is inventory
    assert [card.name for card in inventory] == ["Sol Ring", "Mox Pearl"]
    assert repo.warnings == []
    assert not repo.is_loading()


def test_load_inventory_keeps_warnings(tmp_path):
    """Test that loader warnings from the latest load are kept."""
    bad = raw("Bad Card", 3)
    bad["rarity"] = "ultra"
    path = write_dump(tmp_path / "AllPrintings.json", [raw("Sol Ring", 1), bad])
    repo = CardRepository()
    repo.load_inventory(path)

    assert len(repo.warnings) == 1
    assert "Bad Card" in repo.warnings[0]


def test_cancelled_load_keeps_current_inventory(dump_file, inventory):
    """Test that a cancelled load does not replace the current inventory."""
    repo = CardRepository(inventory)
    result = repo.load_inventory(dump_file, is_cancelled=lambda: True)

    assert len(result) == 0
    assert repo.inventory is inventory


def test_load_inventory_error(tmp_path):
    """Test that unreadable files raise InventoryError."""
    repo = CardRepository()
    with pytest.raises(InventoryError):
        repo.load_inventory(tmp_path / "missing.json")
    assert not repo.is_loaded()
    assert not repo.is_loading()


def test_load_inventory_async(dump_file):
    """Test loading in the background and receiving the result."""
    done = threading.Event()
    results = []

    def on_success(inventory):
        results.append(inventory)
        done.set()

    repo = CardRepository(worker=BackgroundWorker())
    repo.load_inventory_async(dump_file, on_success=on_success)

    assert done.wait(timeout=5.0)
    assert len(results[0]) == 2
    assert repo.inventory is results[0]
    repo.worker.shutdown()


def test_load_inventory_async_error(tmp_path):
    """Test that background load errors reach the error callback."""
    done = threading.Event()
    errors = []

    def on_error(exc):
        errors.append(exc)
        done.set()

    with BackgroundWorker() as worker:
        repo = CardRepository(worker=worker)
        repo.load_inventory_async(tmp_path / "missing.json", on_error=on_error)
        assert done.wait(timeout=5.0)

    assert isinstance(errors[0], InventoryError)


# ============= Global Instance Tests =============


def test_default_repository_is_shared():
    """Test the module level repository instance."""
    first = get_card_repository()

    assert get_card_repository() is first
    reset_card_repository()
    assert get_card_repository() is not first
