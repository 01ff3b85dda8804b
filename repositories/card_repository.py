"""
Card Repository - Data access layer for the card inventory.

This module owns the loaded inventory and handles:
- Synchronous and background inventory loading
- Card lookup by id
- Loader warnings from the most recent load
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from cards.card import Card
from cards.inventory import Inventory
from utils.background_worker import BackgroundWorker
from utils.card_data import InventoryLoader, MessageCallback, ProgressCallback
from utils.constants import INVENTORY_FILE


class CardRepository:
    """Repository for card data access operations and inventory state management."""

    def __init__(self, inventory: Inventory | None = None, worker: BackgroundWorker | None = None):
        """
        Initialize the card repository.

        Args:
            inventory: Already loaded inventory, if any
            worker: Worker used for background loads. If None, one is created on demand.
        """
        self._inventory = inventory
        self._worker = worker
        self._lock = threading.Lock()
        self._loading = False
        self.warnings: list[str] = []

    @property
    def inventory(self) -> Inventory:
        """
        The loaded inventory.

        Raises:
            RuntimeError: If no inventory has been loaded yet
        """
        if self._inventory is None:
            raise RuntimeError("Card inventory not loaded; call load_inventory first")
        return self._inventory

    @property
    def worker(self) -> BackgroundWorker:
        if self._worker is None:
            self._worker = BackgroundWorker()
        return self._worker

    def is_loaded(self) -> bool:
        return self._inventory is not None

    def is_loading(self) -> bool:
        return self._loading

    def set_inventory(self, inventory: Inventory) -> None:
        with self._lock:
            self._inventory = inventory

    # ============= Loading =============

    def load_inventory(
        self,
        path: Path | str | None = None,
        on_progress: ProgressCallback | None = None,
        on_message: MessageCallback | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> Inventory:
        """
        Load the inventory and keep it as the current one.

        A cancelled load returns an empty inventory and leaves the current one in place.

        Args:
            path: MTGJSON dump to read (defaults to INVENTORY_FILE)
            on_progress: Progress callback (percent, or None while unknown)
            on_message: Status message callback
            is_cancelled: Cancellation check polled while loading

        Returns:
            The inventory that was read

        Raises:
            InventoryError: If the file cannot be read
        """
        path = Path(path) if path is not None else INVENTORY_FILE
        cancelled = is_cancelled or (lambda: False)
        loader = InventoryLoader(path, on_progress=on_progress, on_message=on_message, is_cancelled=cancelled)
        self._loading = True
        try:
            inventory = loader.load()
        finally:
            self._loading = False
        if cancelled():
            return inventory
        with self._lock:
            self._inventory = inventory
            self.warnings = list(loader.warnings)
        return inventory

    def load_inventory_async(
        self,
        path: Path | str | None = None,
        on_success: Callable[[Inventory], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        on_progress: ProgressCallback | None = None,
        on_message: MessageCallback | None = None,
    ) -> threading.Thread:
        """
        Load the inventory on the background worker.

        Shutting the worker down cancels the load.

        Returns:
            The thread running the load
        """
        worker = self.worker
        return worker.submit(
            self.load_inventory,
            path,
            on_progress=on_progress,
            on_message=on_message,
            is_cancelled=worker.is_stopped,
            on_success=on_success,
            on_error=on_error,
        )

    # ============= Lookup =============

    def find_card(self, card_id: str) -> Card | None:
        if self._inventory is None:
            logger.warning(f"Card inventory not loaded; cannot look up {card_id}")
            return None
        return self._inventory.find(card_id)

    def cards(self) -> list[Card]:
        return list(self.inventory)


# Global instance for backward compatibility
_default_repository = None


def get_card_repository() -> CardRepository:
    """Get the default card repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = CardRepository()
    return _default_repository


def reset_card_repository() -> None:
    """
    Reset the global card repository instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_repository
    _default_repository = None
