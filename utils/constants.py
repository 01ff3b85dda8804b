"""Application directories and file locations."""

import os
import sys
from pathlib import Path

APP_NAME = "MTG Deck Editor"


def _default_base_dir() -> Path:
    """Return the writable base directory for config/data/logging."""
    override = os.getenv("MTG_DECK_EDITOR_HOME")
    if override:
        return Path(override)
    if getattr(sys, "frozen", False):
        local_appdata = os.getenv("LOCALAPPDATA")
        if local_appdata:
            return Path(local_appdata) / APP_NAME
    return Path.home() / ".mtg_deck_editor"


BASE_DATA_DIR = _default_base_dir()
CONFIG_DIR = BASE_DATA_DIR / "config"
DATA_DIR = BASE_DATA_DIR / "data"
DECKS_DIR = BASE_DATA_DIR / "decks"
LOGS_DIR = BASE_DATA_DIR / "logs"

SETTINGS_FILE = CONFIG_DIR / "settings.json"
INVENTORY_FILE = DATA_DIR / "AllPrintings.json"

LEGACY_DECK_EXTENSION = ".dek"
JSON_DECK_EXTENSION = ".json"
MAX_RECENT_FILES = 8


__all__ = [
    "APP_NAME",
    "BASE_DATA_DIR",
    "CONFIG_DIR",
    "DATA_DIR",
    "DECKS_DIR",
    "LOGS_DIR",
    "SETTINGS_FILE",
    "INVENTORY_FILE",
    "LEGACY_DECK_EXTENSION",
    "JSON_DECK_EXTENSION",
    "MAX_RECENT_FILES",
]
