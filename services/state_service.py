from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from decks.category import CategorySpec
from filters.errors import FilterError
from utils.constants import MAX_RECENT_FILES, SETTINGS_FILE


@dataclass
class EditorSettings:
    """Persisted editor preferences."""

    inventory_path: str | None = None
    recent_files: list[str] = field(default_factory=list)
    warn_on_inventory_errors: bool = True
    presets: list[CategorySpec] = field(default_factory=list)


class StateService:
    """Loads and persists editor settings."""

    def __init__(self, settings_path: Path | None = None) -> None:
        self.settings_path = settings_path or SETTINGS_FILE

    def load(self) -> dict[str, Any]:
        if not self.settings_path.exists():
            return {}
        try:
            with self.settings_path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(f"Failed to load editor settings: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring editor settings in {self.settings_path}: not an object")
            return {}
        return data

    def save(self, data: dict[str, Any]) -> None:
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with self.settings_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
        except OSError as exc:
            logger.warning(f"Unable to persist editor settings: {exc}")

    @staticmethod
    def coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def deserialize_presets(value: Any) -> list[CategorySpec]:
        if not isinstance(value, list):
            return []
        presets: list[CategorySpec] = []
        for entry in value:
            try:
                presets.append(CategorySpec.from_json(entry))
            except FilterError as exc:
                logger.warning(f"Skipping unreadable category preset: {exc}")
        return presets

    def load_settings(self) -> EditorSettings:
        """Read settings, falling back to defaults for anything missing or unreadable."""
        data = self.load()
        inventory_path = data.get("inventory_path")
        recent = data.get("recent_files")
        return EditorSettings(
            inventory_path=inventory_path if isinstance(inventory_path, str) else None,
            recent_files=[str(p) for p in recent][:MAX_RECENT_FILES] if isinstance(recent, list) else [],
            warn_on_inventory_errors=self.coerce_bool(data.get("warn_on_inventory_errors", True)),
            presets=self.deserialize_presets(data.get("presets")),
        )

    def save_settings(self, settings: EditorSettings) -> None:
        self.save(
            {
                "inventory_path": settings.inventory_path,
                "recent_files": settings.recent_files[:MAX_RECENT_FILES],
                "warn_on_inventory_errors": settings.warn_on_inventory_errors,
                "presets": [spec.to_json() for spec in settings.presets],
            }
        )

    def add_recent_file(self, settings: EditorSettings, path: Path | str) -> None:
        entry = str(path)
        if entry in settings.recent_files:
            settings.recent_files.remove(entry)
        settings.recent_files.insert(0, entry)
        del settings.recent_files[MAX_RECENT_FILES:]


_default_service = None


def get_state_service() -> StateService:
    """Get the default state service instance."""
    global _default_service
    if _default_service is None:
        _default_service = StateService()
    return _default_service


def reset_state_service() -> None:
    """Reset the global state service instance."""
    global _default_service
    _default_service = None


__all__ = ["EditorSettings", "StateService", "get_state_service", "reset_state_service"]
