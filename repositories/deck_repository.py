"""
Deck Repository - Data access layer for deck files.

This module handles all deck persistence including:
- The legacy line-based deck format
- The JSON deck format
- Saving into the decks directory with safe, unique file names
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from cards.card import Card
from decks.category import CategorySpec
from decks.deck import Deck
from decks.errors import DeckFormatError
from filters.errors import FilterError
from utils.constants import DECKS_DIR, JSON_DECK_EXTENSION, LEGACY_DECK_EXTENSION
from utils.filenames import sanitize_filename

JSON_FORMAT_VERSION = 1


class CardLookup(Protocol):
    def find(self, card_id: str) -> Card | None:
        ...


class DeckFileFormat(Enum):
    LEGACY = "legacy"
    JSON = "json"

    @classmethod
    def for_path(cls, path: Path) -> DeckFileFormat:
        return cls.JSON if path.suffix.lower() == JSON_DECK_EXTENSION else cls.LEGACY

    @property
    def extension(self) -> str:
        return JSON_DECK_EXTENSION if self is DeckFileFormat.JSON else LEGACY_DECK_EXTENSION


class DeckRepository:
    """Repository for reading and writing deck files."""

    def __init__(self, decks_dir: Path | None = None):
        """
        Initialize the deck repository.

        Args:
            decks_dir: Default directory for saved decks (defaults to DECKS_DIR)
        """
        self.decks_dir = decks_dir or DECKS_DIR

    # ============= Legacy Format =============

    def serialize_legacy(self, deck: Deck) -> str:
        """
        Write a deck in the legacy format.

        Line 1 holds the number of distinct cards, followed by one
        ``<card id>\\t<count>`` line per card, then the number of categories
        and one legacy category string per category.
        """
        lines = [str(deck.size)]
        lines.extend(f"{card.id}\t{count}" for card, count in deck.entries())
        specs = deck.category_specs()
        lines.append(str(len(specs)))
        lines.extend(spec.to_legacy_string() for spec in specs)
        return "\n".join(lines) + "\n"

    def parse_legacy(self, text: str, cards: CardLookup) -> Deck:
        """
        Read a deck written by :meth:`serialize_legacy`.

        Args:
            text: File contents
            cards: Resolves card ids, usually the loaded inventory

        Returns:
            The rebuilt deck

        Raises:
            DeckFormatError: If the text is malformed or names an unknown card
        """
        lines = text.splitlines()
        position = 0

        def next_line() -> tuple[int, str]:
            nonlocal position
            if position >= len(lines):
                raise DeckFormatError("unexpected end of file", position + 1)
            position += 1
            return position, lines[position - 1]

        deck = Deck()
        line_no, line = next_line()
        for _ in range(self._parse_count(line, line_no)):
            line_no, line = next_line()
            card_id, separator, count_text = line.partition("\t")
            if not separator:
                raise DeckFormatError(f"expected '<card id>\\t<count>', got {line!r}", line_no)
            card = self._find(cards, card_id.strip(), line_no)
            count = self._parse_count(count_text, line_no)
            if count < 1:
                raise DeckFormatError(f"card count must be positive, got {count}", line_no)
            deck.add(card, count)

        line_no, line = next_line()
        for _ in range(self._parse_count(line, line_no)):
            line_no, line = next_line()
            try:
                spec = CategorySpec.parse_legacy(line)
            except (DeckFormatError, FilterError) as exc:
                raise DeckFormatError(str(exc), line_no) from exc
            deck.add_category(spec, resolve=cards.find)
        return deck

    @staticmethod
    def _parse_count(text: str, line_no: int) -> int:
        try:
            return int(text.strip())
        except ValueError:
            raise DeckFormatError(f"expected a number, got {text!r}", line_no) from None

    @staticmethod
    def _find(cards: CardLookup, card_id: str, line_no: int | None = None) -> Card:
        card = cards.find(card_id)
        if card is None:
            raise DeckFormatError(f"unknown card id {card_id!r}", line_no)
        return card

    # ============= JSON Format =============

    def to_document(self, deck: Deck) -> dict[str, Any]:
        return {
            "version": JSON_FORMAT_VERSION,
            "cards": [{"id": card.id, "count": count} for card, count in deck.entries()],
            "categories": [spec.to_json() for spec in deck.category_specs()],
        }

    def serialize_json(self, deck: Deck) -> str:
        return json.dumps(self.to_document(deck), indent=2, ensure_ascii=False) + "\n"

    def parse_json(self, text: str, cards: CardLookup) -> Deck:
        """
        Read a deck written by :meth:`serialize_json`.

        Raises:
            DeckFormatError: If the document is malformed or names an unknown card
        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DeckFormatError(f"invalid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise DeckFormatError("deck document must be an object")
        version = document.get("version")
        if version != JSON_FORMAT_VERSION:
            raise DeckFormatError(f"unsupported deck format version {version!r}")

        deck = Deck()
        for entry in document.get("cards", []):
            try:
                card_id, count = str(entry["id"]), int(entry["count"])
            except (KeyError, TypeError, ValueError) as exc:
                raise DeckFormatError(f"bad card entry {entry!r}") from exc
            if count < 1:
                raise DeckFormatError(f"card count must be positive in {entry!r}")
            deck.add(self._find(cards, card_id), count)

        for entry in document.get("categories", []):
            try:
                spec = CategorySpec.from_json(entry)
            except FilterError as exc:
                raise DeckFormatError(str(exc)) from exc
            deck.add_category(spec, resolve=cards.find)
        return deck

    # ============= File Operations =============

    def save_deck(self, deck: Deck, path: Path | str, fmt: DeckFileFormat | None = None) -> Path:
        """
        Write a deck to ``path``.

        Args:
            deck: Deck to save
            path: Target file
            fmt: File format; chosen from the file extension when omitted

        Returns:
            Path to the saved file
        """
        path = Path(path)
        fmt = fmt or DeckFileFormat.for_path(path)
        content = self.serialize_json(deck) if fmt is DeckFileFormat.JSON else self.serialize_legacy(deck)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Saved deck to {path} ({fmt.value})")
        return path

    def load_deck(self, path: Path | str, cards: CardLookup, fmt: DeckFileFormat | None = None) -> Deck:
        """
        Read a deck file.

        Args:
            path: File to read
            cards: Resolves card ids, usually the loaded inventory
            fmt: File format; chosen from the file extension when omitted

        Raises:
            DeckFormatError: If the file is malformed
            OSError: If the file cannot be read
        """
        path = Path(path)
        fmt = fmt or DeckFileFormat.for_path(path)
        text = path.read_text(encoding="utf-8")
        deck = self.parse_json(text, cards) if fmt is DeckFileFormat.JSON else self.parse_legacy(text, cards)
        logger.info(f"Loaded deck from {path}: {deck.size} cards, {len(deck.categories)} categories")
        return deck

    def save_deck_to_directory(
        self,
        deck: Deck,
        deck_name: str,
        directory: Path | None = None,
        fmt: DeckFileFormat = DeckFileFormat.LEGACY,
    ) -> Path:
        """
        Save a deck under a file name derived from ``deck_name``, never overwriting.

        Args:
            deck: Deck to save
            deck_name: Name for the deck file
            directory: Target directory (defaults to the repository's decks directory)
            fmt: File format

        Returns:
            Path to the saved file
        """
        directory = directory or self.decks_dir
        directory.mkdir(parents=True, exist_ok=True)

        safe_name = sanitize_filename(deck_name, fallback="saved_deck")
        file_path = directory / f"{safe_name}{fmt.extension}"
        counter = 1
        while file_path.exists():
            file_path = directory / f"{safe_name}_{counter}{fmt.extension}"
            counter += 1
        return self.save_deck(deck, file_path, fmt)

    def list_deck_files(self, directory: Path | None = None) -> list[Path]:
        """
        List deck files in a directory, sorted by name.

        Args:
            directory: Directory to search (defaults to the repository's decks directory)
        """
        directory = directory or self.decks_dir
        if not directory.exists():
            return []
        extensions = {LEGACY_DECK_EXTENSION, JSON_DECK_EXTENSION}
        return sorted(path for path in directory.iterdir() if path.is_file() and path.suffix.lower() in extensions)


# Global instance for backward compatibility
_default_repository = None


def get_deck_repository() -> DeckRepository:
    """Get the default deck repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = DeckRepository()
    return _default_repository


def reset_deck_repository() -> None:
    """
    Reset the global deck repository instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_repository
    _default_repository = None
