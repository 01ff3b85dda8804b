"""Build the card inventory from an MTGJSON ``AllPrintings`` dump."""

from __future__ import annotations

import gzip
import json
import re
import zipfile
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any

from loguru import logger

from cards.attributes import NO_BLOCK, CombatStat, Expansion, Legality, ManaType, Rarity
from cards.card import Card, CardFace, CardLayout, join_faces, meld
from cards.formats import FORMAT_CONSTRAINTS
from cards.inventory import Inventory, InventoryIndex
from cards.mana import ManaCost

ProgressCallback = Callable[[int | None], None]
MessageCallback = Callable[[str], None]

_VERSION = re.compile(r"^(\d+)(?:\.(\d+))?")
_FACE_SEPARATOR = " // "


class InventoryError(RuntimeError):
    """The inventory file could not be read at all."""


def load_inventory(
    path: Path | str,
    on_progress: ProgressCallback | None = None,
    on_message: MessageCallback | None = None,
    is_cancelled: Callable[[], bool] | None = None,
) -> Inventory:
    """
    Load an inventory synchronously.

    This is intended to be called from a background thread.

    Args:
        path: MTGJSON dump (``.json``, ``.json.gz`` or ``.zip``)
        on_progress: Receives percentages, or None while progress is unknown
        on_message: Receives short status messages
        is_cancelled: Polled while loading; returning True aborts the load

    Returns:
        The loaded inventory, or an empty one if the load was cancelled

    Raises:
        InventoryError: If the file cannot be read or is not an MTGJSON dump
    """
    loader = InventoryLoader(path, on_progress=on_progress, on_message=on_message, is_cancelled=is_cancelled)
    return loader.load()


@dataclass
class _PendingFace:
    order: int
    card: Card
    set_code: str
    names: tuple[str, ...]
    face_name: str
    side: str


class InventoryLoader:
    """
    Reads an MTGJSON dump into :class:`~cards.inventory.Inventory`.

    Cards without a multiverse id are skipped. A card record that cannot be
    understood is skipped too; a description of the problem is appended to
    :attr:`warnings` and loading continues.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        on_progress: ProgressCallback | None = None,
        on_message: MessageCallback | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ):
        self.path = Path(path)
        self.warnings: list[str] = []
        self._on_progress = on_progress
        self._on_message = on_message
        self._is_cancelled = is_cancelled or (lambda: False)
        self._last_progress = -1
        self._v5 = True

    def load(self) -> Inventory:
        self._message(f"Opening {self.path.name}...")
        self._progress(None)
        sets = self._sets(self._read())
        total = sum(
            1 for set_data in sets for raw in set_data.get("cards", []) if self._multiverse_id(raw) is not None
        )
        logger.info(f"Loading {total} cards from {len(sets)} sets in {self.path}")

        self._message("Reading cards...")
        self._progress(0)
        ordered: list[tuple[int, Card]] = []
        pending: list[_PendingFace] = []
        expansions: list[Expansion] = []
        processed = 0
        for set_data in sets:
            if self._is_cancelled():
                return self._cancel()
            try:
                expansion = self._expansion(set_data)
            except (KeyError, TypeError, ValueError) as exc:
                self._warn(f"Skipping set {set_data.get('code', '?')}: {exc}")
                continue
            expansions.append(expansion)
            for raw in set_data.get("cards", []):
                if self._is_cancelled():
                    return self._cancel()
                multiverse_id = self._multiverse_id(raw)
                if multiverse_id is None:
                    continue
                processed += 1
                try:
                    card = self._card(raw, expansion, multiverse_id)
                    if card.layout.is_multi_faced:
                        pending.append(self._pending(processed, card, raw, expansion))
                    else:
                        ordered.append((processed, card))
                except (KeyError, TypeError, ValueError) as exc:
                    self._warn(f"{raw.get('name', '?')} ({expansion.name}): {exc}")
                self._progress(processed * 100 // total)

        self._message("Joining multi-faced cards...")
        ordered.extend(self._join(pending))
        ordered.sort(key=lambda item: item[0])
        cards = self._dedupe(card for _, card in ordered)

        self._message("Indexing...")
        index = InventoryIndex.from_cards(cards, expansions)
        unknown = [name for name in index.formats if name not in FORMAT_CONSTRAINTS]
        if unknown:
            self._warn(f"Could not find definitions for the following formats: {', '.join(unknown)}")
        self._progress(100)
        logger.info(f"Loaded {len(cards)} cards with {len(self.warnings)} warnings")
        return Inventory(cards, index)

    # ============= Reporting =============

    def _progress(self, value: int | None) -> None:
        if value is not None:
            if value <= self._last_progress:
                return
            self._last_progress = value
        if self._on_progress:
            self._on_progress(value)

    def _message(self, text: str) -> None:
        logger.debug(text)
        if self._on_message:
            self._on_message(text)

    def _warn(self, text: str) -> None:
        logger.warning(text)
        self.warnings.append(text)

    def _cancel(self) -> Inventory:
        logger.info(f"Loading {self.path} cancelled")
        return Inventory()

    # ============= Reading =============

    def _read(self) -> dict[str, Any]:
        try:
            if self.path.suffix == ".zip":
                with zipfile.ZipFile(self.path) as zf:
                    member = next((name for name in zf.namelist() if name.endswith(".json")), None)
                    if member is None:
                        raise InventoryError(f"No JSON file inside {self.path}")
                    with zf.open(member) as source:
                        raw = json.load(source)
            elif self.path.suffix == ".gz":
                with gzip.open(self.path, "rt", encoding="utf-8") as source:
                    raw = json.load(source)
            else:
                with self.path.open(encoding="utf-8") as source:
                    raw = json.load(source)
        except (OSError, json.JSONDecodeError, zipfile.BadZipFile) as exc:
            raise InventoryError(f"Cannot read card data from {self.path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise InventoryError(f"{self.path} is not an MTGJSON dump")
        return raw

    def _sets(self, raw: dict[str, Any]) -> list[dict[str, Any]]:
        meta = raw.get("meta")
        if isinstance(meta, dict) and isinstance(raw.get("data"), dict):
            match = _VERSION.match(str(meta.get("version", "")))
            self._v5 = match is None or int(match.group(1)) >= 5
            data = raw["data"]
        else:
            self._v5 = False
            data = raw
        return [set_data for set_data in data.values() if isinstance(set_data, dict)]

    def _expansion(self, set_data: dict[str, Any]) -> Expansion:
        released = set_data.get("releaseDate")
        try:
            release_date = date.fromisoformat(released) if released else None
        except ValueError:
            release_date = None
        return Expansion(
            name=set_data["name"],
            block=set_data.get("block") or NO_BLOCK,
            code=set_data.get("code", ""),
            count=len(set_data.get("cards", [])),
            release_date=release_date,
        )

    @staticmethod
    def _multiverse_id(raw: dict[str, Any]) -> int | None:
        identifiers = raw.get("identifiers") or {}
        value = identifiers.get("multiverseId", raw.get("multiverseId"))
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def _card(self, raw: dict[str, Any], expansion: Expansion, multiverse_id: int) -> Card:
        identifiers = raw.get("identifiers") or {}
        card_id = identifiers.get("scryfallId") or raw.get("scryfallId") or raw["uuid"]
        mana_value = float(raw.get("manaValue", raw.get("convertedManaCost", 0)) or 0)
        face_mana_value = raw.get("faceManaValue", raw.get("faceConvertedManaCost"))
        face = CardFace(
            name=raw.get("faceName") or raw["name"],
            mana_cost=ManaCost.parse(raw.get("manaCost")),
            mana_value=float(face_mana_value) if face_mana_value is not None else mana_value,
            colors=tuple(ManaType.parse(color) for color in raw.get("colors", [])),
            type_line=raw.get("type", ""),
            supertypes=frozenset(raw.get("supertypes", [])),
            types=frozenset(raw.get("types", [])),
            subtypes=frozenset(raw.get("subtypes", [])),
            oracle_text=raw.get("text", ""),
            flavor_text=raw.get("flavorText", ""),
            power=CombatStat(str(raw.get("power") or "")),
            toughness=CombatStat(str(raw.get("toughness") or "")),
            loyalty=CombatStat(str(raw.get("loyalty") or "")),
            artist=raw.get("artist", ""),
            number=str(raw.get("number", "")),
        )
        return Card(
            id=str(card_id),
            faces=(face,),
            expansion=expansion,
            rarity=Rarity.parse(raw["rarity"]),
            layout=CardLayout.parse(raw.get("layout", "normal")),
            mana_value=mana_value,
            color_identity=tuple(ManaType.parse(color) for color in raw.get("colorIdentity", [])),
            legality={name: Legality.parse(value) for name, value in (raw.get("legalities") or {}).items()},
            multiverse_id=multiverse_id,
        )

    # ============= Multi-faced cards =============

    def _pending(self, order: int, card: Card, raw: dict[str, Any], expansion: Expansion) -> _PendingFace:
        if raw.get("names"):
            names = tuple(raw["names"])
        else:
            names = tuple(raw["name"].split(_FACE_SEPARATOR))
        return _PendingFace(
            order=order,
            card=card,
            set_code=expansion.code or expansion.name,
            names=names,
            face_name=card.faces[0].name,
            side=raw.get("side", ""),
        )

    def _join(self, pending: list[_PendingFace]) -> list[tuple[int, Card]]:
        joined: list[tuple[int, Card]] = []
        melds = [face for face in pending if face.card.layout is CardLayout.MELD]
        groups: dict[tuple, list[_PendingFace]] = defaultdict(list)
        for face in pending:
            if face.card.layout is CardLayout.MELD:
                continue
            key = (face.card.id,) if self._v5 else (face.set_code, face.names)
            groups[key].append(face)

        for faces in groups.values():
            names = faces[0].names
            layout = faces[0].card.layout
            if len(faces) != len(names) or any(face.face_name not in names for face in faces):
                self._warn(f"Could not join the faces of {_FACE_SEPARATOR.join(names)} ({faces[0].set_code})")
                joined.extend((face.order, replace(face.card, layout=CardLayout.NORMAL)) for face in faces)
                continue
            faces.sort(key=lambda face: names.index(face.face_name))
            joined.append((faces[0].order, join_faces([face.card for face in faces], layout)))

        backs = [face for face in melds if self._is_meld_back(face)]
        for front in melds:
            if front in backs:
                continue
            back = next(
                (
                    b
                    for b in backs
                    if b.set_code == front.set_code and b.face_name in front.names and b.face_name != front.face_name
                ),
                None,
            )
            if back is None:
                self._warn(f"Could not find the melded face of {front.face_name} ({front.set_code})")
                joined.append((front.order, replace(front.card, layout=CardLayout.NORMAL)))
                continue
            joined.append((front.order, meld(front.card, back.card)))
        return joined

    def _is_meld_back(self, face: _PendingFace) -> bool:
        if face.side:
            return face.side == "b"
        return len(face.names) == 3 and face.face_name == face.names[-1]

    def _dedupe(self, cards) -> list[Card]:
        seen_multiverse: set[int] = set()
        seen_ids: set[str] = set()
        unique: list[Card] = []
        for card in cards:
            if card.multiverse_id in seen_multiverse or card.id in seen_ids:
                continue
            if card.multiverse_id is not None:
                seen_multiverse.add(card.multiverse_id)
            seen_ids.add(card.id)
            unique.append(card)
        return unique
