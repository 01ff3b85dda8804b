#!/usr/bin/env python3
"""Command line entry point for searching the inventory and working with deck files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from cards.inventory import Inventory
from decks.errors import DeckError
from filters import codec
from filters.errors import FilterError
from repositories.card_repository import get_card_repository
from repositories.deck_repository import DeckFileFormat
from services.deck_service import get_deck_service
from services.search_service import get_search_service
from services.state_service import get_state_service
from utils.card_data import InventoryError
from utils.constants import INVENTORY_FILE, LOGS_DIR
from utils.logging_config import configure_logging


def _inventory_path(args: argparse.Namespace) -> Path:
    if args.inventory:
        return Path(args.inventory)
    settings = get_state_service().load_settings()
    return Path(settings.inventory_path) if settings.inventory_path else INVENTORY_FILE


def _load_inventory(args: argparse.Namespace) -> Inventory:
    last = {"value": -1}

    def on_progress(value: int | None) -> None:
        if value is not None and value // 10 > last["value"] // 10:
            logger.info(f"Loading cards: {value}%")
        if value is not None:
            last["value"] = value

    repo = get_card_repository()
    inventory = repo.load_inventory(_inventory_path(args), on_progress=on_progress)
    if repo.warnings and not args.quiet:
        logger.warning(f"{len(repo.warnings)} problems while loading the inventory (see the log for details)")
    return inventory


def cmd_filter(args: argparse.Namespace) -> int:
    filter = codec.parse(args.filter)
    print(codec.dumps(filter, indent=2) if args.json else codec.serialize(filter))
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    _load_inventory(args)
    results = get_search_service().search(args.filter, limit=args.limit)
    for card in results:
        print(f"{card.name}\t{card.expansion.name}\t{card.id}")
    logger.info(f"{len(results)} matching cards")
    return 0


def cmd_deck(args: argparse.Namespace) -> int:
    _load_inventory(args)
    service = get_deck_service()
    deck = service.open_deck(args.deck)
    for line in service.summarize(deck).lines():
        print(line)
    if args.check:
        problems = service.check_format(deck, args.check)
        for problem in problems:
            print(f"! {problem}")
        return 1 if problems else 0
    return 0


def cmd_convert(args: argparse.Namespace) -> int:
    _load_inventory(args)
    service = get_deck_service()
    deck = service.open_deck(args.source)
    fmt = DeckFileFormat(args.to) if args.to else None
    path = service.save_deck(deck, args.target, fmt)
    logger.info(f"Wrote {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search MTG card data and manage categorized deck files.")
    parser.add_argument("--inventory", help="MTGJSON AllPrintings file (default: from settings)")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    parser.add_argument("--no-log-file", action="store_true", help="Do not write a log file.")
    commands = parser.add_subparsers(dest="command", required=True)

    filter_cmd = commands.add_parser("filter", help="Parse a filter string and print it back.")
    filter_cmd.add_argument("filter", help='Filter string, e.g. "<cmc:≤3>"')
    filter_cmd.add_argument("--json", action="store_true", help="Print the structured form instead.")
    filter_cmd.set_defaults(func=cmd_filter)

    search = commands.add_parser("search", help="List inventory cards matching a filter.")
    search.add_argument("filter", help="Filter string")
    search.add_argument("--limit", type=int, default=None, help="Maximum number of results.")
    search.set_defaults(func=cmd_search)

    deck = commands.add_parser("deck", help="Summarize a deck file.")
    deck.add_argument("deck", help="Deck file (.json or legacy)")
    deck.add_argument("--check", metavar="FORMAT", help="Also check the deck against a format's rules.")
    deck.set_defaults(func=cmd_deck)

    convert = commands.add_parser("convert", help="Rewrite a deck file in another format.")
    convert.add_argument("source", help="Deck file to read")
    convert.add_argument("target", help="Deck file to write")
    convert.add_argument("--to", choices=[fmt.value for fmt in DeckFileFormat], help="Output format.")
    convert.set_defaults(func=cmd_convert)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(None if args.no_log_file else LOGS_DIR, level="WARNING" if args.quiet else "INFO")
    try:
        return args.func(args)
    except (FilterError, DeckError, InventoryError, OSError, KeyError) as exc:
        logger.error(str(exc))
        return 2


if __name__ == "__main__":
    sys.exit(main())
