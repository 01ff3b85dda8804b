"""Exceptions raised by decks, categories and deck files."""

from __future__ import annotations


class DeckError(Exception):
    """Base class for deck failures."""


class DuplicateCategoryNameError(DeckError):
    def __init__(self, name: str):
        super().__init__(f"A category named {name!r} already exists")
        self.name = name


class CategoryNotFoundError(DeckError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"No category named {name!r}")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class DeckFormatError(DeckError):
    def __init__(self, message: str, line: int | None = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class InvalidCategoryNameError(DeckError, ValueError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid category name {name!r}: {reason}")
        self.name = name
