"""Exceptions raised while building, parsing or decoding filters."""

from __future__ import annotations


class FilterError(Exception):
    """Base class for every filter failure."""


class UnknownFieldError(FilterError):
    def __init__(self, code: str):
        super().__init__(f"Unknown filter type {code!r}")
        self.code = code


class MalformedFilterStringError(FilterError):
    def __init__(self, text: str, reason: str):
        super().__init__(f"Malformed filter string {text!r}: {reason}")
        self.text = text
        self.reason = reason


class InvalidOperandError(FilterError):
    def __init__(self, code: str, operand: str, reason: str = ""):
        message = f"Invalid operand {operand!r} for filter type {code!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.code = code
        self.operand = operand


class InvalidContainmentModeError(FilterError):
    def __init__(self, code: str, mode: object):
        super().__init__(f"Mode {mode!r} is not allowed for filter type {code!r}")
        self.code = code
        self.mode = mode


class FilterDeserializationError(FilterError):
    """A structured filter document could not be turned back into a filter."""
