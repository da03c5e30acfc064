"""Exceptions raised by the parser, the interpreter and the datapack loader."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ParseErrorKind(str, Enum):
    """Closed set of parse failures; each value is a message template."""

    EXTRA_WHITESPACE = "Expected exactly one space before {token!r}"
    TRAILING_WHITESPACE = "Unexpected whitespace at the end of the input"
    UNEXPECTED_SYMBOL = "Expected {expected} but got {found!r} instead"
    UNEXPECTED_END = "Expected {expected} but reached the end of the input"
    UNKNOWN_COMMAND = "Unknown command {command!r}"
    UNKNOWN_KEYWORD = "Unknown {what} {found!r}. Expected one of: {options}"
    INTEGER_OUT_OF_RANGE = "Integer {literal} is out of range [{minimum}, {maximum}]"
    UNCLOSED_STRING = "Unclosed string"
    INVALID_INTERVAL = "Expected an integer or a range but got {found!r}"
    TRAILING_CHARACTERS = "Unexpected trailing characters {rest!r}"


class ParseError(Exception):
    """Raised when a line of command text cannot be parsed.

    Attributes:
        kind: Which expectation failed.
        position: 0-based column at which parsing failed.
        details: Format arguments for the kind's message template.
    """

    def __init__(self, kind: ParseErrorKind, position: int, **details: Any) -> None:
        self.kind = kind
        self.position = position
        self.details = details
        super().__init__(str(self))

    @property
    def message(self) -> str:
        return self.kind.value.format(**self.details)

    def __str__(self) -> str:
        return f"column {self.position + 1}: {self.message}"


class UnsupportedTargetError(NotImplementedError):
    """Raised when an entity selector would have to be resolved to players."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Entity selector {selector} is not supported; use a player name")
        self.selector = selector


class DatapackError(RuntimeError):
    """Raised when a datapack cannot be read or one of its functions fails to parse."""
