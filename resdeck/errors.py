"""Custom exceptions for the :mod:`resdeck` package."""
from __future__ import annotations


class ResDeckError(Exception):
    """Base exception for deck and grid-property errors."""


class ConfigurationError(ResDeckError, ValueError):
    """Invalid runner configuration or parameter values."""


class DeckParseError(ResDeckError, ValueError):
    """Deck text that cannot be turned into keywords and records."""

    def __init__(self, message: str, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class DeckDataError(ResDeckError, ValueError):
    """Keyword data whose shape does not match the grid."""


class SchemaError(ResDeckError, ValueError):
    """A keyword was requested that the container does not support."""


class UninitializedError(ResDeckError, ValueError):
    """A supported keyword was requested before any data was given for it."""


class IndexBoundsError(ResDeckError, IndexError):
    """Cell or property index outside the stored range."""


class InconsistentDeckError(ResDeckError, RuntimeError):
    """An option is declared in the deck but its data keyword is not supplied."""


class MissingDataError(ResDeckError, RuntimeError):
    """A record leaves a required item unset."""


class RegionRangeError(ResDeckError, RuntimeError):
    """A record refers to a region number outside the defined regions."""


class InvalidRegionCountError(ResDeckError, RuntimeError):
    """The region property does not define any region."""


__all__ = [
    "ResDeckError",
    "ConfigurationError",
    "DeckParseError",
    "DeckDataError",
    "SchemaError",
    "UninitializedError",
    "IndexBoundsError",
    "InconsistentDeckError",
    "MissingDataError",
    "RegionRangeError",
    "InvalidRegionCountError",
]
