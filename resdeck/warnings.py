"""Structured warning classes for the :mod:`resdeck` package."""
from __future__ import annotations


class ResDeckWarning(UserWarning):
    """Base warning class for resdeck."""


class DeckWarning(ResDeckWarning):
    """Deck content that is accepted but ignored or only partly honoured."""


__all__ = [
    "ResDeckWarning",
    "DeckWarning",
]
