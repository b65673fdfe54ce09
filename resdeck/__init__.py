"""Region threshold-pressure tables from reservoir simulation decks."""
from . import constants, grid
from .deck import Deck, parse_file, parse_string
from .errors import ResDeckError
from .grid import GridDims
from .properties import GridProperties, GridProperty, KeywordInfo
from .thpres import ThresholdPressure, ThresholdPressureTable, build_threshold_pressure

__all__ = [
    "constants",
    "grid",
    "Deck",
    "parse_file",
    "parse_string",
    "ResDeckError",
    "GridDims",
    "GridProperties",
    "GridProperty",
    "KeywordInfo",
    "ThresholdPressure",
    "ThresholdPressureTable",
    "build_threshold_pressure",
]
