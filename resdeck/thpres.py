"""Threshold pressures between equilibration regions.

The table is built from three checks applied in order, stopping at the
first failure:

1. *option-check*: ``RUNSPEC`` / ``EQLOPTS`` must list ``THPRES`` for the
   table to be needed at all.  ``IRREVERS`` only marks the table as
   irreversible.
2. *presence-check*: a ``SOLUTION`` section, when present, must hold a
   non-empty ``THPRES`` keyword.  A deck without ``SOLUTION`` yields an
   empty table.
3. *record-validation*: every ``THPRES`` record must name two regions in
   ``[1, R]`` and a pressure, where ``R`` is the maximum of ``EQLNUM``.

Pressures are read in bar and stored in Pascal in a flat ``R*R`` array,
``table[(i-1)*R + (j-1)]``, with both ``(i, j)`` and ``(j, i)`` written.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

import numpy as np
import pandas as pd

from . import constants
from .deck import Deck, DeckKeyword
from .errors import (
    InconsistentDeckError,
    InvalidRegionCountError,
    MissingDataError,
    RegionRangeError,
    ResDeckError,
)
from .properties import GridProperties
from .warnings import DeckWarning

logger = logging.getLogger(__name__)

NAMES = constants.ThpresNames()


class Stage(Enum):
    """Checkpoints of the table build, in the order they run."""

    OPTION = "option-check"
    PRESENCE = "presence-check"
    RECORDS = "record-validation"


@dataclass(frozen=True, eq=False)
class ThresholdPressureTable:
    """Symmetric ``R × R`` threshold pressures in Pascal, flattened row-major."""

    num_regions: int
    values: np.ndarray
    irreversible: bool = False

    def __post_init__(self) -> None:
        if self.values.shape != (self.num_regions * self.num_regions,):
            raise ValueError(
                f"table of {self.num_regions} regions needs {self.num_regions ** 2} values, got {self.values.shape}"
            )

    @classmethod
    def empty(cls, irreversible: bool = False) -> "ThresholdPressureTable":
        values = np.zeros(0, dtype=float)
        values.flags.writeable = False
        return cls(0, values, irreversible)

    def __len__(self) -> int:
        return int(self.values.size)

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self.values)

    @property
    def is_empty(self) -> bool:
        return self.num_regions == 0

    def get(self, region1: int, region2: int) -> float:
        """Return the threshold pressure between two 1-based region numbers."""
        for region in (region1, region2):
            if not 1 <= region <= self.num_regions:
                raise RegionRangeError(f"region {region} outside [1, {self.num_regions}]")
        return float(self.values[(region1 - 1) * self.num_regions + (region2 - 1)])

    def as_matrix(self) -> np.ndarray:
        return self.values.reshape(self.num_regions, self.num_regions)

    def to_list(self) -> List[float]:
        return [float(v) for v in self.values]

    def to_frame(self) -> pd.DataFrame:
        """Return the matrix as a DataFrame labelled by region number."""
        labels = pd.RangeIndex(1, self.num_regions + 1, name="region")
        frame = pd.DataFrame(self.as_matrix(), index=labels, columns=labels.rename(None))
        return frame


@dataclass(frozen=True)
class ThresholdPressureResult:
    """Outcome of a table build: either a table or the error of the failing stage."""

    stage: Stage
    table: Optional[ThresholdPressureTable] = None
    error: Optional[ResDeckError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ThresholdPressureTable:
        if self.error is not None:
            raise self.error
        if self.table is None:
            raise ResDeckError(f"result of {self.stage.value} holds neither a table nor an error")
        return self.table


@dataclass(frozen=True)
class ThpresOptions:
    active: bool = False
    irreversible: bool = False


def read_options(deck: Deck) -> ThpresOptions:
    """Scan ``EQLOPTS`` for the ``THPRES`` and ``IRREVERS`` tokens."""

    if not deck.has_section(NAMES.option_section):
        return ThpresOptions()
    section = deck.section(NAMES.option_section)
    if not section.has_keyword(NAMES.option_keyword):
        return ThpresOptions()
    keyword = section.keyword(NAMES.option_keyword)
    if len(keyword) == 0:
        return ThpresOptions()

    active = False
    irreversible = False
    for item in keyword.record(0):
        if not item.has_value:
            continue
        token = item.value
        if token == constants.OPT_THPRES:
            active = True
        elif token == constants.OPT_IRREVERS:
            irreversible = True
        elif token not in constants.EQLOPTS_TOKENS:
            warnings.warn(f"Unrecognised {NAMES.option_keyword} option {token!r} ignored", DeckWarning, stacklevel=3)
    return ThpresOptions(active=active, irreversible=irreversible)


def find_data_keyword(deck: Deck) -> Optional[DeckKeyword]:
    """Return the ``THPRES`` keyword, or ``None`` when the deck has no ``SOLUTION`` yet."""

    if not deck.has_section(NAMES.data_section):
        return None
    section = deck.section(NAMES.data_section)
    if not section.has_keyword(NAMES.data_keyword):
        raise InconsistentDeckError(
            f"Invalid {NAMES.data_section} section; the {NAMES.option_keyword} {constants.OPT_THPRES} option "
            f"is set in {NAMES.option_section}, but no {NAMES.data_keyword} keyword is found in {NAMES.data_section}"
        )
    keyword = section.keyword(NAMES.data_keyword)
    if len(keyword) == 0:
        raise InconsistentDeckError(
            f"Invalid {NAMES.data_section} section; the {NAMES.option_keyword} {constants.OPT_THPRES} option "
            f"is set in {NAMES.option_section}, but the {NAMES.data_keyword} keyword at line {keyword.line} "
            "has no records"
        )
    return keyword


def fill_table(keyword: DeckKeyword, grid_properties: GridProperties, irreversible: bool = False) -> ThresholdPressureTable:
    """Validate the ``THPRES`` records and write them into a new table."""

    eqlnum = grid_properties.get_initialized(NAMES.region_keyword)
    num_regions = int(eqlnum.max_value())
    if num_regions <= 0:
        raise InvalidRegionCountError(
            f"Error when internalizing {NAMES.data_keyword}: maximum {NAMES.region_keyword} value is "
            f"{num_regions}, no equilibration regions defined"
        )

    values = np.zeros(num_regions * num_regions, dtype=float)
    seen = set()
    for record in keyword:
        region1 = record.item("REGION1")
        region2 = record.item("REGION2")
        pressure = record.item("VALUE")
        for item in (region1, region2, pressure):
            if not item.has_value:
                raise MissingDataError(
                    f"Missing data for use of the {NAMES.data_keyword} keyword: item {item.name} "
                    f"of the record at line {record.line} is not set"
                )
        r1 = int(region1.value)
        r2 = int(region2.value)
        for region in (r1, r2):
            if not 1 <= region <= num_regions:
                raise RegionRangeError(
                    f"Invalid region number in {NAMES.data_keyword} keyword at line {record.line}: "
                    f"region {region} is outside [1, {num_regions}]"
                )
        pair = (min(r1, r2), max(r1, r2))
        if pair in seen:
            logger.debug("%s pair %s repeated at line %d; last value wins", NAMES.data_keyword, pair, record.line)
        seen.add(pair)
        value = float(pressure.value) * constants.BAR_TO_PASCAL
        values[(r1 - 1) * num_regions + (r2 - 1)] = value
        values[(r2 - 1) * num_regions + (r1 - 1)] = value

    # a record naming the same region twice leaves the diagonal at zero
    np.fill_diagonal(values.reshape(num_regions, num_regions), 0.0)
    values.flags.writeable = False
    logger.info(
        "Built threshold pressure table for %d regions from %d record(s)",
        num_regions,
        len(keyword),
    )
    return ThresholdPressureTable(num_regions, values, irreversible)


def evaluate_threshold_pressure(deck: Deck, grid_properties: GridProperties) -> ThresholdPressureResult:
    """Run the three checks and return a tagged result instead of raising."""

    stage = Stage.OPTION
    try:
        options = read_options(deck)
        if not options.active:
            logger.debug("%s option not set; threshold pressure table left empty", constants.OPT_THPRES)
            return ThresholdPressureResult(stage, ThresholdPressureTable.empty(options.irreversible))

        stage = Stage.PRESENCE
        keyword = find_data_keyword(deck)
        if keyword is None:
            logger.debug("No %s section; threshold pressure table not required yet", NAMES.data_section)
            return ThresholdPressureResult(stage, ThresholdPressureTable.empty(options.irreversible))

        stage = Stage.RECORDS
        table = fill_table(keyword, grid_properties, options.irreversible)
    except ResDeckError as exc:
        logger.debug("Threshold pressure build failed at %s: %s", stage.value, exc)
        return ThresholdPressureResult(stage, error=exc)
    return ThresholdPressureResult(stage, table)


def build_threshold_pressure(deck: Deck, grid_properties: GridProperties) -> ThresholdPressureTable:
    """Return the threshold pressure table, raising the error of the failing check."""
    return evaluate_threshold_pressure(deck, grid_properties).unwrap()


class ThresholdPressure:
    """Threshold pressure table of one deck and grid property container."""

    def __init__(self, deck: Deck, grid_properties: GridProperties) -> None:
        self._table = build_threshold_pressure(deck, grid_properties)

    @property
    def table(self) -> ThresholdPressureTable:
        return self._table

    @property
    def irreversible(self) -> bool:
        return self._table.irreversible

    def get_threshold_pressure_table(self) -> List[float]:
        return self._table.to_list()


__all__ = [
    "Stage",
    "ThresholdPressureTable",
    "ThresholdPressureResult",
    "ThpresOptions",
    "read_options",
    "find_data_keyword",
    "fill_table",
    "evaluate_threshold_pressure",
    "build_threshold_pressure",
    "ThresholdPressure",
]
