"""Keyword names and unit factors shared by the deck and table modules.

Pressures in the deck are given in bar (METRIC deck units) while the
threshold-pressure table is stored in Pascal.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

# Pressure conversion from deck input (bar) to stored output (Pa)
BAR_TO_PASCAL: float = 1.0e5

# Section names in file order
RUNSPEC: str = "RUNSPEC"
GRID: str = "GRID"
EDIT: str = "EDIT"
PROPS: str = "PROPS"
REGIONS: str = "REGIONS"
SOLUTION: str = "SOLUTION"
SUMMARY: str = "SUMMARY"
SCHEDULE: str = "SCHEDULE"

SECTION_NAMES: Tuple[str, ...] = (
    RUNSPEC,
    GRID,
    EDIT,
    PROPS,
    REGIONS,
    SOLUTION,
    SUMMARY,
    SCHEDULE,
)

# Keywords used by the threshold-pressure builder
EQLOPTS: str = "EQLOPTS"
THPRES: str = "THPRES"
EQLNUM: str = "EQLNUM"
DIMENS: str = "DIMENS"

# Integer per-cell region keywords the reader knows by default
REGION_KEYWORDS: Tuple[str, ...] = (
    EQLNUM,
    "FIPNUM",
    "SATNUM",
    "PVTNUM",
    "IMBNUM",
    "ROCKNUM",
    "MULTNUM",
    "OPERNUM",
)

# EQLOPTS option tokens
OPT_THPRES: str = "THPRES"
OPT_IRREVERS: str = "IRREVERS"
EQLOPTS_TOKENS: FrozenSet[str] = frozenset({"MOBILE", "QUIESC", OPT_THPRES, OPT_IRREVERS})

# Sections scanned for per-cell keyword data
PROPERTY_SECTIONS: Tuple[str, ...] = (GRID, EDIT, REGIONS)


@dataclass(frozen=True)
class ThpresNames:
    """Bundle of the fixed keyword names the threshold-pressure builder reads."""

    option_keyword: str = EQLOPTS
    data_keyword: str = THPRES
    region_keyword: str = EQLNUM
    option_section: str = RUNSPEC
    data_section: str = SOLUTION
