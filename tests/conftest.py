from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
FIXTURES = Path(__file__).resolve().parent / "fixtures"
for _path in (ROOT, FIXTURES):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from resdeck.grid import GridDims  # noqa: E402
from resdeck.properties import GridProperties, KeywordInfo  # noqa: E402


@pytest.fixture
def make_grid_properties() -> Callable[..., GridProperties]:
    """Return a factory for a 3x3x3 container supporting EQLNUM."""

    def _factory(default_eqlnum: int = 3, add_keyword: bool = True) -> GridProperties:
        props = GridProperties(GridDims(3, 3, 3), [KeywordInfo("EQLNUM", default_eqlnum, "")])
        if add_keyword:
            props.add_keyword("EQLNUM")
        return props

    return _factory
