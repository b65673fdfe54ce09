"""Keyword-indexed per-cell grid properties.

Usage is as follows:

1. Build a :class:`GridProperties` container from the grid dimensions and
   the list of supported keywords (:class:`KeywordInfo`).
2. Query it with :meth:`GridProperties.supports` (is the keyword meaningful
   here?) and :meth:`GridProperties.has` (has it been given data?).
3. :meth:`GridProperties.get_or_create` materialises a property filled with
   the keyword default on first access, while
   :meth:`GridProperties.get_initialized` only returns properties that
   already exist.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from numbers import Integral
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np

from . import constants
from .errors import DeckDataError, IndexBoundsError, SchemaError, UninitializedError
from .grid import GridDims

if TYPE_CHECKING:
    from .deck import Deck

logger = logging.getLogger(__name__)

Scalar = Union[int, float]


@dataclass(frozen=True)
class KeywordInfo:
    """Name, default fill value and unit of one supported per-cell keyword."""

    name: str
    default_value: Scalar
    unit: str = ""

    @property
    def dtype(self) -> np.dtype:
        if isinstance(self.default_value, Integral) and not isinstance(self.default_value, bool):
            return np.dtype(np.int64)
        return np.dtype(np.float64)


class GridProperty:
    """One scalar value per grid cell, initialised to the keyword default."""

    def __init__(self, nx: int, ny: int, nz: int, info: KeywordInfo) -> None:
        if nx <= 0 or ny <= 0 or nz <= 0:
            raise ValueError(f"grid dimensions must be positive, got ({nx}, {ny}, {nz})")
        size = int(nx) * int(ny) * int(nz)
        if size > np.iinfo(np.intp).max:
            raise ValueError(f"grid of {size} cells is too large")
        self._dims = (int(nx), int(ny), int(nz))
        self._info = info
        self._data = np.full(size, info.default_value, dtype=info.dtype)

    def __repr__(self) -> str:
        return f"GridProperty({self.name!r}, dims={self._dims})"

    def __len__(self) -> int:
        return self._data.size

    @property
    def info(self) -> KeywordInfo:
        return self._info

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def dims(self) -> Tuple[int, int, int]:
        return self._dims

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the cell values."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._data.size:
            raise IndexBoundsError(f"{self.name}: index {index} outside [0, {self._data.size})")

    def get(self, index: int) -> Scalar:
        self._check_index(index)
        return self._data[index].item()

    def set(self, index: int, value: Scalar) -> None:
        self._check_index(index)
        self._data[index] = value

    def max_value(self) -> Scalar:
        """Return the largest stored value (the default for an untouched property)."""
        return self._data.max().item()

    def load(self, values: Sequence[Scalar]) -> None:
        """Assign all cells at once from deck data given in cell order."""
        arr = np.asarray(values, dtype=self._data.dtype)
        if arr.ndim != 1 or arr.size != self._data.size:
            raise DeckDataError(
                f"{self.name} has {arr.size} values, the grid needs {self._data.size}"
            )
        self._data[:] = arr


class GridProperties:
    """Container of lazily created :class:`GridProperty` objects, one per keyword.

    Parameters
    ----------
    grid:
        Dimensions used to size every property.
    supported_keywords:
        The fixed set of keywords the container may hold.
    """

    def __init__(self, grid: GridDims, supported_keywords: Iterable[KeywordInfo]) -> None:
        self._grid = grid
        self._supported: Dict[str, KeywordInfo] = {}
        for info in supported_keywords:
            self._supported[info.name] = info
        self._properties: Dict[str, GridProperty] = {}
        self._order: List[str] = []

    @property
    def grid(self) -> GridDims:
        return self._grid

    @property
    def supported_keywords(self) -> Tuple[str, ...]:
        return tuple(self._supported)

    def supports(self, name: str) -> bool:
        return name in self._supported

    def has(self, name: str) -> bool:
        return name in self._properties

    def count(self) -> int:
        return len(self._order)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[GridProperty]:
        return (self._properties[name] for name in self._order)

    def __contains__(self, name: object) -> bool:
        return name in self._properties

    def add_keyword(self, name: str) -> bool:
        """Create the property for ``name``; return ``False`` if it already exists."""
        if not self.supports(name):
            raise SchemaError(f"The keyword: {name} is not supported in this container")
        if self.has(name):
            return False
        nx, ny, nz = self._grid.dims
        self._properties[name] = GridProperty(nx, ny, nz, self._supported[name])
        self._order.append(name)
        logger.debug("Created grid property %s with %d cells", name, self._grid.cartesian_size)
        return True

    def get_or_create(self, name: str) -> GridProperty:
        if not self.has(name):
            self.add_keyword(name)
        return self._properties[name]

    def get_initialized(self, name: str) -> GridProperty:
        """Return an existing property, distinguishing "not given" from "not supported"."""
        if self.has(name):
            return self._properties[name]
        if self.supports(name):
            raise UninitializedError(f"Keyword: {name} is supported - but not initialized.")
        raise SchemaError(f"Keyword: {name} is not supported.")

    def get_by_index(self, index: int) -> GridProperty:
        if not 0 <= index < len(self._order):
            raise IndexBoundsError("Invalid index")
        return self._properties[self._order[index]]

    def load_from_deck(self, deck: "Deck") -> List[str]:
        """Fill supported keywords found in the deck's grid-data sections.

        Returns the names loaded, in deck order.  A keyword repeated in the
        deck overwrites the earlier data.
        """
        loaded: List[str] = []
        for section_name in constants.PROPERTY_SECTIONS:
            if not deck.has_section(section_name):
                continue
            for keyword in deck.section(section_name):
                if not self.supports(keyword.name):
                    continue
                item = keyword.record(0).item(0)
                if not item.has_value:
                    raise DeckDataError(f"{keyword.name} at line {keyword.line} holds no data")
                self.get_or_create(keyword.name).load(item.value)
                loaded.append(keyword.name)
        if loaded:
            logger.info("Loaded grid properties from deck: %s", ", ".join(loaded))
        return loaded


__all__ = [
    "Scalar",
    "KeywordInfo",
    "GridProperty",
    "GridProperties",
]
