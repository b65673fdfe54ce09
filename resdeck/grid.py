"""Cartesian grid dimensions for per-cell property storage.

Only the cell counts ``nx``, ``ny`` and ``nz`` are needed here; geometry
(corner points, depths) stays with the simulator.
"""
from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import Tuple, TYPE_CHECKING

from . import constants
from .errors import DeckDataError, IndexBoundsError

if TYPE_CHECKING:
    from .deck import Deck


@dataclass(frozen=True)
class GridDims:
    """Logical cartesian grid size.

    Parameters
    ----------
    nx, ny, nz:
        Number of cells along each axis; all must be positive.
    """

    nx: int
    ny: int
    nz: int

    def __post_init__(self) -> None:
        for axis, value in (("nx", self.nx), ("ny", self.ny), ("nz", self.nz)):
            if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
                raise ValueError(f"{axis} must be a positive integer, got {value!r}")

    @property
    def cartesian_size(self) -> int:
        return self.nx * self.ny * self.nz

    @property
    def dims(self) -> Tuple[int, int, int]:
        return self.nx, self.ny, self.nz

    def global_index(self, i: int, j: int, k: int) -> int:
        """Return the linear cell index of zero-based ``(i, j, k)``, i fastest."""
        if not (0 <= i < self.nx and 0 <= j < self.ny and 0 <= k < self.nz):
            raise IndexBoundsError(f"cell ({i}, {j}, {k}) outside grid {self.dims}")
        return i + self.nx * (j + self.ny * k)

    @classmethod
    def from_deck(cls, deck: "Deck") -> "GridDims":
        """Construct the dimensions from the ``RUNSPEC`` ``DIMENS`` keyword."""
        if not deck.has_section(constants.RUNSPEC):
            raise DeckDataError("deck has no RUNSPEC section to read DIMENS from")
        runspec = deck.section(constants.RUNSPEC)
        if not runspec.has_keyword(constants.DIMENS):
            raise DeckDataError("RUNSPEC section does not contain DIMENS")
        record = runspec.keyword(constants.DIMENS).record(0)
        values = []
        for index, axis in enumerate(("NX", "NY", "NZ")):
            item = record.item(index)
            if not item.has_value:
                raise DeckDataError(f"DIMENS item {axis} is not set")
            values.append(int(item.value))
        return cls(*values)
