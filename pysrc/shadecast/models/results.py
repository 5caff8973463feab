"""Shade query and shadow raster results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np

from .geo import GeoPoint

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True)
class ShadeResult:
    """
    Outcome of a single point shade test.

    Attributes:
        shaded: True if the point is in shadow (or the sun is down).
        cast_by_building_id: Occluding building, None when unshaded or at night.
    """

    shaded: bool
    cast_by_building_id: int | str | None = None


@dataclass(frozen=True)
class RasterMeta:
    """
    Parameters a shadow raster was generated from.

    Attributes:
        center: Center of the query disk.
        radius_meters: Disk radius; cells centered outside it are sunlit.
        cell_meters: Edge length of one square cell.
        instant: Time the shadows were computed for (UTC).
    """

    center: GeoPoint
    radius_meters: float
    cell_meters: float
    instant: datetime


@dataclass(frozen=True, eq=False)
class ShadowRaster:
    """
    Shaded/sunlit classification sampled on a regular grid.

    Built once per (center, radius, cell size, instant) and never mutated;
    ``grid`` is a read-only uint8 array of shape ``(rows, columns)`` where
    row 0 is the southernmost row, 0 = sunlit and 1 = shaded.

    Attributes:
        meta: Generation parameters.
        origin: Bottom-left (south-west) corner of the grid.
        columns: Number of columns (west to east).
        rows: Number of rows (south to north).
        grid: Cell values.
    """

    meta: RasterMeta
    origin: GeoPoint
    columns: int
    rows: int
    grid: NDArray[np.uint8]

    def __post_init__(self):
        grid = np.array(self.grid, dtype=np.uint8)
        if grid.shape != (self.rows, self.columns):
            raise ValueError(f"Grid shape {grid.shape} does not match rows x columns ({self.rows}, {self.columns})")
        grid.setflags(write=False)
        object.__setattr__(self, "grid", grid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShadowRaster):
            return NotImplemented
        return (
            self.meta == other.meta
            and self.origin == other.origin
            and self.columns == other.columns
            and self.rows == other.rows
            and np.array_equal(self.grid, other.grid)
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def shaded_fraction(self) -> float:
        """Fraction of all cells marked shaded."""
        if self.grid.size == 0:
            return 0.0
        return float(self.grid.mean())
