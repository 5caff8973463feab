"""
Batch shadow rasters and O(1) point lookup.

A raster samples the shade test at the centers of a square grid covering
a disk. Cells centered outside the disk are sunlit by policy and never
tested. Interior cells are split into chunks and classified by the
selected backend on a thread pool; every chunk writes only its own cells,
so the grid is identical for any worker count.

Cell geometry is expressed in the plane anchored at the raster center:
cell ``(r, c)`` spans ``[-h + c*s, -h + (c+1)*s) x [-h + r*s, -h + (r+1)*s)``
with ``s`` the cell size and ``h = columns * s / 2``. Row 0 is the
southernmost row.
"""

from __future__ import annotations

import math
import os
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Any

import numpy as np

from .backends import ShadowBackend, get_backend
from .constants import DEFAULT_RASTER_RAY_METERS, SHADED, SUNLIT
from .models import BuildingFootprint, GeoPoint, LocalPoint, RasterMeta, ShadowRaster, usable_buildings
from .progress import ProgressReporter
from .projection import project, unproject
from .shadecast_logging import get_logger
from .shading import OccluderPolicy
from .solar import compute_sun, to_utc
from .validation import require_positive

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64


def grid_size(diameter_meters: float, cell_meters: float) -> int:
    """Cells per side: ``ceil(diameter / cell)``."""
    return math.ceil(diameter_meters / cell_meters)


def _half_extent(columns: int, cell_meters: float) -> float:
    return columns * cell_meters / 2


def _cell_offset(index: int, half: float, cell_meters: float) -> float:
    # Center of cell `index` along one axis, meters from the raster center
    return -half + (index + 0.5) * cell_meters


def cell_center(raster: ShadowRaster, row: int, column: int) -> GeoPoint:
    """Geographic center of a cell, as used when the raster was built."""
    half = _half_extent(raster.columns, raster.meta.cell_meters)
    x = _cell_offset(column, half, raster.meta.cell_meters)
    y = _cell_offset(row, half, raster.meta.cell_meters)
    return unproject(raster.meta.center, LocalPoint(x, y))


def is_interior_cell(raster: ShadowRaster, row: int, column: int) -> bool:
    """True if the cell's center lies within the raster's disk."""
    half = _half_extent(raster.columns, raster.meta.cell_meters)
    x = _cell_offset(column, half, raster.meta.cell_meters)
    y = _cell_offset(row, half, raster.meta.cell_meters)
    return math.hypot(x, y) <= raster.meta.radius_meters


def _resolve_workers(workers: int | None, n_chunks: int) -> int:
    if workers is None:
        workers = min(8, os.cpu_count() or 1)
    return max(1, min(workers, n_chunks))


def _classify_chunk(
    backend: ShadowBackend,
    cells: Sequence[tuple[int, int, GeoPoint]],
    buildings: Sequence[BuildingFootprint],
    instant: datetime,
    max_ray_meters: float,
    policy: OccluderPolicy,
) -> list[tuple[int, int, int]]:
    points = [p for _, _, p in cells]
    suns = [compute_sun(instant, p.latitude, p.longitude) for p in points]
    results = backend.classify(points, suns, buildings, max_ray_meters, policy)
    return [(r, c, SHADED if res.shaded else SUNLIT) for (r, c, _), res in zip(cells, results)]


def build_shadow_raster(
    center: GeoPoint,
    diameter_meters: float,
    instant: datetime,
    cell_meters: float,
    buildings: Sequence[BuildingFootprint],
    *,
    max_ray_meters: float | None = None,
    policy: OccluderPolicy | str = OccluderPolicy.NEAREST,
    backend: str | ShadowBackend = "reference",
    workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    show_progress: bool = False,
    feedback: Any = None,
) -> ShadowRaster:
    """
    Sample the shade test over a disk and store it as a raster.

    Args:
        center: Center of the disk.
        diameter_meters: Disk diameter; the grid is ``ceil(diameter / cell)``
            cells on each side.
        instant: Time of interest (naive = UTC).
        cell_meters: Cell edge length.
        buildings: Candidate occluders; invalid footprints are logged and skipped.
        max_ray_meters: Ray length per cell. Defaults to
            ``max(DEFAULT_RASTER_RAY_METERS, diameter_meters)``.
        policy: Occluder tie-break (does not change the grid values).
        backend: Backend name or instance.
        workers: Thread count; None picks one from the CPU count.
        chunk_size: Cells per backend call.
        show_progress: Show a progress bar.
        feedback: Optional host feedback object for progress.

    Returns:
        A read-only ShadowRaster.

    Raises:
        DegenerateInput: ``diameter_meters``, ``cell_meters`` or
            ``max_ray_meters`` is not a finite number > 0.
        ConfigurationError: Unknown backend or policy.

    Example:
        >>> raster = build_shadow_raster(GeoPoint(-122.4194, 37.7749), 400, instant, 10.0, buildings)
        >>> query_raster(raster, GeoPoint(-122.4190, 37.7751))
        True
    """
    diameter_meters = require_positive("diameter_meters", diameter_meters)
    cell_meters = require_positive("cell_meters", cell_meters)
    if max_ray_meters is None:
        max_ray_meters = max(DEFAULT_RASTER_RAY_METERS, diameter_meters)
    max_ray_meters = require_positive("max_ray_meters", max_ray_meters)
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    policy = OccluderPolicy.parse(policy)
    resolved_backend = get_backend(backend)
    instant = to_utc(instant)

    radius = diameter_meters / 2
    columns = rows = grid_size(diameter_meters, cell_meters)
    half = _half_extent(columns, cell_meters)
    origin = unproject(center, LocalPoint(-half, -half))

    usable = usable_buildings(buildings)

    interior: list[tuple[int, int, GeoPoint]] = []
    for r in range(rows):
        y = _cell_offset(r, half, cell_meters)
        for c in range(columns):
            x = _cell_offset(c, half, cell_meters)
            if math.hypot(x, y) > radius:
                continue
            interior.append((r, c, unproject(center, LocalPoint(x, y))))

    chunks = [interior[i : i + chunk_size] for i in range(0, len(interior), chunk_size)]
    n_workers = _resolve_workers(workers, len(chunks))

    logger.info(
        f"Building shadow raster: {columns}x{rows} cells of {cell_meters:g} m, "
        f"{len(interior)} inside the disk, {len(usable)} buildings, backend={resolved_backend.name}"
    )
    start = time.perf_counter()

    grid = np.full((rows, columns), SUNLIT, dtype=np.uint8)
    progress = ProgressReporter(
        total=len(chunks),
        desc="Shadow raster",
        feedback=feedback,
        disable=not show_progress and feedback is None,
    )
    try:
        if n_workers == 1:
            for chunk in chunks:
                for r, c, value in _classify_chunk(resolved_backend, chunk, usable, instant, max_ray_meters, policy):
                    grid[r, c] = value
                progress.update(1)
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                futures = [
                    executor.submit(_classify_chunk, resolved_backend, chunk, usable, instant, max_ray_meters, policy)
                    for chunk in chunks
                ]
                for future in as_completed(futures):
                    for r, c, value in future.result():
                        grid[r, c] = value
                    progress.update(1)
    finally:
        progress.close()

    elapsed = time.perf_counter() - start
    logger.info(f"Shadow raster done in {elapsed:.2f}s: {int(grid.sum())} of {len(interior)} cells shaded")
    logger.debug(f"{len(chunks)} chunks on {n_workers} workers")

    return ShadowRaster(
        meta=RasterMeta(center=center, radius_meters=radius, cell_meters=cell_meters, instant=instant),
        origin=origin,
        columns=columns,
        rows=rows,
        grid=grid,
    )


def raster_cell(raster: ShadowRaster, point: GeoPoint) -> tuple[int, int] | None:
    """
    ``(row, column)`` of the cell containing ``point``, or None outside the grid.

    ``floor((point - origin) / cell)`` evaluated in the plane anchored at the
    raster center, the frame the cells were laid out in.
    """
    cell = raster.meta.cell_meters
    half = _half_extent(raster.columns, cell)
    xy = project(raster.meta.center, point)
    c = math.floor((xy.x + half) / cell)
    r = math.floor((xy.y + half) / cell)
    if c < 0 or r < 0 or c >= raster.columns or r >= raster.rows:
        return None
    return r, c


def query_raster(raster: ShadowRaster, point: GeoPoint) -> bool:
    """
    Whether ``point`` is sunny according to a stored raster.

    Points outside the grid are sunny by policy.
    """
    cell = raster_cell(raster, point)
    if cell is None:
        return True
    r, c = cell
    return bool(raster.grid[r, c] == SUNLIT)


def shaded_points(
    center: GeoPoint,
    radius_meters: float,
    step_meters: float,
    buildings: Sequence[BuildingFootprint],
    instant: datetime,
    *,
    max_ray_meters: float = 200.0,
    policy: OccluderPolicy | str = OccluderPolicy.NEAREST,
    backend: str | ShadowBackend = "reference",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[GeoPoint]:
    """
    Shaded samples of a square lattice around ``center``.

    Samples sit at ``(i * step - radius, j * step - radius)`` meters for
    ``i, j in range(floor(2 * radius / step))``, covering the square
    (not only the disk).

    Returns:
        The shaded sample points, in lattice order (x-major).
    """
    radius_meters = require_positive("radius_meters", radius_meters)
    step_meters = require_positive("step_meters", step_meters)
    max_ray_meters = require_positive("max_ray_meters", max_ray_meters)
    policy = OccluderPolicy.parse(policy)
    resolved_backend = get_backend(backend)

    n = math.floor(2 * radius_meters / step_meters)
    lattice = [
        unproject(center, LocalPoint(i * step_meters - radius_meters, j * step_meters - radius_meters))
        for i in range(n)
        for j in range(n)
    ]
    usable = usable_buildings(buildings)

    shaded = []
    for start in range(0, len(lattice), chunk_size):
        chunk = lattice[start : start + chunk_size]
        suns = [compute_sun(instant, p.latitude, p.longitude) for p in chunk]
        for p, result in zip(chunk, resolved_backend.classify(chunk, suns, usable, max_ray_meters, policy)):
            if result.shaded:
                shaded.append(p)

    logger.debug(f"{len(shaded)} of {len(lattice)} lattice points shaded")
    return shaded
