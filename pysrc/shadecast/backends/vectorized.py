"""
Array backend: evaluates a chunk of points against every building edge at once.

Stands in for an accelerator kernel. Trigonometry (projection scale, ray
direction, sun tangent) is evaluated per point with the same scalar
functions as the reference path; the arrays only carry IEEE add, subtract,
multiply, divide and compare, in the same order as
:mod:`shadecast.shading`, so classifications match the reference exactly.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from ..constants import METERS_PER_DEGREE_LATITUDE, PARALLEL_EPSILON
from ..models import BuildingFootprint, GeoPoint, ShadeResult, SolarPosition
from ..projection import meters_per_degree
from ..shading import OccluderPolicy, ray_end
from .base import ShadowBackend

if TYPE_CHECKING:
    from numpy.typing import NDArray


class _EdgeTable:
    """Flattened vertex and edge arrays for a list of footprints."""

    def __init__(self, buildings: Sequence[BuildingFootprint]):
        lons = []
        lats = []
        a_idx = []
        b_idx = []
        starts = []
        offset = 0
        for building in buildings:
            ring = building.outer_ring
            starts.append(len(a_idx))
            for i in range(len(ring) - 1):
                a_idx.append(offset + i)
                b_idx.append(offset + i + 1)
            lons.extend(p.longitude for p in ring)
            lats.extend(p.latitude for p in ring)
            offset += len(ring)

        self.lon = np.asarray(lons, dtype=np.float64)
        self.lat = np.asarray(lats, dtype=np.float64)
        self.a_idx = np.asarray(a_idx, dtype=np.intp)
        self.b_idx = np.asarray(b_idx, dtype=np.intp)
        self.starts = np.asarray(starts, dtype=np.intp)
        self.heights = np.asarray([b.height_meters for b in buildings], dtype=np.float64)
        self.ids = [b.id for b in buildings]


class VectorizedBackend(ShadowBackend):
    """numpy implementation of the shade test over point batches."""

    name = "vectorized"

    def classify(
        self,
        points: Sequence[GeoPoint],
        suns: Sequence[SolarPosition],
        buildings: Sequence[BuildingFootprint],
        max_ray_meters: float,
        policy: OccluderPolicy,
    ) -> list[ShadeResult]:
        if len(points) != len(suns):
            raise ValueError(f"Got {len(points)} points but {len(suns)} sun positions")
        if not points:
            return []

        sun_up = np.array([sun.altitude_radians > 0 for sun in suns], dtype=bool)
        if not buildings or not sun_up.any():
            return [ShadeResult(shaded=not up) for up in sun_up]

        table = _EdgeTable(buildings)
        lit = [i for i in range(len(points)) if sun_up[i]]
        hits = self._occluders(
            [points[i] for i in lit],
            [suns[i] for i in lit],
            table,
            max_ray_meters,
            policy,
        )

        results = [ShadeResult(shaded=True)] * len(points)
        for i, building_index in zip(lit, hits):
            if building_index < 0:
                results[i] = ShadeResult(shaded=False)
            else:
                results[i] = ShadeResult(shaded=True, cast_by_building_id=table.ids[building_index])
        return results

    def _occluders(
        self,
        points: Sequence[GeoPoint],
        suns: Sequence[SolarPosition],
        table: _EdgeTable,
        max_ray_meters: float,
        policy: OccluderPolicy,
    ) -> NDArray[np.intp]:
        """Index of the reported occluder per point, -1 where none qualifies."""
        plon = np.array([p.longitude for p in points], dtype=np.float64)[:, None]
        plat = np.array([p.latitude for p in points], dtype=np.float64)[:, None]
        lon_m = np.array([meters_per_degree(p.latitude)[1] for p in points], dtype=np.float64)[:, None]
        rays = [ray_end(sun.bearing_from_north_degrees, max_ray_meters) for sun in suns]
        ex = np.array([r[0] for r in rays], dtype=np.float64)[:, None]
        ey = np.array([r[1] for r in rays], dtype=np.float64)[:, None]
        tan_altitude = np.array([math.tan(sun.altitude_radians) for sun in suns], dtype=np.float64)[:, None]

        # Vertices in each point's own plane, shape (points, vertices)
        dlon = table.lon[None, :] - plon
        dlon = np.where(dlon >= 180, dlon - 360, np.where(dlon < -180, dlon + 360, dlon))
        x = dlon * lon_m
        y = (table.lat[None, :] - plat) * METERS_PER_DEGREE_LATITUDE

        ax = x[:, table.a_idx]
        ay = y[:, table.a_idx]
        bx = x[:, table.b_idx]
        by = y[:, table.b_idx]

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            # Ray/edge crossings
            sx = bx - ax
            sy = by - ay
            denom = ex * sy - ey * sx
            t = (ax * sy - ay * sx) / denom
            u = (ax * ey - ay * ex) / denom
            hit = (np.abs(denom) >= PARALLEL_EPSILON) & (t >= 0) & (t <= 1) & (u >= 0) & (u <= 1)
            t_nearest = np.minimum.reduceat(np.where(hit, t, np.inf), table.starts, axis=1)

            # Crossing-number containment of the origin
            straddles = (ay > 0) != (by > 0)
            x_cross = (bx - ax) * -ay / (by - ay) + ax
            crossings = (straddles & (0 < x_cross)).astype(np.int64)
            inside = (np.add.reduceat(crossings, table.starts, axis=1) % 2) == 1

            distance = t_nearest * max_ray_meters
            qualifies = ~inside & np.isfinite(t_nearest) & (table.heights[None, :] >= distance * tan_altitude)

        any_hit = qualifies.any(axis=1)
        if policy is OccluderPolicy.FIRST_MATCH:
            index = np.argmax(qualifies, axis=1)
        else:
            index = np.argmin(np.where(qualifies, distance, np.inf), axis=1)
        return np.where(any_hit, index, -1)
