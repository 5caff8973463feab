"""
Point shade test by ray casting against building footprints.

A ray is cast from the query point toward the sun in a local plane anchored
at the point. For each building the nearest crossing of the ray with the
footprint boundary gives a distance ``d``; the building occludes the sun
when ``height >= d * tan(altitude)``.

Geometry is evaluated in the point-anchored plane: the point is the origin,
the ray runs from ``(0, 0)`` to ``(L sin(bearing), L cos(bearing))``.
The vectorized backend reproduces these expressions operation for
operation, so keep the two in step when changing either.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from .constants import DEFAULT_MAX_RAY_METERS, PARALLEL_EPSILON
from .errors import ConfigurationError
from .models import BuildingFootprint, GeoPoint, ShadeResult, SolarPosition, usable_buildings
from .projection import project_ring
from .solar import compute_sun
from .validation import require_positive


class OccluderPolicy(str, Enum):
    """
    Which occluding building is reported when several qualify.

    NEAREST evaluates every building and reports the one whose ray crossing
    is closest to the point, independent of input order. FIRST_MATCH stops
    at the first qualifying building in input order (legacy behaviour).
    Both give the same ``shaded`` value.
    """

    NEAREST = "nearest"
    FIRST_MATCH = "first_match"

    @classmethod
    def parse(cls, value: OccluderPolicy | str) -> OccluderPolicy:
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(p.value for p in cls)
            raise ConfigurationError("policy", f"expected one of {valid}, got {value!r}") from e


def ray_end(bearing_degrees: float, length: float) -> tuple[float, float]:
    """End point of a ray of ``length`` meters from the origin along a compass bearing."""
    b = bearing_degrees * math.pi / 180
    return length * math.sin(b), length * math.cos(b)


def segment_hit(ex: float, ey: float, ax: float, ay: float, bx: float, by: float) -> float | None:
    """
    Parameter ``t`` in [0, 1] where the ray (0,0)->(ex,ey) crosses segment A->B.

    Returns None for no crossing, including (near-)parallel segments.
    """
    sx = bx - ax
    sy = by - ay
    denom = ex * sy - ey * sx
    if abs(denom) < PARALLEL_EPSILON:
        return None
    t = (ax * sy - ay * sx) / denom
    u = (ax * ey - ay * ex) / denom
    if 0 <= t <= 1 and 0 <= u <= 1:
        return t
    return None


def contains_origin(ring: Sequence[tuple[float, float]]) -> bool:
    """Crossing-number test of the origin against a closed ring of (x, y) vertices."""
    inside = False
    for (ax, ay), (bx, by) in zip(ring[:-1], ring[1:]):
        if (ay > 0) != (by > 0):
            x_cross = (bx - ax) * -ay / (by - ay) + ax
            if 0 < x_cross:
                inside = not inside
    return inside


def nearest_crossing(ring: Sequence[tuple[float, float]], ex: float, ey: float) -> float | None:
    """Smallest ray parameter at which the ray crosses any edge of the ring."""
    nearest = None
    for (ax, ay), (bx, by) in zip(ring[:-1], ring[1:]):
        t = segment_hit(ex, ey, ax, ay, bx, by)
        if t is not None and (nearest is None or t < nearest):
            nearest = t
    return nearest


def shade_with_sun(
    point: GeoPoint,
    buildings: Sequence[BuildingFootprint],
    sun: SolarPosition,
    max_ray_meters: float,
    policy: OccluderPolicy = OccluderPolicy.NEAREST,
) -> ShadeResult:
    """
    Shade test for a known sun position against already validated buildings.

    This is the reference computation every backend must agree with.
    """
    if sun.altitude_radians <= 0:
        return ShadeResult(shaded=True)

    tan_altitude = math.tan(sun.altitude_radians)
    ex, ey = ray_end(sun.bearing_from_north_degrees, max_ray_meters)

    best_distance = None
    best_id = None
    for building in buildings:
        ring = [(p.x, p.y) for p in project_ring(point, building.outer_ring)]
        # A point inside a footprint is never shaded by that footprint
        if contains_origin(ring):
            continue
        t = nearest_crossing(ring, ex, ey)
        if t is None:
            continue
        distance = t * max_ray_meters
        if building.height_meters >= distance * tan_altitude:
            if policy is OccluderPolicy.FIRST_MATCH:
                return ShadeResult(shaded=True, cast_by_building_id=building.id)
            if best_distance is None or distance < best_distance:
                best_distance = distance
                best_id = building.id

    return ShadeResult(shaded=best_distance is not None, cast_by_building_id=best_id)


def is_shaded(
    point: GeoPoint,
    buildings: Sequence[BuildingFootprint],
    instant: datetime,
    max_ray_meters: float = DEFAULT_MAX_RAY_METERS,
    policy: OccluderPolicy | str = OccluderPolicy.NEAREST,
) -> ShadeResult:
    """
    Decide whether ``point`` lies in a building shadow at ``instant``.

    When the sun is at or below the horizon the point is reported shaded
    with no occluder. Invalid footprints are logged and skipped.

    Args:
        point: Query location.
        buildings: Candidate occluders.
        instant: Time of interest (naive = UTC).
        max_ray_meters: How far toward the sun to look for buildings.
        policy: Occluder tie-break, see :class:`OccluderPolicy`.

    Returns:
        ShadeResult with the occluding building's id when shaded by one.

    Raises:
        DegenerateInput: ``max_ray_meters`` is not a finite number > 0.
    """
    max_ray_meters = require_positive("max_ray_meters", max_ray_meters)
    policy = OccluderPolicy.parse(policy)
    sun = compute_sun(instant, point.latitude, point.longitude)
    return shade_with_sun(point, usable_buildings(buildings), sun, max_ray_meters, policy)
