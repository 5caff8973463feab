"""
Vector shadow footprints for rendering.

Each building's shadow is approximated by a parallelogram: the two
footprint vertices that are extremal across the shadow direction (the
silhouette), plus their translations by the shadow length along the shadow
bearing. This is a visual approximation; shade decisions go through
:mod:`shadecast.shading`.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

from shapely.geometry import Polygon

from .constants import MIN_SUN_TANGENT
from .errors import InvalidGeometry
from .models import BuildingFootprint, LocalPoint
from .projection import naive_centroid, project_ring, unproject
from .shadecast_logging import get_logger
from .solar import compute_sun

logger = get_logger(__name__)


def _compass_to_plane(bearing_degrees: float) -> tuple[float, float]:
    # Compass bearing (0 = north, clockwise) to an (east, north) unit vector
    b = math.radians(bearing_degrees)
    return math.sin(b), math.cos(b)


def project_shadow(building: BuildingFootprint, instant: datetime) -> Polygon | None:
    """
    Shadow polygon cast by one building at an instant.

    The sun is evaluated at the footprint's naive centroid, which is also
    the anchor of the local plane used for the construction.

    Args:
        building: A footprint; it is validated first.
        instant: Time of interest (naive = UTC).

    Returns:
        A closed lon/lat ``shapely`` Polygon ``[base1, base2, tip2, tip1]``,
        or None when the sun is at or below the horizon or too low for a
        finite shadow length.

    Raises:
        InvalidGeometry: The footprint fails validation.
    """
    building.validate()

    center = naive_centroid(building.outer_ring)
    sun = compute_sun(instant, center.latitude, center.longitude)
    if sun.altitude_radians <= 0:
        return None

    tan_altitude = math.tan(sun.altitude_radians)
    if tan_altitude < MIN_SUN_TANGENT:
        return None
    length = building.height_meters / tan_altitude

    ring = project_ring(center, building.outer_ring)

    ux, uy = _compass_to_plane((sun.shadow_bearing_degrees + 90) % 360)
    min_proj = math.inf
    max_proj = -math.inf
    min_pt = max_pt = ring[0]
    for p in ring:
        proj = p.x * ux + p.y * uy
        if proj < min_proj:
            min_proj = proj
            min_pt = p
        if proj > max_proj:
            max_proj = proj
            max_pt = p

    # Offset is (sin, cos) of the shadow bearing: x east, y north
    dx, dy = _compass_to_plane(sun.shadow_bearing_degrees)
    dx *= length
    dy *= length

    tip_min = LocalPoint(min_pt.x + dx, min_pt.y + dy)
    tip_max = LocalPoint(max_pt.x + dx, max_pt.y + dy)

    corners = [min_pt, max_pt, tip_max, tip_min]
    return Polygon([unproject(center, p).to_lnglat() for p in corners])


def project_shadows(buildings: Iterable[BuildingFootprint], instant: datetime) -> list[tuple[int | str, Polygon]]:
    """
    Shadow polygons for every building that casts one.

    Invalid footprints are logged and skipped; buildings with no shadow
    (sun down) are left out.

    Returns:
        ``(building_id, polygon)`` pairs in input order.
    """
    shadows = []
    for building in buildings:
        try:
            polygon = project_shadow(building, instant)
        except InvalidGeometry as e:
            logger.warning(f"Skipping building: {e}")
            continue
        if polygon is not None:
            shadows.append((building.id, polygon))
    logger.debug(f"Projected {len(shadows)} shadow polygons")
    return shadows
