"""
Local tangent-plane projection.

Equirectangular approximation anchored at a reference point: good to well
under a meter for the tens-to-thousands of meters shade queries cover,
degrading at high latitude and over large radii.

Longitude differences are taken the short way round, so an area that
crosses the antimeridian projects as one piece. Unprojected points are
wrapped back into [-180, 180) longitude and clamped to [-90, 90] latitude;
the frame itself is meaningless within a few hundred meters of a pole.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .constants import METERS_PER_DEGREE_LATITUDE, METERS_PER_DEGREE_LONGITUDE_EQUATOR
from .models import GeoPoint, LocalPoint


def meters_per_degree(latitude: float) -> tuple[float, float]:
    """
    Meters per degree of latitude and of longitude at a latitude.

    Returns:
        ``(lat_meters, lon_meters)``.
    """
    lon_meters = METERS_PER_DEGREE_LONGITUDE_EQUATOR * math.cos(latitude * math.pi / 180)
    return METERS_PER_DEGREE_LATITUDE, lon_meters


def longitude_delta(from_longitude: float, to_longitude: float) -> float:
    """Signed longitude difference in degrees, wrapped into [-180, 180)."""
    delta = to_longitude - from_longitude
    if delta >= 180:
        delta -= 360
    elif delta < -180:
        delta += 360
    return delta


def normalize_longitude(longitude: float) -> float:
    if -180 <= longitude < 180:
        return longitude
    return (longitude + 180) % 360 - 180


def project(anchor: GeoPoint, p: GeoPoint) -> LocalPoint:
    """Project ``p`` into the plane anchored at ``anchor`` (x east, y north, meters)."""
    lat_meters, lon_meters = meters_per_degree(anchor.latitude)
    return LocalPoint(
        x=longitude_delta(anchor.longitude, p.longitude) * lon_meters,
        y=(p.latitude - anchor.latitude) * lat_meters,
    )


def unproject(anchor: GeoPoint, xy: LocalPoint) -> GeoPoint:
    """Inverse of :func:`project` for the same anchor."""
    lat_meters, lon_meters = meters_per_degree(anchor.latitude)
    return GeoPoint(
        longitude=normalize_longitude(anchor.longitude + xy.x / lon_meters),
        latitude=min(90.0, max(-90.0, anchor.latitude + xy.y / lat_meters)),
    )


def project_ring(anchor: GeoPoint, ring: Sequence[GeoPoint]) -> list[LocalPoint]:
    lat_meters, lon_meters = meters_per_degree(anchor.latitude)
    return [
        LocalPoint(
            x=longitude_delta(anchor.longitude, p.longitude) * lon_meters,
            y=(p.latitude - anchor.latitude) * lat_meters,
        )
        for p in ring
    ]


def naive_centroid(ring: Sequence[GeoPoint]) -> GeoPoint:
    """
    Unweighted mean of the ring's vertices.

    This is not the area centroid of the polygon. The closing vertex of a
    closed ring is excluded so that the first vertex is not counted twice.
    For the small, roughly convex footprints this is used on, the error is
    a fraction of the footprint size.

    Longitudes are averaged as offsets from the first vertex so rings
    across the antimeridian stay in one piece.

    Raises:
        ValueError: The ring has no vertices.
    """
    points = list(ring)
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    if not points:
        raise ValueError("Cannot take the centroid of an empty ring")
    n = len(points)
    base = points[0].longitude
    return GeoPoint(
        longitude=normalize_longitude(base + sum(longitude_delta(base, p.longitude) for p in points) / n),
        latitude=sum(p.latitude for p in points) / n,
    )
