"""Geographic and local-plane point types."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    """
    A point on the Earth's surface in WGS84-ish degrees (no datum correction).

    Attributes:
        longitude: Longitude in degrees (east positive).
        latitude: Latitude in degrees (north positive).
    """

    longitude: float
    latitude: float

    def __post_init__(self):
        if not (math.isfinite(self.longitude) and math.isfinite(self.latitude)):
            raise ValueError(f"Coordinates must be finite, got ({self.longitude}, {self.latitude})")
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be in [-90, 90], got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be in [-180, 180], got {self.longitude}")

    @classmethod
    def from_lnglat(cls, pair) -> GeoPoint:
        """Build from a ``[lng, lat]`` pair (GeoJSON / original record order)."""
        lng, lat = pair
        return cls(longitude=float(lng), latitude=float(lat))

    def to_lnglat(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)


@dataclass(frozen=True)
class LocalPoint:
    """
    Position in meters in a tangent-plane frame anchored at some GeoPoint.

    Only meaningful relative to the anchor it was projected with.

    Attributes:
        x: Meters east of the anchor.
        y: Meters north of the anchor.
    """

    x: float
    y: float

    def distance_to(self, other: LocalPoint) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)
