"""Solar position data model."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SolarPosition:
    """
    Sun position for one (instant, location) pair.

    Recomputed per location; azimuth depends on latitude and longitude.

    Attributes:
        altitude_radians: Angle above the horizon (negative when below).
        azimuth_radians: Ephemeris azimuth, 0 = south, increasing toward west.
        bearing_from_north_degrees: Compass bearing to the sun, 0-360 clockwise from north.
        shadow_bearing_degrees: Direction shadows extend, opposite the sun.
    """

    altitude_radians: float
    azimuth_radians: float
    bearing_from_north_degrees: float
    shadow_bearing_degrees: float

    @property
    def altitude_degrees(self) -> float:
        return math.degrees(self.altitude_radians)

    @property
    def is_up(self) -> bool:
        """True when the sun is strictly above the horizon."""
        return self.altitude_radians > 0

    @classmethod
    def from_bearing(cls, altitude_radians: float, bearing_from_north_degrees: float) -> SolarPosition:
        """
        Build a position from altitude and compass bearing.

        Useful for scenario tests and for backends that receive the sun
        direction from elsewhere.
        """
        bearing = bearing_from_north_degrees % 360
        azimuth_degrees = bearing - 180
        return cls(
            altitude_radians=altitude_radians,
            azimuth_radians=math.radians(azimuth_degrees),
            bearing_from_north_degrees=bearing,
            shadow_bearing_degrees=(bearing + 180) % 360,
        )
