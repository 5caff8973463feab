"""
Low-precision solar ephemeris.

Sun position from Julian date via mean anomaly, ecliptic longitude,
obliquity, right ascension/declination and local hour angle. This is the
formulation popularised by the SunCalc library (after Meeus and the
Astronomy Answers articles); errors are in the arcminute range, far below
what footprint heights and the flat-plane approximation resolve.

Reference:
    Meeus, J. (1998) Astronomical Algorithms, 2nd ed., ch. 25.
    https://aa.quae.nl/en/reken/zonpositie.html
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from .models import SolarPosition

RAD = math.pi / 180

_DAY_SECONDS = 86400.0
_J1970 = 2440588.0
_J2000 = 2451545.0

# Obliquity of the Earth's axis
_OBLIQUITY = RAD * 23.4397

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_utc(instant: datetime) -> datetime:
    """Return ``instant`` as an aware UTC datetime; naive values are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_julian(instant: datetime) -> float:
    """Julian date of an instant."""
    seconds = (to_utc(instant) - _EPOCH).total_seconds()
    return seconds / _DAY_SECONDS - 0.5 + _J1970


def to_days(instant: datetime) -> float:
    """Days since the J2000.0 epoch."""
    return to_julian(instant) - _J2000


def _right_ascension(lon: float, lat: float) -> float:
    return math.atan2(math.sin(lon) * math.cos(_OBLIQUITY) - math.tan(lat) * math.sin(_OBLIQUITY), math.cos(lon))


def _declination(lon: float, lat: float) -> float:
    return math.asin(math.sin(lat) * math.cos(_OBLIQUITY) + math.cos(lat) * math.sin(_OBLIQUITY) * math.sin(lon))


def _azimuth(hour_angle: float, phi: float, dec: float) -> float:
    return math.atan2(math.sin(hour_angle), math.cos(hour_angle) * math.sin(phi) - math.tan(dec) * math.cos(phi))


def _altitude(hour_angle: float, phi: float, dec: float) -> float:
    return math.asin(math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec) * math.cos(hour_angle))


def _sidereal_time(d: float, lw: float) -> float:
    return RAD * (280.16 + 360.9856235 * d) - lw


def _solar_mean_anomaly(d: float) -> float:
    return RAD * (357.5291 + 0.98560028 * d)


def _ecliptic_longitude(m: float) -> float:
    center = RAD * (1.9148 * math.sin(m) + 0.02 * math.sin(2 * m) + 0.0003 * math.sin(3 * m))
    perihelion = RAD * 102.9372
    return m + center + perihelion + math.pi


def sun_coords(d: float) -> tuple[float, float]:
    """Declination and right ascension (radians) for ``d`` days since J2000."""
    ecliptic = _ecliptic_longitude(_solar_mean_anomaly(d))
    return _declination(ecliptic, 0.0), _right_ascension(ecliptic, 0.0)


def compute_sun(instant: datetime, latitude: float, longitude: float) -> SolarPosition:
    """
    Sun altitude and direction at an instant and location.

    Pure function of its arguments. The ephemeris azimuth (0 = south,
    positive toward west) is converted to a compass bearing:
    ``bearing = (azimuth_deg + 180) mod 360`` and
    ``shadow_bearing = (bearing + 180) mod 360``.

    Args:
        instant: Time of interest; naive datetimes are taken as UTC.
        latitude: Degrees north.
        longitude: Degrees east.

    Returns:
        SolarPosition (altitude <= 0 means the sun is not visible).
    """
    lw = RAD * -longitude
    phi = RAD * latitude
    d = to_days(instant)

    dec, ra = sun_coords(d)
    hour_angle = _sidereal_time(d, lw) - ra

    azimuth = _azimuth(hour_angle, phi, dec)
    altitude = _altitude(hour_angle, phi, dec)

    bearing = (math.degrees(azimuth) + 180) % 360
    return SolarPosition(
        altitude_radians=altitude,
        azimuth_radians=azimuth,
        bearing_from_north_degrees=bearing,
        shadow_bearing_degrees=(bearing + 180) % 360,
    )
