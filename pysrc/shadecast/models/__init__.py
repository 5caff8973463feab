"""Data models for shadecast.

Modules
-------
geo
    ``GeoPoint`` (degrees) and ``LocalPoint`` (meters in an anchored plane).
buildings
    ``BuildingFootprint`` plus validation helpers.
solar
    ``SolarPosition``.
results
    ``ShadeResult``, ``RasterMeta`` and ``ShadowRaster``.
"""

from .buildings import BuildingFootprint, close_ring, usable_buildings
from .geo import GeoPoint, LocalPoint
from .results import RasterMeta, ShadeResult, ShadowRaster
from .solar import SolarPosition

__all__ = [
    "GeoPoint",
    "LocalPoint",
    "BuildingFootprint",
    "close_ring",
    "usable_buildings",
    "SolarPosition",
    "ShadeResult",
    "RasterMeta",
    "ShadowRaster",
]
