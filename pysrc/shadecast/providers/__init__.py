"""Building data providers."""

from .overpass import OverpassBuildingProvider, overpass_query, parse_overpass_elements
from .throttle import RateLimiter

__all__ = [
    "OverpassBuildingProvider",
    "RateLimiter",
    "overpass_query",
    "parse_overpass_elements",
]
