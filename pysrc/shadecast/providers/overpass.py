"""
Building footprints from the OpenStreetMap Overpass API.

Every way tagged ``building`` within the search radius becomes one
footprint. Ways without an id or with fewer than 3 nodes are dropped;
unclosed rings are closed; heights come from :func:`shadecast.heights.parse_height_meters`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import requests

from ..errors import BuildingDataError
from ..heights import parse_height_meters
from ..models import BuildingFootprint, GeoPoint, close_ring
from ..shadecast_logging import get_logger
from .throttle import RateLimiter

if TYPE_CHECKING:
    from ..config import ShadowConfig

logger = get_logger(__name__)

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"


def overpass_query(center: GeoPoint, radius_meters: float) -> str:
    """Overpass QL for building ways around ``center``, with tags and inline geometry."""
    return (
        "[out:json];"
        f'(way["building"](around:{radius_meters:g},{center.latitude},{center.longitude}););'
        "out tags geom;"
    )


def parse_overpass_elements(elements: list[dict[str, Any]]) -> list[BuildingFootprint]:
    """Convert Overpass ``way`` elements (``out geom`` form) to footprints."""
    buildings = []
    for element in elements:
        if not isinstance(element, dict) or element.get("type") != "way":
            continue
        if element.get("id") is None:
            logger.warning("Skipping way without an id")
            continue
        geometry = element.get("geometry") or []
        if len(geometry) < 3:
            logger.debug(f"Skipping way {element.get('id')}: {len(geometry)} nodes")
            continue
        try:
            ring = close_ring([GeoPoint(longitude=node["lon"], latitude=node["lat"]) for node in geometry])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping way {element.get('id')}: bad geometry ({e})")
            continue
        buildings.append(
            BuildingFootprint(
                id=element.get("id"),
                outer_ring=ring,
                height_meters=parse_height_meters(element.get("tags") or {}),
            )
        )
    return buildings


class OverpassBuildingProvider:
    """
    Fetch building footprints around a point.

    Args:
        url: Overpass interpreter endpoint.
        min_interval_s: Minimum spacing between requests.
        timeout_s: HTTP timeout per request.
        session: Optional ``requests.Session`` (or compatible object with ``post``).
        rate_limiter: Optional limiter; one is created from ``min_interval_s`` otherwise.
        search_margin_m: Added to every requested radius so buildings just
            outside the area can still cast shadows into it.

    Example:
        >>> provider = OverpassBuildingProvider()
        >>> buildings = provider.fetch_buildings(GeoPoint(-122.4194, 37.7749), 250)
    """

    def __init__(
        self,
        url: str = DEFAULT_OVERPASS_URL,
        min_interval_s: float = 1.0,
        timeout_s: float = 60.0,
        session: Any = None,
        rate_limiter: RateLimiter | None = None,
        search_margin_m: float = 0.0,
    ):
        self.url = url
        self.timeout_s = timeout_s
        self._session = session if session is not None else requests.Session()
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(min_interval_s)
        self.search_margin_m = search_margin_m

    @classmethod
    def from_config(cls, config: ShadowConfig, session: Any = None) -> OverpassBuildingProvider:
        return cls(
            url=config.overpass_url,
            min_interval_s=config.overpass_min_interval_s,
            timeout_s=config.overpass_timeout_s,
            session=session,
            search_margin_m=config.building_search_margin_m,
        )

    def fetch_buildings(self, center: GeoPoint, radius_meters: float) -> list[BuildingFootprint]:
        """
        Buildings whose ways fall within ``radius_meters`` (plus the search
        margin) of ``center``.

        Raises:
            BuildingDataError: Transport failure, non-OK HTTP status or a
                response that is not Overpass JSON.
        """
        query = overpass_query(center, radius_meters + self.search_margin_m)
        self.rate_limiter.wait()
        logger.debug(f"Overpass query: {query}")
        try:
            response = self._session.post(self.url, data={"data": query}, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise BuildingDataError(self.url, detail=str(e)) from e

        if not response.ok:
            raise BuildingDataError(self.url, status=response.status_code, detail=response.reason)

        try:
            payload = response.json()
        except ValueError as e:
            raise BuildingDataError(self.url, status=response.status_code, detail="response is not JSON") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("elements", []), list):
            raise BuildingDataError(
                self.url, status=response.status_code, detail="response is not an Overpass result object"
            )

        buildings = parse_overpass_elements(payload.get("elements", []))
        logger.info(f"Fetched {len(buildings)} buildings within {radius_meters:g} m of {center.to_lnglat()}")
        return buildings
