"""Building footprint data model."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidGeometry, InvalidRecord
from ..shadecast_logging import get_logger
from .geo import GeoPoint

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildingFootprint:
    """
    One above-ground structure as a vertical extrusion of a flat footprint.

    The ring may be given as GeoPoints or as ``(lng, lat)`` pairs; it is
    stored as a tuple of GeoPoints. Construction does not check the
    geometry, call :meth:`validate` (batch operations do this and skip
    failures).

    Attributes:
        id: Building identifier from the data provider.
        outer_ring: Closed ring (first == last) of at least 4 points.
        height_meters: Flat-roof height above ground, > 0.
    """

    id: int | str
    outer_ring: tuple[GeoPoint, ...]
    height_meters: float

    def __post_init__(self):
        ring = tuple(p if isinstance(p, GeoPoint) else GeoPoint.from_lnglat(p) for p in self.outer_ring)
        object.__setattr__(self, "outer_ring", ring)
        object.__setattr__(self, "height_meters", float(self.height_meters))

    @property
    def is_closed(self) -> bool:
        return len(self.outer_ring) > 1 and self.outer_ring[0] == self.outer_ring[-1]

    @property
    def distinct_vertex_count(self) -> int:
        return len(set(self.outer_ring))

    def validate(self) -> None:
        """
        Check the footprint is usable for shading.

        Raises:
            InvalidGeometry: Ring not closed, fewer than 4 points, fewer than
                3 distinct vertices, or a non-positive height.
        """
        if not self.is_closed:
            raise InvalidGeometry(self.id, "outer ring is not closed (first point != last point)")
        if len(self.outer_ring) < 4:
            raise InvalidGeometry(self.id, f"outer ring has {len(self.outer_ring)} points, need at least 4")
        if self.distinct_vertex_count < 3:
            raise InvalidGeometry(self.id, f"outer ring has {self.distinct_vertex_count} distinct vertices, need 3")
        if not math.isfinite(self.height_meters) or self.height_meters <= 0:
            raise InvalidGeometry(self.id, f"height must be a positive number, got {self.height_meters}")

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> BuildingFootprint:
        """
        Parse a ``{"id", "outer": [[lng, lat], ...], "height"}`` record.

        Fields are required; nothing is defaulted.

        Raises:
            InvalidRecord: A field is missing or has the wrong type.
        """
        if not isinstance(record, dict):
            raise InvalidRecord("building", f"expected an object, got {type(record).__name__}")
        for key in ("id", "outer", "height"):
            if key not in record:
                raise InvalidRecord(key, "missing")

        building_id = record["id"]
        if not isinstance(building_id, (int, str)) or isinstance(building_id, bool):
            raise InvalidRecord("id", f"expected int or str, got {type(building_id).__name__}")

        height = record["height"]
        if not isinstance(height, (int, float)) or isinstance(height, bool):
            raise InvalidRecord("height", f"expected a number, got {type(height).__name__}")

        outer = record["outer"]
        if not isinstance(outer, list):
            raise InvalidRecord("outer", "expected a list of [lng, lat] pairs")
        ring = []
        for i, pair in enumerate(outer):
            if (
                not isinstance(pair, (list, tuple))
                or len(pair) != 2
                or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in pair)
            ):
                raise InvalidRecord(f"outer[{i}]", "expected a [lng, lat] number pair")
            try:
                ring.append(GeoPoint.from_lnglat(pair))
            except ValueError as e:
                raise InvalidRecord(f"outer[{i}]", str(e)) from e

        return cls(id=building_id, outer_ring=tuple(ring), height_meters=float(height))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "outer": [list(p.to_lnglat()) for p in self.outer_ring],
            "height": self.height_meters,
        }


def usable_buildings(buildings: Iterable[BuildingFootprint]) -> list[BuildingFootprint]:
    """
    Drop footprints that fail validation, logging each one.

    Input order is preserved for the buildings that are kept.
    """
    kept = []
    for building in buildings:
        try:
            building.validate()
        except InvalidGeometry as e:
            logger.warning(f"Skipping building: {e}")
            continue
        kept.append(building)
    return kept


def close_ring(points: Sequence[GeoPoint]) -> tuple[GeoPoint, ...]:
    """Return the ring with its first point appended when it is not already closed."""
    ring = tuple(points)
    if ring and ring[0] != ring[-1]:
        ring = ring + (ring[0],)
    return ring
