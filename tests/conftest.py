"""Shared pytest fixtures and scene builders."""

from datetime import datetime, timezone

import pytest
from shadecast.models import BuildingFootprint, GeoPoint, LocalPoint
from shadecast.projection import unproject

# San Francisco, used throughout as the query center
SF = GeoPoint(longitude=-122.4194, latitude=37.7749)

# Winter solstice local solar noon in San Francisco: sun due south, ~28.8 deg up
SF_WINTER_NOON = datetime(2024, 12, 21, 20, 8, tzinfo=timezone.utc)

# Local midnight in San Francisco
SF_MIDNIGHT = datetime(2024, 12, 21, 8, 0, tzinfo=timezone.utc)

# Taveuni, Fiji: 0.001 deg west of the antimeridian
TAVEUNI = GeoPoint(longitude=179.999, latitude=-16.8)


def offset(anchor: GeoPoint, east: float, north: float) -> GeoPoint:
    """Point ``east`` / ``north`` meters from ``anchor``."""
    return unproject(anchor, LocalPoint(east, north))


def square_building(
    anchor: GeoPoint,
    east: float,
    north: float,
    half_size: float = 3.0,
    height: float = 50.0,
    building_id: int | str = 1,
) -> BuildingFootprint:
    """Axis-aligned square footprint centered ``east`` / ``north`` meters from ``anchor``."""
    corners = [
        (east - half_size, north - half_size),
        (east + half_size, north - half_size),
        (east + half_size, north + half_size),
        (east - half_size, north + half_size),
    ]
    ring = [offset(anchor, x, y) for x, y in corners]
    ring.append(ring[0])
    return BuildingFootprint(id=building_id, outer_ring=tuple(ring), height_meters=height)


def unclosed_building(anchor: GeoPoint, building_id: int | str = "open") -> BuildingFootprint:
    """Footprint whose ring is not closed, so it fails validation."""
    ring = [offset(anchor, x, y) for x, y in [(0, 5), (5, 5), (5, 10), (0, 10)]]
    return BuildingFootprint(id=building_id, outer_ring=tuple(ring), height_meters=20.0)


@pytest.fixture
def center() -> GeoPoint:
    return SF


@pytest.fixture
def tower_north() -> BuildingFootprint:
    """50 m tower, 20 m square, centered 40 m north of SF."""
    return square_building(SF, 0.0, 40.0, half_size=10.0, height=50.0, building_id="tower")


@pytest.fixture
def feedback():
    """Host feedback stand-in that records every call."""

    class RecordingFeedback:
        def __init__(self):
            self.progress = []
            self.info = []
            self.debug = []
            self.errors = []

        def set_progress(self, percent):
            self.progress.append(percent)

        def push_info(self, message):
            self.info.append(message)

        def push_debug_info(self, message):
            self.debug.append(message)

        def report_error(self, message):
            self.errors.append(message)

    return RecordingFeedback()
