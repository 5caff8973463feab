"""
Local Plane Projection Tests

Properties of the equirectangular projection anchored at a reference point.
"""

import math

import pytest
from shadecast.models import GeoPoint, LocalPoint
from shadecast.projection import (
    longitude_delta,
    meters_per_degree,
    naive_centroid,
    project,
    project_ring,
    unproject,
)

from conftest import SF, TAVEUNI, square_building


class TestProjectionProperties:
    def test_anchor_projects_to_origin(self):
        xy = project(SF, SF)
        assert xy.x == 0.0
        assert xy.y == 0.0

    def test_axes_point_east_and_north(self):
        east = project(SF, GeoPoint(SF.longitude + 0.001, SF.latitude))
        north = project(SF, GeoPoint(SF.longitude, SF.latitude + 0.001))
        assert east.x > 0 and east.y == 0.0
        assert north.y > 0 and north.x == 0.0

    def test_scale_at_equator(self):
        lat_m, lon_m = meters_per_degree(0.0)
        assert lat_m == 111132.0
        assert lon_m == pytest.approx(111320.0)

    def test_longitude_scale_shrinks_with_latitude(self):
        _, lon_equator = meters_per_degree(0.0)
        _, lon_sf = meters_per_degree(SF.latitude)
        assert lon_sf == pytest.approx(lon_equator * math.cos(math.radians(SF.latitude)))

    def test_one_millidegree_north(self):
        xy = project(SF, GeoPoint(SF.longitude, SF.latitude + 0.001))
        assert xy.y == pytest.approx(111.132, rel=1e-9)

    @pytest.mark.parametrize("dx,dy", [(0.0, 0.0), (10.0, -25.0), (-750.0, 1200.0), (3000.0, 3000.0)])
    def test_round_trip(self, dx, dy):
        p = unproject(SF, LocalPoint(dx, dy))
        back = unproject(SF, project(SF, p))
        assert abs(back.longitude - p.longitude) <= 1e-9
        assert abs(back.latitude - p.latitude) <= 1e-9

    def test_ring_matches_pointwise_projection(self):
        ring = [GeoPoint(-122.42, 37.775), GeoPoint(-122.419, 37.775), GeoPoint(-122.419, 37.776)]
        assert project_ring(SF, ring) == [project(SF, p) for p in ring]


class TestNaiveCentroid:
    def test_excludes_closing_vertex(self):
        ring = [GeoPoint(0, 0), GeoPoint(2, 0), GeoPoint(2, 2), GeoPoint(0, 2), GeoPoint(0, 0)]
        c = naive_centroid(ring)
        assert c.longitude == pytest.approx(1.0)
        assert c.latitude == pytest.approx(1.0)

    def test_is_vertex_mean_not_area_centroid(self):
        # Extra vertex on one edge pulls the mean, not the area centroid
        ring = [GeoPoint(0, 0), GeoPoint(1, 0), GeoPoint(2, 0), GeoPoint(2, 2), GeoPoint(0, 2), GeoPoint(0, 0)]
        c = naive_centroid(ring)
        assert c.latitude == pytest.approx(0.8)

    def test_empty_ring_raises(self):
        with pytest.raises(ValueError):
            naive_centroid([])


class TestAntimeridianAndPoles:
    @pytest.mark.parametrize(
        "start,end,expected",
        [(179.9995, -179.9995, 0.001), (-179.9995, 179.9995, -0.001), (10.0, 20.0, 10.0), (-180.0, 180.0, 0.0)],
    )
    def test_longitude_delta_takes_short_way(self, start, end, expected):
        assert longitude_delta(start, end) == pytest.approx(expected, abs=1e-9)

    def test_project_across_antimeridian(self):
        west = GeoPoint(179.9995, -16.8)
        east = GeoPoint(-179.9995, -16.8)
        _, lon_m = meters_per_degree(-16.8)
        assert project(west, east).x == pytest.approx(0.001 * lon_m, rel=1e-6)
        assert project(east, west).x == pytest.approx(-0.001 * lon_m, rel=1e-6)

    def test_unproject_wraps_longitude(self):
        p = unproject(TAVEUNI, LocalPoint(200.0, 0.0))
        assert -180.0 <= p.longitude < -179.99
        back = project(TAVEUNI, p)
        assert back.x == pytest.approx(200.0, abs=1e-6)
        assert back.y == 0.0

    def test_ring_across_antimeridian(self):
        building = square_building(TAVEUNI, 100.0, 0.0, half_size=15.0)
        xs = [p.x for p in project_ring(TAVEUNI, building.outer_ring)]
        assert min(xs) == pytest.approx(85.0, abs=1e-6)
        assert max(xs) == pytest.approx(115.0, abs=1e-6)

    def test_centroid_across_antimeridian(self):
        ring = [GeoPoint(179.9999, 0), GeoPoint(-179.9999, 0), GeoPoint(-179.9999, 0.0001), GeoPoint(179.9999, 0.0001)]
        c = naive_centroid(ring)
        assert abs(c.longitude) == pytest.approx(180.0, abs=1e-9)
        assert c.latitude == pytest.approx(0.00005)

    def test_unproject_clamps_latitude_at_pole(self):
        assert unproject(GeoPoint(10.0, 89.9999), LocalPoint(0.0, 500.0)).latitude == 90.0
        assert unproject(GeoPoint(10.0, -89.9999), LocalPoint(0.0, -500.0)).latitude == -90.0

    def test_unproject_at_pole_stays_in_range(self):
        p = unproject(GeoPoint(10.0, 90.0), LocalPoint(100.0, -100.0))
        assert -180.0 <= p.longitude <= 180.0
        assert p.latitude < 90.0
