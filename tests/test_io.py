"""
Tests for raster persistence, GeoTIFF export and GeoJSON interchange.
"""

import json
from datetime import datetime, timezone

import numpy as np
import pytest
from rasterio.crs import CRS
from shadecast import io
from shadecast.errors import InvalidRecord
from shadecast.footprints import project_shadows
from shadecast.models import GeoPoint, RasterMeta
from shadecast.raster import build_shadow_raster

from conftest import SF, SF_MIDNIGHT, SF_WINTER_NOON, offset, square_building


@pytest.fixture
def raster(tower_north):
    return build_shadow_raster(SF, 200.0, SF_WINTER_NOON, 20.0, [tower_north], max_ray_meters=300.0)


@pytest.fixture
def night_raster(tower_north):
    return build_shadow_raster(SF, 100.0, SF_MIDNIGHT, 10.0, [tower_north])


# =============================================================================
# Raster JSON record
# =============================================================================


class TestRasterRecord:
    def test_record_layout(self, raster):
        record = io.raster_to_record(raster)
        assert set(record) == {"meta", "origin", "columns", "rows", "grid"}
        assert record["meta"]["center"] == {"lng": SF.longitude, "lat": SF.latitude}
        assert record["meta"]["radiusMeters"] == 100.0
        assert record["meta"]["cellMeters"] == 20.0
        assert record["meta"]["instant"] == "2024-12-21T20:08:00+00:00"
        assert len(record["grid"]) == record["rows"] == 10
        assert all(len(row) == 10 for row in record["grid"])

    def test_round_trip_through_file(self, raster, tmp_path):
        path = io.save_raster_json(raster, tmp_path / "shadow.json")
        assert io.load_raster_json(path) == raster

    def test_save_to_directory_uses_cache_name(self, raster, tmp_path):
        path = io.save_raster_json(raster, tmp_path)
        assert path.name == io.raster_filename(raster.meta)
        assert path.exists()

    def test_record_is_plain_json(self, raster):
        text = json.dumps(io.raster_to_record(raster))
        assert io.raster_from_record(json.loads(text)) == raster

    def test_filename(self):
        meta = RasterMeta(center=SF, radius_meters=100.0, cell_meters=20.0, instant=SF_WINTER_NOON)
        assert io.raster_filename(meta) == "shadow_37.77490_-122.41940_12-21_20-8.json"

    def test_legacy_record(self):
        record = {
            "meta": {
                "center": {"lng": SF.longitude, "lat": SF.latitude},
                "radiusMeters": 10.0,
                "resolutionMeters": 10.0,
                "when": "2024-12-21T20:08:00Z",
            },
            "origin": {"lng": -122.42, "lat": 37.7748},
            "cols": 2,
            "rows": 2,
            "grid": [[0, 1], [1, 0]],
        }
        raster = io.raster_from_record(record)
        assert raster.columns == 2
        assert raster.meta.cell_meters == 10.0
        assert raster.meta.instant == datetime(2024, 12, 21, 20, 8, tzinfo=timezone.utc)
        assert raster.grid.tolist() == [[0, 1], [1, 0]]

    def test_legacy_top_level_cell_size(self):
        record = {
            "meta": {"center": {"lng": 0.0, "lat": 0.0}, "radiusMeters": 5.0, "instant": "2024-01-01T00:00:00"},
            "origin": {"lng": 0.0, "lat": 0.0},
            "cellMeters": 5.0,
            "columns": 1,
            "rows": 1,
            "grid": [[1]],
        }
        raster = io.raster_from_record(record)
        assert raster.meta.cell_meters == 5.0
        assert raster.meta.instant.tzinfo is not None


class TestMalformedRecords:
    @pytest.fixture
    def record(self, night_raster):
        return io.raster_to_record(night_raster)

    def test_not_an_object(self):
        with pytest.raises(InvalidRecord):
            io.raster_from_record([1, 2, 3])

    def test_missing_meta(self, record):
        del record["meta"]
        with pytest.raises(InvalidRecord) as exc_info:
            io.raster_from_record(record)
        assert exc_info.value.field == "meta"

    def test_bad_cell_value(self, record):
        record["grid"][0][0] = 2
        with pytest.raises(InvalidRecord):
            io.raster_from_record(record)

    def test_ragged_grid(self, record):
        record["grid"][3] = record["grid"][3][:-1]
        with pytest.raises(InvalidRecord) as exc_info:
            io.raster_from_record(record)
        assert exc_info.value.field == "grid[3]"

    def test_wrong_row_count(self, record):
        record["rows"] = record["rows"] + 1
        with pytest.raises(InvalidRecord):
            io.raster_from_record(record)

    def test_bad_instant(self, record):
        record["meta"]["instant"] = "yesterday"
        with pytest.raises(InvalidRecord) as exc_info:
            io.raster_from_record(record)
        assert exc_info.value.field == "meta.instant"

    def test_non_numeric_radius(self, record):
        record["meta"]["radiusMeters"] = "100"
        with pytest.raises(InvalidRecord):
            io.raster_from_record(record)

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(InvalidRecord):
            io.load_raster_json(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            io.load_raster_json(tmp_path / "missing.json")


class TestSunnyFromFile:
    def test_lookup(self, night_raster, tmp_path):
        path = io.save_raster_json(night_raster, tmp_path / "night.json")
        assert not io.is_location_sunny_from_file(path, SF)
        assert io.is_location_sunny_from_file(path, offset(SF, 0.0, 1000.0))


# =============================================================================
# GeoTIFF
# =============================================================================


class TestGeoTiff:
    def test_export(self, raster, tmp_path):
        path = io.save_raster_geotiff(raster, tmp_path / "out" / "shadow.tif")
        data, transform, crs_wkt = io.load_geotiff(path)

        assert data.shape == (raster.rows, raster.columns)
        assert np.array_equal(data, np.flipud(raster.grid))
        assert CRS.from_wkt(crs_wkt).to_epsg() == 4326

        assert transform.c == pytest.approx(raster.origin.longitude)
        north = offset(SF, 0.0, 100.0).latitude
        assert transform.f == pytest.approx(north, abs=1e-9)
        assert transform.e < 0 < transform.a

    def test_transform_pixel_size(self, raster):
        transform = io.raster_transform(raster)
        east_edge = offset(SF, 100.0, 0.0).longitude
        assert transform.c + raster.columns * transform.a == pytest.approx(east_edge, abs=1e-9)

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            io.load_geotiff(tmp_path / "missing.tif")


# =============================================================================
# GeoJSON
# =============================================================================


class TestGeoJson:
    def test_shadows_feature_collection(self, tower_north, tmp_path):
        shadows = project_shadows([tower_north], SF_WINTER_NOON)
        collection = io.shadows_to_geojson(shadows)
        assert collection["type"] == "FeatureCollection"
        assert len(collection["features"]) == 1
        feature = collection["features"][0]
        assert feature["properties"]["building_id"] == "tower"
        assert feature["geometry"]["type"] == "Polygon"

        path = io.save_shadows_geojson(shadows, tmp_path / "shadows.geojson")
        assert json.loads(path.read_text())["features"][0]["properties"]["building_id"] == "tower"

    def test_buildings_from_geojson(self):
        collection = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "id": 101,
                    "properties": {"height": "12.5 m"},
                    "geometry": {
                        "type": "Polygon",
                        "coordinates": [[[0.0, 0.0], [0.001, 0.0], [0.001, 0.001], [0.0, 0.001], [0.0, 0.0]]],
                    },
                },
                {
                    "type": "Feature",
                    "properties": {"id": "b2", "building:levels": "4"},
                    "geometry": {
                        "type": "Polygon",
                        "coordinates": [[[1.0, 1.0], [1.001, 1.0], [1.001, 1.001], [1.0, 1.0]]],
                    },
                },
            ],
        }
        buildings = io.buildings_from_geojson(collection)
        assert [b.id for b in buildings] == [101, "b2"]
        assert buildings[0].height_meters == 12.5
        assert buildings[1].height_meters == 12.0
        assert buildings[0].outer_ring[0] == GeoPoint(0.0, 0.0)
        for b in buildings:
            b.validate()

    def test_round_trip_building_file(self, tmp_path):
        tower = square_building(SF, 0.0, 40.0, building_id="t")
        collection = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "id": "t",
                    "properties": {"height": 50},
                    "geometry": {"type": "Polygon", "coordinates": [[list(p.to_lnglat()) for p in tower.outer_ring]]},
                }
            ],
        }
        path = tmp_path / "buildings.geojson"
        path.write_text(json.dumps(collection))
        (loaded,) = io.load_buildings_geojson(path)
        assert loaded == tower

    def test_rejects_non_polygon(self):
        collection = {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "id": 1, "properties": {}, "geometry": {"type": "Point", "coordinates": [0, 0]}}],
        }
        with pytest.raises(InvalidRecord):
            io.buildings_from_geojson(collection)

    def test_rejects_missing_id(self):
        collection = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {},
                    "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]},
                }
            ],
        }
        with pytest.raises(InvalidRecord):
            io.buildings_from_geojson(collection)

    def test_rejects_non_collection(self):
        with pytest.raises(InvalidRecord):
            io.buildings_from_geojson({"type": "Feature"})
