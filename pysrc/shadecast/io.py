"""
Persistence and interchange formats.

- Shadow raster JSON record (the portable format; exact round trip)
- Shadow raster GeoTIFF export (rasterio, EPSG:4326, north-up)
- Shadow polygons to GeoJSON and building footprints from GeoJSON
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import numpy as np
import pyproj
import rasterio
from affine import Affine
from shapely.geometry import Polygon, mapping, shape

from .errors import InvalidRecord
from .heights import parse_height_meters
from .models import BuildingFootprint, GeoPoint, RasterMeta, ShadowRaster, close_ring
from .projection import meters_per_degree
from .raster import query_raster
from .solar import to_utc

logger = logging.getLogger(__name__)


def check_path(path_str: str | Path, make_dir: bool = False) -> Path:
    """Absolute path whose parent directory exists (created when ``make_dir``)."""
    path = Path(path_str).absolute()
    if not path.parent.exists():
        if make_dir:
            path.parent.mkdir(parents=True, exist_ok=True)
        else:
            raise OSError(f"Parent directory {path.parent} does not exist for path {path}. Set make_dir=True to create it.")
    return path


# =============================================================================
# Raster JSON record
# =============================================================================


def _point_record(p: GeoPoint) -> dict[str, float]:
    return {"lng": p.longitude, "lat": p.latitude}


def _parse_point(value: Any, field: str) -> GeoPoint:
    if not isinstance(value, dict) or "lng" not in value or "lat" not in value:
        raise InvalidRecord(field, "expected an object with 'lng' and 'lat'")
    try:
        return GeoPoint(longitude=float(value["lng"]), latitude=float(value["lat"]))
    except (TypeError, ValueError) as e:
        raise InvalidRecord(field, str(e)) from e


def _parse_number(container: dict, keys: tuple[str, ...], field: str) -> float:
    for key in keys:
        if key in container:
            value = container[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidRecord(field, f"expected a finite number, got {value!r}")
            return float(value)
    raise InvalidRecord(field, "missing")


def _parse_instant(value: Any) -> datetime:
    if not isinstance(value, str):
        raise InvalidRecord("meta.instant", "expected an ISO 8601 string")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return to_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise InvalidRecord("meta.instant", str(e)) from e


def raster_to_record(raster: ShadowRaster) -> dict[str, Any]:
    """
    The portable record of a raster.

    Shape::

        {
          "meta": {"center": {"lng", "lat"}, "radiusMeters", "cellMeters", "instant"},
          "origin": {"lng", "lat"},
          "columns": int, "rows": int,
          "grid": [[0 | 1, ...], ...]   # row-major, row 0 = south
        }
    """
    meta = raster.meta
    return {
        "meta": {
            "center": _point_record(meta.center),
            "radiusMeters": meta.radius_meters,
            "cellMeters": meta.cell_meters,
            "instant": meta.instant.isoformat(),
        },
        "origin": _point_record(raster.origin),
        "columns": raster.columns,
        "rows": raster.rows,
        "grid": raster.grid.tolist(),
    }


def raster_from_record(record: Any) -> ShadowRaster:
    """
    Rebuild a raster from its record.

    Also accepts the older field names ``meta.resolutionMeters``,
    ``meta.when``, top-level ``cols`` and ``cellMeters``.

    Raises:
        InvalidRecord: A field is missing, mistyped, or the grid does not
            match ``rows`` x ``columns`` with 0/1 values.
    """
    if not isinstance(record, dict):
        raise InvalidRecord("record", f"expected an object, got {type(record).__name__}")
    meta = record.get("meta")
    if not isinstance(meta, dict):
        raise InvalidRecord("meta", "missing or not an object")

    center = _parse_point(meta.get("center"), "meta.center")
    radius = _parse_number(meta, ("radiusMeters",), "meta.radiusMeters")
    cell_source = meta if ("cellMeters" in meta or "resolutionMeters" in meta) else record
    cell = _parse_number(cell_source, ("cellMeters", "resolutionMeters"), "meta.cellMeters")
    instant = _parse_instant(meta.get("instant", meta.get("when")))
    origin = _parse_point(record.get("origin"), "origin")

    columns = record.get("columns", record.get("cols"))
    rows = record.get("rows")
    for name, value in (("columns", columns), ("rows", rows)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidRecord(name, f"expected a non-negative integer, got {value!r}")

    grid = record.get("grid")
    if not isinstance(grid, list) or len(grid) != rows:
        raise InvalidRecord("grid", f"expected {rows} rows")
    for r, row in enumerate(grid):
        if not isinstance(row, list) or len(row) != columns:
            raise InvalidRecord(f"grid[{r}]", f"expected {columns} values")
        if any(v not in (0, 1) or isinstance(v, bool) for v in row):
            raise InvalidRecord(f"grid[{r}]", "values must be 0 or 1")

    return ShadowRaster(
        meta=RasterMeta(center=center, radius_meters=radius, cell_meters=cell, instant=instant),
        origin=origin,
        columns=columns,
        rows=rows,
        grid=np.array(grid, dtype=np.uint8).reshape(rows, columns),
    )


def raster_filename(meta: RasterMeta) -> str:
    """Cache file name ``shadow_<lat>_<lng>_<month>-<day>_<hour>-<minute>.json``."""
    when = meta.instant
    return (
        f"shadow_{meta.center.latitude:.5f}_{meta.center.longitude:.5f}_"
        f"{when.month}-{when.day}_{when.hour}-{when.minute}.json"
    )


def save_raster_json(raster: ShadowRaster, path: str | Path) -> Path:
    """
    Write a raster record to ``path``. A directory gets the default file name.

    Returns:
        Path of the written file.
    """
    path = Path(path)
    if path.is_dir():
        path = path / raster_filename(raster.meta)
    out_path = check_path(path, make_dir=True)
    with open(out_path, "w") as f:
        json.dump(raster_to_record(raster), f)
    logger.debug(f"Saved shadow raster: {out_path}")
    return out_path


def load_raster_json(path: str | Path) -> ShadowRaster:
    """
    Read a raster record written by :func:`save_raster_json`.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        InvalidRecord: The file is not a valid raster record.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Shadow raster file {path} does not exist.")
    with open(path) as f:
        try:
            record = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidRecord("record", f"not valid JSON: {e}") from e
    return raster_from_record(record)


def is_location_sunny_from_file(path: str | Path, point: GeoPoint) -> bool:
    """Load a stored raster and look ``point`` up in it."""
    return query_raster(load_raster_json(path), point)


# =============================================================================
# GeoTIFF export
# =============================================================================


def raster_transform(raster: ShadowRaster) -> Affine:
    """North-up affine transform (degrees) of the raster grid."""
    lat_meters, lon_meters = meters_per_degree(raster.meta.center.latitude)
    cell = raster.meta.cell_meters
    north = raster.origin.latitude + raster.rows * cell / lat_meters
    return Affine.translation(raster.origin.longitude, north) * Affine.scale(cell / lon_meters, -cell / lat_meters)


def save_raster_geotiff(raster: ShadowRaster, path: str | Path) -> Path:
    """
    Write the grid as a single-band uint8 GeoTIFF in EPSG:4326.

    Rows are flipped so the first stored row is the northernmost.
    """
    out_path = check_path(path, make_dir=True)
    crs = pyproj.CRS.from_epsg(4326)
    with rasterio.open(
        out_path,
        "w",
        driver="GTiff",
        height=raster.rows,
        width=raster.columns,
        count=1,
        dtype="uint8",
        crs=crs.to_wkt(),
        transform=raster_transform(raster),
    ) as dst:
        dst.write(np.flipud(raster.grid), 1)
        dst.update_tags(instant=raster.meta.instant.isoformat(), cell_meters=str(raster.meta.cell_meters))
    logger.debug(f"Saved shadow GeoTIFF: {out_path}")
    return out_path


def load_geotiff(path: str | Path) -> tuple[np.ndarray, Affine, str | None]:
    """
    Read band 1 of a GeoTIFF.

    Returns:
        Tuple of (array, transform, crs_wkt).
    """
    path = check_path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file {path} does not exist.")
    with rasterio.open(path) as dataset:
        crs_wkt = dataset.crs.to_wkt() if dataset.crs is not None else None
        return dataset.read(1), dataset.transform, crs_wkt


# =============================================================================
# GeoJSON
# =============================================================================


def shadows_to_geojson(shadows: Iterable[tuple[int | str, Polygon]]) -> dict[str, Any]:
    """FeatureCollection of ``(building_id, polygon)`` pairs from :func:`project_shadows`."""
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"building_id": building_id}, "geometry": mapping(polygon)}
            for building_id, polygon in shadows
        ],
    }


def save_shadows_geojson(shadows: Iterable[tuple[int | str, Polygon]], path: str | Path) -> Path:
    out_path = check_path(path, make_dir=True)
    with open(out_path, "w") as f:
        json.dump(shadows_to_geojson(shadows), f)
    return out_path


def buildings_from_geojson(collection: Any) -> list[BuildingFootprint]:
    """
    Parse Polygon features into footprints.

    The outer ring is closed if needed; the feature ``id`` (or
    ``properties.id``) is the building id; height comes from
    ``height`` / ``building:height`` / ``building:levels`` properties.

    Raises:
        InvalidRecord: Not a FeatureCollection, a feature without id, or a
            non-Polygon geometry.
    """
    if not isinstance(collection, dict) or collection.get("type") != "FeatureCollection":
        raise InvalidRecord("type", "expected a GeoJSON FeatureCollection")
    features = collection.get("features")
    if not isinstance(features, list):
        raise InvalidRecord("features", "expected a list")

    buildings = []
    for i, feature in enumerate(features):
        if not isinstance(feature, dict):
            raise InvalidRecord(f"features[{i}]", "expected an object")
        properties = feature.get("properties") or {}
        building_id = feature.get("id", properties.get("id"))
        if building_id is None:
            raise InvalidRecord(f"features[{i}].id", "missing")
        try:
            geometry = shape(feature.get("geometry"))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise InvalidRecord(f"features[{i}].geometry", str(e)) from e
        if geometry.geom_type != "Polygon":
            raise InvalidRecord(f"features[{i}].geometry", f"expected Polygon, got {geometry.geom_type}")
        try:
            ring = close_ring([GeoPoint(longitude=x, latitude=y) for x, y, *_ in geometry.exterior.coords])
        except ValueError as e:
            raise InvalidRecord(f"features[{i}].geometry", str(e)) from e
        buildings.append(
            BuildingFootprint(id=building_id, outer_ring=ring, height_meters=parse_height_meters(properties))
        )
    return buildings


def load_buildings_geojson(path: str | Path) -> list[BuildingFootprint]:
    """Read a GeoJSON FeatureCollection file of building footprints."""
    path = Path(path)
    with open(path) as f:
        collection = json.load(f)
    buildings = buildings_from_geojson(collection)
    logger.info(f"Loaded {len(buildings)} buildings from {path}")
    return buildings
