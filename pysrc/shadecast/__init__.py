"""shadecast - building shadows from solar position and footprints.

Decides whether a point on the ground lies in a building shadow at a
given instant, builds shadow rasters over a disk for fast repeated
lookups, and projects vector shadow footprints for rendering.

Quick start::

    import shadecast
    from datetime import datetime, timezone

    buildings = shadecast.OverpassBuildingProvider().fetch_buildings(center, 300)
    when = datetime(2024, 6, 21, 18, 0, tzinfo=timezone.utc)

    result = shadecast.is_shaded(center, buildings, when)
    print(result.shaded, result.cast_by_building_id)

    raster = shadecast.build_shadow_raster(center, 400, when, 10.0, buildings, backend="vectorized")
    shadecast.query_raster(raster, other_point)  # True = sunny

I/O helpers::

    shadecast.io.save_raster_json(raster, "cache/")
    shadecast.io.save_raster_geotiff(raster, "shadow.tif")
"""

import logging
from importlib.metadata import PackageNotFoundError, version

logger = logging.getLogger(__name__)

try:
    __version__ = version("shadecast")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for source checkouts without metadata

from . import io, progress  # noqa: E402
from .backends import available_backends, get_backend  # noqa: E402
from .config import ShadowConfig, load_settings  # noqa: E402
from .errors import (  # noqa: E402
    BuildingDataError,
    ConfigurationError,
    DegenerateInput,
    InvalidGeometry,
    InvalidRecord,
    ShadecastError,
)
from .footprints import project_shadow, project_shadows  # noqa: E402
from .heights import parse_height_meters  # noqa: E402
from .models import (  # noqa: E402
    BuildingFootprint,
    GeoPoint,
    LocalPoint,
    RasterMeta,
    ShadeResult,
    ShadowRaster,
    SolarPosition,
)
from .projection import project, unproject  # noqa: E402
from .providers import OverpassBuildingProvider, RateLimiter  # noqa: E402
from .raster import build_shadow_raster, query_raster, shaded_points  # noqa: E402
from .shading import OccluderPolicy, is_shaded  # noqa: E402
from .solar import compute_sun  # noqa: E402

__all__ = [
    "__version__",
    # Data models
    "GeoPoint",
    "LocalPoint",
    "BuildingFootprint",
    "SolarPosition",
    "ShadeResult",
    "RasterMeta",
    "ShadowRaster",
    # Core operations
    "compute_sun",
    "project",
    "unproject",
    "is_shaded",
    "OccluderPolicy",
    "project_shadow",
    "project_shadows",
    "build_shadow_raster",
    "query_raster",
    "shaded_points",
    # Configuration and backends
    "ShadowConfig",
    "load_settings",
    "available_backends",
    "get_backend",
    # Building data
    "OverpassBuildingProvider",
    "RateLimiter",
    "parse_height_meters",
    # Modules
    "io",
    "progress",
    # Errors
    "ShadecastError",
    "InvalidGeometry",
    "DegenerateInput",
    "InvalidRecord",
    "ConfigurationError",
    "BuildingDataError",
]
