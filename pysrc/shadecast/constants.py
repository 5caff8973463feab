"""
Constants and default parameters for shadecast.

Consolidates the projection constants, numeric guards and default policy
values used across the package.
"""

# =============================================================================
# Local Plane Projection
# =============================================================================

# Meters per degree of latitude (equirectangular approximation, constant)
METERS_PER_DEGREE_LATITUDE = 111132.0

# Meters per degree of longitude at the equator; scaled by cos(latitude)
METERS_PER_DEGREE_LONGITUDE_EQUATOR = 111320.0


# =============================================================================
# Numeric Guards
# =============================================================================

# Ray/edge pairs whose cross product magnitude falls below this are treated
# as parallel (no intersection)
PARALLEL_EPSILON = 1e-12

# Sun tangents below this cast no shadow polygon (shadow length unbounded)
MIN_SUN_TANGENT = 1e-9


# =============================================================================
# Default Query Parameters
# =============================================================================

# Ray length for single point queries (meters)
DEFAULT_MAX_RAY_METERS = 500.0

# Ray length floor for batch raster builds (meters); the builder uses
# max(DEFAULT_RASTER_RAY_METERS, diameter)
DEFAULT_RASTER_RAY_METERS = 1000.0

# Raster cell size (meters)
DEFAULT_CELL_METERS = 20.0

# Grid values
SUNLIT = 0
SHADED = 1


# =============================================================================
# Building Height Estimation
# =============================================================================

# Height per storey when only building:levels is tagged (meters)
METERS_PER_LEVEL = 3.0

# Height when nothing is tagged (meters)
FALLBACK_BUILDING_HEIGHT = 10.0


__all__ = [
    "METERS_PER_DEGREE_LATITUDE",
    "METERS_PER_DEGREE_LONGITUDE_EQUATOR",
    "PARALLEL_EPSILON",
    "MIN_SUN_TANGENT",
    "DEFAULT_MAX_RAY_METERS",
    "DEFAULT_RASTER_RAY_METERS",
    "DEFAULT_CELL_METERS",
    "SUNLIT",
    "SHADED",
    "METERS_PER_LEVEL",
    "FALLBACK_BUILDING_HEIGHT",
]
