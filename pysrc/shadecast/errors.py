"""shadecast error types for actionable error messages.

These exceptions carry structured information about what went wrong
so callers can react without parsing message strings.

Example:
    try:
        raster = shadecast.build_shadow_raster(center, 0, instant, 5.0, buildings)
    except shadecast.DegenerateInput as e:
        print(f"Bad parameter '{e.parameter}': {e.value}")
"""

from __future__ import annotations


class ShadecastError(Exception):
    """Base class for all shadecast errors."""

    pass


class InvalidGeometry(ShadecastError):
    """Raised when a building footprint cannot be used.

    Batch operations catch this, log it and skip the building rather than
    failing the whole request.

    Attributes:
        building_id: Id of the rejected building (may be None).
        reason: Why the footprint was rejected.
    """

    def __init__(self, building_id: object, reason: str):
        self.building_id = building_id
        self.reason = reason
        super().__init__(f"Invalid footprint for building {building_id!r}: {reason}")


class DegenerateInput(ShadecastError, ValueError):
    """Raised before any computation when a size parameter is unusable.

    Attributes:
        parameter: Name of the offending parameter (e.g., "cell_meters").
        value: The value that was supplied.
    """

    def __init__(self, parameter: str, value: object, reason: str = "must be a finite number > 0"):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid '{parameter}': {value!r} ({reason})")


class InvalidRecord(ShadecastError, ValueError):
    """Raised when a serialized raster or building record is malformed.

    Attributes:
        field: The missing or malformed field.
        reason: What is wrong with it.
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Malformed record field '{field}': {reason}")


class ConfigurationError(ShadecastError):
    """Raised when configuration is invalid or inconsistent.

    Attributes:
        parameter: The problematic parameter name.
        reason: Why the configuration is invalid.
    """

    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        message = f"Invalid configuration for '{parameter}': {reason}"
        super().__init__(message)


class BuildingDataError(ShadecastError):
    """Raised when the remote building data service fails.

    Attributes:
        url: Service endpoint that was queried.
        status: HTTP status code, or None for transport errors.
    """

    def __init__(self, url: str, status: int | None = None, detail: str | None = None):
        self.url = url
        self.status = status
        message = f"Building data request to {url} failed"
        if status is not None:
            message += f" (HTTP {status})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
