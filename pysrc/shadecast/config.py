"""Configuration: bundled JSON settings and the typed ShadowConfig."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from .backends import available_backends
from .constants import DEFAULT_CELL_METERS, DEFAULT_MAX_RAY_METERS, DEFAULT_RASTER_RAY_METERS
from .errors import ConfigurationError
from .shading import OccluderPolicy
from .utils import dict_to_namespace

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "data" / "default_settings.json"


def load_settings(settings_json_path: str | Path | None = None) -> SimpleNamespace:
    """
    Load settings from a JSON file.

    Args:
        settings_json_path: Path to a settings file. If None (default), loads
            the bundled default_settings.json.

    Returns:
        SimpleNamespace with nested sections (Query, Raster, Execution, Overpass).

    Examples:
        >>> settings = load_settings()
        >>> settings.Raster.cell_meters  # 20.0
        >>> settings.Overpass.min_interval_s  # 1.0
    """
    settings_path = DEFAULT_SETTINGS_PATH if settings_json_path is None else Path(settings_json_path)

    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with open(settings_path) as f:
        settings_dict = json.load(f)

    return dict_to_namespace(settings_dict)


@dataclass
class ShadowConfig:
    """
    Settings for shade queries, raster builds and building fetches.

    Pure configuration - no data.

    Attributes:
        max_ray_meters: Ray length for point queries. Default 500.
        policy: Occluder tie-break, "nearest" or "first_match". Default "nearest".
        raster_cell_meters: Default raster cell size. Default 20.
        raster_ray_meters: Ray length floor for raster builds; the builder uses
            max(raster_ray_meters, diameter). Default 1000.
        backend: Execution backend name ("reference" or "vectorized").
        workers: Thread count for raster builds. None picks one from the CPU count.
        chunk_size: Points per backend call. Bounds the vectorized backend's
            working arrays (points x building edges).
        show_progress: Show a progress bar during raster builds.
        overpass_url: Overpass API endpoint.
        overpass_min_interval_s: Minimum spacing between Overpass requests.
        overpass_timeout_s: HTTP timeout for Overpass requests.
        building_search_margin_m: Extra radius added when fetching buildings
            around a raster so edge cells see buildings just outside the disk.

    Examples:
        >>> config = ShadowConfig.defaults()
        >>> config = ShadowConfig(backend="vectorized", workers=4)
        >>> config.save("shadecast.json")
    """

    max_ray_meters: float = DEFAULT_MAX_RAY_METERS
    policy: str = OccluderPolicy.NEAREST.value
    raster_cell_meters: float = DEFAULT_CELL_METERS
    raster_ray_meters: float = DEFAULT_RASTER_RAY_METERS
    backend: str = "reference"
    workers: int | None = None
    chunk_size: int = 64
    show_progress: bool = True
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    overpass_min_interval_s: float = 1.0
    overpass_timeout_s: float = 60.0
    building_search_margin_m: float = 50.0

    def __post_init__(self):
        for name in ("max_ray_meters", "raster_cell_meters", "raster_ray_meters", "overpass_timeout_s"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(name, f"must be a finite number > 0, got {value!r}")
        for name in ("overpass_min_interval_s", "building_search_margin_m"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
                raise ConfigurationError(name, f"must be a finite number >= 0, got {value!r}")
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError("workers", f"must be >= 1 or None, got {self.workers}")
        if self.chunk_size < 1:
            raise ConfigurationError("chunk_size", f"must be >= 1, got {self.chunk_size}")
        if self.backend not in available_backends():
            raise ConfigurationError("backend", f"expected one of {', '.join(available_backends())}, got {self.backend!r}")
        self.policy = OccluderPolicy.parse(self.policy).value

    @property
    def occluder_policy(self) -> OccluderPolicy:
        return OccluderPolicy(self.policy)

    def query_options(self) -> dict[str, Any]:
        """Keyword arguments for :func:`shadecast.shading.is_shaded`."""
        return {"max_ray_meters": self.max_ray_meters, "policy": self.occluder_policy}

    def raster_options(self, diameter_meters: float) -> dict[str, Any]:
        """
        Keyword arguments for :func:`shadecast.raster.build_shadow_raster`.

        The ray covers at least the whole disk.
        """
        return {
            "max_ray_meters": max(self.raster_ray_meters, diameter_meters),
            "policy": self.occluder_policy,
            "backend": self.backend,
            "workers": self.workers,
            "chunk_size": self.chunk_size,
            "show_progress": self.show_progress,
        }

    @classmethod
    def defaults(cls) -> ShadowConfig:
        """Configuration from the bundled default settings."""
        return cls.from_settings(load_settings())

    @classmethod
    def from_settings(cls, settings: SimpleNamespace) -> ShadowConfig:
        """
        Build from a settings namespace as returned by :func:`load_settings`.

        Missing sections or keys keep the dataclass defaults.
        """
        query = getattr(settings, "Query", SimpleNamespace())
        raster = getattr(settings, "Raster", SimpleNamespace())
        execution = getattr(settings, "Execution", SimpleNamespace())
        overpass = getattr(settings, "Overpass", SimpleNamespace())
        base = SimpleNamespace(**{f.name: f.default for f in fields(cls)})
        return cls(
            max_ray_meters=getattr(query, "max_ray_meters", base.max_ray_meters),
            policy=getattr(query, "policy", base.policy),
            raster_cell_meters=getattr(raster, "cell_meters", base.raster_cell_meters),
            raster_ray_meters=getattr(raster, "ray_meters", base.raster_ray_meters),
            backend=getattr(execution, "backend", base.backend),
            workers=getattr(execution, "workers", base.workers),
            chunk_size=getattr(execution, "chunk_size", base.chunk_size),
            show_progress=getattr(execution, "show_progress", base.show_progress),
            overpass_url=getattr(overpass, "url", base.overpass_url),
            overpass_min_interval_s=getattr(overpass, "min_interval_s", base.overpass_min_interval_s),
            overpass_timeout_s=getattr(overpass, "timeout_s", base.overpass_timeout_s),
            building_search_margin_m=getattr(overpass, "search_margin_m", base.building_search_margin_m),
        )

    def save(self, path: str | Path) -> None:
        """Save configuration to a flat JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)

        logger.info(f"Saved configuration to {path}")

    @classmethod
    def load(cls, path: str | Path) -> ShadowConfig:
        """
        Load configuration saved with :meth:`save`.

        Raises:
            ConfigurationError: The file contains unknown keys.
        """
        path = Path(path)

        with open(path) as f:
            data = json.load(f)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(unknown[0], "unknown configuration key")
        return cls(**data)
