"""Backend interface for batch shade classification."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models import BuildingFootprint, GeoPoint, ShadeResult, SolarPosition
from ..shading import OccluderPolicy


class ShadowBackend(ABC):
    """
    Evaluates the shade test for many points at once.

    Implementations must return, for every point, the same ``ShadeResult``
    as :func:`shadecast.shading.shade_with_sun` would for that point and sun.
    Inputs are read-only; implementations hold no per-call state so one
    instance can serve several threads.
    """

    name: str = ""

    @abstractmethod
    def classify(
        self,
        points: Sequence[GeoPoint],
        suns: Sequence[SolarPosition],
        buildings: Sequence[BuildingFootprint],
        max_ray_meters: float,
        policy: OccluderPolicy,
    ) -> list[ShadeResult]:
        """
        Shade results for ``points[i]`` under ``suns[i]``.

        Args:
            points: Query locations.
            suns: Sun position at each query location.
            buildings: Validated footprints.
            max_ray_meters: Ray length, > 0.
            policy: Occluder tie-break.
        """
