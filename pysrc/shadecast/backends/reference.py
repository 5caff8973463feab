"""Scalar CPU backend: one reference shade test per point."""

from __future__ import annotations

from collections.abc import Sequence

from ..models import BuildingFootprint, GeoPoint, ShadeResult, SolarPosition
from ..shading import OccluderPolicy, shade_with_sun
from .base import ShadowBackend


class ReferenceBackend(ShadowBackend):
    """Loops over points calling :func:`shade_with_sun`; the correctness baseline."""

    name = "reference"

    def classify(
        self,
        points: Sequence[GeoPoint],
        suns: Sequence[SolarPosition],
        buildings: Sequence[BuildingFootprint],
        max_ray_meters: float,
        policy: OccluderPolicy,
    ) -> list[ShadeResult]:
        if len(points) != len(suns):
            raise ValueError(f"Got {len(points)} points but {len(suns)} sun positions")
        return [shade_with_sun(p, buildings, sun, max_ray_meters, policy) for p, sun in zip(points, suns)]
