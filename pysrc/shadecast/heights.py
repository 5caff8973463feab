"""Building height estimation from OpenStreetMap-style tags."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

from .constants import FALLBACK_BUILDING_HEIGHT, METERS_PER_LEVEL

_HEIGHT_PATTERN = re.compile(r"([0-9]+\.?[0-9]*)\s*(m|meter|meters)?", re.IGNORECASE)


def parse_height_meters(tags: Mapping[str, object]) -> float:
    """
    Estimate a building height from its tags.

    Priority:
    1. ``height`` or ``building:height``: first number, optional m/meter(s) unit
    2. ``building:levels`` x 3 m
    3. 10 m fallback

    Examples:
        >>> parse_height_meters({"height": "12.5 m"})
        12.5
        >>> parse_height_meters({"building:levels": "4"})
        12.0
        >>> parse_height_meters({})
        10.0
    """
    raw = tags.get("height") or tags.get("building:height")
    if raw:
        match = _HEIGHT_PATTERN.search(str(raw))
        if match:
            return float(match.group(1))

    levels = tags.get("building:levels")
    if levels is not None:
        try:
            height = float(levels) * METERS_PER_LEVEL
        except (TypeError, ValueError):
            height = None
        if height is not None and math.isfinite(height):
            return height

    return FALLBACK_BUILDING_HEIGHT
