"""Parameter checks shared by the public entry points."""

from __future__ import annotations

import math

from .errors import DegenerateInput


def require_positive(parameter: str, value: float) -> float:
    """
    Return ``value`` as a float, failing fast if it is not a finite number > 0.

    Raises:
        DegenerateInput: ``value`` is zero, negative, NaN, infinite or not a number.
    """
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise DegenerateInput(parameter, value) from e
    if not math.isfinite(number) or number <= 0:
        raise DegenerateInput(parameter, value)
    return number
