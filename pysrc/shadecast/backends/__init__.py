"""Execution backends for batch shade classification.

``reference`` is the scalar CPU path and the correctness baseline;
``vectorized`` evaluates point chunks with numpy arrays. Both produce
identical classifications.
"""

from __future__ import annotations

from ..errors import ConfigurationError
from .base import ShadowBackend
from .reference import ReferenceBackend
from .vectorized import VectorizedBackend

_BACKENDS: dict[str, type[ShadowBackend]] = {
    ReferenceBackend.name: ReferenceBackend,
    VectorizedBackend.name: VectorizedBackend,
}


def available_backends() -> list[str]:
    """Names accepted by :func:`get_backend`."""
    return sorted(_BACKENDS)


def get_backend(name: str | ShadowBackend) -> ShadowBackend:
    """
    Resolve a backend by name (an instance is returned unchanged).

    Raises:
        ConfigurationError: Unknown backend name.
    """
    if isinstance(name, ShadowBackend):
        return name
    try:
        return _BACKENDS[name]()
    except KeyError:
        raise ConfigurationError("backend", f"expected one of {', '.join(available_backends())}, got {name!r}") from None


__all__ = [
    "ShadowBackend",
    "ReferenceBackend",
    "VectorizedBackend",
    "available_backends",
    "get_backend",
]
