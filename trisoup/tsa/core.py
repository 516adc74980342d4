"""Core exceptions for trisoup."""

from __future__ import annotations

__all__ = [
    "TSAError",
    "GeometryConfigError",
    "MeshLoadError",
    "TopologyInvariantError",
]


class TSAError(Exception):
    """Base exception for trisoup errors."""


class GeometryConfigError(TSAError, ValueError):
    """Raised when a geometry does not satisfy an analysis precondition."""


class MeshLoadError(TSAError):
    """Raised when a mesh cannot be loaded or saved."""


class TopologyInvariantError(TSAError, RuntimeError):
    """Raised when adjacency resolution reaches an impossible state."""
