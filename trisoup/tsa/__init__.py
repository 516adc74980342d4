"""Core package metadata and public API for trisoup."""

from __future__ import annotations

from importlib import metadata

__all__ = [
    "__version__",
    "get_version",
    "AnalysisOptions",
    "ConnectivityResult",
    "SoupGeometry",
    "Surface",
    "analyze_connectivity",
    "isolated_geometries",
    "sorted_surfaces_by_area",
    "surfaces",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed package version."""
    try:
        return metadata.version("trisoup")
    except metadata.PackageNotFoundError:
        return __version__


from .analyzer import (  # noqa: E402
    AnalysisOptions,
    ConnectivityResult,
    analyze_connectivity,
    isolated_geometries,
)
from .geometry import SoupGeometry  # noqa: E402
from .coplanar import Surface, sorted_surfaces_by_area, surfaces  # noqa: E402
