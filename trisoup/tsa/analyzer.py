"""Split a triangle soup into its connected islands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .adjacency import AdjacencyResolver, ResolutionStats, build_candidates
from .core import GeometryConfigError
from .geometry import SoupGeometry
from .islands import IslandTracker
from .vertex_index import build_vertex_index

__all__ = [
    "AnalysisOptions",
    "DEFAULT_PRECISION",
    "ConnectivityResult",
    "analyze_connectivity",
    "isolated_geometries",
    "resolve_options",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_PRECISION = 4


@dataclass(frozen=True)
class AnalysisOptions:
    """Options shared by the island and surface analyzers.

    ``precision`` is the number of decimal places two values may differ in
    and still count as equal (4 means an epsilon of 0.0001). Vertex identity
    only honours it when ``snap_vertices`` is set; otherwise positions must
    match exactly. Normal comparisons in the surface grouper always use it.
    """

    precision: int = DEFAULT_PRECISION
    snap_vertices: bool = False
    compute_area: bool = False

    def __post_init__(self) -> None:
        precision = self.precision
        is_integer = isinstance(precision, (int, np.integer)) and not isinstance(precision, bool)
        if not is_integer or precision < 0:
            raise GeometryConfigError(
                f"precision must be a non-negative integer, got {precision!r}"
            )


def resolve_options(precision: Optional[int], options: Optional[AnalysisOptions]) -> AnalysisOptions:
    """Merge a bare ``precision`` argument with an explicit ``options`` object.

    Without ``options`` the defaults are used around ``precision`` (4 when it
    is ``None``). Passing both is allowed only when they agree.
    """

    if options is None:
        return AnalysisOptions(precision=DEFAULT_PRECISION if precision is None else precision)
    if precision is not None and precision != options.precision:
        raise GeometryConfigError(
            f"precision={precision!r} conflicts with options.precision={options.precision!r}"
        )
    return options


@dataclass(frozen=True, eq=False)
class ConnectivityResult:
    """Resolved half-edge pairing and island partition of a soup."""

    face_roots: List[Optional[int]]
    neighbors: List[Optional[int]]
    islands: List[List[int]]
    degenerate_faces: np.ndarray
    boundary_half_edges: List[int]
    stats: ResolutionStats

    @property
    def island_count(self) -> int:
        return len(self.islands)

    @property
    def degenerate_count(self) -> int:
        return int(np.count_nonzero(self.degenerate_faces))


def _require_unindexed(geometry: SoupGeometry) -> None:
    if geometry.is_indexed:
        raise GeometryConfigError(
            "Indexed geometry is not supported; provide a flat, unindexed triangle list"
        )


def analyze_connectivity(
    geometry: SoupGeometry,
    precision: Optional[int] = None,
    *,
    options: Optional[AnalysisOptions] = None,
) -> ConnectivityResult:
    """Pair up half-edges and group faces into islands."""

    _require_unindexed(geometry)
    opts = resolve_options(precision, options)

    index = build_vertex_index(geometry.positions, opts.precision, snap=opts.snap_vertices)
    adjacency = build_candidates(index)
    tracker = IslandTracker(index.degenerate_faces)
    stats = AdjacencyResolver(geometry.positions, adjacency, tracker).resolve()

    islands = tracker.islands()
    _LOGGER.debug(
        "Connectivity: %d faces, %d degenerate, %d islands",
        geometry.face_count,
        int(np.count_nonzero(index.degenerate_faces)),
        len(islands),
    )

    return ConnectivityResult(
        face_roots=tracker.roots(),
        neighbors=list(adjacency.neighbors),
        islands=islands,
        degenerate_faces=index.degenerate_faces.copy(),
        boundary_half_edges=adjacency.boundary_half_edges(index.degenerate_faces),
        stats=stats,
    )


def isolated_geometries(
    geometry: SoupGeometry,
    precision: Optional[int] = None,
    *,
    options: Optional[AnalysisOptions] = None,
) -> List[SoupGeometry]:
    """Separate a soup with unconnected islands into one soup per island.

    Degenerate faces are dropped. Positions, normals and colors of each island
    are copied face by face in input face order.
    """

    result = analyze_connectivity(geometry, precision, options=options)
    return [geometry.subset(island) for island in result.islands]
