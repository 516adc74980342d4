"""Group faces into contiguous patches that share the same normal."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np

from .analyzer import AnalysisOptions, resolve_options
from .core import GeometryConfigError
from .geometry import SoupGeometry
from .mesh_utils import face_area_metrics
from .vertex_index import VertexIdentityIndex, build_vertex_index

__all__ = [
    "FaceGraph",
    "Surface",
    "coplanar_neighbors",
    "sorted_surfaces_by_area",
    "surfaces",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class Surface:
    """Faces forming one coplanar patch."""

    face_indices: List[int]
    normal: np.ndarray
    area: Optional[float] = None

    @property
    def face_count(self) -> int:
        return len(self.face_indices)


class FaceGraph:
    """How faces touch each other, for an arbitrary notion of touching."""

    def __init__(self, face_count: int, neighbors_of: Callable[[int], Iterable[int]]) -> None:
        self._neighbors: List[List[int]] = []
        for face_index in range(face_count):
            neighbors = dict.fromkeys(neighbors_of(face_index))
            neighbors.pop(face_index, None)
            self._neighbors.append(list(neighbors))

    def __len__(self) -> int:
        return len(self._neighbors)

    def neighbors(self, face_index: int) -> List[int]:
        return list(self._neighbors[face_index])

    def flood_fill(self) -> List[List[int]]:
        """Breadth-first groups of connected faces, each face visited once."""

        visited = np.zeros(len(self._neighbors), dtype=bool)
        groups: List[List[int]] = []

        for start in range(len(self._neighbors)):
            if visited[start]:
                continue

            group = [start]
            visited[start] = True
            queue = deque([start])
            while queue:
                current = queue.popleft()
                for neighbour in self._neighbors[current]:
                    if not visited[neighbour]:
                        visited[neighbour] = True
                        group.append(neighbour)
                        queue.append(neighbour)
            groups.append(group)

        return groups


def coplanar_neighbors(
    index: VertexIdentityIndex,
    normals: np.ndarray,
    precision: int,
) -> Callable[[int], List[int]]:
    """Neighbor function: faces sharing a vertex whose normal matches ours.

    A face's normal is taken from its first vertex. Normals match when the sum
    of their componentwise differences, scaled by ``10 ** precision`` and
    rounded, is zero.
    """

    vertex_normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    scale = 10.0 ** int(precision)

    def _neighbors_of(face_index: int) -> List[int]:
        current = vertex_normals[3 * face_index]
        found: Dict[int, None] = {}
        for corner in range(3):
            group = index.group_of(3 * face_index + corner)
            diff = np.abs(np.floor((current - vertex_normals[group]) * scale + 0.5)).sum(axis=1)
            for slot, matches in zip(group, diff < 1):
                if matches:
                    found[slot // 3] = None
        return list(found)

    return _neighbors_of


def _check_surface_input(geometry: SoupGeometry) -> np.ndarray:
    if geometry.is_indexed:
        raise GeometryConfigError(
            "Can not handle indexed faces; provide a flat, unindexed triangle list"
        )
    if geometry.normals is None:
        raise GeometryConfigError("Geometry is missing normals; can not calculate surfaces")
    return geometry.normals


def _unit(vector: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(vector))
    return vector / (length or 1.0)


def surfaces(
    geometry: SoupGeometry,
    precision: Optional[int] = None,
    *,
    options: Optional[AnalysisOptions] = None,
) -> List[Surface]:
    """Groups of contiguous faces that share the same normal.

    Surfaces come out in discovery order. ``area`` is filled in only when
    ``options.compute_area`` is set.
    """

    normals = _check_surface_input(geometry)
    opts = resolve_options(precision, options)

    index = build_vertex_index(geometry.positions, opts.precision, snap=opts.snap_vertices)
    graph = FaceGraph(geometry.face_count, coplanar_neighbors(index, normals, opts.precision))
    vertex_normals = normals.reshape(-1, 3)

    result = [
        Surface(face_indices=group, normal=_unit(vertex_normals[3 * group[0]].copy()))
        for group in graph.flood_fill()
    ]

    if opts.compute_area:
        _assign_areas(geometry, result)

    _LOGGER.debug("Found %d surfaces across %d faces", len(result), geometry.face_count)
    return result


def _assign_areas(geometry: SoupGeometry, found: Sequence[Surface]) -> None:
    face_areas = face_area_metrics(geometry.positions)
    for surface in found:
        surface.area = float(face_areas[surface.face_indices].sum())


def sorted_surfaces_by_area(
    geometry: SoupGeometry,
    precision: Optional[int] = None,
    *,
    options: Optional[AnalysisOptions] = None,
) -> List[Surface]:
    """Surfaces ordered by descending area; equal areas keep discovery order.

    The area is ``|(c - b) x (a - b)|`` summed over faces, which is twice the
    geometric area. It is only meant for ranking.
    """

    found = surfaces(geometry, precision, options=options)
    if options is None or not options.compute_area:
        _assign_areas(geometry, found)
    return sorted(found, key=lambda surface: -surface.area)
