"""Half-edge pairing for triangle soups.

Every half-edge collects the half-edges of other faces that run between the
same two points in the opposite direction. Most edges end up with exactly one
such candidate and pair up immediately; the rest are disambiguated by
repeatedly dropping the candidate pairing whose dihedral angle is furthest
from flat, which removes splinters and back-to-back duplicates first.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from .core import TopologyInvariantError
from .islands import IslandTracker
from .mesh_utils import compute_face_normals, dihedral_angle
from .vertex_index import VertexIdentityIndex

__all__ = [
    "AdjacencyResolver",
    "HalfEdgeAdjacency",
    "ResolutionStats",
    "build_candidates",
    "next_in_face",
    "previous_in_face",
]

_LOGGER = logging.getLogger(__name__)


def next_in_face(slot: int) -> int:
    return slot - 2 if slot % 3 == 2 else slot + 1


def previous_in_face(slot: int) -> int:
    return slot + 2 if slot % 3 == 0 else slot - 1


@dataclass
class ResolutionStats:
    """Counters collected while pairing half-edges."""

    candidate_pairs: int = 0
    forced_matches: int = 0
    conflicts_broken: int = 0
    passes: int = 0


class HalfEdgeAdjacency:
    """Candidate and resolved partners for every half-edge of a soup.

    ``candidates[h]`` maps a candidate half-edge id to its cached dihedral
    angle (``None`` until needed). ``neighbors[h]`` is the resolved partner.
    """

    def __init__(self, half_edge_count: int) -> None:
        self.candidates: List[Dict[int, Optional[float]]] = [
            {} for _ in range(half_edge_count)
        ]
        self.neighbors: List[Optional[int]] = [None] * half_edge_count

    def __len__(self) -> int:
        return len(self.neighbors)

    def candidate_count(self) -> int:
        """Number of directed candidate entries still present."""
        return sum(len(entries) for entries in self.candidates)

    def boundary_half_edges(self, degenerate_faces: np.ndarray) -> List[int]:
        """Half-edges of non-degenerate faces that never found a partner."""

        return [
            half_edge
            for half_edge, neighbor in enumerate(self.neighbors)
            if neighbor is None and not degenerate_faces[half_edge // 3]
        ]


def build_candidates(index: VertexIdentityIndex) -> HalfEdgeAdjacency:
    """Collect every opposite-winding partner candidate of every half-edge."""

    adjacency = HalfEdgeAdjacency(index.slot_count)
    class_ids = index.class_ids
    degenerate = index.degenerate_faces

    for face_index in range(index.face_count):
        if degenerate[face_index]:
            continue
        for edge_index in range(3):
            start = 3 * face_index + edge_index
            end_class = class_ids[next_in_face(start)]
            entries = adjacency.candidates[start]

            for other in index.group_of(start):
                other_face = other // 3
                if other_face == face_index or degenerate[other_face]:
                    continue
                # ``other`` is where the partner half-edge ends; it must start at our end.
                partner = previous_in_face(other)
                if class_ids[partner] != end_class:
                    continue
                entries[partner] = None

    _LOGGER.debug("Collected %d directed candidate pairs", adjacency.candidate_count())
    return adjacency


class AdjacencyResolver:
    """Reduce candidate sets to at most one partner per half-edge."""

    def __init__(
        self,
        positions: np.ndarray,
        adjacency: HalfEdgeAdjacency,
        tracker: IslandTracker,
    ) -> None:
        self._vertices = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        self._adjacency = adjacency
        self._tracker = tracker
        self._face_normals: Optional[np.ndarray] = None
        self._unresolved: Set[int] = {
            half_edge for half_edge, entries in enumerate(adjacency.candidates) if entries
        }
        self.stats = ResolutionStats(candidate_pairs=adjacency.candidate_count())

    @property
    def unresolved(self) -> Set[int]:
        return set(self._unresolved)

    def resolve(self) -> ResolutionStats:
        """Run forced matching and conflict breaking until nothing is left."""

        while self._unresolved:
            self.stats.passes += 1
            if self.connect_forced():
                continue
            self.break_worst_conflict()

        _LOGGER.debug(
            "Adjacency resolved: %d forced matches, %d conflicts broken in %d passes",
            self.stats.forced_matches,
            self.stats.conflicts_broken,
            self.stats.passes,
        )
        return self.stats

    def connect_forced(self) -> int:
        """Pair every half-edge that has exactly one candidate left.

        Half-edges are visited in id order and the check is made against live
        state, so pairings made earlier in the pass can force later ones.
        """

        candidates = self._adjacency.candidates
        connected = 0
        for half_edge in sorted(self._unresolved):
            if half_edge not in self._unresolved:
                continue
            entries = candidates[half_edge]
            if len(entries) == 1:
                self.connect(half_edge, next(iter(entries)))
                connected += 1
        return connected

    def connect(self, half_edge_a: int, half_edge_b: int) -> None:
        """Record ``a`` and ``b`` as partners and merge their islands."""

        candidates = self._adjacency.candidates
        for half_edge in (half_edge_a, half_edge_b):
            for other in candidates[half_edge]:
                other_entries = candidates[other]
                other_entries.pop(half_edge, None)
                if not other_entries:
                    self._unresolved.discard(other)
            candidates[half_edge].clear()
            self._unresolved.discard(half_edge)

        self._adjacency.neighbors[half_edge_a] = half_edge_b
        self._adjacency.neighbors[half_edge_b] = half_edge_a
        self._tracker.union(half_edge_a, half_edge_b)
        self.stats.forced_matches += 1

    def break_worst_conflict(self) -> None:
        """Drop the candidate pairing whose dihedral angle is furthest from flat."""

        candidates = self._adjacency.candidates
        worst: Optional[Tuple[int, int]] = None
        worst_deviation = -math.inf

        for half_edge in sorted(self._unresolved):
            entries = candidates[half_edge]
            for other in entries:
                angle = entries[other]
                if angle is None:
                    angle = entries[other] = self.faces_angle(half_edge, other)
                deviation = abs(math.pi - angle)
                if deviation > worst_deviation:
                    worst_deviation = deviation
                    worst = (half_edge, other)

        if worst is None:
            raise TopologyInvariantError(
                f"{len(self._unresolved)} half-edges are unresolved but no candidate pairing remains"
            )

        half_edge, other = worst
        for source, target in ((half_edge, other), (other, half_edge)):
            entries = candidates[source]
            entries.pop(target, None)
            if not entries:
                self._unresolved.discard(source)

        self.stats.conflicts_broken += 1
        _LOGGER.debug(
            "Removed candidate pairing %d <-> %d (deviation from flat %.6f rad)",
            half_edge,
            other,
            worst_deviation,
        )

    def faces_angle(self, half_edge: int, other: int) -> float:
        """Dihedral angle between the faces owning ``half_edge`` and ``other``."""

        if self._face_normals is None:
            self._face_normals = compute_face_normals(self._vertices.reshape(-1))

        edge = self._vertices[next_in_face(half_edge)] - self._vertices[half_edge]
        return dihedral_angle(
            self._face_normals[half_edge // 3],
            self._face_normals[other // 3],
            edge,
        )
