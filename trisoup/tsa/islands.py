"""Union-find over faces that grows islands as half-edges get paired."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set

__all__ = ["IslandTracker"]


class IslandTracker:
    """Union by rank over face ids with a per-island frontier.

    Degenerate faces have no parent and never join an island. The frontier of
    an island is the set of its half-edges that are still unpaired; only the
    entry of the current root is meaningful.
    """

    def __init__(self, degenerate_faces: Sequence[bool]) -> None:
        self._parent: List[Optional[int]] = []
        self._rank: List[int] = []
        self._frontier: List[Optional[Set[int]]] = []

        for face_index, degenerate in enumerate(degenerate_faces):
            if degenerate:
                self._parent.append(None)
                self._frontier.append(None)
            else:
                self._parent.append(face_index)
                base = 3 * face_index
                self._frontier.append({base, base + 1, base + 2})
            self._rank.append(0)

    def __len__(self) -> int:
        return len(self._parent)

    def find(self, face_index: int) -> Optional[int]:
        """Return the island root of ``face_index``, compressing the path."""

        root = self._parent[face_index]
        if root is None:
            return None
        while self._parent[root] != root:
            root = self._parent[root]

        current = face_index
        while current != root:
            following = self._parent[current]
            self._parent[current] = root
            current = following
        return root

    def rank(self, face_index: int) -> int:
        return self._rank[face_index]

    def frontier(self, face_index: int) -> Set[int]:
        """Unpaired half-edges of the island containing ``face_index``."""

        root = self.find(face_index)
        if root is None:
            return set()
        return set(self._frontier[root] or ())

    def union(self, half_edge_a: int, half_edge_b: int) -> int:
        """Join the islands on either side of a freshly paired half-edge couple.

        Returns the root of the merged island.
        """

        root_a = self.find(half_edge_a // 3)
        root_b = self.find(half_edge_b // 3)
        if root_a is None or root_b is None:
            raise ValueError("Degenerate faces cannot be joined to an island")

        root = root_a
        if root_a != root_b:
            if self._rank[root_a] < self._rank[root_b]:
                root, child = root_b, root_a
            elif self._rank[root_b] < self._rank[root_a]:
                root, child = root_a, root_b
            else:
                root, child = root_a, root_b
                self._rank[root_a] += 1
            self._parent[child] = root

            merged = self._frontier[root]
            merged.update(self._frontier[child])
            self._frontier[child] = None

        frontier = self._frontier[root]
        frontier.discard(half_edge_a)
        frontier.discard(half_edge_b)
        return root

    def roots(self) -> List[Optional[int]]:
        """Root of every face, ``None`` for degenerate faces."""
        return [self.find(face_index) for face_index in range(len(self._parent))]

    def islands(self) -> List[List[int]]:
        """Face ids grouped by island, islands in first-encountered face order."""

        groups: Dict[int, List[int]] = {}
        for face_index in range(len(self._parent)):
            root = self.find(face_index)
            if root is None:
                continue
            groups.setdefault(root, []).append(face_index)
        return list(groups.values())
