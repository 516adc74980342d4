"""Grouping of vertex slots that refer to the same point in space.

A *vertex slot* is the position of a vertex inside the flat buffer divided by
three: slot ``3 * f + k`` is corner ``k`` of face ``f``. Because half-edge
``k`` of a face starts at corner ``k``, slot ids double as half-edge ids.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, List, Sequence

import numpy as np

__all__ = ["VertexIdentityIndex", "build_vertex_index", "vertex_keys"]

_LOGGER = logging.getLogger(__name__)


def vertex_keys(positions: np.ndarray, precision: int = 4, *, snap: bool = False) -> List[Hashable]:
    """Return one identity key per vertex slot.

    By default the key is the exact stored coordinate triple and ``precision``
    has no effect. With ``snap`` the coordinates are first rounded (half up)
    to ``precision`` decimal places so nearly coincident points merge.

    NaN never compares equal, so exact keys containing NaN stay unique and
    such vertices never share an identity class.
    """

    coords = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if not snap:
        return [tuple(row) for row in coords.tolist()]

    scale = 10.0 ** int(precision)
    snapped = np.floor(coords * scale + 0.5).astype(np.int64)
    return [tuple(row) for row in snapped.tolist()]


class VertexIdentityIndex:
    """Identity classes of every vertex slot in a triangle soup."""

    def __init__(self, keys: Sequence[Hashable]) -> None:
        self.groups: Dict[Hashable, List[int]] = {}
        class_ids = np.empty(len(keys), dtype=np.int64)
        class_lookup: Dict[Hashable, int] = {}

        for slot, key in enumerate(keys):
            group = self.groups.get(key)
            if group is None:
                group = self.groups[key] = []
                class_lookup[key] = len(class_lookup)
            group.append(slot)
            class_ids[slot] = class_lookup[key]

        self.keys: List[Hashable] = list(keys)
        self.class_ids = class_ids

        corners = class_ids.reshape(-1, 3)
        self.degenerate_faces = (
            (corners[:, 0] == corners[:, 1])
            | (corners[:, 1] == corners[:, 2])
            | (corners[:, 2] == corners[:, 0])
        )

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def slot_count(self) -> int:
        return int(self.class_ids.size)

    @property
    def face_count(self) -> int:
        return int(self.degenerate_faces.size)

    def group_of(self, slot: int) -> List[int]:
        """All slots sharing ``slot``'s identity, in buffer order."""
        return self.groups[self.keys[slot]]

    def same_vertex(self, slot_a: int, slot_b: int) -> bool:
        return bool(self.class_ids[slot_a] == self.class_ids[slot_b])

    def is_degenerate(self, face_index: int) -> bool:
        return bool(self.degenerate_faces[face_index])


def build_vertex_index(
    positions: np.ndarray, precision: int = 4, *, snap: bool = False
) -> VertexIdentityIndex:
    """Build the identity index for a flat position buffer."""

    index = VertexIdentityIndex(vertex_keys(positions, precision, snap=snap))
    _LOGGER.debug(
        "Vertex index: %d slots in %d identity classes, %d degenerate faces",
        index.slot_count,
        len(index),
        int(np.count_nonzero(index.degenerate_faces)),
    )
    return index
