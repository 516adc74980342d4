"""Flat, unindexed triangle buffers consumed and produced by the analyzers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .core import GeometryConfigError

__all__ = ["SoupGeometry", "FLOATS_PER_FACE"]

# 3 vertices x 3 components
FLOATS_PER_FACE = 9


def _as_flat_buffer(values: object, name: str) -> np.ndarray:
    array = np.asarray(values, dtype=np.float64).reshape(-1)
    if array.size % FLOATS_PER_FACE != 0:
        raise GeometryConfigError(
            f"{name} buffer has {array.size} values; expected a multiple of {FLOATS_PER_FACE}"
        )
    return array


@dataclass(frozen=True, eq=False)
class SoupGeometry:
    """A triangle soup: three consecutive position triples per face.

    ``normals`` and ``colors`` are optional per-vertex attributes laid out in
    parallel with ``positions``. ``index`` is only carried so that analyzers
    can refuse shared-vertex meshes.
    """

    positions: np.ndarray
    normals: Optional[np.ndarray] = None
    colors: Optional[np.ndarray] = None
    index: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        positions = _as_flat_buffer(self.positions, "position")
        object.__setattr__(self, "positions", positions)

        for name in ("normals", "colors"):
            values = getattr(self, name)
            if values is None:
                continue
            array = _as_flat_buffer(values, name[:-1])
            if array.size != positions.size:
                raise GeometryConfigError(
                    f"{name[:-1]} buffer has {array.size} values but position buffer has "
                    f"{positions.size}"
                )
            object.__setattr__(self, name, array)

        if self.index is not None:
            object.__setattr__(self, "index", np.asarray(self.index, dtype=np.int64).reshape(-1))

    @classmethod
    def from_triangles(
        cls,
        triangles: Sequence[Sequence[Sequence[float]]],
        *,
        normals: Optional[Sequence[Sequence[Sequence[float]]]] = None,
        colors: Optional[Sequence[Sequence[Sequence[float]]]] = None,
    ) -> "SoupGeometry":
        """Build a soup from ``(F, 3, 3)`` shaped triangle corner data."""

        return cls(
            positions=np.asarray(triangles, dtype=np.float64).reshape(-1),
            normals=None if normals is None else np.asarray(normals, dtype=np.float64).reshape(-1),
            colors=None if colors is None else np.asarray(colors, dtype=np.float64).reshape(-1),
        )

    @property
    def face_count(self) -> int:
        return int(self.positions.size // FLOATS_PER_FACE)

    @property
    def is_indexed(self) -> bool:
        return self.index is not None

    def triangles(self) -> np.ndarray:
        """Return positions reshaped to ``(F, 3, 3)``."""
        return self.positions.reshape(-1, 3, 3)

    def subset(self, face_indices: Sequence[int]) -> "SoupGeometry":
        """Copy the listed faces, in the given order, into a new soup."""

        faces = np.asarray(face_indices, dtype=np.int64)

        def _take(values: Optional[np.ndarray]) -> Optional[np.ndarray]:
            if values is None:
                return None
            return values.reshape(-1, FLOATS_PER_FACE)[faces].reshape(-1)

        return SoupGeometry(
            positions=_take(self.positions),
            normals=_take(self.normals),
            colors=_take(self.colors),
        )
