"""Per-face geometric helpers used by the adjacency resolver and surface grouper."""

from __future__ import annotations

import math

import numpy as np

__all__ = [
    "compute_face_normals",
    "angle_between",
    "dihedral_angle",
    "face_area_metrics",
]


def compute_face_normals(positions: np.ndarray, *, eps: float = 0.0) -> np.ndarray:
    """Compute unit normals for every face of a flat position buffer.

    The normal follows the winding order, ``(c - b) x (a - b)``. Faces whose
    cross product has length ``<= eps`` get a zero normal.
    """

    triangles = np.asarray(positions, dtype=np.float64).reshape(-1, 3, 3)
    normals = np.zeros((triangles.shape[0], 3), dtype=np.float64)
    if triangles.shape[0] == 0:
        return normals

    a = triangles[:, 0]
    b = triangles[:, 1]
    c = triangles[:, 2]
    cross = np.cross(c - b, a - b)
    lengths = np.linalg.norm(cross, axis=1)
    valid = lengths > eps
    normals[valid] = cross[valid] / lengths[valid, None]
    return normals


def angle_between(n1: np.ndarray, n2: np.ndarray) -> float:
    """Return the angle between two vectors in ``[0, pi]``.

    A zero-length vector is treated as perpendicular to everything.
    """

    denominator = math.sqrt(float(np.dot(n1, n1)) * float(np.dot(n2, n2)))
    if denominator == 0.0:
        return math.pi / 2

    theta = float(np.dot(n1, n2)) / denominator
    return math.acos(min(1.0, max(-1.0, theta)))


def dihedral_angle(n1: np.ndarray, n2: np.ndarray, edge: np.ndarray) -> float:
    """Angle between two faces around their shared edge, in ``[0, 2 pi]``.

    ``n1`` and ``n2`` are the unit normals of the two faces and ``edge`` is the
    direction of the shared edge as walked by the first face. A flat join
    measures ``pi``; a thin splinter or folded-over pair measures close to
    ``0`` or ``2 pi``.
    """

    normals_angle = angle_between(n1, n2)
    if float(np.dot(np.cross(n1, n2), edge)) > 0:
        return math.pi - normals_angle
    return math.pi + normals_angle


def face_area_metrics(positions: np.ndarray) -> np.ndarray:
    """Return ``|(c - b) x (a - b)|`` per face, i.e. twice the triangle area."""

    triangles = np.asarray(positions, dtype=np.float64).reshape(-1, 3, 3)
    if triangles.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)

    a = triangles[:, 0]
    b = triangles[:, 1]
    c = triangles[:, 2]
    return np.linalg.norm(np.cross(c - b, a - b), axis=1)
