"""Mesh file loading and saving for the ``tsa`` CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import trimesh

from .core import MeshLoadError
from .geometry import SoupGeometry

__all__ = ["load_soup", "save_soup", "soup_to_trimesh", "trimesh_to_soup"]

_LOGGER = logging.getLogger(__name__)


def trimesh_to_soup(mesh: trimesh.Trimesh) -> SoupGeometry:
    """Un-index a :class:`trimesh.Trimesh` into a triangle soup.

    Every corner gets the normal of its face. Per-vertex colors are carried
    over as floats in ``[0, 1]`` when the mesh has them.
    """

    vertices = np.asarray(mesh.vertices, dtype=np.float64)
    faces = np.asarray(mesh.faces, dtype=np.int64)

    if vertices.ndim != 2 or vertices.shape[1] < 3:
        raise MeshLoadError("Mesh vertices are missing or malformed")
    if faces.ndim != 2 or faces.shape[1] != 3:
        raise MeshLoadError("Mesh does not contain triangular faces")

    positions = vertices[:, :3][faces].reshape(-1)
    normals = np.repeat(np.asarray(mesh.face_normals, dtype=np.float64), 3, axis=0).reshape(-1)

    colors: Optional[np.ndarray] = None
    visual = getattr(mesh, "visual", None)
    if visual is not None and getattr(visual, "kind", None) == "vertex":
        vertex_colors = np.asarray(visual.vertex_colors)
        if vertex_colors.ndim == 2 and vertex_colors.shape[0] == vertices.shape[0]:
            rgb = vertex_colors[:, :3].astype(np.float64) / 255.0
            colors = rgb[faces].reshape(-1)

    return SoupGeometry(positions=positions, normals=normals, colors=colors)


def load_soup(mesh_path: Path) -> SoupGeometry:
    """Load any format trimesh understands and flatten it into a soup."""

    resolved_path = Path(mesh_path).expanduser().resolve()
    try:
        scene = trimesh.load(str(resolved_path), force="scene", process=False)
    except Exception as exc:  # pragma: no cover - depends on trimesh/asset
        raise MeshLoadError(f"Failed to load mesh '{resolved_path}': {exc}") from exc

    if scene is None or getattr(scene, "is_empty", False):
        raise MeshLoadError(f"Mesh '{resolved_path}' does not contain any geometry")

    if isinstance(scene, trimesh.Scene):
        mesh = scene.to_mesh()
    else:
        mesh = scene

    if not isinstance(mesh, trimesh.Trimesh) or mesh.faces is None or len(mesh.faces) == 0:
        raise MeshLoadError(f"Mesh '{resolved_path}' does not contain triangulated geometry")

    soup = trimesh_to_soup(mesh)
    _LOGGER.debug("Loaded %s: %d faces", resolved_path, soup.face_count)
    return soup


def soup_to_trimesh(geometry: SoupGeometry) -> trimesh.Trimesh:
    """Wrap a soup as a trimesh without merging any vertices."""

    vertices = geometry.positions.reshape(-1, 3)
    faces = np.arange(vertices.shape[0], dtype=np.int64).reshape(-1, 3)

    kwargs = {}
    if geometry.colors is not None:
        rgb = np.clip(geometry.colors.reshape(-1, 3), 0.0, 1.0)
        alpha = np.ones((rgb.shape[0], 1), dtype=np.float64)
        kwargs["vertex_colors"] = np.round(np.hstack([rgb, alpha]) * 255.0).astype(np.uint8)

    return trimesh.Trimesh(
        vertices=vertices,
        faces=faces,
        process=False,
        maintain_order=True,
        **kwargs,
    )


def save_soup(geometry: SoupGeometry, output_path: Path) -> Path:
    """Write ``geometry`` to ``output_path``; the suffix selects the format."""

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        soup_to_trimesh(geometry).export(str(output_path))
    except Exception as exc:  # pragma: no cover - depends on trimesh exporters
        raise MeshLoadError(f"Failed to write mesh '{output_path}': {exc}") from exc
    _LOGGER.debug("Wrote %s: %d faces", output_path, geometry.face_count)
    return output_path
