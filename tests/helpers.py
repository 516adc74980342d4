from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

from trisoup.tsa import SoupGeometry

Point = Tuple[float, float, float]

_BOX_QUADS = [
    # corners counter-clockwise seen from outside, outward normal
    (((1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)), (1, 0, 0)),
    (((0, 0, 0), (0, 0, 1), (0, 1, 1), (0, 1, 0)), (-1, 0, 0)),
    (((0, 1, 0), (0, 1, 1), (1, 1, 1), (1, 1, 0)), (0, 1, 0)),
    (((0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)), (0, -1, 0)),
    (((0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)), (0, 0, 1)),
    (((0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)), (0, 0, -1)),
]

TETRA_POINTS: List[Point] = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)]
TETRA_FACES = [(0, 2, 1), (0, 1, 3), (0, 3, 2), (1, 2, 3)]


def soup(triangles: Sequence[Sequence[Point]], **kwargs: object) -> SoupGeometry:
    return SoupGeometry.from_triangles(triangles, **kwargs)


def two_triangles() -> SoupGeometry:
    return soup(
        [
            [(0, 0, 0), (1, 0, 0), (0, 1, 0)],
            [(1, 0, 0), (1, 1, 0), (0, 1, 0)],
        ]
    )


def tetrahedron_triangles(offset: Point = (0.0, 0.0, 0.0)) -> List[List[Point]]:
    points = [tuple(p + o for p, o in zip(point, offset)) for point in TETRA_POINTS]
    return [[points[a], points[b], points[c]] for a, b, c in TETRA_FACES]


def tetrahedron(offset: Point = (0.0, 0.0, 0.0)) -> SoupGeometry:
    return soup(tetrahedron_triangles(offset))


def box(size: Point = (1.0, 1.0, 1.0), *, with_colors: bool = False) -> SoupGeometry:
    """12-triangle unindexed box with per-face normals."""

    scale = np.asarray(size, dtype=np.float64)
    triangles = []
    normals = []
    for corners, normal in _BOX_QUADS:
        a, b, c, d = (np.asarray(corner, dtype=np.float64) * scale for corner in corners)
        triangles.extend([[a, b, c], [a, c, d]])
        normals.extend([[normal] * 3, [normal] * 3])

    colors = None
    if with_colors:
        colors = [[(0.5, float(index) / 12.0, 1.0)] * 3 for index in range(12)]
    return soup(triangles, normals=normals, colors=colors)


def write_two_island_asset(directory: Path) -> Path:
    obj_data = """\
o TwoIslands
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
v 2 0 0
v 3 0 0
v 3 1 0
v 2 1 0
f 1 2 3
f 1 3 4
f 5 6 7
f 5 7 8
"""

    obj_path = directory / "two_islands.obj"
    obj_path.write_text(obj_data, encoding="utf-8")
    return obj_path
