from __future__ import annotations

import numpy as np
import pytest

from trisoup.tsa import (
    AnalysisOptions,
    SoupGeometry,
    analyze_connectivity,
    isolated_geometries,
)
from trisoup.tsa.core import GeometryConfigError

from .helpers import box, soup, tetrahedron_triangles, two_triangles


def test_single_degenerate_triangle_yields_no_islands() -> None:
    geometry = soup([[(1, 2, 3), (1, 2, 3), (1, 2, 3)]])

    assert isolated_geometries(geometry) == []
    result = analyze_connectivity(geometry)
    assert result.face_roots == [None]
    assert result.degenerate_count == 1


def test_two_triangles_form_one_island() -> None:
    geometry = two_triangles()
    islands = isolated_geometries(geometry)

    assert len(islands) == 1
    assert islands[0].face_count == 2
    assert np.array_equal(islands[0].positions, geometry.positions)


def test_tetrahedron_is_one_island() -> None:
    result = analyze_connectivity(soup(tetrahedron_triangles()))

    assert result.islands == [[0, 1, 2, 3]]
    assert result.boundary_half_edges == []
    assert result.stats.conflicts_broken == 0


def test_islands_partition_non_degenerate_faces() -> None:
    triangles = (
        tetrahedron_triangles()
        + [[(9, 9, 9), (9, 9, 9), (8, 8, 8)]]
        + tetrahedron_triangles((5.0, 0.0, 0.0))
        + [[(20, 0, 0), (21, 0, 0), (20, 1, 0)]]
    )
    # Interleave so islands are not contiguous in the buffer.
    order = [0, 4, 5, 1, 6, 2, 9, 7, 3, 8]
    geometry = soup([triangles[i] for i in order])
    result = analyze_connectivity(geometry)

    assert result.degenerate_count == 1
    degenerate = int(np.flatnonzero(result.degenerate_faces)[0])
    covered = sorted(face for island in result.islands for face in island)
    assert covered == sorted(set(range(geometry.face_count)) - {degenerate})
    assert [len(island) for island in result.islands] == [4, 4, 1]
    # Islands appear in first-encountered face order.
    assert [island[0] for island in result.islands] == [0, 2, 6]


def test_attributes_are_copied_per_island() -> None:
    first = box(with_colors=True)
    second_positions = first.positions + 10.0
    geometry = SoupGeometry(
        positions=np.concatenate([first.positions, second_positions]),
        normals=np.concatenate([first.normals, first.normals]),
        colors=np.concatenate([first.colors, first.colors * 0.5]),
    )

    islands = isolated_geometries(geometry)

    assert len(islands) == 2
    assert np.array_equal(islands[0].positions, first.positions)
    assert np.array_equal(islands[1].positions, second_positions)
    assert np.array_equal(islands[0].normals, first.normals)
    assert np.array_equal(islands[1].colors, first.colors * 0.5)
    assert islands[0].positions is not geometry.positions


def test_emitted_island_is_stable_when_reanalysed() -> None:
    triangles = tetrahedron_triangles() + tetrahedron_triangles((3.0, 3.0, 3.0))
    for island in isolated_geometries(soup(triangles)):
        again = isolated_geometries(island)
        assert len(again) == 1
        assert np.array_equal(again[0].positions, island.positions)


def test_snap_merges_nearly_coincident_vertices() -> None:
    geometry = soup(
        [
            [(0, 0, 0), (1, 0, 0), (0, 1, 0)],
            [(1.00001, 0, 0), (1, 1, 0), (0, 1, 0)],
        ]
    )

    assert len(isolated_geometries(geometry)) == 2
    snapped = isolated_geometries(geometry, options=AnalysisOptions(snap_vertices=True))
    assert len(snapped) == 1
    assert len(isolated_geometries(geometry, options=AnalysisOptions(precision=6, snap_vertices=True))) == 2


def test_indexed_geometry_is_rejected() -> None:
    geometry = SoupGeometry(positions=two_triangles().positions, index=[0, 1, 2, 3, 4, 5])

    with pytest.raises(GeometryConfigError):
        isolated_geometries(geometry)


def test_malformed_buffers_are_rejected() -> None:
    with pytest.raises(GeometryConfigError):
        SoupGeometry(positions=np.zeros(10))
    with pytest.raises(GeometryConfigError):
        SoupGeometry(positions=np.zeros(9), normals=np.zeros(18))
    with pytest.raises(GeometryConfigError):
        AnalysisOptions(precision=-1)


def test_empty_geometry() -> None:
    assert isolated_geometries(SoupGeometry(positions=np.zeros(0))) == []


@pytest.mark.parametrize("precision", [None, 2.5, "4", True])
def test_non_integer_precision_is_a_config_error(precision: object) -> None:
    with pytest.raises(GeometryConfigError, match="non-negative integer"):
        AnalysisOptions(precision=precision)


def test_precision_argument_must_agree_with_options() -> None:
    geometry = two_triangles()

    with pytest.raises(GeometryConfigError, match="conflicts"):
        isolated_geometries(geometry, 6, options=AnalysisOptions())

    assert len(isolated_geometries(geometry, 4, options=AnalysisOptions())) == 1
    assert analyze_connectivity(geometry, np.int64(2)).island_count == 1
