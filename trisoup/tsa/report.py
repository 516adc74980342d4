"""Serialisable summaries of island and surface analyses."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .analyzer import AnalysisOptions, ConnectivityResult, analyze_connectivity
from .coplanar import Surface, sorted_surfaces_by_area, surfaces
from .geometry import SoupGeometry

__all__ = ["connectivity_to_report", "island_report", "surface_report", "surfaces_to_report"]

_LOGGER = logging.getLogger(__name__)


def connectivity_to_report(result: ConnectivityResult, face_count: int) -> Dict[str, Any]:
    islands = [
        {"id": island_id, "face_count": len(faces), "faces": [int(face) for face in faces]}
        for island_id, faces in enumerate(result.islands, start=1)
    ]
    stats = result.stats
    return {
        "face_count": int(face_count),
        "degenerate_face_count": result.degenerate_count,
        "island_count": result.island_count,
        "islands": islands,
        "resolution": {
            "candidate_pairs": stats.candidate_pairs,
            "forced_matches": stats.forced_matches,
            "conflicts_broken": stats.conflicts_broken,
            "passes": stats.passes,
            "boundary_half_edges": len(result.boundary_half_edges),
        },
    }


def island_report(geometry: SoupGeometry, options: AnalysisOptions) -> Dict[str, Any]:
    """Analyse ``geometry`` and return its island summary."""

    result = analyze_connectivity(geometry, options=options)
    report = connectivity_to_report(result, geometry.face_count)
    report["precision"] = options.precision
    report["snap_vertices"] = options.snap_vertices
    _LOGGER.debug("Island report generated: %d islands", report["island_count"])
    return report


def surfaces_to_report(found: List[Surface]) -> List[Dict[str, Any]]:
    return [
        {
            "id": surface_id,
            "face_count": surface.face_count,
            "faces": [int(face) for face in surface.face_indices],
            "normal": [float(value) for value in surface.normal],
            "area": None if surface.area is None else float(surface.area),
        }
        for surface_id, surface in enumerate(found, start=1)
    ]


def surface_report(
    geometry: SoupGeometry,
    options: AnalysisOptions,
    *,
    sort_by_area: bool = False,
) -> Dict[str, Any]:
    """Analyse ``geometry`` and return its coplanar surface summary."""

    if sort_by_area:
        found = sorted_surfaces_by_area(geometry, options=options)
    else:
        found = surfaces(geometry, options=options)

    return {
        "face_count": geometry.face_count,
        "surface_count": len(found),
        "sorted_by_area": bool(sort_by_area),
        "precision": options.precision,
        "surfaces": surfaces_to_report(found),
    }
