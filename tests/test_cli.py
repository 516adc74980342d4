from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from trisoup.tsa import AnalysisOptions
from trisoup.tsa.mesh_io import load_soup
from trisoup.tsa.report import island_report

from .helpers import tetrahedron, write_two_island_asset


def _run_tsa(args: list[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
    cmd = [sys.executable, "-m", "trisoup.tsa.cli", *args]
    return subprocess.run(cmd, check=check, capture_output=True, text=True)


def test_islands_cli_writes_report_and_meshes(tmp_path: Path) -> None:
    obj_path = write_two_island_asset(tmp_path)
    json_path = tmp_path / "report.json"
    out_dir = tmp_path / "islands"

    result = _run_tsa(
        ["islands", str(obj_path), "--json", str(json_path), "--out-dir", str(out_dir)]
    )
    assert result.returncode == 0

    report = json.loads(json_path.read_text(encoding="utf-8"))
    assert report["island_count"] == 2
    assert [island["face_count"] for island in report["islands"]] == [2, 2]
    assert report["degenerate_face_count"] == 0
    assert report["resolution"]["forced_matches"] == 2
    assert report["resolution"]["conflicts_broken"] == 0

    outputs = [Path(path) for path in report["outputs"]]
    assert [path.name for path in outputs] == ["two_islands_island_1.stl", "two_islands_island_2.stl"]
    for path in outputs:
        assert path.exists()
        assert load_soup(path).face_count == 2


def test_surfaces_cli_sorted_by_area(tmp_path: Path) -> None:
    obj_path = write_two_island_asset(tmp_path)
    json_path = tmp_path / "surfaces.json"

    _run_tsa(["surfaces", str(obj_path), "--sort-by-area", "--json", str(json_path)])

    report = json.loads(json_path.read_text(encoding="utf-8"))
    assert report["surface_count"] == 2
    assert report["sorted_by_area"] is True
    for surface in report["surfaces"]:
        assert surface["face_count"] == 2
        assert surface["area"] == 2.0
        assert surface["normal"] == [0.0, 0.0, 1.0]


def test_cli_reports_load_errors(tmp_path: Path) -> None:
    empty = tmp_path / "empty.obj"
    empty.write_text("# nothing here\n", encoding="utf-8")

    result = _run_tsa(["islands", str(empty)], check=False)

    assert result.returncode != 0
    assert "Error" in result.stderr


def test_version_command() -> None:
    result = _run_tsa(["version"])
    assert result.stdout.startswith("trisoup ")


def test_island_report_for_tetrahedron() -> None:
    report = island_report(tetrahedron(), AnalysisOptions())

    assert report["island_count"] == 1
    assert report["islands"][0]["faces"] == [0, 1, 2, 3]
    assert report["resolution"]["boundary_half_edges"] == 0
    assert report["snap_vertices"] is False


def test_islands_cli_verbose_prints_resolution_counters(tmp_path: Path) -> None:
    obj_path = write_two_island_asset(tmp_path)
    json_path = tmp_path / "report.json"

    quiet = _run_tsa(["islands", str(obj_path)])
    verbose = _run_tsa(
        ["--verbose", "islands", str(obj_path), "--precision", "3", "--json", str(json_path)]
    )

    assert "candidate_pairs" not in quiet.stdout
    assert "Resolution" in verbose.stdout
    assert "candidate_pairs" in verbose.stdout

    report = json.loads(json_path.read_text(encoding="utf-8"))
    assert report["precision"] == 3
    assert report["snap_vertices"] is False
    assert report["mesh"] == str(obj_path)
