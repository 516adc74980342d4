"""Command line interface for the ``tsa`` tool."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import click
from rich.console import Console
from rich.table import Table

from . import get_version
from .analyzer import AnalysisOptions
from .core import TSAError
from .mesh_io import load_soup, save_soup
from .report import island_report, surface_report

__all__ = ["main"]

_LOGGER = logging.getLogger(__name__)

_PRECISION_OPTION = click.option(
    "--precision",
    type=click.IntRange(min=0),
    default=4,
    show_default=True,
    help="Decimal places used when comparing normals (and vertices with --snap).",
)
_SNAP_OPTION = click.option(
    "--snap",
    "snap_vertices",
    is_flag=True,
    help="Round vertex positions to --precision before matching them.",
)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def _console(ctx: click.Context) -> Console:
    ctx_obj: Dict[str, Any] = ctx.obj if isinstance(ctx.obj, dict) else {}
    console = ctx_obj.get("console")
    if not isinstance(console, Console):
        console = Console()
    return console


def _write_json(path: Path, report: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2)
        handle.write("\n")


def _format_vector(values: List[float]) -> str:
    return "(" + ", ".join(f"{value:.4f}" for value in values) + ")"


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose logging output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Entrypoint for the ``tsa`` command."""

    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["console"] = Console()
    ctx.obj["verbose"] = bool(verbose)


@main.command()
def version() -> None:
    """Show package version."""

    click.echo(f"trisoup {get_version()}")


@main.command(name="islands")
@click.argument("mesh_path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@_PRECISION_OPTION
@_SNAP_OPTION
@click.option(
    "--json",
    "json_path",
    type=click.Path(path_type=Path),
    help="Write the island report to this JSON file.",
)
@click.option(
    "--out-dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Write one mesh file per island into this directory.",
)
@click.option(
    "--format",
    "out_format",
    type=click.Choice(["obj", "stl", "ply"], case_sensitive=False),
    default="stl",
    show_default=True,
    help="File format for --out-dir meshes",
)
@click.pass_context
def islands_command(
    ctx: click.Context,
    mesh_path: Path,
    precision: int,
    snap_vertices: bool,
    json_path: Path | None,
    out_dir: Path | None,
    out_format: str,
) -> None:
    """Split a mesh into its connected islands."""

    options = AnalysisOptions(precision=precision, snap_vertices=snap_vertices)
    try:
        geometry = load_soup(mesh_path)
        report = island_report(geometry, options)
    except TSAError as exc:
        raise click.ClickException(str(exc)) from exc
    report["mesh"] = str(mesh_path)

    ctx_obj: Dict[str, Any] = ctx.obj if isinstance(ctx.obj, dict) else {}
    console = _console(ctx)
    table = Table(title=str(mesh_path))
    table.add_column("Island", justify="right")
    table.add_column("Faces", justify="right")
    for island in report["islands"]:
        table.add_row(str(island["id"]), str(island["face_count"]))
    if not report["islands"]:
        table.add_row("—", "0")
    console.print(table)

    resolution = report["resolution"]
    console.print(
        f"{report['island_count']} islands, {report['degenerate_face_count']} degenerate faces, "
        f"{resolution['forced_matches']} edges paired, "
        f"{resolution['conflicts_broken']} conflicts broken, "
        f"{resolution['boundary_half_edges']} boundary half-edges"
    )

    verbose_enabled = bool(ctx_obj.get("verbose"))
    if verbose_enabled:
        resolution_table = Table(title="Resolution")
        resolution_table.add_column("Counter")
        resolution_table.add_column("Value", justify="right")
        for name, value in resolution.items():
            resolution_table.add_row(name, str(value))
        console.print(resolution_table)

    if out_dir is not None:
        written: List[str] = []
        suffix = out_format.lower()
        try:
            for island in report["islands"]:
                path = out_dir / f"{mesh_path.stem}_island_{island['id']}.{suffix}"
                written.append(str(save_soup(geometry.subset(island["faces"]), path)))
        except TSAError as exc:
            raise click.ClickException(str(exc)) from exc
        report["outputs"] = written
        console.print(f"[green]Wrote {len(written)} island meshes to {out_dir}[/green]")

    if json_path is not None:
        _write_json(json_path, report)
        console.print(f"[green]Wrote island report to {json_path}[/green]")


@main.command(name="surfaces")
@click.argument("mesh_path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@_PRECISION_OPTION
@_SNAP_OPTION
@click.option("--sort-by-area", is_flag=True, help="Order surfaces by descending area")
@click.option(
    "--json",
    "json_path",
    type=click.Path(path_type=Path),
    help="Write the surface report to this JSON file.",
)
@click.pass_context
def surfaces_command(
    ctx: click.Context,
    mesh_path: Path,
    precision: int,
    snap_vertices: bool,
    sort_by_area: bool,
    json_path: Path | None,
) -> None:
    """Group mesh faces into coplanar surfaces."""

    options = AnalysisOptions(
        precision=precision,
        snap_vertices=snap_vertices,
        compute_area=sort_by_area,
    )
    try:
        geometry = load_soup(mesh_path)
        report = surface_report(geometry, options, sort_by_area=sort_by_area)
    except TSAError as exc:
        raise click.ClickException(str(exc)) from exc
    report["mesh"] = str(mesh_path)

    console = _console(ctx)
    table = Table(title=str(mesh_path))
    table.add_column("Surface", justify="right")
    table.add_column("Faces", justify="right")
    table.add_column("Normal")
    if sort_by_area:
        table.add_column("Area", justify="right")

    for surface in report["surfaces"]:
        row = [str(surface["id"]), str(surface["face_count"]), _format_vector(surface["normal"])]
        if sort_by_area:
            row.append(f"{surface['area']:.4f}")
        table.add_row(*row)
    console.print(table)

    if json_path is not None:
        _write_json(json_path, report)
        console.print(f"[green]Wrote surface report to {json_path}[/green]")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
