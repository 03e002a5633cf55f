"""
Command Line Interface for TerraGrid

Usage:
    terragrid info <grid.json>
    terragrid contours <grid.json> --interval 1 --major 5
    terragrid slope <grid.json> --spacing 10
    terragrid flow <grid.json> --spacing 10
    terragrid cutfill <grid.json> --spacing 10 --datum 100
    terragrid generate-sample --output <file>

A grid file is either a bare 2D JSON array or a project file. Settings
stored in a project file (spacing, units, contour interval, major
multiplier) are used wherever the matching option is not given.
"""

import json
import sys
from typing import Optional

import click

from .core.config import AnalysisConfig, ContourConfig
from .core.contour import generate_contours, generate_contour_paths
from .core.raster import legend_stops
from .core.validation import ValidationError, validate_output_path
from .analysis.terrain import compute_cut_fill, compute_flow_direction, compute_slope
from .io.grid_file import SurveyProject, generate_sample_grid, load_project, save_grid
from .utils.mathutils import rgb_string


def _load(input_file: str) -> SurveyProject:
    try:
        project = load_project(input_file)
    except (OSError, ValidationError) as e:
        click.echo(f"Error loading grid: {e}", err=True)
        sys.exit(1)
    grid = project.grid
    click.echo(f"  Grid size: {grid.rows} x {grid.cols} ({grid.valid_count} surveyed points)")
    return project


def _write_json(data: dict, output: str, context: str) -> None:
    try:
        output_path = validate_output_path(output, context)
        with open(output_path, 'w') as f:
            json.dump(data, f, indent=2)
        click.echo(f"\nResults saved to: {output}")
    except (OSError, ValidationError) as e:
        click.echo(f"Error saving output: {e}", err=True)
        sys.exit(1)


def _analysis_config(
    project: SurveyProject,
    spacing: Optional[float],
    datum: Optional[float] = None,
    units: Optional[str] = None,
) -> AnalysisConfig:
    """Command-line values override the project's stored settings."""
    stored = project.analysis
    try:
        return AnalysisConfig(
            spacing=stored.spacing if spacing is None else spacing,
            datum=stored.datum if datum is None else datum,
            units=stored.units if units is None else units,
        )
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version="0.1.0")
def main():
    """TerraGrid Terrain Tool

    Turn a grid of surveyed elevations into contour lines, slope and
    flow maps, and cut/fill volumes.
    """
    pass


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
def info(input_file: str):
    """Display dimensions and elevation statistics of a grid file."""
    click.echo(f"Loading: {input_file}")
    project = _load(input_file)
    grid = project.grid

    stats = grid.statistics()

    click.echo("\n" + "=" * 50)
    click.echo("GRID INFO")
    click.echo("=" * 50)
    click.echo(f"File:           {input_file}")
    click.echo(f"Project:        {project.name}")
    click.echo(f"Rows x Cols:    {grid.rows} x {grid.cols}")
    click.echo(f"Spacing:        {project.analysis.spacing} {project.analysis.units}")

    if stats is None:
        click.echo("Points:         0 surveyed")
        click.echo("=" * 50)
        return

    click.echo(f"Points:         {stats.count}/{stats.total} surveyed")
    click.echo(f"")
    click.echo(f"Elevation:")
    click.echo(f"  Min:          {stats.min:.3f}")
    click.echo(f"  Max:          {stats.max:.3f}")
    click.echo(f"  Mean:         {stats.mean:.3f}")
    click.echo(f"  Relief:       {stats.relief:.3f}")
    click.echo(f"")
    click.echo(f"Legend (terrain):")
    for value, color in legend_stops(stats):
        click.echo(f"  {value:>12.3f}  {rgb_string(color)}")
    click.echo("=" * 50)


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--interval', '-i', default=None, type=float,
              help='Contour interval (default: project setting, else 1.0)')
@click.option('--major', '-m', default=None, type=int,
              help='Every n-th contour is major (default: project setting, else 5)')
@click.option('--smoothing', '-s', default=None, type=float,
              help='Curve smoothing 0-1, used for --svg-paths (default: 0.5)')
@click.option('--svg-paths', is_flag=True, help='Include smoothed SVG path data in the output')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file for contour levels')
def contours(
    input_file: str,
    interval: Optional[float],
    major: Optional[int],
    smoothing: Optional[float],
    svg_paths: bool,
    output: Optional[str],
):
    """Generate contour lines.

    Example:

        terragrid contours site.json -i 0.5 -m 4 -o contours.json
    """
    click.echo(f"Loading grid: {input_file}")
    project = _load(input_file)
    stored = project.contour

    try:
        config = ContourConfig(
            interval=stored.interval if interval is None else interval,
            major_multiplier=stored.major_multiplier if major is None else major,
            smoothing=stored.smoothing if smoothing is None else smoothing,
        )
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Generating contours (interval: {config.interval}, major every {config.major_multiplier})...")
    levels = generate_contours(project.grid, config.interval, config.major_multiplier)

    if not levels:
        click.echo("No contours: the grid needs at least 2x2 points, 4 surveyed values and some relief.")
    else:
        click.echo("\n" + "=" * 50)
        click.echo("CONTOUR LEVELS")
        click.echo("=" * 50)
        for contour in levels:
            kind = "major" if contour.is_major else "minor"
            click.echo(
                f"  {contour.level:>12.3f}  {kind:<5}  "
                f"{len(contour.polylines)} line(s), {contour.point_count} points"
            )
        click.echo("=" * 50)

    if output:
        data = {
            "config": config.to_dict(),
            "levels": [c.to_dict() for c in levels],
        }
        if svg_paths:
            data["paths"] = [
                {"level": c.level, "paths": [p.to_svg() for p in paths]}
                for c, paths in generate_contour_paths(levels, config.smoothing)
            ]
        _write_json(data, output, "output JSON file")


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--spacing', '-s', default=None, type=float,
              help='Distance between grid points (default: project setting, else 1.0)')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file for the slope field')
def slope(input_file: str, spacing: Optional[float], output: Optional[str]):
    """Compute slope (percent grade) at every grid point."""
    click.echo(f"Loading grid: {input_file}")
    project = _load(input_file)
    config = _analysis_config(project, spacing)

    field = compute_slope(project.grid, config.spacing)

    click.echo("\n" + "=" * 50)
    click.echo("SLOPE")
    click.echo("=" * 50)
    if field.valid_count == 0:
        click.echo("Not enough neighbouring points to compute slope.")
    else:
        click.echo(f"Points:         {field.valid_count}")
        click.echo(f"Max Slope:      {field.max:.1f}%")
        click.echo(f"Mean Slope:     {field.mean:.1f}%")
    click.echo("=" * 50)

    if output:
        _write_json({"spacing": config.spacing, "slope": field.to_rows()}, output, "output JSON file")


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--spacing', '-s', default=None, type=float,
              help='Distance between grid points (default: project setting, else 1.0)')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file for the flow field')
def flow(input_file: str, spacing: Optional[float], output: Optional[str]):
    """Compute steepest-descent flow direction (radians) at every grid point."""
    click.echo(f"Loading grid: {input_file}")
    project = _load(input_file)
    config = _analysis_config(project, spacing)

    field = compute_flow_direction(project.grid, config.spacing)
    total = project.grid.valid_count

    click.echo("\n" + "=" * 50)
    click.echo("FLOW DIRECTION")
    click.echo("=" * 50)
    click.echo(f"Draining points:  {field.valid_count}")
    click.echo(f"Sinks/flat:       {total - field.valid_count}")
    click.echo("=" * 50)

    if output:
        _write_json({"spacing": config.spacing, "flow": field.to_rows()}, output, "output JSON file")


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--spacing', '-s', default=None, type=float,
              help='Distance between grid points (default: project setting, else 1.0)')
@click.option('--datum', '-d', required=True, type=float, help='Datum elevation')
@click.option('--units', type=click.Choice(['m', 'ft']), default=None,
              help='Linear unit (default: project setting, else m)')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file for results')
def cutfill(
    input_file: str,
    spacing: Optional[float],
    datum: float,
    units: Optional[str],
    output: Optional[str],
):
    """Calculate cut/fill volumes against a datum elevation.

    Example:

        terragrid cutfill site.json --spacing 10 --datum 98.5
    """
    click.echo(f"Loading grid: {input_file}")
    project = _load(input_file)
    config = _analysis_config(project, spacing, datum, units)

    click.echo(f"Calculating cut/fill (datum: {config.datum})...")
    result = compute_cut_fill(project.grid, config.spacing, config.datum)

    click.echo("\n" + result.summary(units=config.units))

    if output:
        data = {**config.to_dict(), **result.to_dict()}
        _write_json(data, output, "output JSON file")


@main.command()
@click.option('--output', '-o', required=True, type=click.Path(),
              help='Output grid file (.json)')
@click.option('--rows', default=8, type=int, help='Number of rows (default: 8)')
@click.option('--cols', default=8, type=int, help='Number of columns (default: 8)')
@click.option('--base-elevation', default=95.0, type=float, help='Base elevation (default: 95)')
def generate_sample(output: str, rows: int, cols: int, base_elevation: float):
    """Generate a sample survey grid for testing.

    Creates synthetic terrain with two hills, a valley and a gentle tilt.

    Example:
        terragrid generate-sample -o sample.json --rows 12 --cols 16
    """
    if rows < 2 or cols < 2:
        click.echo("Error: rows and cols must be at least 2", err=True)
        sys.exit(1)

    click.echo(f"Generating sample grid...")
    click.echo(f"  Size: {rows} x {cols}")
    click.echo(f"  Base elevation: {base_elevation}")

    grid = generate_sample_grid(rows=rows, cols=cols, base_elevation=base_elevation)

    try:
        save_grid(grid, output)
    except (OSError, ValidationError) as e:
        click.echo(f"Error saving grid: {e}", err=True)
        sys.exit(1)
    click.echo(f"Saved to: {output}")


if __name__ == '__main__':
    main()
