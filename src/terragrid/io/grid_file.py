"""
Grid File Module

Reads and writes elevation grids as JSON and generates synthetic survey
grids for testing.

Two layouts are understood:

- a bare 2D array of numbers and nulls
- a project file, an object holding the ``grid`` next to a ``project``
  block with the survey settings::

    {
      "version": "1.0",
      "project": {"name": "Lot 7", "rows": 8, "cols": 8, "spacing": 10,
                  "units": "ft", "contourInterval": 1, "majorMultiplier": 5},
      "grid": [[100.0, 101.5, ...], ...]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union
import numpy as np

from ..core.config import AnalysisConfig, ContourConfig
from ..core.grid import ElevationGrid
from ..core.validation import ValidationError, validate_output_path

PROJECT_FORMAT_VERSION = "1.0"


@dataclass
class SurveyProject:
    """
    A grid together with the settings it was surveyed and contoured with.

    Attributes:
        grid: Surveyed elevations
        name: Project name
        contour: Contour interval, major multiplier and smoothing
        analysis: Grid spacing, datum and linear units
    """
    grid: ElevationGrid
    name: str = "TerraGrid Project"
    contour: ContourConfig = field(default_factory=ContourConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    def to_dict(self) -> dict:
        """Project file layout, settings keyed the way saved files name them."""
        return {
            "version": PROJECT_FORMAT_VERSION,
            "project": {
                "name": self.name,
                "rows": self.grid.rows,
                "cols": self.grid.cols,
                "spacing": self.analysis.spacing,
                "units": self.analysis.units,
                "datum": self.analysis.datum,
                "contourInterval": self.contour.interval,
                "majorMultiplier": self.contour.major_multiplier,
                "smoothing": self.contour.smoothing,
            },
            "grid": self.grid.to_rows(),
        }


def _read_json(filepath: Path) -> Any:
    try:
        with open(filepath, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"{filepath} is not valid JSON: {e}") from e


def _parse_rows(data: Any, filepath: Path) -> ElevationGrid:
    if not isinstance(data, list) or not all(isinstance(row, list) for row in data):
        raise ValidationError(
            f"{filepath} must contain a 2D array of elevations, "
            "e.g. [[100.0, 101.5], [null, 102.0]]"
        )

    for row in data:
        for value in row:
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ValidationError(
                    f"{filepath}: elevations must be numbers or null, got {value!r}"
                )

    return ElevationGrid.from_rows(data)


def load_grid(filepath: Union[str, Path]) -> ElevationGrid:
    """
    Load a grid from a JSON file.

    Accepts either a bare 2D array or an object with a ``grid`` key;
    any settings next to the grid are ignored (see ``load_project``).

    Raises:
        ValidationError: If the file is not a JSON grid
        GridShapeError: If the rows are ragged
    """
    filepath = Path(filepath)
    data = _read_json(filepath)

    if isinstance(data, dict):
        data = data.get("grid")

    return _parse_rows(data, filepath)


def load_project(filepath: Union[str, Path]) -> SurveyProject:
    """
    Load a grid and its survey settings from a JSON file.

    A bare 2D array, or an object without a ``project`` block, loads with
    default settings. Missing settings fall back to the config defaults.

    Raises:
        ValidationError: If the file is not a JSON grid or a setting is
            invalid (e.g. a negative spacing)
        GridShapeError: If the rows are ragged
    """
    filepath = Path(filepath)
    data = _read_json(filepath)

    if not isinstance(data, dict):
        return SurveyProject(grid=_parse_rows(data, filepath))

    grid = _parse_rows(data.get("grid"), filepath)
    settings = data.get("project") or {}
    if not isinstance(settings, dict):
        raise ValidationError(f"{filepath}: 'project' must be an object")

    contour_defaults = ContourConfig()
    analysis_defaults = AnalysisConfig()

    return SurveyProject(
        grid=grid,
        name=str(settings.get("name") or "TerraGrid Project"),
        contour=ContourConfig(
            interval=settings.get("contourInterval", contour_defaults.interval),
            major_multiplier=settings.get("majorMultiplier", contour_defaults.major_multiplier),
            smoothing=settings.get("smoothing", contour_defaults.smoothing),
        ),
        analysis=AnalysisConfig(
            spacing=settings.get("spacing", analysis_defaults.spacing),
            datum=settings.get("datum", analysis_defaults.datum),
            units=settings.get("units", analysis_defaults.units),
        ),
    )


def save_grid(grid: ElevationGrid, filepath: Union[str, Path]) -> Path:
    """Write a grid as a JSON 2D array with null for absent points."""
    path = validate_output_path(filepath, "grid file")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(grid.to_rows(), f)
    return path


def save_project(project: SurveyProject, filepath: Union[str, Path]) -> Path:
    """Write a project file (settings plus grid)."""
    path = validate_output_path(filepath, "project file")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(project.to_dict(), f, indent=2)
    return path


def generate_sample_grid(
    rows: int = 8,
    cols: int = 8,
    base_elevation: float = 95.0,
) -> ElevationGrid:
    """
    Generate a synthetic survey grid.

    Two gaussian peaks and a valley on a gentle tilt with a small
    sinusoidal ripple, rounded to millimetres. Deterministic, so it is
    usable as a fixture.

    Args:
        rows: Number of grid rows
        cols: Number of grid columns
        base_elevation: Elevation of the undisturbed surface

    Returns:
        Fully populated ElevationGrid
    """
    features = [
        # (row, col, height, width)
        (rows * 0.3, cols * 0.3, 12.0, 2.0),
        (rows * 0.7, cols * 0.65, 8.0, 2.5),
        (rows * 0.8, cols * 0.2, -5.0, 3.0),
    ]

    rr, cc = np.meshgrid(np.arange(rows), np.arange(cols), indexing="ij")
    z = np.full((rows, cols), float(base_elevation))

    for fr, fc, height, width in features:
        d2 = (rr - fr) ** 2 + (cc - fc) ** 2
        z += height * np.exp(-d2 / (2 * width * width))

    # Tilt and ripple
    z += (cc / cols) * 2 - (rr / rows) * 1.5
    z += np.sin(rr * 1.3) * np.cos(cc * 0.9) * 0.5

    z = np.floor(z * 1000 + 0.5) / 1000
    return ElevationGrid(z)
