"""
Elevation Raster Module

Colors grid cells by elevation (or slope) with a color ramp, producing
RGB arrays the rendering side can paint directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from .grid import ElevationGrid, GridStatistics
from ..utils.mathutils import Color, get_ramp, sample_ramp

if TYPE_CHECKING:
    from ..analysis.terrain import SlopeField


@dataclass(eq=False)
class ColorRaster:
    """
    RGB raster with a coverage mask.

    Attributes:
        colors: uint8 array [rows, cols, 3]; black where ``mask`` is False
        mask: True where the cell/point had data
        ramp: Name of the ramp used
    """
    colors: np.ndarray
    mask: np.ndarray
    ramp: str

    @property
    def shape(self) -> Tuple[int, int]:
        return self.mask.shape

    def color_at(self, row: int, col: int) -> Optional[Color]:
        if not self.mask[row, col]:
            return None
        r, g, b = self.colors[row, col]
        return (int(r), int(g), int(b))


def _colorize(t: np.ndarray, ramp_name: str) -> ColorRaster:
    """Sample the ramp at every finite position of ``t``."""
    ramp = get_ramp(ramp_name)
    mask = ~np.isnan(t)
    colors = np.zeros(t.shape + (3,), dtype=np.uint8)
    for r, c in np.argwhere(mask):
        colors[r, c] = sample_ramp(ramp, float(t[r, c]))
    return ColorRaster(colors=colors, mask=mask, ramp=ramp_name)


def elevation_raster(grid, ramp: str = "terrain") -> ColorRaster:
    """
    Color every complete cell by its mean corner elevation.

    The mean is normalised over the grid's elevation range; a grid with no
    relief maps to the middle of the ramp.

    Returns:
        ColorRaster of shape [rows-1, cols-1]
    """
    grid = ElevationGrid.coerce(grid)
    means = grid.cell_means()
    stats = grid.statistics()

    if stats is None:
        t = means  # all NaN
    elif stats.relief > 0:
        t = (means - stats.min) / stats.relief
    else:
        t = np.where(np.isnan(means), np.nan, 0.5)

    return _colorize(t, ramp)


def slope_raster(slope: 'SlopeField', ramp: str = "slope") -> ColorRaster:
    """
    Color every grid point by slope, normalised by the steepest point.

    Returns:
        ColorRaster of shape [rows, cols]
    """
    max_slope = slope.max
    values = slope.values
    if max_slope is not None and max_slope > 0:
        t = np.clip(values / max_slope, 0.0, 1.0)
    else:
        t = np.where(np.isnan(values), np.nan, 0.0)
    return _colorize(t, ramp)


def legend_stops(
    stats: GridStatistics,
    ramp: str = "terrain",
    count: int = 5,
) -> List[Tuple[float, Color]]:
    """
    Evenly spaced (elevation, color) pairs from the maximum down to the minimum.
    """
    colors = get_ramp(ramp)
    stops = []
    for i in range(count):
        t = i / (count - 1) if count > 1 else 0.0
        value = stats.max - t * stats.relief
        stops.append((value, sample_ramp(colors, 1.0 - t)))
    return stops
