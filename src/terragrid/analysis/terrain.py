"""
Terrain Analysis Module

Slope, flow direction and cut/fill volumes computed directly on an
elevation grid with missing points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from ..core.grid import ElevationGrid
from ..core.validation import validate_datum, validate_spacing

# Neighbour scan order for flow direction: row delta outer, column delta inner
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dr, dc)
    for dr in (-1, 0, 1)
    for dc in (-1, 0, 1)
    if not (dr == 0 and dc == 0)
)


@dataclass(eq=False)
class _PointField:
    """Per-point float field; NaN marks an absent value."""
    values: np.ndarray

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    @property
    def valid_mask(self) -> np.ndarray:
        return ~np.isnan(self.values)

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    def get(self, row: int, col: int) -> Optional[float]:
        value = self.values[row, col]
        return None if np.isnan(value) else float(value)

    def to_rows(self) -> List[List[Optional[float]]]:
        return [
            [None if np.isnan(v) else float(v) for v in row]
            for row in self.values
        ]


@dataclass(eq=False)
class SlopeField(_PointField):
    """Slope in percent grade at each grid point."""

    @property
    def max(self) -> Optional[float]:
        if self.valid_count == 0:
            return None
        return float(np.nanmax(self.values))

    @property
    def mean(self) -> Optional[float]:
        if self.valid_count == 0:
            return None
        return float(np.nanmean(self.values))


@dataclass(eq=False)
class FlowField(_PointField):
    """
    Direction of steepest descent at each grid point.

    Angles are ``atan2(d_row, d_col)`` in radians of the chosen neighbour
    offset, so only the 8 compass directions occur. Rows grow downwards,
    which makes pi/2 point "south" on a map drawn top-down.
    """

    def arrow(self, row: int, col: int, length: float = 1.0) -> Optional[Tuple[float, float]]:
        """(dx, dy) of a flow arrow, in drawing coordinates."""
        angle = self.get(row, col)
        if angle is None:
            return None
        return (float(np.cos(angle) * length), float(np.sin(angle) * length))


@dataclass
class CutFillResult:
    """
    Cut/fill volumes against a datum elevation.

    Volumes are in the cube of the grid's linear unit.
    """
    cut_volume: float
    fill_volume: float
    net_volume: float  # Positive = net export, Negative = net import
    cell_count: int = 0  # Complete cells that contributed

    def summary(self, units: str = "units") -> str:
        """Return human-readable summary."""
        lines = [
            "=" * 50,
            "CUT / FILL SUMMARY",
            "=" * 50,
            f"Cells used:        {self.cell_count:,}",
            f"Cut Volume:        {self.cut_volume:,.2f} cubic {units}",
            f"Fill Volume:       {self.fill_volume:,.2f} cubic {units}",
            f"NET VOLUME:        {self.net_volume:+,.2f} cubic {units}",
            f"  {'(Export required)' if self.net_volume > 0 else '(Import required)'}",
            "=" * 50,
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "cut_volume": self.cut_volume,
            "fill_volume": self.fill_volume,
            "net_volume": self.net_volume,
            "cell_count": self.cell_count,
        }


def _neighbours(z: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Left, right, up and down neighbour arrays, NaN beyond the edges."""
    zp = np.pad(z, 1, mode="constant", constant_values=np.nan)
    return zp[1:-1, :-2], zp[1:-1, 2:], zp[:-2, 1:-1], zp[2:, 1:-1]


def _axis_derivative(
    center: np.ndarray,
    before: np.ndarray,
    after: np.ndarray,
    spacing: float,
) -> np.ndarray:
    """Central difference where both neighbours exist, else one-sided."""
    has_c = ~np.isnan(center)
    has_b = ~np.isnan(before)
    has_a = ~np.isnan(after)

    central = (after - before) / (2 * spacing)
    forward = (after - center) / spacing
    backward = (center - before) / spacing

    return np.where(
        has_b & has_a, central,
        np.where(has_a & has_c, forward,
                 np.where(has_b & has_c, backward, np.nan))
    )


def compute_slope(grid, spacing: float) -> SlopeField:
    """
    Slope in percent grade at every grid point.

    Each axis uses a central difference when both neighbours exist and a
    one-sided difference against the point itself otherwise. A point is
    absent when it is unsurveyed or when either axis has no usable pair.

    Args:
        grid: ElevationGrid or nested rows of float/None
        spacing: Distance between adjacent grid points (> 0)

    Raises:
        SpacingError: If spacing is not positive
    """
    spacing = validate_spacing(spacing)
    grid = ElevationGrid.coerce(grid)

    z = grid.elevations
    left, right, up, down = _neighbours(z)

    dzx = _axis_derivative(z, left, right, spacing)
    dzy = _axis_derivative(z, up, down, spacing)

    slope = np.sqrt(dzx ** 2 + dzy ** 2) * 100.0
    slope[~grid.valid_mask] = np.nan

    return SlopeField(slope)


def compute_flow_direction(grid, spacing: float) -> FlowField:
    """
    Steepest-descent direction at every grid point.

    Scans the 8 neighbours in row-major order and keeps the one with the
    largest positive drop ``(center - neighbour) / distance``; the first
    neighbour wins a tie. Points with no lower neighbour are absent.

    Args:
        grid: ElevationGrid or nested rows of float/None
        spacing: Distance between adjacent grid points (> 0)

    Raises:
        SpacingError: If spacing is not positive
    """
    spacing = validate_spacing(spacing)
    grid = ElevationGrid.coerce(grid)

    z = grid.elevations
    rows, cols = grid.shape
    zp = np.pad(z, 1, mode="constant", constant_values=np.nan)

    best_drop = np.zeros((rows, cols))
    best_dr = np.zeros((rows, cols))
    best_dc = np.zeros((rows, cols))

    for dr, dc in NEIGHBOR_OFFSETS:
        neighbour = zp[1 + dr:1 + dr + rows, 1 + dc:1 + dc + cols]
        distance = spacing * np.hypot(dr, dc)
        drop = (z - neighbour) / distance

        # NaN compares False, so absent points and neighbours never win
        with np.errstate(invalid="ignore"):
            better = drop > best_drop
        best_drop[better] = drop[better]
        best_dr[better] = dr
        best_dc[better] = dc

    flow = np.where(best_drop > 0, np.arctan2(best_dr, best_dc), np.nan)
    return FlowField(flow)


def compute_cut_fill_grid(grid, datum: float) -> np.ndarray:
    """
    Per-cell difference between the cell's mean corner elevation and datum.

    Returns:
        Array [rows-1, cols-1]; positive = cut, negative = fill, NaN for
        cells with an absent corner
    """
    datum = validate_datum(datum)
    grid = ElevationGrid.coerce(grid)
    return grid.cell_means() - datum


def compute_cut_fill(grid, spacing: float, datum: float) -> CutFillResult:
    """
    Cut and fill volumes of the grid surface against a datum.

    Each complete cell is represented by the mean of its 4 corners; its
    volume is ``|mean - datum| * spacing**2``, counted as cut above the
    datum and fill otherwise. This midpoint estimate is exact for planar
    cells and differs from the bilinear-surface integral only with cell
    curvature.

    Args:
        grid: ElevationGrid or nested rows of float/None
        spacing: Distance between adjacent grid points (> 0)
        datum: Reference elevation

    Raises:
        SpacingError: If spacing is not positive
    """
    spacing = validate_spacing(spacing)
    diff = compute_cut_fill_grid(grid, datum)

    complete = ~np.isnan(diff)
    cell_area = spacing * spacing

    with np.errstate(invalid="ignore"):
        above = diff > 0
    cut_cells = complete & above
    fill_cells = complete & ~above

    cut = float(np.sum(diff[cut_cells]) * cell_area)
    fill = float(np.sum(np.abs(diff[fill_cells])) * cell_area)

    return CutFillResult(
        cut_volume=cut,
        fill_volume=fill,
        net_volume=cut - fill,
        cell_count=int(np.count_nonzero(complete)),
    )
