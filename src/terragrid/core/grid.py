"""
Elevation Grid Module

Rectangular grid of surveyed elevations where any point may be
unsurveyed. This is the shared input of the contour engine and the
terrain analysis passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union
import numpy as np

from .validation import GridShapeError, validate_grid_dimensions, validate_grid_rows
from ..utils.mathutils import bilinear_interp, point_id


@dataclass(frozen=True)
class GridStatistics:
    """Summary of the valid samples in a grid."""
    min: float
    max: float
    mean: float
    relief: float  # max - min
    count: int     # valid samples
    total: int     # rows * cols

    def to_dict(self) -> dict:
        return {
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "relief": self.relief,
            "count": self.count,
            "total": self.total,
        }


@dataclass(frozen=True, eq=False)
class ElevationGrid:
    """
    Regular grid of optional elevation values.

    Attributes:
        elevations: 2D float array [rows, cols]; NaN marks an absent
            (unsurveyed) point. Any non-finite input is stored as NaN.

    The grid is treated as read-only: edits produce a new grid through
    ``with_value``.
    """
    elevations: np.ndarray

    def __post_init__(self):
        arr = np.array(self.elevations, dtype=np.float64)
        if arr.ndim != 2:
            raise GridShapeError(
                f"elevations must be a 2D array, got {arr.ndim} dimensions"
            )
        arr[~np.isfinite(arr)] = np.nan
        arr.setflags(write=False)
        object.__setattr__(self, "elevations", arr)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Optional[float]]],
        _stacklevel: int = 3,
    ) -> ElevationGrid:
        """
        Build a grid from nested rows of floats or None.

        ``[]`` and ``[[]]`` give zero-sized grids, which every engine
        treats as "no data".

        Raises:
            GridShapeError: If the rows are ragged
        """
        n_rows, n_cols = validate_grid_rows(rows)
        validate_grid_dimensions(n_rows, n_cols, stacklevel=_stacklevel)
        arr = np.full((n_rows, n_cols), np.nan)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    arr[r, c] = float(value)
        return cls(arr)

    @classmethod
    def empty(cls, rows: int, cols: int) -> ElevationGrid:
        """All-absent grid, the starting point of a new survey."""
        validate_grid_dimensions(rows, cols, stacklevel=3)
        return cls(np.full((rows, cols), np.nan))

    @classmethod
    def coerce(cls, grid: Union[ElevationGrid, Sequence, np.ndarray]) -> ElevationGrid:
        """Accept an ElevationGrid, a numpy array or nested rows."""
        if isinstance(grid, ElevationGrid):
            return grid
        if isinstance(grid, np.ndarray) and grid.dtype != object:
            if grid.ndim == 2:
                validate_grid_dimensions(*grid.shape, stacklevel=3)
            return cls(grid)
        return cls.from_rows(grid, _stacklevel=4)

    @property
    def shape(self) -> Tuple[int, int]:
        """Grid dimensions (rows, cols)."""
        return self.elevations.shape

    @property
    def rows(self) -> int:
        return self.elevations.shape[0]

    @property
    def cols(self) -> int:
        return self.elevations.shape[1]

    @property
    def valid_mask(self) -> np.ndarray:
        """True where a sample exists."""
        return ~np.isnan(self.elevations)

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    def get(self, row: int, col: int) -> Optional[float]:
        """Elevation at a grid point, or None if unsurveyed."""
        value = self.elevations[row, col]
        return None if np.isnan(value) else float(value)

    def to_rows(self) -> List[List[Optional[float]]]:
        """Nested lists with None for absent points."""
        return [
            [None if np.isnan(v) else float(v) for v in row]
            for row in self.elevations
        ]

    def with_value(self, row: int, col: int, value: Optional[float]) -> ElevationGrid:
        """Return a copy with one point replaced (None clears it)."""
        arr = self.elevations.copy()
        arr[row, col] = np.nan if value is None else float(value)
        return ElevationGrid(arr)

    def cell_means(self) -> np.ndarray:
        """
        Mean of the 4 corners of every cell.

        Returns:
            Array [rows-1, cols-1]; NaN where any corner is absent
        """
        z = self.elevations
        # NaN propagates, so incomplete cells stay NaN
        return (z[:-1, :-1] + z[:-1, 1:] + z[1:, :-1] + z[1:, 1:]) / 4.0

    def interpolate(self, row: float, col: float) -> Optional[float]:
        """Bilinear elevation at fractional grid coordinates."""
        return bilinear_interp(self, row, col)

    def point_id(self, row: int, col: int) -> str:
        return point_id(row, col)

    def statistics(self) -> Optional[GridStatistics]:
        """Min/max/mean/relief of the valid samples, or None if there are none."""
        valid = self.elevations[self.valid_mask]

        if valid.size == 0:
            return None

        vmin = float(np.min(valid))
        vmax = float(np.max(valid))
        return GridStatistics(
            min=vmin,
            max=vmax,
            mean=float(np.mean(valid)),
            relief=vmax - vmin,
            count=int(valid.size),
            total=int(self.elevations.size),
        )
