"""
Input Validation Module

Provides validation functions and custom exceptions for the terragrid package.
All validation functions provide clear, actionable error messages.

Missing survey data is never a validation problem: absent samples are
filtered by the engines themselves. Only malformed configuration and
malformed grid shapes are rejected here.
"""

from __future__ import annotations

import math
import numbers
import os
import warnings
from pathlib import Path
from typing import Sequence, Union


class ValidationError(ValueError):
    """Base exception for validation errors with user-friendly messages."""
    pass


class SpacingError(ValidationError):
    """Invalid grid spacing value."""
    pass


class IntervalError(ValidationError):
    """Invalid contour interval or major-line multiplier."""
    pass


class GridShapeError(ValidationError):
    """Grid rows are ragged or the grid is not two-dimensional."""
    pass


class FilePermissionError(ValidationError):
    """Cannot write to specified path."""
    pass


# Above this many points a full contour pass gets noticeably slow
LARGE_GRID_POINTS = 1_000_000


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_spacing(spacing: float, context: str = "spacing") -> float:
    """
    Validate grid spacing is a positive, finite number.

    Args:
        spacing: Real-world distance between adjacent grid points
        context: Description of the value (used in error messages)

    Returns:
        The validated spacing as a float

    Raises:
        SpacingError: If spacing is None, not a number, or <= 0
    """
    if spacing is None:
        raise SpacingError(f"{context} cannot be None")

    if not _is_number(spacing):
        raise SpacingError(
            f"{context} must be a number, got {type(spacing).__name__}"
        )

    if not math.isfinite(spacing) or spacing <= 0:
        raise SpacingError(
            f"{context} must be positive, got {spacing}. "
            "Use the real-world distance between neighbouring survey points."
        )

    return float(spacing)


def validate_interval(interval: float, context: str = "contour interval") -> float:
    """
    Validate contour interval is a positive, finite number.

    Raises:
        IntervalError: If interval is None, not a number, or <= 0
    """
    if interval is None:
        raise IntervalError(f"{context} cannot be None")

    if not _is_number(interval):
        raise IntervalError(
            f"{context} must be a number, got {type(interval).__name__}"
        )

    if not math.isfinite(interval) or interval <= 0:
        raise IntervalError(
            f"{context} must be positive, got {interval}. "
            "Typical values are 0.25-5.0 elevation units."
        )

    return float(interval)


def validate_major_multiplier(
    multiplier: int,
    context: str = "major multiplier",
) -> int:
    """
    Validate the major-contour multiplier is a positive integer.

    Raises:
        IntervalError: If multiplier is not an integer >= 1
    """
    if multiplier is None:
        raise IntervalError(f"{context} cannot be None")

    if isinstance(multiplier, bool) or not isinstance(multiplier, numbers.Integral):
        if _is_number(multiplier) and float(multiplier).is_integer():
            multiplier = int(multiplier)
        else:
            raise IntervalError(
                f"{context} must be an integer, got {multiplier!r}"
            )

    if multiplier < 1:
        raise IntervalError(
            f"{context} must be at least 1, got {multiplier}. "
            "Use 5 to emphasise every fifth contour."
        )

    return int(multiplier)


def validate_smoothing(smoothing: float, context: str = "smoothing") -> float:
    """
    Validate the curve smoothing factor, clamping it into [0, 1].

    Values outside the range are clamped with a warning rather than
    rejected.

    Raises:
        ValidationError: If smoothing is None or not a finite number
    """
    if smoothing is None:
        raise ValidationError(f"{context} cannot be None")

    if not _is_number(smoothing) or not math.isfinite(smoothing):
        raise ValidationError(
            f"{context} must be a finite number, got {smoothing!r}"
        )

    if smoothing < 0 or smoothing > 1:
        clamped = min(1.0, max(0.0, float(smoothing)))
        warnings.warn(
            f"{context} of {smoothing} is outside 0-1, using {clamped}.",
            UserWarning,
            stacklevel=2
        )
        return clamped

    return float(smoothing)


def validate_datum(datum: float, context: str = "datum elevation") -> float:
    """
    Validate a datum elevation is a finite number (any sign).

    Raises:
        ValidationError: If datum is None, not a number, or not finite
    """
    if datum is None:
        raise ValidationError(f"{context} cannot be None")

    if not _is_number(datum) or not math.isfinite(datum):
        raise ValidationError(
            f"{context} must be a finite number, got {datum!r}"
        )

    return float(datum)


def validate_grid_rows(rows: Sequence[Sequence]) -> tuple[int, int]:
    """
    Validate a nested sequence is a rectangular grid.

    Args:
        rows: Sequence of row sequences

    Returns:
        (rows, cols) of the grid; ``[]`` is (0, 0) and ``[[]]`` is (1, 0)

    Raises:
        GridShapeError: If rows have unequal length
    """
    n_rows = len(rows)
    n_cols = len(rows[0]) if n_rows else 0

    for index, row in enumerate(rows):
        if len(row) != n_cols:
            raise GridShapeError(
                f"Grid is not rectangular: row {index} has {len(row)} entries, "
                f"expected {n_cols} (the length of row 0)."
            )

    return n_rows, n_cols


def validate_grid_dimensions(rows: int, cols: int, stacklevel: int = 2) -> None:
    """
    Validate that grid dimensions are valid.

    Zero-sized grids are allowed; the engines return empty results for
    them. Very large grids only warn.

    Args:
        rows: Number of grid rows
        cols: Number of grid columns
        stacklevel: Passed to ``warnings.warn`` so the warning points at
            the caller that supplied the grid

    Raises:
        GridShapeError: If a dimension is negative
    """
    if rows < 0 or cols < 0:
        raise GridShapeError(
            f"Invalid grid dimensions ({rows} rows x {cols} cols)."
        )

    total_points = rows * cols
    if total_points > LARGE_GRID_POINTS:
        warnings.warn(
            f"Very large grid ({rows}x{cols} = {total_points:,} points). "
            "Contour generation runs one full pass per level.",
            UserWarning,
            stacklevel=stacklevel
        )


def validate_output_path(filepath: Union[str, Path], context: str = "output file") -> Path:
    """
    Validate output path is writable before attempting to write.

    Args:
        filepath: The path to validate
        context: Description of what will be written (used in error messages)

    Returns:
        The validated path as a Path object

    Raises:
        FilePermissionError: If directory doesn't exist or isn't writable
    """
    path = Path(filepath)
    parent = path.parent

    if str(parent) == '.':
        parent = Path.cwd()

    if not parent.exists():
        raise FilePermissionError(
            f"Cannot write {context}: directory '{parent}' does not exist. "
            "Create the directory first or specify a different path."
        )

    if not os.access(parent, os.W_OK):
        raise FilePermissionError(
            f"Cannot write {context}: no write permission for directory '{parent}'."
        )

    if path.exists() and not os.access(path, os.W_OK):
        raise FilePermissionError(
            f"Cannot overwrite {context}: file '{path}' exists but is not writable."
        )

    return path
