"""
Shared Math Helpers

Bilinear interpolation, color ramps and small numeric helpers used by
the contour engine, the analysis passes and the elevation raster.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Tuple

Color = Tuple[int, int, int]


# Color ramps as [R, G, B] stops, low to high
RAMPS: Dict[str, List[Color]] = {
    "terrain": [
        (20, 60, 120),    # deep blue
        (58, 120, 180),   # blue
        (80, 170, 100),   # green
        (120, 180, 70),   # light green
        (180, 170, 80),   # yellow
        (170, 100, 50),   # brown
        (200, 160, 130),  # tan
        (240, 240, 240),  # white (peaks)
    ],
    "viridis": [
        (68, 1, 84), (59, 82, 139), (33, 145, 140), (94, 201, 98), (253, 231, 37),
    ],
    "plasma": [
        (13, 8, 135), (126, 3, 167), (203, 71, 120), (248, 149, 64), (240, 249, 33),
    ],
    "grayscale": [(20, 20, 25), (240, 240, 245)],
    "rdbu": [
        (178, 24, 43), (244, 165, 130), (247, 247, 247), (146, 197, 222), (33, 102, 172),
    ],
    # flat (pale) -> green -> yellow -> orange -> red (steep)
    "slope": [
        (240, 245, 255), (120, 200, 100), (255, 220, 60), (255, 120, 30), (200, 30, 30),
    ],
}

DEFAULT_RAMP = "terrain"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return int(math.floor(value + 0.5))


def round_to(value: float, ndigits: int = 3) -> float:
    """Round to ``ndigits`` decimals, halves towards +infinity."""
    scale = 10 ** ndigits
    return round_half_up(value * scale) / scale


def lerp_color(c1: Sequence[int], c2: Sequence[int], t: float) -> Color:
    return (
        round_half_up(lerp(c1[0], c2[0], t)),
        round_half_up(lerp(c1[1], c2[1], t)),
        round_half_up(lerp(c1[2], c2[2], t)),
    )


def get_ramp(name: Optional[str]) -> List[Color]:
    """Look up a color ramp by name, falling back to the terrain ramp."""
    if name is None:
        return RAMPS[DEFAULT_RAMP]
    return RAMPS.get(name, RAMPS[DEFAULT_RAMP])


def sample_ramp(ramp: Sequence[Sequence[int]], t: float) -> Color:
    """
    Sample a multi-stop color ramp.

    Args:
        ramp: Sequence of (R, G, B) stops, evenly spaced over [0, 1]
        t: Position along the ramp; clamped into [0, 1]

    Returns:
        Interpolated (R, G, B) color
    """
    t = clamp(t, 0.0, 1.0)
    n = len(ramp) - 1
    if n <= 0:
        return tuple(ramp[0])
    idx = t * n
    lo = int(math.floor(idx))
    hi = min(lo + 1, n)
    lo = min(lo, n)
    return lerp_color(ramp[lo], ramp[hi], idx - lo)


def rgb_string(color: Sequence[int]) -> str:
    return f"rgb({color[0]},{color[1]},{color[2]})"


def bilinear_interp(grid, r: float, c: float) -> Optional[float]:
    """
    Bilinear interpolation at fractional grid coordinates.

    ``grid`` is anything indexable as ``grid[row][col]`` holding floats or
    None (an ElevationGrid works through its ``get`` method). The upper
    neighbours are clamped to the last row/column, so sampling exactly on
    the far edge is allowed.

    Returns:
        Interpolated elevation, or None if any of the 4 samples is absent
        or the position lies outside the grid.
    """
    if hasattr(grid, "get") and hasattr(grid, "rows"):
        rows, cols = grid.rows, grid.cols
        value_at = grid.get
    else:
        rows = len(grid)
        cols = len(grid[0]) if rows else 0
        value_at = lambda row, col: grid[row][col]  # noqa: E731

    if rows == 0 or cols == 0 or r < 0 or c < 0 or r > rows - 1 or c > cols - 1:
        return None

    r0, c0 = int(math.floor(r)), int(math.floor(c))
    r1, c1 = min(r0 + 1, rows - 1), min(c0 + 1, cols - 1)
    fr, fc = r - r0, c - c0

    v00 = value_at(r0, c0)
    v01 = value_at(r0, c1)
    v10 = value_at(r1, c0)
    v11 = value_at(r1, c1)
    if v00 is None or v01 is None or v10 is None or v11 is None:
        return None

    return (
        v00 * (1 - fr) * (1 - fc)
        + v01 * (1 - fr) * fc
        + v10 * fr * (1 - fc)
        + v11 * fr * fc
    )


def col_label(index: int) -> str:
    """Spreadsheet column label: 0 -> A, 25 -> Z, 26 -> AA."""
    label = ""
    num = index
    while True:
        label = chr(65 + num % 26) + label
        num = num // 26 - 1
        if num < 0:
            return label


def point_id(row: int, col: int) -> str:
    """Survey point label, e.g. row 0 col 0 -> A1."""
    return f"{col_label(col)}{row + 1}"
