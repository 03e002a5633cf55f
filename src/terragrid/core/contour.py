"""
Contour Engine Module

Extracts contour lines from an elevation grid with Marching Squares,
chains the per-cell segments into polylines and converts polylines to
smoothed Bezier paths.

All coordinates are fractional grid coordinates: x is the column
(column.fraction) and y is the row (row.fraction).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from .grid import ElevationGrid
from .validation import validate_interval, validate_major_multiplier, validate_smoothing
from ..utils.mathutils import round_half_up, round_to

if TYPE_CHECKING:
    from shapely.geometry import MultiLineString

Point = Tuple[float, float]
Polyline = List[Point]

# Edges of a cell: 0 = top, 1 = right, 2 = bottom, 3 = left
EDGE_TOP, EDGE_RIGHT, EDGE_BOTTOM, EDGE_LEFT = 0, 1, 2, 3

# Marching Squares lookup: case index -> edge pairs joined by a segment.
# Case bits are (top-left << 3) | (top-right << 2) | (bottom-right << 1) | bottom-left.
# Saddles 5 and 10 use a fixed pairing that always cuts off the top-left
# and bottom-right corners; the cell centre is never sampled.
MS_SEGMENTS: Dict[int, Tuple[Tuple[int, int], ...]] = {
    0: (),
    1: ((EDGE_LEFT, EDGE_BOTTOM),),
    2: ((EDGE_BOTTOM, EDGE_RIGHT),),
    3: ((EDGE_LEFT, EDGE_RIGHT),),
    4: ((EDGE_TOP, EDGE_RIGHT),),
    5: ((EDGE_LEFT, EDGE_TOP), (EDGE_BOTTOM, EDGE_RIGHT)),
    6: ((EDGE_TOP, EDGE_BOTTOM),),
    7: ((EDGE_LEFT, EDGE_TOP),),
    8: ((EDGE_LEFT, EDGE_TOP),),
    9: ((EDGE_TOP, EDGE_BOTTOM),),
    10: ((EDGE_TOP, EDGE_LEFT), (EDGE_RIGHT, EDGE_BOTTOM)),
    11: ((EDGE_TOP, EDGE_RIGHT),),
    12: ((EDGE_LEFT, EDGE_RIGHT),),
    13: ((EDGE_BOTTOM, EDGE_RIGHT),),
    14: ((EDGE_LEFT, EDGE_BOTTOM),),
    15: (),
}

# Decimal places kept on each generated level
LEVEL_DECIMALS = 6


@dataclass(frozen=True)
class Segment:
    """One contour piece inside a single cell, in grid coordinates."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def start(self) -> Point:
        return (self.x1, self.y1)

    @property
    def end(self) -> Point:
        return (self.x2, self.y2)


@dataclass
class ContourLevel:
    """
    All contour polylines at one elevation.

    Attributes:
        level: Elevation of the contour
        is_major: True for every ``major_multiplier``-th interval
        polylines: Chained polylines in grid coordinates
    """
    level: float
    is_major: bool
    polylines: List[Polyline] = field(default_factory=list)

    @property
    def point_count(self) -> int:
        return sum(len(p) for p in self.polylines)

    def is_closed(self, index: int, tolerance: float = 1e-6) -> bool:
        """True if the polyline at ``index`` returns to its start point."""
        pts = self.polylines[index]
        if len(pts) < 3:
            return False
        return (
            abs(pts[0][0] - pts[-1][0]) <= tolerance
            and abs(pts[0][1] - pts[-1][1]) <= tolerance
        )

    def to_geometry(self) -> 'MultiLineString':
        """Polylines as a shapely MultiLineString (grid coordinates)."""
        from shapely.geometry import MultiLineString

        return MultiLineString([list(p) for p in self.polylines if len(p) >= 2])

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "level": self.level,
            "is_major": self.is_major,
            "polylines": [[list(p) for p in line] for line in self.polylines],
        }


@dataclass(frozen=True)
class PathCommand:
    """
    One drawing step of a curve path.

    ``kind`` is "L" (straight line, ``points`` = [end]) or "C" (cubic
    Bezier, ``points`` = [control1, control2, end]).
    """
    kind: str
    points: Tuple[Point, ...]


@dataclass(frozen=True)
class CurvePath:
    """A path starting at ``start`` followed by line or Bezier commands."""
    start: Optional[Point]
    commands: Tuple[PathCommand, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.start is None

    def control_points(self) -> List[Point]:
        """Start point followed by every command point, in order."""
        if self.start is None:
            return []
        pts = [self.start]
        for cmd in self.commands:
            pts.extend(cmd.points)
        return pts

    def to_svg(self, decimals: int = 3) -> str:
        """SVG path data, e.g. ``M0.000,0.500L1.000,0.500``."""
        if self.start is None:
            return ""

        def fmt(p: Point) -> str:
            return f"{p[0]:.{decimals}f},{p[1]:.{decimals}f}"

        d = "M" + fmt(self.start)
        for cmd in self.commands:
            if cmd.kind == "L":
                d += "L" + fmt(cmd.points[0])
            else:
                d += " C" + " ".join(fmt(p) for p in cmd.points)
        return d


def _edge_point(
    edge: int,
    v00: float,
    v10: float,
    v01: float,
    v11: float,
    level: float,
) -> Point:
    """
    Crossing point on a cell edge, relative to the cell's top-left corner.

    Corners: v00 top-left, v10 top-right, v01 bottom-left, v11 bottom-right.
    Raises ZeroDivisionError when the edge is flat.
    """
    if edge == EDGE_TOP:
        return ((level - v00) / (v10 - v00), 0.0)
    if edge == EDGE_RIGHT:
        return (1.0, (level - v10) / (v11 - v10))
    if edge == EDGE_BOTTOM:
        return ((level - v01) / (v11 - v01), 1.0)
    return (0.0, (level - v00) / (v01 - v00))


def compute_segments(grid, level: float) -> List[Segment]:
    """
    Compute contour segments for every cell at one elevation.

    Cells with any absent corner are skipped. A corner counts as above
    the level when ``value >= level``. Segments whose interpolated
    crossing is not finite are dropped.

    Args:
        grid: ElevationGrid or nested rows of float/None
        level: Contour elevation

    Returns:
        Segments in row-major cell order
    """
    grid = ElevationGrid.coerce(grid)
    if grid.rows < 2 or grid.cols < 2:
        return []

    z = grid.elevations
    with np.errstate(invalid="ignore"):
        above = (z >= level).astype(np.int8)
    cases = (
        (above[:-1, :-1] << 3)
        | (above[:-1, 1:] << 2)
        | (above[1:, 1:] << 1)
        | above[1:, :-1]
    )
    complete = ~np.isnan(grid.cell_means())
    active = complete & (cases != 0) & (cases != 15)

    segments = []
    for r, c in np.argwhere(active):
        r, c = int(r), int(c)
        v00 = float(z[r, c])
        v10 = float(z[r, c + 1])
        v01 = float(z[r + 1, c])
        v11 = float(z[r + 1, c + 1])

        for e1, e2 in MS_SEGMENTS[int(cases[r, c])]:
            try:
                fx1, fy1 = _edge_point(e1, v00, v10, v01, v11, level)
                fx2, fy2 = _edge_point(e2, v00, v10, v01, v11, level)
            except ZeroDivisionError:
                continue

            if not all(math.isfinite(v) for v in (fx1, fy1, fx2, fy2)):
                continue

            segments.append(Segment(c + fx1, r + fy1, c + fx2, r + fy2))

    return segments


def merge_segments(segments: Sequence[Segment], tolerance: float = 1e-6) -> List[Polyline]:
    """
    Chain segments sharing an endpoint into polylines.

    Endpoints are matched on coordinates snapped to ``tolerance``. Each
    polyline is seeded with the first unused segment and extended
    forward from its last point, then backward from its first point.
    Every segment is used exactly once, so a closed loop ends where it
    started and an isolated segment becomes a two-point polyline.
    """
    if not segments:
        return []

    def key(x: float, y: float) -> Tuple[int, int]:
        return (round_half_up(x / tolerance), round_half_up(y / tolerance))

    # endpoint key -> [(segment index, which end)]; end 1 = start, 2 = end
    adjacency: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
    for i, seg in enumerate(segments):
        adjacency.setdefault(key(seg.x1, seg.y1), []).append((i, 1))
        adjacency.setdefault(key(seg.x2, seg.y2), []).append((i, 2))

    used = [False] * len(segments)

    def next_unused(point: Point) -> Optional[Tuple[int, int]]:
        for seg_idx, end in adjacency.get(key(*point), ()):
            if not used[seg_idx]:
                return seg_idx, end
        return None

    polylines = []
    for start_idx, seed in enumerate(segments):
        if used[start_idx]:
            continue

        used[start_idx] = True
        pts: List[Point] = [seed.start, seed.end]

        # Extend forward
        while True:
            found = next_unused(pts[-1])
            if found is None:
                break
            seg_idx, end = found
            used[seg_idx] = True
            seg = segments[seg_idx]
            pts.append(seg.end if end == 1 else seg.start)

        # Extend backward
        while True:
            found = next_unused(pts[0])
            if found is None:
                break
            seg_idx, end = found
            used[seg_idx] = True
            seg = segments[seg_idx]
            pts.insert(0, seg.start if end == 2 else seg.end)

        polylines.append(pts)

    return polylines


def polyline_to_path(points: Sequence[Point], smoothing: float = 0.5) -> CurvePath:
    """
    Convert a polyline to a path, optionally smoothed.

    With ``smoothing == 0`` or fewer than 3 points the path is made of
    straight lines through the input points. Otherwise each span
    p1 -> p2 becomes a cubic Bezier derived from Catmull-Rom with
    control points ``p1 + (p2 - p0) * s / 6`` and ``p2 - (p3 - p1) * s / 6``
    where ``s = smoothing * 6``; p0 and p3 repeat the end points at the
    ends of the sequence.

    Args:
        points: Polyline points
        smoothing: 0 (straight) .. 1 (full Catmull-Rom tangents); values
            outside the range are clamped with a warning

    Returns:
        CurvePath
    """
    smoothing = validate_smoothing(smoothing)

    pts = [(float(x), float(y)) for x, y in points]
    if not pts:
        return CurvePath(start=None)

    n = len(pts)
    if n < 3 or smoothing == 0:
        return CurvePath(
            start=pts[0],
            commands=tuple(PathCommand("L", (p,)) for p in pts[1:]),
        )

    s = smoothing * 6
    commands = []
    for i in range(n - 1):
        p0 = pts[max(0, i - 1)]
        p1 = pts[i]
        p2 = pts[i + 1]
        p3 = pts[min(n - 1, i + 2)]
        c1 = (p1[0] + (p2[0] - p0[0]) * s / 6, p1[1] + (p2[1] - p0[1]) * s / 6)
        c2 = (p2[0] - (p3[0] - p1[0]) * s / 6, p2[1] - (p3[1] - p1[1]) * s / 6)
        commands.append(PathCommand("C", (c1, c2, p2)))

    return CurvePath(start=pts[0], commands=tuple(commands))


def generate_contours(
    grid,
    interval: float,
    major_multiplier: int = 5,
) -> List[ContourLevel]:
    """
    Generate the full contour set for a grid.

    Levels run from ``ceil(min / interval) * interval`` up to the maximum
    valid elevation in steps of ``interval``, each rounded to 6 decimals.
    Only levels that produced at least one polyline are returned.

    Args:
        grid: ElevationGrid or nested rows of float/None
        interval: Contour interval (> 0)
        major_multiplier: Every n-th level is flagged as major (>= 1)

    Returns:
        ContourLevel list in ascending elevation; empty when the grid is
        smaller than 2x2 or has fewer than 4 valid samples

    Raises:
        IntervalError: If interval or major_multiplier is invalid
    """
    interval = validate_interval(interval)
    major_multiplier = validate_major_multiplier(major_multiplier)

    grid = ElevationGrid.coerce(grid)
    if grid.rows < 2 or grid.cols < 2:
        return []

    stats = grid.statistics()
    if stats is None or stats.count < 4:
        return []

    result = []
    level = math.ceil(stats.min / interval) * interval
    while level <= stats.max:
        level = round_to(level, LEVEL_DECIMALS)
        polylines = merge_segments(compute_segments(grid, level))
        if polylines:
            is_major = round_half_up(level / interval) % major_multiplier == 0
            result.append(ContourLevel(level=level, is_major=is_major, polylines=polylines))
        level += interval

    return result


def generate_contour_paths(
    levels: Sequence[ContourLevel],
    smoothing: float = 0.5,
    scale: float = 1.0,
) -> List[Tuple[ContourLevel, List[CurvePath]]]:
    """
    Pair every contour level with drawing paths for its polylines.

    Points are multiplied by ``scale`` (grid units to drawing units)
    before smoothing.
    """
    smoothing = validate_smoothing(smoothing)
    out = []
    for contour in levels:
        paths = [
            polyline_to_path([(x * scale, y * scale) for x, y in line], smoothing)
            for line in contour.polylines
            if len(line) >= 2
        ]
        out.append((contour, paths))
    return out
