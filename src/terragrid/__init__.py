"""
TerraGrid Terrain Engine

A Python library for turning a grid of surveyed elevation points into
contour lines, a colored elevation raster, and terrain metrics
(slope, flow direction, cut/fill volumes).
"""

__version__ = "0.1.0"

from .core.grid import ElevationGrid, GridStatistics
from .core.config import ContourConfig, AnalysisConfig
from .core.contour import (
    ContourLevel,
    CurvePath,
    Segment,
    compute_segments,
    merge_segments,
    polyline_to_path,
    generate_contours,
)
from .analysis.terrain import (
    SlopeField,
    FlowField,
    CutFillResult,
    compute_slope,
    compute_flow_direction,
    compute_cut_fill,
)

__all__ = [
    "ElevationGrid",
    "GridStatistics",
    "ContourConfig",
    "AnalysisConfig",
    "ContourLevel",
    "CurvePath",
    "Segment",
    "compute_segments",
    "merge_segments",
    "polyline_to_path",
    "generate_contours",
    "SlopeField",
    "FlowField",
    "CutFillResult",
    "compute_slope",
    "compute_flow_direction",
    "compute_cut_fill",
]
