"""Core data structures and algorithms."""

from .grid import ElevationGrid, GridStatistics
from .contour import ContourLevel, generate_contours

__all__ = ["ElevationGrid", "GridStatistics", "ContourLevel", "generate_contours"]
