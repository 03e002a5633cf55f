"""Terrain analysis passes: slope, flow direction and cut/fill."""

from .terrain import compute_slope, compute_flow_direction, compute_cut_fill

__all__ = ["compute_slope", "compute_flow_direction", "compute_cut_fill"]
