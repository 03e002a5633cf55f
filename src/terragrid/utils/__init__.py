"""Utility modules."""

from .mathutils import bilinear_interp, sample_ramp, get_ramp

__all__ = ["bilinear_interp", "sample_ramp", "get_ramp"]
