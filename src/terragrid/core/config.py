"""
Configuration Module

Validated settings for contour generation and terrain analysis.
Constructing a config rejects malformed values up front, so the engines
never see a negative interval or a zero multiplier.
"""

from __future__ import annotations

from dataclasses import dataclass

from .validation import (
    ValidationError,
    validate_datum,
    validate_interval,
    validate_major_multiplier,
    validate_smoothing,
    validate_spacing,
)

UNITS = ("m", "ft")


@dataclass
class ContourConfig:
    """
    Contour settings.

    Attributes:
        interval: Elevation step between contours (> 0)
        major_multiplier: Every n-th contour is major (>= 1)
        smoothing: Curve smoothing, 0 (straight) to 1; clamped with a warning
    """
    interval: float = 1.0
    major_multiplier: int = 5
    smoothing: float = 0.5

    def __post_init__(self):
        self.interval = validate_interval(self.interval)
        self.major_multiplier = validate_major_multiplier(self.major_multiplier)
        self.smoothing = validate_smoothing(self.smoothing)

    def to_dict(self) -> dict:
        return {
            "interval": self.interval,
            "major_multiplier": self.major_multiplier,
            "smoothing": self.smoothing,
        }


@dataclass
class AnalysisConfig:
    """
    Terrain analysis settings.

    Attributes:
        spacing: Real-world distance between adjacent grid points (> 0)
        datum: Reference elevation for cut/fill
        units: Linear unit shared by elevations and spacing ("m" or "ft")
    """
    spacing: float = 1.0
    datum: float = 0.0
    units: str = "m"

    def __post_init__(self):
        self.spacing = validate_spacing(self.spacing)
        self.datum = validate_datum(self.datum)
        if self.units not in UNITS:
            raise ValidationError(
                f"units must be one of {', '.join(UNITS)}, got {self.units!r}"
            )

    @property
    def volume_units(self) -> str:
        return f"{self.units}³"

    def to_dict(self) -> dict:
        return {
            "spacing": self.spacing,
            "datum": self.datum,
            "units": self.units,
        }
