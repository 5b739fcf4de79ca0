"""
Puzzle implementations for ClockX.
"""

from clockx.puzzles.clock import (
    CONTROL_REGIONS,
    ControlId,
    ControlRegion,
    RubiksClock,
    WrapPolicy,
)

__all__ = [
    "CONTROL_REGIONS",
    "ControlId",
    "ControlRegion",
    "RubiksClock",
    "WrapPolicy",
]
