"""
ClockX: a Rubik's Clock style dial puzzle with JAX

A 3x3 grid of dials (1..12) turned by four corner controls. The puzzle
transform is pure and JIT-compiled; ``ClockGame`` wraps it in a mutable play
session with step counting and injected randomness.
"""

from clockx.core import FieldDescriptor, Puzzle, PuzzleState, state_dataclass
from clockx.game import ClockGame
from clockx.puzzles import (
    CONTROL_REGIONS,
    ControlId,
    ControlRegion,
    RubiksClock,
    WrapPolicy,
)

__version__ = "0.1.0"

__all__ = [
    # Core framework
    "Puzzle",
    "PuzzleState",
    "FieldDescriptor",
    "state_dataclass",
    # Puzzle
    "RubiksClock",
    "ControlId",
    "ControlRegion",
    "WrapPolicy",
    "CONTROL_REGIONS",
    # Session
    "ClockGame",
]
