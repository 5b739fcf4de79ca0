"""
Core puzzle framework components.

Base classes and state containers shared by ClockX puzzles.
"""

from clockx.core.puzzle_base import Puzzle
from clockx.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass

__all__ = [
    "Puzzle",
    "PuzzleState",
    "FieldDescriptor",
    "state_dataclass",
]
