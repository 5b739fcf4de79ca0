"""
Utility functions and constants for ClockX puzzles.

Bit packing for dial states, image-parser attachment and terminal coloring.
"""

from clockx.utils.annotate import IMG_SIZE
from clockx.utils.util import add_img_parser, coloring_str, from_uint8, to_uint8

__all__ = [
    "IMG_SIZE",
    "add_img_parser",
    "coloring_str",
    "from_uint8",
    "to_uint8",
]
