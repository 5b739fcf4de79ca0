import enum
import math
from typing import NamedTuple

import chex
import jax
import jax.numpy as jnp
import numpy as np
from termcolor import colored

from clockx.core.puzzle_base import Puzzle
from clockx.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass
from clockx.utils.annotate import IMG_SIZE
from clockx.utils.util import coloring_str, from_uint8, to_uint8

TYPE = jnp.uint8
ACTIVE_BITS = 4  # 1..12 fits in a nibble
DIAL_MIN = 1
DIAL_MAX = 12
GRID_SIZE = 3


class ControlId(enum.IntEnum):
    TOP_LEFT = 0
    TOP_RIGHT = 1
    BOTTOM_LEFT = 2
    BOTTOM_RIGHT = 3

    @property
    def label(self) -> str:
        return CONTROL_LABELS[self]

    @classmethod
    def from_label(cls, label) -> "ControlId":
        """Resolve ``"tl"``, ``"top_left"`` or ``"0"`` style input to a control."""
        text = str(label).strip().lower()
        if text.isdigit():
            try:
                return cls(int(text))
            except ValueError:
                raise ValueError(f"Unknown control: {label!r}") from None
        for control in cls:
            if text in (control.label.lower(), control.name.lower()):
                return control
        raise ValueError(f"Unknown control: {label!r}")


class WrapPolicy(enum.Enum):
    WRAP = "wrap"  # 12 -> 1
    CLAMP = "clamp"  # 12 stays 12


class ControlRegion(NamedTuple):
    rows: tuple[int, ...]
    cols: tuple[int, ...]
    policy: WrapPolicy

    @property
    def cells(self) -> tuple[tuple[int, int], ...]:
        return tuple((r, c) for r in self.rows for c in self.cols)


CONTROL_REGIONS = {
    ControlId.TOP_LEFT: ControlRegion((0, 1), (0, 1), WrapPolicy.WRAP),
    ControlId.TOP_RIGHT: ControlRegion((0, 1), (1, 2), WrapPolicy.WRAP),
    ControlId.BOTTOM_LEFT: ControlRegion((1, 2), (0, 1), WrapPolicy.WRAP),
    ControlId.BOTTOM_RIGHT: ControlRegion((1, 2), (1, 2), WrapPolicy.CLAMP),
}

CONTROL_LABELS = {
    ControlId.TOP_LEFT: "TL",
    ControlId.TOP_RIGHT: "TR",
    ControlId.BOTTOM_LEFT: "BL",
    ControlId.BOTTOM_RIGHT: "BR",
}

SOLVED_RGB = (0, 200, 83)
FACE_RGB = (46, 125, 50)
HAND_RGB = (232, 245, 233)


def action_to_char(action: int) -> str:
    try:
        control = ControlId(int(action))
    except ValueError:
        raise ValueError(f"Invalid action: {action}") from None
    return colored(control.label, "light_yellow")


class RubiksClock(Puzzle):
    """
    3x3 grid of dials showing 1..12, driven by four corner controls.

    Each control advances the dials of one 2x2 quadrant by one hour. Three
    quadrants wrap 12 back to 1; the bottom-right quadrant stops at 12. The
    puzzle is solved when all nine dials show 12.
    """

    size: int
    region_masks: chex.Array
    clamp_mask: chex.Array

    def define_state_class(self) -> PuzzleState:
        """Defines the state class for RubiksClock using xtructure."""
        str_parser = self.get_string_parser()
        raw_shape = (self.size * self.size,)
        packed_dials = to_uint8(jnp.ones(raw_shape, dtype=TYPE), ACTIVE_BITS)

        @state_dataclass
        class State:
            dials: FieldDescriptor.tensor(dtype=TYPE, shape=packed_dials.shape)

            def __str__(self, **kwargs):
                return str_parser(self, **kwargs)

            @property
            def packed(self) -> "RubiksClock.State":
                return State(dials=to_uint8(self.dials, ACTIVE_BITS))

            @property
            def unpacked(self) -> "RubiksClock.State":
                return State(dials=from_uint8(self.dials, raw_shape, ACTIVE_BITS))

        return State

    def __init__(self, **kwargs):
        self.size = GRID_SIZE
        self.action_size = len(ControlId)

        masks = np.zeros((self.action_size, self.size * self.size), dtype=bool)
        clamp = np.zeros((self.action_size,), dtype=bool)
        for control, region in CONTROL_REGIONS.items():
            for r, c in region.cells:
                masks[control, r * self.size + c] = True
            clamp[control] = region.policy is WrapPolicy.CLAMP
        self.region_masks = jnp.asarray(masks)
        self.clamp_mask = jnp.asarray(clamp)
        super().__init__(**kwargs)

    def get_string_parser(self):
        form = self._grid_visualize_format(self.size, cell_width=2)

        def to_str(value):
            token = f"{int(value):2d}"
            if value == DIAL_MAX:
                return coloring_str(token, SOLVED_RGB)
            return token

        def parser(state: "RubiksClock.State", **kwargs):
            return form.format(*map(to_str, np.asarray(state.unpacked.dials)))

        return parser

    def get_target_state(self, key=None) -> "RubiksClock.State":
        return self.State(dials=jnp.full(self.size**2, DIAL_MAX, dtype=TYPE)).packed

    def get_solve_config(self, key=None, data=None) -> Puzzle.SolveConfig:
        return self.SolveConfig(TargetState=self.get_target_state(key))

    def get_initial_state(
        self, solve_config: Puzzle.SolveConfig, key=None, data=None
    ) -> "RubiksClock.State":
        """
        `data`, when given, is used verbatim as the dial values; otherwise every
        dial is drawn independently and uniformly from 1..12.
        """
        if data is not None:
            dials = jnp.asarray(data, dtype=TYPE).reshape(-1)
        else:
            dials = jax.random.randint(
                key, (self.size * self.size,), DIAL_MIN, DIAL_MAX + 1
            ).astype(TYPE)
        return self.State(dials=dials).packed

    def state_from_grid(self, grid) -> "RubiksClock.State":
        """
        Build a state from a 3x3 (or flat length-9) array of dial values.

        Raises:
            ValueError: if the shape is wrong, the values are not integers or
                any value lies outside 1..12.
        """
        values = np.asarray(grid)
        if values.shape not in ((self.size, self.size), (self.size * self.size,)):
            raise ValueError(
                f"Expected a {self.size}x{self.size} grid of dial values, got shape {values.shape}"
            )
        if not np.issubdtype(values.dtype, np.integer):
            raise ValueError(f"Dial values must be integers, got dtype {values.dtype}")
        if values.min() < DIAL_MIN or values.max() > DIAL_MAX:
            raise ValueError(
                f"Dial values must lie in [{DIAL_MIN}, {DIAL_MAX}], got {values.reshape(-1).tolist()}"
            )
        return self.State(dials=jnp.asarray(values.reshape(-1), dtype=TYPE)).packed

    def grid_of(self, state: "RubiksClock.State") -> np.ndarray:
        """Return a fresh (3, 3) integer copy of the dials of `state`."""
        return np.array(state.unpacked.dials, dtype=np.int64).reshape(self.size, self.size)

    def get_actions(
        self,
        solve_config: Puzzle.SolveConfig,
        state: "RubiksClock.State",
        action: chex.Array,
        filled: bool = True,
    ) -> tuple["RubiksClock.State", chex.Array]:
        """
        Advance every dial in the region of `action` by one hour.
        """
        dials = state.unpacked.dials
        in_region = self.region_masks[action]

        wrapped = dials % DIAL_MAX + 1
        clamped = jnp.minimum(dials + 1, DIAL_MAX)
        advanced = jnp.where(self.clamp_mask[action], clamped, wrapped)
        rotated = jnp.where(in_region, advanced, dials).astype(TYPE)

        next_dials, cost = jax.lax.cond(
            filled, lambda: (rotated, 1.0), lambda: (dials, jnp.inf)
        )
        next_state = self.State(dials=next_dials).packed
        return next_state, cost

    def is_solved(self, solve_config: Puzzle.SolveConfig, state: "RubiksClock.State") -> bool:
        return state == solve_config.TargetState

    def action_to_string(self, action: int) -> str:
        return action_to_char(action)

    def get_img_parser(self):
        """
        Renders the nine dials as clock faces with a single hand each.
        """
        import cv2

        def img_func(state: "RubiksClock.State", **kwargs):
            imgsize = IMG_SIZE[0]
            img = np.full((imgsize, imgsize, 3), fill_value=250, dtype=np.uint8)
            cell_size = imgsize // self.size
            radius = int(cell_size * 0.4)
            dials = np.asarray(state.unpacked.dials).reshape(self.size, self.size)
            for i in range(self.size):
                for j in range(self.size):
                    value = int(dials[i, j])
                    center = (j * cell_size + cell_size // 2, i * cell_size + cell_size // 2)
                    face = SOLVED_RGB if value == DIAL_MAX else FACE_RGB
                    img = cv2.circle(img, center, radius, face, thickness=-1)
                    img = cv2.circle(img, center, radius, (0, 0, 0), thickness=2)
                    for hour in range(DIAL_MAX):
                        angle = math.radians(hour * 30 - 90)
                        outer = (
                            int(center[0] + radius * math.cos(angle)),
                            int(center[1] + radius * math.sin(angle)),
                        )
                        inner = (
                            int(center[0] + radius * 0.85 * math.cos(angle)),
                            int(center[1] + radius * 0.85 * math.sin(angle)),
                        )
                        img = cv2.line(img, inner, outer, HAND_RGB, thickness=2)
                    angle = math.radians(value * 30 - 90)
                    tip = (
                        int(center[0] + radius * 0.7 * math.cos(angle)),
                        int(center[1] + radius * 0.7 * math.sin(angle)),
                    )
                    img = cv2.line(img, center, tip, HAND_RGB, thickness=4)
                    img = cv2.circle(img, center, 5, (0, 0, 0), thickness=-1)
            return img

        return img_func
