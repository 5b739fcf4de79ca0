from __future__ import annotations

import logging
from typing import Optional

import chex
import jax
import numpy as np

from clockx.puzzles.clock import ControlId, RubiksClock

logger = logging.getLogger(__name__)


class ClockGame:
    """A single play session on a :class:`RubiksClock`.

    The session owns the current state, the step counter and a JAX PRNG key.
    Every mutation goes through :meth:`rotate` or :meth:`reset`; readers get
    copies via :attr:`grid`.

    The session is not thread-safe: call its methods serially.

    Args:
        initial_grid: Optional 3x3 dial values used verbatim (validated to lie
            in 1..12). When omitted the dials are drawn at random.
        key: JAX PRNG key driving every random draw of this session.
        seed: Integer seed, used when ``key`` is not given.
        puzzle: Puzzle instance to play on; a new ``RubiksClock`` by default.

    Raises:
        ValueError: If ``initial_grid`` has the wrong shape or out-of-range values.
    """

    def __init__(
        self,
        initial_grid=None,
        *,
        key: Optional[chex.PRNGKey] = None,
        seed: Optional[int] = None,
        puzzle: Optional[RubiksClock] = None,
    ):
        self.puzzle = puzzle if puzzle is not None else RubiksClock()
        if key is None:
            if seed is None:
                seed = int(np.random.SeedSequence().entropy % (2**32))
            key = jax.random.PRNGKey(seed)
        self._key = key
        self.solve_config = self.puzzle.get_solve_config()
        self._steps = 0
        if initial_grid is None:
            self._state = self._draw_state()
        else:
            self._state = self.puzzle.state_from_grid(initial_grid)

    def _draw_state(self) -> RubiksClock.State:
        self._key, subkey = jax.random.split(self._key)
        return self.puzzle.get_initial_state(self.solve_config, key=subkey)

    @staticmethod
    def _as_control(control) -> ControlId:
        if isinstance(control, (bool, np.bool_)):
            raise ValueError(f"Invalid control: {control!r}")
        try:
            return ControlId(control)
        except ValueError:
            raise ValueError(
                f"Invalid control: {control!r}; expected one of {[int(c) for c in ControlId]}"
            ) from None

    def rotate(self, control) -> None:
        """Apply one control and count it as a step, even if no dial moved."""
        control = self._as_control(control)
        self._state, _ = self.puzzle.get_actions(
            self.solve_config, self._state, int(control)
        )
        self._steps += 1
        logger.debug("rotate %s, step %d", control.name, self._steps)
        if self.is_won():
            logger.info("solved in %d steps", self._steps)

    def is_won(self) -> bool:
        return bool(self.puzzle.is_solved(self.solve_config, self._state))

    def reset(self) -> None:
        """Redraw every dial and zero the step counter."""
        self._state = self._draw_state()
        self._steps = 0
        logger.debug("reset")

    @property
    def state(self) -> RubiksClock.State:
        return self._state

    @property
    def grid(self) -> np.ndarray:
        return self.puzzle.grid_of(self._state)

    @property
    def steps(self) -> int:
        return self._steps

    def get_grid(self) -> np.ndarray:
        return self.grid

    def get_steps(self) -> int:
        return self._steps

    def __str__(self):
        return str(self._state)

    def __repr__(self):
        return f"ClockGame(grid={self.grid.tolist()}, steps={self._steps})"
