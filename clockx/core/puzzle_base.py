from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Optional

import chex
import jax
import jax.numpy as jnp

from clockx.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass
from clockx.utils.util import add_img_parser


class Puzzle(ABC):
    """Abstract base class for ClockX dial puzzles.

    Every concrete puzzle subclass must:

    1. Set ``action_size`` (number of controls).
    2. Implement :meth:`define_state_class` to return a ``@state_dataclass``-decorated class.
    3. Implement :meth:`get_actions`, :meth:`is_solved`, :meth:`get_solve_config`,
       :meth:`get_initial_state`, :meth:`get_string_parser`, and :meth:`get_img_parser`.

    The base class JIT-compiles the core methods and provides the batched
    variants built on ``jax.vmap``.

    Attributes:
        action_size: Number of discrete controls available in this puzzle.
        State: The ``@state_dataclass`` class representing states (set during ``__init__``).
        SolveConfig: The ``@state_dataclass`` class representing goal configurations
            (set during ``__init__``).
    """

    action_size: int = None

    @property
    def inverse_action_map(self) -> Optional[jnp.ndarray]:
        """
        Array mapping each action to its inverse, or None when some action
        cannot be undone by a single other action.
        """
        return None

    @property
    def is_reversible(self) -> bool:
        return self.inverse_action_map is not None

    class State(PuzzleState):
        pass

    class SolveConfig(PuzzleState):
        pass

    def define_solve_config_class(self) -> PuzzleState:
        """Return the ``@state_dataclass`` class used for the goal configuration.

        The default is a ``SolveConfig`` with a single ``TargetState`` field.

        Returns:
            A ``@state_dataclass`` class describing the solve configuration.
        """

        @state_dataclass
        class SolveConfig:
            TargetState: FieldDescriptor.scalar(dtype=self.State)

            def __str__(self, **kwargs):
                return self.TargetState.str(**kwargs)

        return SolveConfig

    @abstractmethod
    def define_state_class(self) -> PuzzleState:
        """Return the ``@state_dataclass`` class used for puzzle states."""
        pass

    @property
    def has_target(self) -> bool:
        return "TargetState" in self.SolveConfig.__annotations__.keys()

    @property
    def only_target(self) -> bool:
        return self.has_target and len(self.SolveConfig.__annotations__.keys()) == 1

    def __init__(self, **kwargs):
        """Initialise the puzzle.

        Subclass constructors **must** call ``super().__init__(**kwargs)``
        after setting ``action_size`` and any attributes needed by
        :meth:`define_state_class`.

        This method builds the ``State`` and ``SolveConfig`` classes,
        attaches the image parsers and JIT-compiles the core methods.

        Raises:
            ValueError: If ``action_size`` is still ``None`` after subclass init.
        """
        super().__init__()

        self.State = self.define_state_class()
        self.SolveConfig = self.define_solve_config_class()
        self.State = add_img_parser(self.State, self.get_img_parser())
        self.SolveConfig = add_img_parser(
            self.SolveConfig, self.get_solve_config_img_parser()
        )

        self.get_initial_state = jax.jit(self.get_initial_state)
        self.get_solve_config = jax.jit(self.get_solve_config)
        self.get_inits = jax.jit(self.get_inits)
        self.get_actions = jax.jit(self.get_actions)
        self.batched_get_actions = jax.jit(
            self.batched_get_actions, static_argnums=(4,)
        )
        self.get_neighbours = jax.jit(self.get_neighbours)
        self.batched_get_neighbours = jax.jit(
            self.batched_get_neighbours, static_argnums=(3,)
        )
        self.is_solved = jax.jit(self.is_solved)
        self.batched_is_solved = jax.jit(self.batched_is_solved, static_argnums=(2,))

        if self.action_size is None:
            raise ValueError(
                f"{self.__class__.__name__} must define `action_size` before calling Puzzle.__init__"
            )

    @abstractmethod
    def get_string_parser(self) -> Callable:
        """Return a callable ``(state, **kwargs) -> str`` rendering a ``State``."""
        pass

    def get_solve_config_img_parser(self) -> Callable:
        assert self.only_target, (
            "You should redefine this function, because this function is only for target state"
            f"SolveConfig: {self.SolveConfig.__annotations__.keys()}"
        )
        imgparser_state = self.get_img_parser()

        def imgparser(solve_config: "Puzzle.SolveConfig") -> jnp.ndarray:
            return imgparser_state(solve_config.TargetState)

        return imgparser

    @abstractmethod
    def get_img_parser(self) -> Callable:
        """Return a callable ``(state, **kwargs) -> np.ndarray`` producing an
        ``(H, W, 3)`` RGB image."""
        pass

    def get_data(self, key=None) -> Any:
        """Optionally return puzzle-specific data consumed by ``get_inits``."""
        return None

    @abstractmethod
    def get_solve_config(self, key=None, data=None) -> SolveConfig:
        """Build and return the goal configuration.

        Args:
            key: Optional JAX PRNG key.
            data: Optional puzzle-specific data from :meth:`get_data`.
        """
        pass

    @abstractmethod
    def get_initial_state(
        self, solve_config: SolveConfig, key=None, data=None
    ) -> State:
        """Build and return the starting state for a given goal.

        Args:
            solve_config: The goal configuration for this episode.
            key: JAX PRNG key used to draw a random start.
            data: Optional explicit starting values.
        """
        pass

    def get_inits(self, key=None) -> tuple[SolveConfig, State]:
        """Return ``(solve_config, initial_state)`` drawn from a single key."""
        datakey, solveconfigkey, initkey = jax.random.split(key, 3)
        data = self.get_data(datakey)
        solve_config = self.get_solve_config(solveconfigkey, data)
        return solve_config, self.get_initial_state(solve_config, initkey, data)

    def batched_get_actions(
        self,
        solve_configs: SolveConfig,
        states: State,
        actions: chex.Array,
        filleds: bool = True,
        multi_solve_config: bool = False,
    ) -> tuple[State, chex.Array]:
        """Vectorised version of :meth:`get_actions`.

        Args:
            solve_configs: Solve configurations, single or batched.
            states: Batch of states with leading batch dimension.
            actions: Batch of action indices.
            filleds: Whether each move is applied (broadcast scalar or batch).
            multi_solve_config: If ``True``, ``solve_configs`` has the same
                batch dimension as ``states``; otherwise a single config is
                broadcast.
        """
        if multi_solve_config:
            return jax.vmap(self.get_actions, in_axes=(0, 0, 0, 0))(
                solve_configs, states, actions, filleds
            )
        else:
            return jax.vmap(self.get_actions, in_axes=(None, 0, 0, 0))(
                solve_configs, states, actions, filleds
            )

    @abstractmethod
    def get_actions(
        self,
        solve_config: SolveConfig,
        state: State,
        actions: chex.Array,
        filled: bool = True,
    ) -> tuple[State, chex.Array]:
        """Apply a single action to a state.

        Returns:
            ``(next_state, cost)``; when ``filled`` is ``False`` the state is
            returned unchanged with ``jnp.inf`` cost.
        """
        pass

    def batched_get_neighbours(
        self,
        solve_configs: SolveConfig,
        states: State,
        filleds: bool = True,
        multi_solve_config: bool = False,
    ) -> tuple[State, chex.Array]:
        """Vectorised version of :meth:`get_neighbours`.

        Returns:
            ``(neighbour_states, costs)`` with shapes
            ``(action_size, batch, ...)`` and ``(action_size, batch)``.
        """
        if multi_solve_config:
            return jax.vmap(self.get_neighbours, in_axes=(0, 0, 0), out_axes=(1, 1))(
                solve_configs, states, filleds
            )
        else:
            return jax.vmap(self.get_neighbours, in_axes=(None, 0, 0), out_axes=(1, 1))(
                solve_configs, states, filleds
            )

    def get_neighbours(
        self, solve_config: SolveConfig, state: State, filled: bool = True
    ) -> tuple[State, chex.Array]:
        """Compute the successor state of every action.

        Returns:
            ``(neighbour_states, costs)`` where ``neighbour_states`` has
            shape ``(action_size, ...)`` and ``costs`` has shape
            ``(action_size,)``.
        """
        actions = jnp.arange(self.action_size)
        states, costs = jax.vmap(
            self.get_actions, in_axes=(None, None, 0, None), out_axes=(0, 0)
        )(solve_config, state, actions, filled)
        return states, costs

    def batched_is_solved(
        self,
        solve_configs: SolveConfig,
        states: State,
        multi_solve_config: bool = False,
    ) -> bool:
        """Vectorised version of :meth:`is_solved`; returns a ``(batch,)`` bool array."""
        if multi_solve_config:
            return jax.vmap(self.is_solved, in_axes=(0, 0))(solve_configs, states)
        else:
            return jax.vmap(self.is_solved, in_axes=(None, 0))(solve_configs, states)

    @abstractmethod
    def is_solved(self, solve_config: SolveConfig, state: State) -> bool:
        """
        This function should return True if the state satisfies the goal
        described by the solve config.
        """
        pass

    def action_to_string(self, action: int) -> str:
        """Return a human-readable name for the given action index."""
        return f"action {action}"

    @staticmethod
    def _grid_visualize_format(size: int, cell_width: int = 1) -> str:
        """Build a box-drawing format string for a ``size × size`` board of
        ``cell_width``-character cells."""
        inner = size * (cell_width + 1) - 1
        form = "┏━" + "━" * inner + "━┓\n"
        for _ in range(size):
            form += "┃ "
            form += " ".join(["{:s}"] * size)
            form += " ┃\n"
        form += "┗━" + "━" * inner + "━┛"
        return form

    def __repr__(self):
        state_fields = list(self.State.__annotations__.keys())
        solve_config_fields = list(self.SolveConfig.__annotations__.keys())
        return (
            f"Puzzle({self.__class__.__name__}, "
            f"action_size={self.action_size}, "
            f"state_fields={state_fields}, "
            f"solve_config_fields={solve_config_fields})"
        )
