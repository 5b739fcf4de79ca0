import logging

import jax
import numpy as np
import pytest

from clockx.game import ClockGame
from clockx.puzzles.clock import ControlId, RubiksClock

LADDER = [[3, 4, 5], [6, 7, 8], [9, 10, 11]]
TWO_MOVES_FROM_SOLVED = [[11, 11, 12], [11, 10, 11], [12, 11, 11]]


@pytest.fixture(scope="module")
def puzzle():
    return RubiksClock()


@pytest.fixture
def game(puzzle):
    return ClockGame(seed=42, puzzle=puzzle)


def all_twelve():
    return np.full((3, 3), 12)


class TestConstruction:
    def test_random_dials_in_range(self, game):
        grid = game.grid
        assert grid.shape == (3, 3)
        assert np.all((grid >= 1) & (grid <= 12))
        assert game.steps == 0

    def test_explicit_grid_used_verbatim(self, puzzle):
        game = ClockGame(LADDER, puzzle=puzzle)
        assert game.get_grid().tolist() == LADDER
        assert game.get_steps() == 0

    def test_default_puzzle(self):
        game = ClockGame(LADDER)
        assert isinstance(game.puzzle, RubiksClock)

    @pytest.mark.parametrize(
        "grid",
        [
            [[1, 2, 3], [4, 5, 6]],
            [[0, 1, 1], [1, 1, 1], [1, 1, 1]],
            [[1, 1, 1], [1, 1, 1], [1, 1, 13]],
        ],
    )
    def test_invalid_grid_rejected(self, puzzle, grid):
        with pytest.raises(ValueError):
            ClockGame(grid, puzzle=puzzle)

    def test_same_seed_same_dials(self, puzzle):
        first = ClockGame(seed=7, puzzle=puzzle)
        second = ClockGame(seed=7, puzzle=puzzle)
        np.testing.assert_array_equal(first.grid, second.grid)
        first.reset()
        second.reset()
        np.testing.assert_array_equal(first.grid, second.grid)

    def test_key_injection_matches_seed(self, puzzle):
        from_key = ClockGame(key=jax.random.PRNGKey(3), puzzle=puzzle)
        from_seed = ClockGame(seed=3, puzzle=puzzle)
        np.testing.assert_array_equal(from_key.grid, from_seed.grid)


class TestRotate:
    def test_top_left_scenario(self, puzzle):
        game = ClockGame(LADDER, puzzle=puzzle)
        game.rotate(ControlId.TOP_LEFT)
        assert game.grid.tolist() == [[4, 5, 5], [7, 8, 8], [9, 10, 11]]

    def test_top_right_scenario(self, puzzle):
        game = ClockGame(LADDER, puzzle=puzzle)
        game.rotate(1)
        assert game.grid.tolist() == [[3, 5, 6], [6, 8, 9], [9, 10, 11]]

    def test_bottom_right_scenario(self, puzzle):
        game = ClockGame([[11, 5, 3], [7, 8, 6], [4, 1, 2]], puzzle=puzzle)
        game.rotate(ControlId.BOTTOM_RIGHT)
        assert game.grid.tolist() == [[11, 5, 3], [7, 9, 7], [4, 2, 3]]

    def test_wrap_around_at_twelve(self, puzzle):
        game = ClockGame([[12, 1, 1], [1, 1, 1], [1, 1, 1]], puzzle=puzzle)
        game.rotate(ControlId.TOP_LEFT)
        assert game.grid[0, 0] == 1

    @pytest.mark.parametrize("control", list(ControlId))
    def test_step_counter(self, game, control):
        before = game.steps
        game.rotate(control)
        assert game.steps == before + 1

    def test_clamped_rotation_still_counts(self, puzzle):
        game = ClockGame(all_twelve(), puzzle=puzzle)
        game.rotate(ControlId.BOTTOM_RIGHT)
        assert game.steps == 1
        assert game.grid.tolist() == all_twelve().tolist()
        assert game.is_won()

    def test_steps_accumulate(self, game):
        for control in [0, 1, 2, 3, 3, 0]:
            game.rotate(control)
        assert game.steps == 6

    @pytest.mark.parametrize("control", [4, -1, "tl", None, True, 1.5])
    def test_invalid_control_rejected(self, game, control):
        with pytest.raises(ValueError):
            game.rotate(control)
        assert game.steps == 0

    def test_numpy_integer_control(self, puzzle):
        game = ClockGame(LADDER, puzzle=puzzle)
        game.rotate(np.int64(0))
        assert game.grid[0, 0] == 4


class TestWinAndReset:
    def test_all_twelve_is_won(self, puzzle):
        assert ClockGame(all_twelve(), puzzle=puzzle).is_won()

    def test_single_eleven_is_not_won(self, puzzle):
        grid = all_twelve()
        grid[2, 1] = 11
        assert not ClockGame(grid, puzzle=puzzle).is_won()

    def test_solving_sequence(self, puzzle):
        game = ClockGame(TWO_MOVES_FROM_SOLVED, puzzle=puzzle)
        game.rotate(ControlId.TOP_LEFT)
        assert not game.is_won()
        game.rotate(ControlId.BOTTOM_RIGHT)
        assert game.is_won()
        assert game.steps == 2

    def test_reset(self, game):
        game.rotate(ControlId.TOP_LEFT)
        game.reset()
        grid = game.grid
        assert np.all((grid >= 1) & (grid <= 12))
        assert game.steps == 0

    def test_win_is_logged(self, puzzle, caplog):
        caplog.set_level(logging.INFO, logger="clockx.game")
        game = ClockGame(TWO_MOVES_FROM_SOLVED, puzzle=puzzle)
        game.rotate(ControlId.TOP_LEFT)
        game.rotate(ControlId.BOTTOM_RIGHT)
        assert "solved in 2 steps" in caplog.text


class TestSnapshots:
    def test_grid_is_a_copy(self, puzzle):
        game = ClockGame(LADDER, puzzle=puzzle)
        grid = game.grid
        grid[:] = 12
        assert game.grid.tolist() == LADDER
        assert not game.is_won()

    def test_state_is_puzzle_state(self, game):
        assert isinstance(game.state, game.puzzle.State)

    def test_str_and_repr(self, puzzle):
        game = ClockGame(LADDER, puzzle=puzzle)
        assert str(game).startswith("┏")
        assert repr(game) == f"ClockGame(grid={LADDER}, steps=0)"
