"""Terminal front end for ClockX.

Example::

    clockx play --seed 7
    clockx show --grid 3,4,5,6,7,8,9,10,11 --img

``play`` reads one command per line (``tl``/``tr``/``bl``/``br`` or ``0``-``3``
to turn a control, ``r`` to reset, ``q`` to quit) and re-renders the dials
after every move. ``show`` prints a state, the control table and every
neighbour state, and optionally saves image renders.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import click
import numpy as np
from PIL import Image
from tabulate import tabulate

from clockx.game import ClockGame
from clockx.puzzles.clock import CONTROL_REGIONS, ControlId
from clockx.utils.logging_config import configure_logging

QUIT_COMMANDS = ("q", "quit", "exit")
RESET_COMMANDS = ("r", "reset")


def _parse_grid(ctx, param, value: Optional[str]):
    if value is None:
        return None
    tokens = [token for token in re.split(r"[\s,]+", value.strip()) if token]
    try:
        values = [int(token) for token in tokens]
    except ValueError:
        raise click.BadParameter(f"dial values must be integers, got {value!r}")
    if len(values) != 9:
        raise click.BadParameter(f"expected 9 dial values, got {len(values)}")
    return np.asarray(values, dtype=np.int64).reshape(3, 3)


def _new_game(grid, seed: Optional[int]) -> ClockGame:
    try:
        return ClockGame(grid, seed=seed)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--grid")


def _render(game: ClockGame) -> None:
    click.echo(str(game))
    click.echo(f"steps: {game.steps}")


def _ensure_uint8(image) -> np.ndarray:
    array = np.asarray(image)
    if array.dtype != np.uint8:
        array = array.astype(np.uint8)
    return array


def _save_image(array, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(_ensure_uint8(array)).save(path)
    return path


seed_option = click.option(
    "--seed",
    type=int,
    default=None,
    envvar="CLOCKX_SEED",
    help="PRNG seed for reproducible dials (random when omitted).",
)
grid_option = click.option(
    "--grid",
    callback=_parse_grid,
    default=None,
    help="Nine comma separated dial values, row by row, instead of a random start.",
)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="CLOCKX_LOG_LEVEL",
)
def cli(log_level: str) -> None:
    configure_logging(log_level)


@cli.command()
@seed_option
@grid_option
def play(seed: Optional[int], grid) -> None:
    """Play interactively on stdin."""
    game = _new_game(grid, seed)
    click.echo("Turn a control with tl, tr, bl, br (or 0-3); r resets, q quits.")
    _render(game)

    stdin = click.get_text_stream("stdin")
    for line in stdin:
        command = line.strip().lower()
        if not command:
            continue
        if command in QUIT_COMMANDS:
            break
        if command in RESET_COMMANDS:
            game.reset()
            _render(game)
            continue
        try:
            control = ControlId.from_label(command)
        except ValueError as e:
            click.echo(f"error: {e}", err=True)
            continue

        game.rotate(control)
        _render(game)
        if game.is_won():
            click.echo(f"Congratulations! You solved it in {game.steps} steps.")
            game.reset()
            _render(game)


@cli.command()
@seed_option
@grid_option
@click.option(
    "--img/--no-img", default=False, help="Save image renders of every state."
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=Path("images/clockx"),
    show_default=True,
    help="Directory where generated images are stored when --img is used.",
)
def show(seed: Optional[int], grid, img: bool, output_dir: Path) -> None:
    """Print a state, the control table and all neighbour states."""
    game = _new_game(grid, seed)
    puzzle = game.puzzle
    click.echo(f"Loaded puzzle: {puzzle!r}")

    click.echo("\nInitial State:")
    click.echo(str(game))

    rows = [
        [int(control), control.label, region.rows, region.cols, region.policy.value]
        for control, region in CONTROL_REGIONS.items()
    ]
    click.echo("\nControls:")
    click.echo(tabulate(rows, headers=["id", "control", "rows", "cols", "policy"]))

    neighbours, costs = puzzle.get_neighbours(game.solve_config, game.state, filled=True)
    np_costs = np.asarray(costs)

    click.echo("\nNeighbours:")
    for idx in range(puzzle.action_size):
        label = ControlId(idx).label
        click.echo(f"[{idx:02d}] {label} cost={np_costs[idx]:.3f}")
        click.echo(str(neighbours[idx]))

    if img:
        img_parser = puzzle.get_img_parser()
        init_path = _save_image(img_parser(game.state), output_dir / "initial.png")
        click.echo(f"Saved initial state image -> {init_path}")
        for idx in range(puzzle.action_size):
            label = ControlId(idx).label
            path = _save_image(img_parser(neighbours[idx]), output_dir / f"{label}.png")
            click.echo(f"Saved neighbour {label} image -> {path}")


if __name__ == "__main__":
    cli()
