import logging

import pytest
from click.testing import CliRunner

from clockx.cli import cli

TWO_MOVES_FROM_SOLVED = "11,11,12,11,10,11,12,11,11"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestPlay:
    def test_solving_announces_steps(self, runner):
        result = runner.invoke(
            cli,
            ["play", "--grid", TWO_MOVES_FROM_SOLVED, "--seed", "1"],
            input="tl\nbr\nq\n",
        )
        assert result.exit_code == 0, result.output
        assert "Congratulations! You solved it in 2 steps." in result.output
        # the game restarts at zero steps after a win
        assert result.output.rstrip().endswith("steps: 0")

    def test_numeric_controls(self, runner):
        result = runner.invoke(
            cli, ["play", "--grid", "3,4,5,6,7,8,9,10,11"], input="0\n1\n"
        )
        assert result.exit_code == 0, result.output
        assert "steps: 2" in result.output

    def test_unknown_command(self, runner):
        result = runner.invoke(cli, ["play", "--seed", "1"], input="spin\nq\n")
        assert result.exit_code == 0
        assert "Unknown control" in result.output
        assert "steps: 1" not in result.output

    def test_reset_command(self, runner):
        result = runner.invoke(cli, ["play", "--seed", "1"], input="tl\nr\nq\n")
        assert result.exit_code == 0
        assert "steps: 1" in result.output
        assert result.output.rstrip().endswith("steps: 0")

    @pytest.mark.parametrize(
        "grid", ["1,2,3", "1,2,3,4,5,6,7,8,x", "1,2,3,4,5,6,7,8,13"]
    )
    def test_bad_grid(self, runner, grid):
        result = runner.invoke(cli, ["play", "--grid", grid], input="q\n")
        assert result.exit_code == 2


class TestShow:
    def test_control_table(self, runner):
        result = runner.invoke(cli, ["show", "--grid", "3,4,5,6,7,8,9,10,11"])
        assert result.exit_code == 0, result.output
        assert "Controls:" in result.output
        assert "clamp" in result.output
        for label in ("TL", "TR", "BL", "BR"):
            assert f"] {label} cost=1.000" in result.output

    def test_seed_from_environment(self, runner):
        from_env = runner.invoke(cli, ["show"], env={"CLOCKX_SEED": "5"})
        from_flag = runner.invoke(cli, ["show", "--seed", "5"])
        assert from_env.exit_code == 0
        assert from_env.output == from_flag.output

    def test_images(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["show", "--seed", "2", "--img", "--output-dir", str(tmp_path)]
        )
        assert result.exit_code == 0, result.output
        for name in ("initial", "TL", "TR", "BL", "BR"):
            assert (tmp_path / f"{name}.png").exists()
