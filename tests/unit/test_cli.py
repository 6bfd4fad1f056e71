"""Tests for CLI commands."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from calcengine._version import get_version
from calcengine.cli import app


@pytest.fixture
def cli_runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """Return a CLI test runner working in an empty directory."""
    monkeypatch.chdir(tmp_path)
    for key in ("CALC_NUMBER_SYSTEM", "CALC_LOGIC", "CALC_MAX_INPUT_LENGTH"):
        monkeypatch.delenv(key, raising=False)
    return CliRunner()


class TestEvalCommand:
    def test_single_expression(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["eval", "1 + 2"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "3"

    def test_shared_state(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["eval", "a = 2", "a * 3", "ans + 1"])
        assert result.exit_code == 0
        assert result.stdout.split() == ["2", "6", "7"]

    def test_number_system_option(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--numbers", "fraction", "eval", "1/3 + 1/6"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "1/2"

    def test_unknown_number_system(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--numbers", "complex", "eval", "1"])
        assert result.exit_code == 2

    def test_error_exit_code(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["eval", "2x"])
        assert result.exit_code == 1

    def test_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "calc.toml").write_text('[calc]\nnumber_system = "decimal"\n')
        result = cli_runner.invoke(app, ["eval", "0.1 + 0.2"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "0.3"

    def test_missing_config_file(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--config", "nope.toml", "eval", "1"])
        assert result.exit_code == 2


class TestInspectCommands:
    def test_tokens(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["tokens", "1 + x"])
        assert result.exit_code == 0
        assert "NUMBER" in result.stdout
        assert "IDENT" in result.stdout

    def test_ast(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["ast", "2(3)"])
        assert result.exit_code == 0
        assert "(2.0 * 3.0)" in result.stdout

    def test_ast_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["ast", "(1"])
        assert result.exit_code == 1

    @pytest.mark.parametrize("command", ["tokens", "ast", "eval"])
    def test_max_input_length(self, cli_runner: CliRunner, command: str) -> None:
        env = {"CALC_MAX_INPUT_LENGTH": "3"}
        assert cli_runner.invoke(app, [command, "1+2"], env=env).exit_code == 0
        assert cli_runner.invoke(app, [command, "1 + 2"], env=env).exit_code == 1


class TestReplCommand:
    def test_session(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["repl"], input="a = 4\na * 2\nfoo(1)\n:vars\n:quit\n")
        assert result.exit_code == 0
        assert "8" in result.stdout
        assert "Variables" in result.stdout

    def test_end_of_input(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["repl"], input="1 + 1\n")
        assert result.exit_code == 0
        assert "2" in result.stdout


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "calcengine" in result.stdout


def test_version_matches_pyproject() -> None:
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    with pyproject.open("rb") as f:
        declared = tomllib.load(f)["project"]["version"]
    assert get_version() == declared
