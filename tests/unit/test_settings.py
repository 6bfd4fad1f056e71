"""Tests for calcengine configuration loading."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import pytest

from calcengine.core.errors import InputTooLong, UnsupportedOperation
from calcengine.core.expression_lang.numbers import DecimalNumbers, FloatNumbers
from calcengine.core.settings import CalcConfig, build_computer, load_config


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "calc.toml"
    path.write_text(
        """
[calc]
number_system = "decimal"
decimal_precision = 12
logic = false
max_input_length = 100
log_level = "info"
"""
    )
    return path


class TestLoadConfig:
    """TOML file and environment sources."""

    def test_defaults(self) -> None:
        config = load_config(environ={})
        assert config == CalcConfig()

    def test_file(self, config_file: Path) -> None:
        config = load_config(config_file, environ={})
        assert config.number_system == "decimal"
        assert config.decimal_precision == 12
        assert config.logic is False
        assert config.max_input_length == 100
        assert config.log_level == "INFO"

    def test_file_without_calc_table(self, tmp_path: Path) -> None:
        path = tmp_path / "other.toml"
        path.write_text('[project]\nname = "x"\n')
        assert load_config(path, environ={}) == CalcConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml", environ={})

    def test_environment_overrides_file(self, config_file: Path) -> None:
        config = load_config(
            config_file,
            environ={"CALC_NUMBER_SYSTEM": "fraction", "CALC_LOGIC": "yes", "HOME": "/"},
        )
        assert config.number_system == "fraction"
        assert config.logic is True
        assert config.decimal_precision == 12

    def test_invalid_value_keeps_previous(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="calcengine.core.settings"):
            config = load_config(
                environ={"CALC_NUMBER_SYSTEM": "complex", "CALC_DECIMAL_PRECISION": "-3"}
            )
        assert config.number_system == "float"
        assert config.decimal_precision == 28
        assert "Invalid value" in caplog.text

    def test_unknown_setting_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="calcengine.core.settings"):
            load_config(environ={"CALC_COLOUR": "blue"})
        assert "unknown setting 'colour'" in caplog.text

    def test_unlimited_input_length(self) -> None:
        config = load_config(environ={"CALC_MAX_INPUT_LENGTH": ""})
        assert config.max_input_length is None


class TestBuildComputer:
    """Computers built from configuration."""

    def test_default(self) -> None:
        computer = build_computer()
        assert isinstance(computer.numbers, FloatNumbers)
        assert computer.eval("sqrt(16)") == 4.0

    def test_from_file(self, config_file: Path) -> None:
        computer = build_computer(load_config(config_file, environ={}))
        assert isinstance(computer.numbers, DecimalNumbers)
        assert computer.numbers.precision == 12
        assert computer.eval("2/3") == Decimal("0.666666666667")
        with pytest.raises(UnsupportedOperation):
            computer.eval("1 < 2")
        with pytest.raises(InputTooLong):
            computer.eval("1" * 101)
