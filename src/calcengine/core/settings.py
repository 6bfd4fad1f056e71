"""
Configuration for calcengine.

Settings come from an optional TOML file and ``CALC_*`` environment
variables, in that order, so the environment wins.

Example ``calc.toml``:

    [calc]
    number_system = "decimal"
    decimal_precision = 50
    logic = true
    max_input_length = 1000
    log_level = "INFO"

Environment variables:
    - CALC_NUMBER_SYSTEM: float (default), decimal, fraction
    - CALC_DECIMAL_PRECISION: digits of precision for decimal
    - CALC_LOGIC: 1/0, true/false; evaluate comparisons and booleans
    - CALC_MAX_INPUT_LENGTH: maximum expression length (unset = unlimited)
    - CALC_LOG_LEVEL: logging level name used by the CLI

Usage:
    from calcengine.core.settings import build_computer, load_config

    computer = build_computer(load_config(Path("calc.toml")))
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from calcengine.core.expression_lang.computer import Computer
from calcengine.core.expression_lang.numbers import get_number_system, number_system_names

logger = logging.getLogger(__name__)

ENV_PREFIX = "CALC_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class CalcConfig:
    """Engine and front-end settings."""

    number_system: str = "float"  # "float" | "decimal" | "fraction"
    decimal_precision: int = 28
    logic: bool = True
    max_input_length: int | None = None
    log_level: str = "WARNING"


def _coerce(name: str, raw: Any, default: Any) -> Any:
    """Convert a raw TOML/env value to the type of the field's default."""
    if name == "max_input_length":
        if raw in (None, "", "none"):
            return None
        value = int(raw)
        if value <= 0:
            raise ValueError("must be positive")
        return value
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).lower().strip()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"expected a boolean, got {raw!r}")
    if isinstance(default, int):
        value = int(raw)
        if value <= 0:
            raise ValueError("must be positive")
        return value
    if name == "number_system":
        text = str(raw).lower().strip()
        if text not in number_system_names():
            raise ValueError(f"expected one of {number_system_names()}")
        return text
    if name == "log_level":
        text = str(raw).upper().strip()
        if not isinstance(logging.getLevelName(text), int):
            raise ValueError(f"unknown log level {raw!r}")
        return text
    return raw


def _apply(config: CalcConfig, values: Mapping[str, Any], source: str) -> None:
    defaults = CalcConfig()
    known = {f.name for f in fields(CalcConfig)}
    for key, raw in values.items():
        if key not in known:
            logger.warning("Ignoring unknown setting '%s' from %s", key, source)
            continue
        try:
            setattr(config, key, _coerce(key, raw, getattr(defaults, key)))
        except (TypeError, ValueError) as e:
            logger.warning(
                "Invalid value %r for '%s' from %s (%s). Keeping %r.",
                raw,
                key,
                source,
                e,
                getattr(config, key),
            )


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> CalcConfig:
    """Build a configuration from a TOML file and the environment.

    Args:
        path: TOML file with a ``[calc]`` table. Missing tables are fine.
        environ: Environment mapping, ``os.environ`` by default.

    Returns:
        CalcConfig with defaults for anything not set.

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    config = CalcConfig()

    if path is not None:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        _apply(config, data.get("calc", {}), str(path))

    environ = os.environ if environ is None else environ
    env_values = {
        key[len(ENV_PREFIX) :].lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_PREFIX)
    }
    _apply(config, env_values, "environment")

    return config


def build_computer(config: CalcConfig | None = None) -> Computer:
    """Create a default-seeded computer for the configured number system."""
    config = config or CalcConfig()
    options: dict[str, Any] = {}
    if config.number_system == "decimal":
        options["precision"] = config.decimal_precision
    numbers = get_number_system(config.number_system, **options)
    return Computer.default(
        numbers,
        logic=config.logic,
        max_input_length=config.max_input_length,
    )
