"""Shared pytest fixtures for calcengine tests."""

import pytest

from calcengine.core.expression_lang.computer import Computer


@pytest.fixture
def computer() -> Computer:
    """Return a default-seeded float computer."""
    return Computer.default()
