"""Version lookup for calcengine."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "calcengine"

# src/calcengine/_version.py -> repository root
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    """Installed distribution version, else the one declared in a source checkout."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        pass

    if _PYPROJECT.is_file():
        with _PYPROJECT.open("rb") as f:
            project = tomllib.load(f).get("project", {})
        if project.get("name") == DISTRIBUTION:
            return str(project.get("version", "0.0.0"))
    return "0.0.0"
