"""Project version lookup for ``--version`` output."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "payrolltax"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[2] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed version, or the one declared in a source checkout."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        pass

    try:
        with PYPROJECT_PATH.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
    except FileNotFoundError as error:
        raise RuntimeError(f"Unable to locate project metadata at {PYPROJECT_PATH}") from error

    version = project.get("version")
    if not version:
        raise RuntimeError("Unable to determine project version from pyproject.toml")
    return str(version)


__all__ = ["get_project_version"]
