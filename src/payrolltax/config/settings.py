"""Settings loader wrapping the shared schema models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import ConfigurationError, Settings

SETTINGS_ENV = "PAYROLLTAX_SETTINGS"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as error:
            raise ConfigurationError(
                f"Settings file {path.name} is not valid YAML: {error}"
            ) from error
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must define a mapping at the top level")
    return data


def resolve_settings_path(path: str | Path | None = None) -> Path | None:
    """Return the settings file to read, honouring ``PAYROLLTAX_SETTINGS``."""

    if path is not None:
        return Path(path)

    env_value = os.getenv(SETTINGS_ENV, "").strip()
    if env_value:
        return Path(env_value)
    return None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load runtime settings, falling back to defaults when no file is configured.

    Relative data file paths are resolved against the directory holding the
    settings file, or the current working directory when defaults are used.
    """

    settings_path = resolve_settings_path(path)
    if settings_path is None:
        return Settings().resolve_paths(Path.cwd())

    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    raw_settings = _load_yaml(settings_path)

    try:
        settings = Settings.model_validate(raw_settings)
    except ValidationError as error:
        raise ConfigurationError(
            f"Settings validation failed for {settings_path.name}: {error}"
        ) from error

    return settings.resolve_paths(settings_path.resolve().parent)


__all__ = [
    "SETTINGS_ENV",
    "load_settings",
    "resolve_settings_path",
]
