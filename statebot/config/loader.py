"""Layered TOML configuration.

Layers, lowest precedence first:
- {config_dir}/default.toml
- {config_dir}/{STATEBOT_ENV}.toml

Either layer may be missing and then contributes nothing, so a bare
checkout runs on model defaults plus environment variables.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "STATEBOT_CONFIG_DIR"
ENVIRONMENT_ENV = "STATEBOT_ENV"
DEFAULT_ENVIRONMENT = "development"


def get_config_dir() -> Path:
    """Directory holding the TOML layers.

    STATEBOT_CONFIG_DIR wins and must name an existing directory.
    Otherwise the nearest config/ with a default.toml at or above the
    working directory is used.

    Raises:
        FileNotFoundError: If STATEBOT_CONFIG_DIR names a missing directory
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_ENV} is not a directory: {override}")
        return path

    cwd = Path.cwd()
    for base in (cwd, *cwd.parents):
        candidate = base / "config"
        if (candidate / "default.toml").is_file():
            return candidate
    return cwd / "config"


def get_environment() -> str:
    """Deployment environment naming the override layer."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """Existing TOML layers in merge order."""
    candidates = dict.fromkeys([config_dir / "default.toml", config_dir / f"{environment}.toml"])
    return [path for path in candidates if path.is_file()]


def load_toml(path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    with path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base; tables merge, everything else is replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Merge every existing layer into one dictionary.

    Args:
        config_dir: Directory to read; resolved with get_config_dir() if omitted
        environment: Override layer name; read from STATEBOT_ENV if omitted

    Returns:
        Merged configuration, empty when no layer exists
    """
    config_dir = config_dir or get_config_dir()
    environment = environment or get_environment()

    config: dict[str, Any] = {}
    for path in config_layers(config_dir, environment):
        config = deep_merge(config, load_toml(path))
    return config
