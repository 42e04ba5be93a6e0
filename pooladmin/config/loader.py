"""Layered TOML configuration files.

``default.toml`` is required. ``<POOLADMIN_ENV>.toml`` from the same
directory is laid over it when present. Environment variables come last and
are applied by the settings source, not here.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "POOLADMIN_CONFIG_DIR"
ENV_VAR = "POOLADMIN_ENV"
DEFAULT_ENV = "development"

# How many directories up from the working directory to look for config/
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    POOLADMIN_CONFIG_DIR wins when set and must exist. Otherwise the nearest
    ``config/`` at or above the working directory, or ``config`` relative to
    it when none is found.
    """
    override = os.environ.get(CONFIG_DIR_VAR)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents][:_SEARCH_DEPTH]:
        candidate = parent / "config"
        if candidate.is_dir():
            return candidate
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENV_VAR) or DEFAULT_ENV


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file; FileNotFoundError and TOMLDecodeError propagate."""
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Lay override over base without modifying either.

    Tables present on both sides merge key by key; any other value,
    lists included, is replaced.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """default.toml merged with the environment's file."""
    config_dir = get_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Missing {default_path}; create it or point {CONFIG_DIR_VAR} at a directory holding one"
        )

    config = load_toml(default_path)
    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.is_file():
        config = deep_merge(config, load_toml(env_path))
    return config
