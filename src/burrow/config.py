"""Configuration file handling for burrow."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from burrow.constants import CONFIG_FILENAME, DEFAULT_DB_FILENAME

logger = logging.getLogger(__name__)


def get_config_path(burrow_dir: str | Path) -> Path:
    """Get the path to the config file.

    Args:
        burrow_dir: Path to .burrow directory

    Returns:
        Path to config.toml
    """
    return Path(burrow_dir) / CONFIG_FILENAME


def load_config(burrow_dir: str | Path) -> dict[str, Any]:
    """Load configuration from .burrow/config.toml.

    Args:
        burrow_dir: Path to .burrow directory

    Returns:
        Configuration dictionary, or empty dict if no config exists
    """
    config_path = get_config_path(burrow_dir)
    if not config_path.exists():
        return {}

    try:
        with config_path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return {}


def save_config(burrow_dir: str | Path, config: dict[str, Any]) -> None:
    """Save configuration to .burrow/config.toml.

    Args:
        burrow_dir: Path to .burrow directory
        config: Configuration dictionary to save
    """
    config_path = get_config_path(burrow_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with config_path.open("wb") as f:
        tomli_w.dump(config, f)


def get_database_path(burrow_dir: str | Path) -> Path:
    """Resolve the SQLite database file for a .burrow directory."""
    config = load_config(burrow_dir)
    return Path(burrow_dir) / config.get("database", DEFAULT_DB_FILENAME)


def get_configured_actor(burrow_dir: str | Path) -> str | None:
    """Return the ``actor`` set in config.toml, if any."""
    actor = load_config(burrow_dir).get("actor")
    return actor or None
