"""Tests for config.toml handling."""

from __future__ import annotations

from typing import TYPE_CHECKING

from burrow.config import (
    get_config_path,
    get_configured_actor,
    get_database_path,
    load_config,
    save_config,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestConfigFile:
    """Test loading and saving config.toml."""

    def test_missing_config_is_empty(self, temp_burrow_dir: Path) -> None:
        """Test that no file means an empty config."""
        assert load_config(temp_burrow_dir) == {}

    def test_save_and_load(self, temp_burrow_dir: Path) -> None:
        """Test that saved values load back."""
        save_config(temp_burrow_dir, {"actor": "alice", "database": "issues.db"})
        assert get_config_path(temp_burrow_dir).exists()
        assert load_config(temp_burrow_dir) == {"actor": "alice", "database": "issues.db"}

    def test_invalid_toml_is_ignored(self, temp_burrow_dir: Path) -> None:
        """Test that a broken file falls back to an empty config."""
        get_config_path(temp_burrow_dir).write_text("actor = [unterminated\n")
        assert load_config(temp_burrow_dir) == {}


class TestConfigValues:
    """Test derived config values."""

    def test_default_database_path(self, temp_burrow_dir: Path) -> None:
        """Test the default database filename."""
        assert get_database_path(temp_burrow_dir) == temp_burrow_dir / "burrow.db"

    def test_custom_database_path(self, temp_burrow_dir: Path) -> None:
        """Test a configured database filename."""
        save_config(temp_burrow_dir, {"database": "issues.db"})
        assert get_database_path(temp_burrow_dir) == temp_burrow_dir / "issues.db"

    def test_configured_actor(self, temp_burrow_dir: Path) -> None:
        """Test actor lookup with and without a value."""
        assert get_configured_actor(temp_burrow_dir) is None
        save_config(temp_burrow_dir, {"actor": "bot@example.com"})
        assert get_configured_actor(temp_burrow_dir) == "bot@example.com"
