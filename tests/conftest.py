"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import pytest

from burrow.cli._json_state import set_json_flag
from burrow.storage import SQLiteStorage

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_json_flag() -> Iterator[None]:
    """Clear the global --json state between CLI invocations."""
    set_json_flag(False)
    yield
    set_json_flag(False)


@pytest.fixture
def temp_burrow_dir(tmp_path: Path) -> Path:
    """Create a temporary .burrow directory for testing."""
    burrow_path = tmp_path / ".burrow"
    burrow_path.mkdir()
    return burrow_path


@pytest.fixture
def bare_storage(temp_burrow_dir: Path) -> Iterator[SQLiteStorage]:
    """Storage with schema but no issue_prefix configured."""
    storage = SQLiteStorage(temp_burrow_dir / "burrow.db")
    yield storage
    storage.close()


@pytest.fixture
def storage(bare_storage: SQLiteStorage) -> SQLiteStorage:
    """Storage initialized with the "proj" prefix."""
    bare_storage.init_prefix("proj")
    return bare_storage


def count_rows(storage: SQLiteStorage, table: str) -> int:
    """Count rows in one of the store's tables."""
    row = storage._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()  # noqa: S608
    return int(row[0])
