"""Shared infrastructure for burrow CLI commands."""

from __future__ import annotations

import functools
import getpass
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from typer.core import TyperGroup

from burrow.config import get_configured_actor, get_database_path
from burrow.constants import BURROW_DIRNAME
from burrow.storage import SQLiteStorage

if TYPE_CHECKING:
    import click


class SortedGroup(TyperGroup):
    """Typer group that lists commands in alphabetical order."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return commands sorted alphabetically."""
        return sorted(super().list_commands(ctx))


@functools.lru_cache(maxsize=1)
def get_default_operator() -> str:
    """Identity used when neither --actor nor config.toml names one.

    The git ``user.email`` when git is installed and has one set, otherwise
    the login name.
    """
    git = shutil.which("git")
    if git is not None:
        result = subprocess.run(
            [git, "config", "--get", "user.email"],
            capture_output=True,
            text=True,
            check=False,
        )
        email = result.stdout.strip()
        if result.returncode == 0 and email:
            return email
    return getpass.getuser()


def resolve_actor(burrow_dir: str, actor: str | None) -> str:
    """Pick the actor: explicit flag, then config.toml, then git/OS user."""
    if actor:
        return actor
    return get_configured_actor(burrow_dir) or get_default_operator()


def find_burrow_dir(start_dir: str | None = None) -> str:
    """Find .burrow directory by searching upward from start_dir.

    Args:
        start_dir: Directory to start searching from (default: current directory)

    Returns:
        Path to .burrow directory, or ".burrow" if not found
    """
    current = Path.cwd() if start_dir is None else Path(start_dir).resolve()

    while True:
        candidate = current / BURROW_DIRNAME
        if candidate.is_dir():
            return str(candidate)

        parent = current.parent
        if parent == current:
            return BURROW_DIRNAME
        current = parent


def get_storage(
    burrow_dir: str = BURROW_DIRNAME,
    create_dir: bool = False,
) -> SQLiteStorage:
    """Open the store for a .burrow directory.

    If burrow_dir doesn't exist in current directory, searches upward
    to find it (similar to how git finds .git).

    Args:
        burrow_dir: Path to .burrow directory.
        create_dir: If True, create the directory if it doesn't exist.

    Returns:
        SQLiteStorage instance
    """
    if not create_dir and not Path(burrow_dir).is_dir():
        burrow_dir = find_burrow_dir()
    return SQLiteStorage(get_database_path(burrow_dir), create_dir=create_dir)


def open_storage_or_exit(burrow_dir: str) -> SQLiteStorage:
    """Open the store, printing an error and exiting 1 if it is missing."""
    from ._json_state import echo_error

    try:
        return get_storage(burrow_dir)
    except ValueError as e:
        echo_error(str(e))
        raise SystemExit(1) from e
