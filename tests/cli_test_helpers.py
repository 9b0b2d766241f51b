"""Shared test helpers for CLI test modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from typer.testing import CliRunner

from burrow.cli import app

if TYPE_CHECKING:
    from pathlib import Path

    from click.testing import Result

runner = CliRunner()


def _init(burrow_dir: Path, prefix: str = "proj") -> None:
    """Initialize a store with a prefix."""
    result = runner.invoke(
        app,
        ["init", "--prefix", prefix, "--burrow-dir", str(burrow_dir)],
    )
    assert result.exit_code == 0, result.output


def _create(burrow_dir: Path, title: str, *extra: str) -> Result:
    """Create an issue with optional extra flags."""
    return runner.invoke(
        app,
        [
            "create",
            title,
            "--burrow-dir",
            str(burrow_dir),
            "--actor",
            "tester@example.com",
            *extra,
        ],
    )
