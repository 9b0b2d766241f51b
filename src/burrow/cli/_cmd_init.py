"""Initialization command for burrow CLI."""

from __future__ import annotations

import typer

from burrow.config import load_config, save_config
from burrow.constants import BURROW_DIRNAME

from ._helpers import get_storage
from ._json_state import echo_error, echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register the init command."""

    @app.command()
    def init(
        prefix: str = typer.Option(
            ...,
            "--prefix",
            "-p",
            help="Root namespace for issue IDs (e.g. 'proj' -> proj-<hash>)",
        ),
        burrow_dir: str = typer.Option(
            BURROW_DIRNAME,
            "--burrow-dir",
            help="Path to .burrow directory",
        ),
        actor: str | None = typer.Option(
            None,
            "--actor",
            help="Default actor recorded on events (saved to config.toml)",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Initialize a new burrow store.

        Creates the .burrow directory and database and sets the issue
        prefix every ID is rooted under. Re-running init changes the prefix
        for new issues only.
        """
        # Strip trailing hyphens (the hyphen is added during ID generation)
        prefix = prefix.strip().rstrip("-")
        if not prefix:
            echo_error("prefix must not be empty")
            raise SystemExit(1)

        storage = get_storage(burrow_dir, create_dir=True)
        try:
            storage.init_prefix(prefix)
        finally:
            storage.close()

        if actor:
            config = load_config(burrow_dir)
            config["actor"] = actor
            save_config(burrow_dir, config)

        if is_json_output(json_output):
            echo_json({"burrow_dir": burrow_dir, "prefix": prefix})
            return

        typer.echo(f"✓ Set prefix: {prefix}")
        typer.echo(f"  Issues will be named: {prefix}-<hash> (e.g., {prefix}-1a2b)")
        typer.echo(f"\n✓ burrow store initialized in {burrow_dir}")
