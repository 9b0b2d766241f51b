"""Import command for burrow CLI."""

from __future__ import annotations

from pathlib import Path

import typer

from burrow.batch import import_jsonl
from burrow.constants import BURROW_DIRNAME
from burrow.errors import BurrowError
from burrow.models import ImportMode

from ._helpers import open_storage_or_exit, resolve_actor
from ._json_state import echo_error, echo_json, exit_with_error, is_json_output


def register(app: typer.Typer) -> None:
    """Register the import command."""

    @app.command("import")
    def import_cmd(
        path: Path = typer.Argument(..., help="JSONL file to import"),
        trusted: bool = typer.Option(
            False,
            "--trusted",
            help="Skip prefix checks on supplied IDs (round-tripping an export)",
        ),
        actor: str | None = typer.Option(None, "--actor", help="Who is importing"),
        burrow_dir: str = typer.Option(
            BURROW_DIRNAME,
            "--burrow-dir",
            help="Path to .burrow directory",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Import issues from a JSONL file in a single transaction.

        Parents are inserted before their hierarchical children. If any
        issue fails, nothing from the file is stored.
        """
        json_mode = is_json_output(json_output)
        if not path.is_file():
            echo_error(f"file not found: {path}")
            raise SystemExit(1)

        who = resolve_actor(burrow_dir, actor)
        storage = open_storage_or_exit(burrow_dir)
        try:
            summary = import_jsonl(
                storage,
                path,
                who,
                ImportMode.from_skip_flag(trusted),
            )
        except BurrowError as e:
            exit_with_error(e)
        except ValueError as e:
            echo_error(str(e))
            raise SystemExit(1) from e
        finally:
            storage.close()

        if json_mode:
            echo_json(
                {"created": summary.created, "skipped": summary.skipped_records},
            )
            return
        typer.echo(f"✓ Imported {len(summary.created)} issues from {path}")
        if summary.skipped_records:
            typer.echo(f"  Skipped {summary.skipped_records} non-issue records")
