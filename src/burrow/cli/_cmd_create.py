"""Create command for burrow CLI."""

from __future__ import annotations

import typer

from burrow.constants import BURROW_DIRNAME, DEFAULT_PRIORITY, DEFAULT_TYPE
from burrow.errors import BurrowError
from burrow.importer import create_or_import
from burrow.models import ImportMode, Issue, Status, issue_to_dict

from ._helpers import open_storage_or_exit, resolve_actor
from ._json_state import echo_json, exit_with_error, is_json_output


def register(app: typer.Typer) -> None:
    """Register the create command."""

    @app.command()
    def create(
        title: str = typer.Argument(..., help="Issue title"),
        issue_id: str | None = typer.Option(
            None,
            "--id",
            help="Explicit issue ID (must match the store prefix)",
        ),
        id_prefix: str | None = typer.Option(
            None,
            "--id-prefix",
            help="Sub-namespace appended to the store prefix",
        ),
        issue_type: str = typer.Option(DEFAULT_TYPE, "--type", "-t", help="Issue type"),
        priority: int = typer.Option(
            DEFAULT_PRIORITY,
            "--priority",
            "-p",
            help="Priority (0-4, 0 is highest)",
        ),
        status: str = typer.Option(Status.OPEN.value, "--status", "-s", help="Status"),
        description: str | None = typer.Option(
            None,
            "--description",
            "-d",
            help="Issue description",
        ),
        labels: list[str] | None = typer.Option(
            None,
            "--label",
            "-l",
            help="Label (repeatable)",
        ),
        parent: str | None = typer.Option(None, "--parent", help="Parent issue ID"),
        actor: str | None = typer.Option(None, "--actor", help="Who is creating it"),
        burrow_dir: str = typer.Option(
            BURROW_DIRNAME,
            "--burrow-dir",
            help="Path to .burrow directory",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Create a single issue."""
        json_mode = is_json_output(json_output)
        who = resolve_actor(burrow_dir, actor)
        issue = Issue(
            title=title,
            id=issue_id or "",
            id_prefix=id_prefix or "",
            issue_type=issue_type,
            priority=priority,
            status=status,
            description=description,
            labels=list(labels or []),
            parent=parent,
            created_by=who,
        )

        storage = open_storage_or_exit(burrow_dir)
        try:
            with storage.transaction() as tx:
                create_or_import(tx, issue, who, ImportMode.STRICT)
        except BurrowError as e:
            exit_with_error(e)
        finally:
            storage.close()

        if json_mode:
            echo_json(issue_to_dict(issue))
            return
        typer.echo(f"✓ Created {issue.id}: {issue.title}")
