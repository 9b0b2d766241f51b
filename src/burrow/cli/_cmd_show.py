"""Show command for burrow CLI."""

from __future__ import annotations

import typer

from burrow.constants import BURROW_DIRNAME
from burrow.models import issue_to_dict

from ._helpers import open_storage_or_exit
from ._json_state import echo_error, echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register the show command."""

    @app.command()
    def show(
        issue_id: str = typer.Argument(..., help="Full issue ID"),
        burrow_dir: str = typer.Option(
            BURROW_DIRNAME,
            "--burrow-dir",
            help="Path to .burrow directory",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Show one issue."""
        storage = open_storage_or_exit(burrow_dir)
        try:
            issue = storage.get_issue(issue_id)
        finally:
            storage.close()

        if issue is None:
            echo_error(f"issue {issue_id} not found")
            raise SystemExit(1)

        if is_json_output(json_output):
            echo_json(issue_to_dict(issue))
            return

        typer.echo(f"{issue.id}: {issue.title}")
        typer.echo(
            f"  Status: {issue.status}  Type: {issue.issue_type}  P{issue.priority}",
        )
        if issue.labels:
            typer.echo(f"  Labels: {', '.join(issue.labels)}")
        if issue.parent:
            typer.echo(f"  Parent: {issue.parent}")
        if issue.created_at:
            typer.echo(f"  Created: {issue.created_at.isoformat()}")
        if issue.closed_at:
            typer.echo(f"  Closed: {issue.closed_at.isoformat()}")
        if issue.description:
            typer.echo(f"\n{issue.description}")
