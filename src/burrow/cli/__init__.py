"""burrow CLI commands for issue ingestion."""

from __future__ import annotations

import logging

import typer

from ._helpers import SortedGroup

app = typer.Typer(
    help="burrow - transactional issue store with multi-repo import",
    no_args_is_help=True,
    cls=SortedGroup,
)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON for all commands",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log each ingestion step to stderr",
    ),
) -> None:
    from ._json_state import set_json_flag

    set_json_flag(json_output)
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


from . import (  # noqa: E402
    _cmd_create,
    _cmd_import,
    _cmd_init,
    _cmd_show,
)

for _mod in (
    _cmd_create,
    _cmd_import,
    _cmd_init,
    _cmd_show,
):
    _mod.register(app)


def main() -> None:
    """Run the burrow CLI application."""
    app()
