"""Output mode and error reporting shared by burrow commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import orjson
import typer

if TYPE_CHECKING:
    from burrow.errors import BurrowError

_output = {"json": False}


def set_json_flag(value: bool) -> None:
    """Set JSON mode from the global ``--json`` option."""
    _output["json"] = value


def is_json_output(local_flag: bool = False) -> bool:
    """Whether this invocation writes JSON.

    A command-level ``--json`` sticks for the rest of the invocation, so
    errors reported after it are JSON too.
    """
    if local_flag:
        _output["json"] = True
    return _output["json"]


def echo_json(data: Any) -> None:
    """Write ``data`` to stdout as indented JSON."""
    typer.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())


def echo_error(message: str, phase: str | None = None) -> None:
    """Write an error to stderr, tagged with the failing phase if known.

    JSON mode writes ``{"error": ..., "phase": ...}``; plain mode writes
    ``Error [phase]: message``.
    """
    if _output["json"]:
        payload: dict[str, str] = {"error": message}
        if phase:
            payload["phase"] = phase
        typer.echo(orjson.dumps(payload).decode(), err=True)
        return
    label = f"Error [{phase}]" if phase else "Error"
    typer.echo(f"{label}: {message}", err=True)


def exit_with_error(error: BurrowError) -> NoReturn:
    """Report a failed ingestion and exit with status 1."""
    echo_error(str(error), error.phase)
    raise SystemExit(1) from error
