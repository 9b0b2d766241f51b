"""Batch import of issues from a JSONL export."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import orjson

from burrow.importer import create_or_import
from burrow.models import ImportMode, Issue, classify_record, dict_to_issue

if TYPE_CHECKING:
    from burrow.storage import SQLiteStorage

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """Outcome of a batch import."""

    created: list[str] = field(default_factory=list[str])
    skipped_records: int = 0


def read_jsonl_issues(path: str | Path) -> tuple[list[Issue], int]:
    """Parse issue records from a JSONL file.

    Blank lines are ignored; dependency, link and event records are counted
    as skipped. A malformed line raises ``ValueError`` naming its line number.

    Returns:
        Tuple of (issues in file order, number of skipped non-issue records).
    """
    issues: list[Issue] = []
    skipped = 0
    with Path(path).open("rb") as f:
        for line_no, raw_line in enumerate(f, start=1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as e:
                msg = f"Invalid JSONL record at line {line_no}: {e}"
                raise ValueError(msg) from e
            if not isinstance(data, dict):
                msg = f"Invalid JSONL record at line {line_no}: expected an object"
                raise ValueError(msg)
            if classify_record(data) != "issue":
                skipped += 1
                continue
            issues.append(dict_to_issue(data))
    return issues, skipped


def sort_by_depth(issues: list[Issue]) -> list[Issue]:
    """Order issues so parents come before their hierarchical children.

    ``proj-ab`` sorts before ``proj-ab.1``, which sorts before
    ``proj-ab.1.1``. Issues without an ID keep their relative order at the
    top level. The sort is stable.
    """
    return sorted(issues, key=lambda issue: issue.depth)


def import_issues(
    storage: SQLiteStorage,
    issues: list[Issue],
    actor: str,
    mode: ImportMode = ImportMode.STRICT,
) -> ImportSummary:
    """Import ``issues`` in one transaction, parents first.

    Any failure rolls the whole batch back and propagates.
    """
    summary = ImportSummary()
    with storage.transaction() as tx:
        for issue in sort_by_depth(issues):
            create_or_import(tx, issue, actor, mode)
            summary.created.append(issue.id)
    logger.info("Imported %d issues (mode=%s)", len(summary.created), mode.value)
    return summary


def import_jsonl(
    storage: SQLiteStorage,
    path: str | Path,
    actor: str,
    mode: ImportMode = ImportMode.STRICT,
) -> ImportSummary:
    """Read a JSONL export and import every issue record in it."""
    issues, skipped = read_jsonl_issues(path)
    if skipped:
        logger.debug("Skipping %d non-issue records in %s", skipped, path)
    summary = import_issues(storage, issues, actor, mode)
    summary.skipped_records = skipped
    return summary
