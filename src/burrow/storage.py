"""SQLite-backed storage for issues with caller-scoped transactions."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

from burrow.constants import (
    CUSTOM_STATUSES_KEY,
    CUSTOM_TYPES_KEY,
    ISSUE_PREFIX_KEY,
)
from burrow.errors import OperationCancelledError
from burrow.event_log import EventLog, created_event
from burrow.models import Issue
from burrow.schema import SCHEMA, SCHEMA_VERSION

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

_ISSUE_COLUMNS = (
    "id",
    "content_hash",
    "title",
    "description",
    "design",
    "acceptance",
    "notes",
    "status",
    "priority",
    "issue_type",
    "owner",
    "parent",
    "external_ref",
    "close_reason",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
    "closed_at",
    "deleted_at",
    "deleted_by",
    "delete_reason",
    "original_type",
    "metadata",
)
_DATETIME_COLUMNS = frozenset(
    {"created_at", "updated_at", "closed_at", "deleted_at"},
)


def _split_vocabulary(value: str | None) -> set[str]:
    """Parse a comma-separated config value into a set of names."""
    if not value:
        return set()
    return {name.strip() for name in value.split(",") if name.strip()}


def _column_value(issue: Issue, column: str) -> Any:
    value = getattr(issue, column)
    if column in _DATETIME_COLUMNS:
        return value.isoformat() if value else None
    if column == "metadata":
        return orjson.dumps(value or {}).decode()
    return value


def _row_to_issue(row: sqlite3.Row, labels: list[str]) -> Issue:
    """Convert a database row to an Issue object."""
    values: dict[str, Any] = {column: row[column] for column in _ISSUE_COLUMNS}
    for column in _DATETIME_COLUMNS:
        if values[column]:
            values[column] = datetime.fromisoformat(values[column])
    values["metadata"] = orjson.loads(values["metadata"] or "{}")
    return Issue(labels=labels, **values)


class Transaction:
    """Handle on an open unit of work.

    Exposes the reads and writes issue ingestion needs. It never begins,
    commits or rolls back; ``SQLiteStorage.transaction()`` owns that.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.conn = conn
        self._cancel_event = cancel_event
        self.events = EventLog(conn)

    def _check_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            msg = "operation cancelled by caller"
            raise OperationCancelledError(msg)

    # -- Config and vocabulary --------------------------------------------

    def get_config(self, key: str) -> str | None:
        """Read a single config value, or None if the key is absent."""
        self._check_cancelled()
        row = self.conn.execute(
            "SELECT value FROM config WHERE key = ?",
            (key,),
        ).fetchone()
        return None if row is None else row["value"]

    def set_config(self, key: str, value: str) -> None:
        """Write a config value, replacing any existing one."""
        self._check_cancelled()
        self.conn.execute(
            "INSERT INTO config (key, value) VALUES (?, ?) "
            "ON CONFLICT (key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    def get_custom_statuses(self) -> set[str]:
        """Return the custom statuses currently configured."""
        return _split_vocabulary(self.get_config(CUSTOM_STATUSES_KEY))

    def get_custom_types(self) -> set[str]:
        """Return the custom issue types currently configured."""
        return _split_vocabulary(self.get_config(CUSTOM_TYPES_KEY))

    def get_issue_prefix(self) -> str | None:
        return self.get_config(ISSUE_PREFIX_KEY)

    # -- Issues -------------------------------------------------------------

    def issue_exists(self, issue_id: str) -> bool:
        self._check_cancelled()
        row = self.conn.execute(
            "SELECT 1 FROM issues WHERE id = ?",
            (issue_id,),
        ).fetchone()
        return row is not None

    def count_issues_with_prefix(self, prefix: str) -> int:
        """Count issues whose ID is ``prefix-<key>``.

        IDs in a deeper sub-namespace (``proj-web-<key>`` when counting
        ``proj``) are not counted.
        """
        self._check_cancelled()
        root = f"{prefix}-"
        row = self.conn.execute(
            "SELECT COUNT(*) FROM issues "
            "WHERE substr(id, 1, ?) = ? AND instr(substr(id, ?), '-') = 0",
            (len(root), root, len(root) + 1),
        ).fetchone()
        return int(row[0])

    def insert_issue_strict(self, issue: Issue) -> None:
        """Insert an issue row and its labels; never overwrites.

        Raises:
            sqlite3.IntegrityError: On ID collision or constraint violation.
        """
        self._check_cancelled()
        placeholders = ", ".join("?" for _ in _ISSUE_COLUMNS)
        self.conn.execute(
            f"INSERT INTO issues ({', '.join(_ISSUE_COLUMNS)}) "  # noqa: S608
            f"VALUES ({placeholders})",
            tuple(_column_value(issue, column) for column in _ISSUE_COLUMNS),
        )
        for label in dict.fromkeys(issue.labels):
            self.conn.execute(
                "INSERT INTO labels (issue_id, label) VALUES (?, ?)",
                (issue.id, label),
            )

    def get_issue(self, issue_id: str) -> Issue | None:
        """Get an issue by its full ID."""
        self._check_cancelled()
        row = self.conn.execute(
            "SELECT * FROM issues WHERE id = ?",
            (issue_id,),
        ).fetchone()
        if row is None:
            return None
        labels = [
            r["label"]
            for r in self.conn.execute(
                "SELECT label FROM labels WHERE issue_id = ? ORDER BY label",
                (issue_id,),
            )
        ]
        return _row_to_issue(row, labels)

    # -- Side effects -------------------------------------------------------

    def record_created_event(self, issue: Issue, actor: str) -> None:
        """Append the "created" audit event for ``issue``."""
        self._check_cancelled()
        self.events.append(created_event(issue, actor))

    def mark_dirty(self, issue_id: str) -> None:
        """Flag ``issue_id`` as changed since the last sync."""
        self._check_cancelled()
        self.conn.execute(
            "INSERT INTO dirty_issues (issue_id, marked_at) VALUES (?, ?) "
            "ON CONFLICT (issue_id) DO UPDATE SET marked_at = excluded.marked_at",
            (issue_id, datetime.now().astimezone().isoformat()),
        )

    def get_dirty_issue_ids(self) -> list[str]:
        self._check_cancelled()
        rows = self.conn.execute(
            "SELECT issue_id FROM dirty_issues ORDER BY marked_at, issue_id",
        ).fetchall()
        return [row["issue_id"] for row in rows]


class SQLiteStorage:
    """Manages the SQLite database backing an issue store."""

    def __init__(
        self,
        path: str | Path = ".burrow/burrow.db",
        create_dir: bool = False,
    ) -> None:
        """Open (and if needed create) the database.

        Args:
            path: Path to the SQLite database file.
            create_dir: If True, create the parent directory if it doesn't
                exist. If False (default), raise an error instead.
        """
        self.path = Path(path)
        self.burrow_dir = self.path.parent

        if create_dir:
            self.burrow_dir.mkdir(parents=True, exist_ok=True)
        elif not self.burrow_dir.exists():
            msg = (
                f"Directory '{self.burrow_dir}' does not exist. "
                f"Run 'brw init' first to initialize the repository."
            )
            raise ValueError(msg)

        # Autocommit mode: transaction() issues BEGIN/COMMIT explicitly
        self._conn = sqlite3.connect(str(self.path), isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.executescript(SCHEMA)
        self._conn.execute(
            "INSERT OR IGNORE INTO metadata (key, value) VALUES (?, ?)",
            ("schema_version", str(SCHEMA_VERSION)),
        )

    @contextmanager
    def transaction(
        self,
        cancel_event: threading.Event | None = None,
    ) -> Iterator[Transaction]:
        """Run a unit of work: commit on success, roll back on any error.

        Args:
            cancel_event: If set while the work runs, the next store access
                raises ``OperationCancelledError`` and everything rolls back.
        """
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield Transaction(self._conn, cancel_event)
        except BaseException:
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
            logger.debug("Rolled back transaction on %s", self.path)
            raise
        self._conn.execute("COMMIT")

    def init_prefix(self, prefix: str) -> None:
        """Set the store's root namespace prefix."""
        with self.transaction() as tx:
            tx.set_config(ISSUE_PREFIX_KEY, prefix)

    def _reader(self) -> Transaction:
        """Read-only handle outside any explicit transaction."""
        return Transaction(self._conn)

    def get_issue(self, issue_id: str) -> Issue | None:
        return self._reader().get_issue(issue_id)

    def get_issue_prefix(self) -> str | None:
        return self._reader().get_issue_prefix()

    def get_dirty_issue_ids(self) -> list[str]:
        return self._reader().get_dirty_issue_ids()

    @property
    def events(self) -> EventLog:
        return self._reader().events

    def close(self) -> None:
        self._conn.close()
