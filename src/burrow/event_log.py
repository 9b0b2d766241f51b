"""Persistent event log for tracking issue changes."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import orjson

from burrow.constants import TRACKED_FIELDS
from burrow.models import Issue, enum_value


@dataclass
class EventRecord:
    """A single event recording a change to an issue."""

    event_type: str  # "created", "updated", "closed", "reopened", "deleted"
    issue_id: str  # full id, e.g. "proj-4kzj"
    timestamp: str  # ISO-8601
    by: str | None = None
    title: str | None = None
    changes: dict[str, dict[str, Any]] = field(
        default_factory=dict[str, dict[str, Any]],
    )


def created_event(
    issue: Issue,
    actor: str,
    recorded_at: datetime | None = None,
) -> EventRecord:
    """Build the "created" event for a freshly inserted issue.

    Every tracked field with a non-empty value is recorded as a change from
    ``None``. The event is stamped with ``recorded_at`` (default: now), not
    the issue's own ``created_at``, so historical imports log when they
    happened.
    """
    changes: dict[str, dict[str, Any]] = {}
    for field_name in sorted(TRACKED_FIELDS):
        value = getattr(issue, field_name, None)
        if value is not None and value != [] and value != "":
            changes[field_name] = {"old": None, "new": enum_value(value)}

    if recorded_at is None:
        recorded_at = datetime.now().astimezone()
    return EventRecord(
        event_type="created",
        issue_id=issue.id,
        timestamp=recorded_at.isoformat(),
        by=actor,
        title=issue.title,
        changes=changes,
    )


def _serialize(event: EventRecord) -> tuple[Any, ...]:
    """Serialize an EventRecord to an ``events`` row."""
    return (
        event.issue_id,
        event.event_type,
        event.by or "",
        None,
        orjson.dumps(event.changes).decode(),
        event.title,
        event.timestamp,
    )


def _deserialize(row: sqlite3.Row) -> EventRecord:
    """Deserialize an ``events`` row into an EventRecord."""
    new_value = row["new_value"]
    return EventRecord(
        event_type=row["event_type"],
        issue_id=row["issue_id"],
        timestamp=row["created_at"],
        by=row["actor"] or None,
        title=row["comment"],
        changes=orjson.loads(new_value) if new_value else {},
    )


class EventLog:
    """Append-only event log stored in the ``events`` table.

    Writes go through whatever connection the caller holds, so an event
    appended inside a transaction disappears with it on rollback.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def append(self, event: EventRecord) -> None:
        """Append a single event record."""
        self._conn.execute(
            "INSERT INTO events (issue_id, event_type, actor, old_value, "
            "new_value, comment, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            _serialize(event),
        )

    def read(
        self,
        *,
        issue_id: str | None = None,
        limit: int | None = None,
    ) -> list[EventRecord]:
        """Read events in reverse chronological order (newest first).

        Args:
            issue_id: Filter to events for this issue ID.
            limit: Maximum number of events to return.

        Returns:
            List of EventRecord, newest first.
        """
        sql = "SELECT * FROM events"
        params: list[Any] = []
        if issue_id is not None:
            sql += " WHERE issue_id = ?"
            params.append(issue_id)
        sql += " ORDER BY id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [_deserialize(row) for row in self._conn.execute(sql, params)]
