"""Invariant repair applied to every issue before validation."""

from __future__ import annotations

from datetime import datetime, timedelta

from burrow.models import Issue

# Repaired closed_at/deleted_at land strictly after the last known activity
REPAIR_OFFSET = timedelta(seconds=1)


def _latest(first: datetime, second: datetime) -> datetime:
    """Return the later instant, reading a naive value as local time when mixed."""
    if (first.tzinfo is None) != (second.tzinfo is None):
        first, second = first.astimezone(), second.astimezone()
    return max(first, second)


def repair_invariants(issue: Issue, now: datetime | None = None) -> Issue:
    """Fill in timestamps the stored row requires.

    Unset ``created_at``/``updated_at`` default to ``now``; timestamps carried
    by an import are kept verbatim. A closed issue without ``closed_at`` and a
    tombstone without ``deleted_at`` get ``max(created_at, updated_at)`` plus
    one second. If only one of the two is timezone-aware, the naive one is
    read as local time for that comparison. Running it twice changes nothing.

    Args:
        issue: The issue to repair, modified in place.
        now: Current instant (default: local now, timezone-aware).

    Returns:
        The same issue.
    """
    if now is None:
        now = datetime.now().astimezone()

    # Keep a defaulted timestamp comparable with a naive imported one
    known = issue.created_at or issue.updated_at
    if known is not None and known.tzinfo is None and now.tzinfo is not None:
        now = now.replace(tzinfo=None)

    created_at = issue.created_at or now
    updated_at = issue.updated_at or now
    issue.created_at = created_at
    issue.updated_at = updated_at

    last_activity = _latest(created_at, updated_at)
    if issue.is_closed() and issue.closed_at is None:
        issue.closed_at = last_activity + REPAIR_OFFSET
    if issue.is_tombstone() and issue.deleted_at is None:
        issue.deleted_at = last_activity + REPAIR_OFFSET

    return issue
