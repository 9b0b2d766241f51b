"""Data models for burrow issues using dataclasses."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import orjson

from burrow._version import version as _burrow_version
from burrow.constants import (
    CONTENT_HASH_FIELDS,
    DEFAULT_PRIORITY,
    DEFAULT_TYPE,
    MAX_TITLE_LENGTH,
)
from burrow.errors import IssueValidationError


class Status(str, Enum):
    """Built-in issue statuses."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    BLOCKED = "blocked"
    DEFERRED = "deferred"
    CLOSED = "closed"
    TOMBSTONE = "tombstone"


class IssueType(str, Enum):
    """Built-in issue types."""

    TASK = "task"
    BUG = "bug"
    FEATURE = "feature"
    STORY = "story"
    CHORE = "chore"
    EPIC = "epic"
    SUBTASK = "subtask"
    QUESTION = "question"


class ImportMode(str, Enum):
    """How ``create_or_import`` treats caller-supplied IDs."""

    STRICT = "strict"  # supplied IDs must match the effective prefix
    TRUSTED_BULK = "trusted_bulk"  # supplied IDs are taken as-is

    @classmethod
    def from_skip_flag(cls, skip_prefix_validation: bool) -> ImportMode:
        """Map the legacy skip-validation boolean onto an import mode."""
        return cls.TRUSTED_BULK if skip_prefix_validation else cls.STRICT


def enum_value(value: Any) -> Any:
    """Reduce an Enum member to its plain value, pass anything else through."""
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class Issue:
    """An issue in the tracking system."""

    title: str
    id: str = ""  # Full ID, e.g. "proj-4kzj"; empty means "generate one"
    description: str | None = None
    status: str = Status.OPEN.value
    priority: int = DEFAULT_PRIORITY  # 0-4 range, lower is higher priority
    issue_type: str = DEFAULT_TYPE
    owner: str | None = None
    parent: str | None = None
    labels: list[str] = field(default_factory=list[str])
    external_ref: str | None = None
    design: str | None = None
    acceptance: str | None = None
    notes: str | None = None
    close_reason: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None
    closed_at: datetime | None = None
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    delete_reason: str | None = None
    original_type: str | None = None  # For tombstones
    metadata: dict[str, Any] = field(default_factory=dict[str, Any])
    content_hash: str = ""
    id_prefix: str = ""  # Sub-namespace token for multi-repo import

    def __post_init__(self) -> None:
        self.status = enum_value(self.status)
        self.issue_type = enum_value(self.issue_type)

    def is_closed(self) -> bool:
        """Check if the issue is closed."""
        return self.status == Status.CLOSED.value

    def is_tombstone(self) -> bool:
        """Check if the issue is a tombstone (soft deleted)."""
        return self.status == Status.TOMBSTONE.value

    @property
    def depth(self) -> int:
        """Hierarchy depth of the ID (``proj-ab.1.2`` is depth 2)."""
        return self.id.count(".")


BUILTIN_STATUSES: frozenset[str] = frozenset(s.value for s in Status)
BUILTIN_TYPES: frozenset[str] = frozenset(t.value for t in IssueType)


def validate_priority(priority: Any) -> None:
    """Validate that priority is in valid range (0-4)."""
    if (
        not isinstance(priority, int)
        or isinstance(priority, bool)
        or priority < 0
        or priority > 4
    ):
        raise IssueValidationError(
            "priority", f"must be an integer between 0 and 4, got {priority!r}"
        )


def validate_status(status: Any, custom_statuses: Iterable[str] = ()) -> None:
    """Validate status against the built-in and custom status vocabulary."""
    if status not in BUILTIN_STATUSES and status not in set(custom_statuses):
        raise IssueValidationError("status", f"invalid status {status!r}")


def validate_issue_type(issue_type: Any, custom_types: Iterable[str] = ()) -> None:
    """Validate issue_type against the built-in and custom type vocabulary."""
    if issue_type not in BUILTIN_TYPES and issue_type not in set(custom_types):
        raise IssueValidationError("issue_type", f"invalid issue type {issue_type!r}")


def validate_issue(
    issue: Issue,
    custom_statuses: Iterable[str] = (),
    custom_types: Iterable[str] = (),
) -> None:
    """Validate that an issue has all required fields and valid data.

    Raises:
        IssueValidationError: naming the first violated field.
    """
    if not isinstance(issue.title, str) or not issue.title.strip():
        raise IssueValidationError("title", "must be a non-empty string")
    if len(issue.title) > MAX_TITLE_LENGTH:
        raise IssueValidationError(
            "title",
            f"must be at most {MAX_TITLE_LENGTH} characters "
            f"(got {len(issue.title)})",
        )

    validate_priority(issue.priority)
    validate_status(issue.status, custom_statuses)
    validate_issue_type(issue.issue_type, custom_types)

    if issue.is_closed() and issue.closed_at is None:
        raise IssueValidationError("closed_at", "closed issues must have closed_at")
    if not issue.is_closed() and not issue.is_tombstone() and issue.closed_at:
        raise IssueValidationError(
            "closed_at", f"{issue.status!r} issues cannot have closed_at"
        )
    if issue.is_tombstone() and issue.deleted_at is None:
        raise IssueValidationError("deleted_at", "tombstones must have deleted_at")


def content_fields(issue: Issue) -> dict[str, Any]:
    """Collect the semantic fields that feed the content fingerprint."""
    data: dict[str, Any] = {}
    for name in CONTENT_HASH_FIELDS:
        value = enum_value(getattr(issue, name))
        if name == "labels":
            value = sorted(value)
        data[name] = value
    return data


def compute_content_hash(issue: Issue) -> str:
    """Compute the content fingerprint of an issue.

    SHA-256 hex digest over the sorted-key orjson encoding of
    ``content_fields(issue)``. IDs, timestamps and actors are excluded so
    the same content hashes identically wherever it was created.
    """
    payload = orjson.dumps(content_fields(issue), option=orjson.OPT_SORT_KEYS)
    return hashlib.sha256(payload).hexdigest()


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    """Convert an Issue to a dictionary, serializing datetimes."""
    return {
        "record_type": "issue",
        "burrow_version": _burrow_version,
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "status": issue.status,
        "priority": issue.priority,
        "issue_type": issue.issue_type,
        "owner": issue.owner,
        "parent": issue.parent,
        "labels": issue.labels,
        "external_ref": issue.external_ref,
        "design": issue.design,
        "acceptance": issue.acceptance,
        "notes": issue.notes,
        "close_reason": issue.close_reason,
        "created_at": _iso(issue.created_at),
        "created_by": issue.created_by,
        "updated_at": _iso(issue.updated_at),
        "updated_by": issue.updated_by,
        "closed_at": _iso(issue.closed_at),
        "deleted_at": _iso(issue.deleted_at),
        "deleted_by": issue.deleted_by,
        "delete_reason": issue.delete_reason,
        "original_type": issue.original_type,
        "metadata": issue.metadata,
        "content_hash": issue.content_hash,
    }


def dict_to_issue(data: dict[str, Any]) -> Issue:
    """Convert a dictionary to an Issue, deserializing datetimes.

    Accepts the ``acceptance_criteria`` and ``assignee`` spellings used by
    older exports.
    """
    return Issue(
        id=data.get("id") or "",
        title=data.get("title", ""),
        description=data.get("description"),
        status=data.get("status") or Status.OPEN.value,
        priority=data.get("priority", DEFAULT_PRIORITY),
        issue_type=data.get("issue_type") or DEFAULT_TYPE,
        owner=data.get("owner", data.get("assignee")),
        parent=data.get("parent"),
        labels=list(data.get("labels") or []),
        external_ref=data.get("external_ref"),
        design=data.get("design"),
        acceptance=data.get("acceptance", data.get("acceptance_criteria")),
        notes=data.get("notes"),
        close_reason=data.get("close_reason"),
        created_at=_parse_dt(data.get("created_at")),
        created_by=data.get("created_by"),
        updated_at=_parse_dt(data.get("updated_at")),
        updated_by=data.get("updated_by"),
        closed_at=_parse_dt(data.get("closed_at")),
        deleted_at=_parse_dt(data.get("deleted_at")),
        deleted_by=data.get("deleted_by"),
        delete_reason=data.get("delete_reason"),
        original_type=data.get("original_type"),
        metadata=dict(data.get("metadata") or {}),
        content_hash=data.get("content_hash") or "",
        id_prefix=data.get("id_prefix") or "",
    )


def classify_record(data: dict[str, Any]) -> str:
    """Classify a JSONL record as 'issue', 'dependency', 'link', or 'event'.

    Checks for an explicit ``record_type`` field first, then falls back to
    field-sniffing for records written without one.
    """
    explicit = data.get("record_type")
    if explicit in ("issue", "dependency", "link", "event"):
        return explicit  # type: ignore[return-value]

    if "from_id" in data and "to_id" in data:
        return "link"
    if "issue_id" in data and "depends_on_id" in data:
        return "dependency"
    return "issue"
