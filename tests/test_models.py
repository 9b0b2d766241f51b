"""Tests for issue models, validation and fingerprinting."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from burrow.errors import IssueValidationError
from burrow.models import (
    ImportMode,
    Issue,
    IssueType,
    Status,
    classify_record,
    compute_content_hash,
    dict_to_issue,
    issue_to_dict,
    validate_issue,
    validate_priority,
)

T0 = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


class TestIssue:
    """Test the Issue dataclass."""

    def test_defaults(self) -> None:
        """Test that a bare issue has open/task/P2 and no ID."""
        issue = Issue(title="Test")
        assert issue.id == ""
        assert issue.status == "open"
        assert issue.issue_type == "task"
        assert issue.priority == 2
        assert issue.created_at is None
        assert issue.content_hash == ""

    def test_enum_values_are_normalized(self) -> None:
        """Test that enum members are stored as their string values."""
        issue = Issue(title="Test", status=Status.CLOSED, issue_type=IssueType.BUG)
        assert issue.status == "closed"
        assert type(issue.status) is str
        assert issue.issue_type == "bug"
        assert issue.is_closed()

    def test_depth(self) -> None:
        """Test hierarchy depth from dotted IDs."""
        assert Issue(title="a", id="proj-ab").depth == 0
        assert Issue(title="a", id="proj-ab.1").depth == 1
        assert Issue(title="a", id="proj-ab.1.3").depth == 2


class TestImportMode:
    """Test mapping of the skip flag onto import modes."""

    def test_from_skip_flag(self) -> None:
        """Test both flag values."""
        assert ImportMode.from_skip_flag(True) is ImportMode.TRUSTED_BULK
        assert ImportMode.from_skip_flag(False) is ImportMode.STRICT


class TestValidation:
    """Test issue validation against built-in and custom vocabularies."""

    def test_valid_issue(self) -> None:
        """Test that a plain open issue validates."""
        validate_issue(Issue(title="Fine"))

    def test_empty_title(self) -> None:
        """Test that a blank title names the title field."""
        with pytest.raises(IssueValidationError) as exc_info:
            validate_issue(Issue(title="   "))
        assert exc_info.value.field == "title"

    def test_title_too_long(self) -> None:
        """Test the 500 character title limit."""
        with pytest.raises(IssueValidationError, match="at most 500"):
            validate_issue(Issue(title="x" * 501))

    @pytest.mark.parametrize("priority", [-1, 5, "1", None, True])
    def test_invalid_priority(self, priority: object) -> None:
        """Test out-of-range and non-integer priorities."""
        with pytest.raises(IssueValidationError) as exc_info:
            validate_priority(priority)
        assert exc_info.value.field == "priority"

    def test_unknown_status(self) -> None:
        """Test that an unknown status is rejected."""
        with pytest.raises(IssueValidationError) as exc_info:
            validate_issue(Issue(title="x", status="review"))
        assert exc_info.value.field == "status"

    def test_custom_status_accepted(self) -> None:
        """Test that a configured custom status is accepted."""
        validate_issue(Issue(title="x", status="review"), custom_statuses={"review"})

    def test_unknown_type(self) -> None:
        """Test that an unknown type is rejected."""
        with pytest.raises(IssueValidationError) as exc_info:
            validate_issue(Issue(title="x", issue_type="spike"))
        assert exc_info.value.field == "issue_type"

    def test_custom_type_accepted(self) -> None:
        """Test that a configured custom type is accepted."""
        validate_issue(Issue(title="x", issue_type="spike"), custom_types=["spike"])

    def test_closed_requires_closed_at(self) -> None:
        """Test that a closed issue must carry closed_at."""
        with pytest.raises(IssueValidationError) as exc_info:
            validate_issue(Issue(title="x", status="closed"))
        assert exc_info.value.field == "closed_at"

    def test_open_issue_cannot_have_closed_at(self) -> None:
        """Test that only closed issues carry closed_at."""
        with pytest.raises(IssueValidationError, match="cannot have closed_at"):
            validate_issue(Issue(title="x", closed_at=T0))

    def test_tombstone_requires_deleted_at(self) -> None:
        """Test that a tombstone must carry deleted_at."""
        with pytest.raises(IssueValidationError) as exc_info:
            validate_issue(Issue(title="x", status="tombstone"))
        assert exc_info.value.field == "deleted_at"

    def test_validation_error_is_value_error(self) -> None:
        """Test that validation failures can be caught as ValueError."""
        with pytest.raises(ValueError):
            validate_issue(Issue(title=""))


class TestContentHash:
    """Test content fingerprinting."""

    def _issue(self) -> Issue:
        return Issue(
            title="Fix login",
            description="Redirect loops",
            priority=1,
            issue_type="bug",
            labels=["auth", "web"],
            metadata={"source": "jira", "points": 3},
        )

    def test_deterministic(self) -> None:
        """Test that identical content hashes identically."""
        assert compute_content_hash(self._issue()) == compute_content_hash(self._issue())

    def test_is_sha256_hex(self) -> None:
        """Test the digest format."""
        digest = compute_content_hash(self._issue())
        assert len(digest) == 64
        int(digest, 16)

    @pytest.mark.parametrize(
        ("field_name", "value"),
        [
            ("title", "Fix logout"),
            ("description", "Other"),
            ("priority", 0),
            ("status", "in_progress"),
            ("issue_type", "feature"),
            ("labels", ["auth"]),
            ("metadata", {"source": "github"}),
            ("owner", "alice@example.com"),
        ],
    )
    def test_semantic_field_changes_hash(self, field_name: str, value: object) -> None:
        """Test that changing any semantic field changes the hash."""
        original = self._issue()
        changed = dataclasses.replace(original, **{field_name: value})
        assert compute_content_hash(changed) != compute_content_hash(original)

    def test_bookkeeping_fields_do_not_change_hash(self) -> None:
        """Test that IDs, timestamps and actors are excluded."""
        original = self._issue()
        changed = dataclasses.replace(
            original,
            id="proj-zzzz",
            created_at=T0,
            updated_at=T0,
            created_by="bob",
            id_prefix="web",
        )
        assert compute_content_hash(changed) == compute_content_hash(original)

    def test_label_order_ignored(self) -> None:
        """Test that labels are hashed as a sorted set."""
        a = self._issue()
        b = dataclasses.replace(a, labels=["web", "auth"])
        assert compute_content_hash(a) == compute_content_hash(b)


class TestSerialization:
    """Test dict conversion."""

    def test_dict_round_trip_keeps_timestamps(self) -> None:
        """Test that datetimes survive issue_to_dict/dict_to_issue."""
        issue = Issue(
            title="x",
            id="proj-abcd",
            status="closed",
            created_at=T0,
            updated_at=T0,
            closed_at=T0,
            labels=["a"],
        )
        restored = dict_to_issue(issue_to_dict(issue))
        assert restored.id == "proj-abcd"
        assert restored.closed_at == T0
        assert restored.labels == ["a"]

    def test_missing_timestamps_stay_unset(self) -> None:
        """Test that absent timestamps load as None for repair to fill."""
        issue = dict_to_issue({"title": "x"})
        assert issue.created_at is None
        assert issue.updated_at is None
        assert issue.id == ""

    def test_legacy_field_names(self) -> None:
        """Test acceptance_criteria and assignee aliases."""
        issue = dict_to_issue(
            {"title": "x", "acceptance_criteria": "works", "assignee": "alice"},
        )
        assert issue.acceptance == "works"
        assert issue.owner == "alice"

    def test_classify_record(self) -> None:
        """Test record classification."""
        assert classify_record({"record_type": "event"}) == "event"
        assert classify_record({"issue_id": "a", "depends_on_id": "b"}) == "dependency"
        assert classify_record({"from_id": "a", "to_id": "b"}) == "link"
        assert classify_record({"id": "proj-a", "title": "x"}) == "issue"
