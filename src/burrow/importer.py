"""Create or import a single issue inside a caller-managed transaction."""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

import orjson

from burrow.errors import (
    DependencyReadError,
    DirtyMarkError,
    EventWriteError,
    IDGenerationError,
    InsertError,
    IssueValidationError,
    StoreNotInitializedError,
)
from burrow.idgen import effective_prefix, generate_issue_id, validate_issue_id_prefix
from burrow.models import ImportMode, compute_content_hash, validate_issue
from burrow.repair import repair_invariants

if TYPE_CHECKING:
    from datetime import datetime

    from burrow.models import Issue
    from burrow.storage import Transaction

logger = logging.getLogger(__name__)


def create_or_import(
    tx: Transaction,
    issue: Issue,
    actor: str,
    mode: ImportMode = ImportMode.STRICT,
    *,
    now: datetime | None = None,
) -> Issue:
    """Persist one issue with its audit event and dirty marker.

    Runs inside ``tx`` and never commits or rolls back: any error leaves
    the caller to roll back, which discards the row, event and marker
    together.

    Parent existence is not checked for hierarchical IDs. Batch imports
    insert parents before children in the same transaction and decide their
    own orphan policy.

    Args:
        tx: Open transaction owned by the caller.
        issue: The issue to store; repaired and completed in place.
        actor: Identity recorded on the creation event.
        mode: ``STRICT`` checks a supplied ID against the effective prefix,
            ``TRUSTED_BULK`` takes it as-is.
        now: Instant used for missing timestamps (default: current time).

    Returns:
        The stored issue, with ``id`` and ``content_hash`` filled in.

    Raises:
        DependencyReadError: Vocabulary or config could not be read.
        IssueValidationError: Content breaks a structural or vocabulary rule.
        StoreNotInitializedError: No ``issue_prefix`` is configured.
        IDGenerationError: No ID could be generated.
        PrefixValidationError: A supplied ID is outside the effective prefix.
        InsertError: The ID already exists or a constraint failed.
        EventWriteError: The creation event could not be written.
        DirtyMarkError: The dirty marker could not be written.
    """
    try:
        custom_statuses = tx.get_custom_statuses()
        custom_types = tx.get_custom_types()
    except sqlite3.Error as e:
        msg = f"failed to read custom statuses/types: {e}"
        raise DependencyReadError(msg) from e

    repair_invariants(issue, now)
    validate_issue(issue, custom_statuses, custom_types)

    if not issue.content_hash:
        try:
            issue.content_hash = compute_content_hash(issue)
        except orjson.JSONEncodeError as e:
            raise IssueValidationError("metadata", f"not JSON-encodable: {e}") from e

    try:
        base_prefix = tx.get_issue_prefix()
    except sqlite3.Error as e:
        msg = f"failed to read issue_prefix config: {e}"
        raise DependencyReadError(msg) from e
    if not base_prefix:
        msg = (
            "store not initialized: issue_prefix config is missing "
            "(run 'brw init --prefix <prefix>' first)"
        )
        raise StoreNotInitializedError(msg)

    prefix = effective_prefix(base_prefix, issue.id_prefix)

    if not issue.id:
        try:
            issue.id = generate_issue_id(tx, prefix, issue, actor)
        except sqlite3.Error as e:
            msg = f"failed to generate issue ID under '{prefix}': {e}"
            raise IDGenerationError(msg) from e
        logger.debug("Generated ID %s under prefix %s", issue.id, prefix)
    elif mode is ImportMode.STRICT:
        validate_issue_id_prefix(issue.id, prefix)

    try:
        tx.insert_issue_strict(issue)
    except (sqlite3.Error, orjson.JSONEncodeError) as e:
        msg = f"failed to insert issue {issue.id}: {e}"
        raise InsertError(msg) from e

    try:
        tx.record_created_event(issue, actor)
    except sqlite3.Error as e:
        msg = f"failed to record creation event for {issue.id}: {e}"
        raise EventWriteError(msg) from e

    try:
        tx.mark_dirty(issue.id)
    except sqlite3.Error as e:
        msg = f"failed to mark issue {issue.id} dirty: {e}"
        raise DirtyMarkError(msg) from e

    logger.info("Created issue %s (actor=%s, mode=%s)", issue.id, actor, mode.value)
    return issue
