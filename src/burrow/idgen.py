"""Hash-based ID generation and prefix checks for issues."""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import TYPE_CHECKING

from burrow.constants import (
    ID_LENGTH_CEILING,
    ID_LENGTH_MAX,
    ID_LENGTH_THRESHOLDS,
    ID_NONCES_PER_LENGTH,
)
from burrow.errors import IDGenerationError, PrefixValidationError

if TYPE_CHECKING:
    from burrow.models import Issue
    from burrow.storage import Transaction


def get_id_length_for_count(issue_count: int) -> int:
    """Determine the appropriate ID length based on issue count.

    Progressive scaling keeps collision likelihood low as a namespace grows:
    - 4 characters for 0-500 issues
    - 5 characters for 501-1500 issues
    - 6 characters for 1501-5000 issues
    - 7 characters beyond that

    Args:
        issue_count: Current number of issues under the prefix.

    Returns:
        Appropriate ID length (4-7 characters).
    """
    for max_count, length in ID_LENGTH_THRESHOLDS:
        if issue_count <= max_count:
            return length
    return ID_LENGTH_MAX


def _base36_encode(data: bytes) -> str:
    """Encode bytes as base36 (0-9, a-z)."""
    num = int.from_bytes(data, byteorder="big")
    if num == 0:
        return "0"

    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    result: list[str] = []
    while num:
        result.append(digits[num % 36])
        num //= 36
    return "".join(reversed(result))


def generate_hash_id(
    input_data: str,
    nonce: str = "",
    length: int = 4,
) -> str:
    """Generate a hash-based key from input data.

    Args:
        input_data: Data to hash (e.g., issue title + timestamp)
        nonce: Optional nonce to handle collisions (empty string for first attempt)
        length: Desired length of the hash portion (default: 4)

    Returns:
        Hash string (just the hash portion, no prefix)
    """
    combined = input_data + nonce
    hash_bytes = hashlib.sha256(combined.encode()).digest()
    return _base36_encode(hash_bytes)[:length]


def effective_prefix(base_prefix: str, id_prefix: str = "") -> str:
    """Return the namespace an issue's ID must live under.

    A sub-namespace token (multi-repo import) is appended to the base:
    ``effective_prefix("proj", "web") == "proj-web"``.
    """
    if id_prefix:
        return f"{base_prefix}-{id_prefix}"
    return base_prefix


def validate_issue_id_prefix(issue_id: str, prefix: str) -> None:
    """Check that ``issue_id`` is rooted under ``prefix``.

    Raises:
        PrefixValidationError: If the ID does not start with ``prefix-`` or
            has nothing after it.
    """
    expected = f"{prefix}-"
    if not issue_id.startswith(expected) or len(issue_id) == len(expected):
        msg = (
            f"issue ID '{issue_id}' does not match configured prefix "
            f"'{prefix}' (expected '{expected}<key>')"
        )
        raise PrefixValidationError(msg)


def _hash_input(issue: Issue, actor: str, timestamp: datetime | None) -> str:
    stamp = timestamp.isoformat() if timestamp else ""
    return f"{issue.title}:{issue.description or ''}:{actor}:{stamp}"


def generate_issue_id(
    tx: Transaction,
    prefix: str,
    issue: Issue,
    actor: str,
) -> str:
    """Generate a unique issue ID under ``prefix``.

    Candidates are checked through ``tx`` so IDs inserted earlier in the same
    (uncommitted) transaction count as taken. Each length gets
    ``ID_NONCES_PER_LENGTH`` attempts before the key grows by one character.

    Args:
        tx: Open transaction to check collisions against.
        prefix: Effective namespace prefix.
        issue: The draft issue (title, description and created_at feed the hash).
        actor: Who is creating the issue.

    Returns:
        Full issue ID, e.g. ``"proj-4kzj"``.

    Raises:
        IDGenerationError: If every candidate up to the ceiling length is taken.
    """
    input_data = _hash_input(issue, actor, issue.created_at)
    start_length = get_id_length_for_count(tx.count_issues_with_prefix(prefix))

    for length in range(start_length, ID_LENGTH_CEILING + 1):
        for attempt in range(ID_NONCES_PER_LENGTH):
            nonce = "" if attempt == 0 else str(attempt)
            candidate = f"{prefix}-{generate_hash_id(input_data, nonce, length)}"
            if not tx.issue_exists(candidate):
                return candidate

    msg = (
        f"could not generate a unique ID under prefix '{prefix}' "
        f"after trying lengths {start_length}-{ID_LENGTH_CEILING}"
    )
    raise IDGenerationError(msg)
