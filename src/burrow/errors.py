"""Failure taxonomy for issue ingestion.

Every error names the phase that failed so callers can tell bad input
(validation, prefix mismatch, collision) apart from infrastructure faults.
None of these are retried at this layer.
"""

from __future__ import annotations


class BurrowError(Exception):
    """Base exception for all burrow failures."""

    phase = "unknown"


class DependencyReadError(BurrowError):
    """Raised when reading vocabulary or config from the store fails."""

    phase = "dependency-read"


class StoreNotInitializedError(BurrowError):
    """Raised when the store has no issue_prefix configured."""

    phase = "config"


class IssueValidationError(BurrowError, ValueError):
    """Raised when issue content violates a structural or vocabulary rule."""

    phase = "validation"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class IDGenerationError(BurrowError):
    """Raised when no identifier could be generated."""

    phase = "id-generation"


class PrefixValidationError(BurrowError, ValueError):
    """Raised when a supplied ID does not belong to the effective prefix."""

    phase = "prefix-validation"


class InsertError(BurrowError):
    """Raised on ID collision or constraint violation during strict insert."""

    phase = "insert"


class SideEffectError(BurrowError):
    """Raised when a post-insert write fails; the caller must roll back."""


class EventWriteError(SideEffectError):
    """Raised when the creation event cannot be recorded."""

    phase = "event"


class DirtyMarkError(SideEffectError):
    """Raised when the dirty marker cannot be written."""

    phase = "dirty-marker"


class OperationCancelledError(BurrowError):
    """Raised when the caller's cancellation event is set mid-operation."""

    phase = "cancelled"
