"""Error taxonomy shared by reconciliation and the batch pipeline."""

from __future__ import annotations


class ReconciliationError(Exception):
    """Base class for domain errors raised while reconciling extracted data."""


class InvalidPathError(ReconciliationError, ValueError):
    """Raised when a field path cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid field path {path!r}: {reason}")


class PathConflictError(ReconciliationError):
    """Raised when a write would traverse through a non-container value."""

    def __init__(self, path: str, segment: str | int, found: object) -> None:
        self.path = path
        self.segment = segment
        self.found = found
        super().__init__(
            f"Cannot write {path!r}: segment {segment!r} holds a "
            f"{type(found).__name__}, not a container"
        )


class NoClientIdentifiedError(ReconciliationError):
    """Raised when no client name can be resolved from a transcript."""


class ExtractionFailedError(ReconciliationError):
    """Raised when the text extractor could not produce an extraction tree."""


class StoreFailureError(ReconciliationError):
    """Raised when the record or transcript store itself fails."""


class InvalidDecisionError(ReconciliationError, ValueError):
    """Raised when a duplicate decision does not fit the item it targets."""


class BatchInProgressError(ReconciliationError, RuntimeError):
    """Raised when a batch run is started while another is still in progress."""
