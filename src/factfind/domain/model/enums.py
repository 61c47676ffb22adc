"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SubEntityKind(StrEnum):
    """Array-valued record fields whose items have a fixed default shape."""

    CHILDREN = "children"
    PENSIONS = "pensions"
    PROPERTIES = "properties"
    INVESTMENTS = "investments"
    BANK_ACCOUNTS = "bankAccounts"
    DEBTS = "debts"
    PROTECTION = "protection"


class DataSourceType(StrEnum):
    TRANSCRIPT = "transcript"
    BATCH_TRANSCRIPT = "batch_transcript"


class MatchType(StrEnum):
    EXACT = "exact"
    SIMILAR = "similar"


class OverwritePolicy(StrEnum):
    """Whether automatic merges may replace values already on the record."""

    ALWAYS = "always"
    FILL_EMPTY = "fill_empty"


class BatchItemStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    AWAITING_DECISION = "awaiting-decision"
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in {BatchItemStatus.SUCCESS, BatchItemStatus.ERROR, BatchItemStatus.SKIPPED}


class DecisionKind(StrEnum):
    USE_EXISTING = "use-existing"
    CREATE_NEW = "create-new"
    SKIP = "skip"
