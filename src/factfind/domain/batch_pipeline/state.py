"""Per-item state, decisions and results of a batch run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from factfind.domain.model.enums import BatchItemStatus, DecisionKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from factfind.domain.ports.extraction import NameCandidate
    from factfind.domain.reconciliation.identity import MatchCandidate

    from .documents import Document


@dataclass(frozen=True, slots=True)
class UseExisting:
    """Merge into ``candidates[candidate_index]`` of the awaiting item."""

    candidate_index: int

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.USE_EXISTING


@dataclass(frozen=True, slots=True)
class CreateNew:
    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.CREATE_NEW


@dataclass(frozen=True, slots=True)
class Skip:
    reason: str = "Skipped by user"

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.SKIP


type Decision = UseExisting | CreateNew | Skip


@dataclass(frozen=True, slots=True)
class BatchItemResult:
    item_id: str
    file_name: str
    status: BatchItemStatus
    client_id: str | None = None
    client_name: str | None = None
    fields_updated: int = 0
    completeness: int | None = None
    summary: str = ""
    missing_fields: tuple[str, ...] = ()
    message: str | None = None
    candidates: tuple[MatchCandidate, ...] = ()


@dataclass(slots=True)
class BatchItem:
    """Mutable pipeline-owned state for one queued document."""

    item_id: str
    document: Document
    status: BatchItemStatus = BatchItemStatus.PENDING
    result: BatchItemResult | None = None
    text: str | None = None
    name: NameCandidate | None = None
    candidates: tuple[MatchCandidate, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class BatchSummary:
    total: int
    success: int
    error: int
    skipped: int
    client_ids: tuple[str, ...]

    @classmethod
    def from_results(cls, results: Iterable[BatchItemResult]) -> BatchSummary:
        finished = [result for result in results if result.status.is_terminal]
        client_ids: list[str] = []
        for result in finished:
            if result.client_id and result.client_id not in client_ids:
                client_ids.append(result.client_id)
        return cls(
            total=len(finished),
            success=sum(1 for r in finished if r.status is BatchItemStatus.SUCCESS),
            error=sum(1 for r in finished if r.status is BatchItemStatus.ERROR),
            skipped=sum(1 for r in finished if r.status is BatchItemStatus.SKIPPED),
            client_ids=tuple(client_ids),
        )
