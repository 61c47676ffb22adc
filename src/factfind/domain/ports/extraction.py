"""Ports for turning transcript text into extraction trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from factfind.domain.model.extraction import Node

if TYPE_CHECKING:
    from factfind.domain.model.record import ClientRecord


@dataclass(frozen=True, slots=True)
class NameCandidate:
    """Client name pulled from a transcript by the lightweight name call."""

    first_name: str
    last_name: str
    meeting_date: str | None = None


@dataclass(frozen=True, slots=True)
class ExtractionOutcome:
    success: bool
    data: Node = field(default_factory=Node)
    summary: str = ""
    missing_fields: tuple[str, ...] = ()
    error: str | None = None

    @classmethod
    def ok(
        cls, data: Node, *, summary: str = "", missing_fields: tuple[str, ...] = ()
    ) -> ExtractionOutcome:
        return cls(success=True, data=data, summary=summary, missing_fields=missing_fields)

    @classmethod
    def failed(cls, error: str) -> ExtractionOutcome:
        return cls(success=False, error=error)


@runtime_checkable
class TextExtractor(Protocol):
    """Language-model collaborator: text in, confidence-annotated tree out.

    ``extract_full`` must accept ``existing=None`` for first-contact transcripts.
    Neither method raises for provider failures; they report them through the
    outcome or by returning ``None``.
    """

    async def extract_full(
        self, text: str, existing: ClientRecord | None = None
    ) -> ExtractionOutcome: ...

    async def extract_name(self, text: str) -> NameCandidate | None: ...


__all__ = ["ExtractionOutcome", "NameCandidate", "TextExtractor"]
