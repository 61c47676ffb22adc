"""Ports for persisting client records and transcripts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from factfind.domain.model.record import ClientRecord


@dataclass(frozen=True, slots=True)
class TranscriptRecord:
    client_id: str
    file_name: str
    content: str
    uploaded_at: datetime


@runtime_checkable
class RecordStore(Protocol):
    """Async key/value store of client records keyed by ``id``."""

    async def get_all(self) -> list[ClientRecord]: ...

    async def get(self, record_id: str) -> ClientRecord | None: ...

    async def put(self, record: ClientRecord) -> None: ...


@runtime_checkable
class TranscriptStore(Protocol):
    """Append-only transcript archive; the domain never reads from it."""

    async def put(self, transcript: TranscriptRecord) -> None: ...


__all__ = ["RecordStore", "TranscriptRecord", "TranscriptStore"]
