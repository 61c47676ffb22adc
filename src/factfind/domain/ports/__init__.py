"""Domain ports (Protocols) implemented by adapters."""

from __future__ import annotations

from .extraction import ExtractionOutcome, NameCandidate, TextExtractor
from .persistence import RecordStore, TranscriptRecord, TranscriptStore
from .unit_of_work import (
    ClientRecordRepository,
    ClientRepositories,
    ClientUnitOfWork,
    RepositoryCollection,
    TranscriptRepository,
    UnitOfWork,
)

__all__ = [
    "ClientRecordRepository",
    "ClientRepositories",
    "ClientUnitOfWork",
    "ExtractionOutcome",
    "NameCandidate",
    "RecordStore",
    "RepositoryCollection",
    "TextExtractor",
    "TranscriptRecord",
    "TranscriptRepository",
    "TranscriptStore",
    "UnitOfWork",
]
