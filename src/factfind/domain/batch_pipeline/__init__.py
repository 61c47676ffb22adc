"""Batch import of transcripts with duplicate-client resolution."""

from __future__ import annotations

from .documents import Document, FileDocument, TextDocument
from .heuristics import parse_name_from_text
from .pipeline import ABORTED_MESSAGE, NO_CLIENT_MESSAGE, BatchPipeline
from .state import (
    BatchItem,
    BatchItemResult,
    BatchSummary,
    CreateNew,
    Decision,
    Skip,
    UseExisting,
)

__all__ = [
    "ABORTED_MESSAGE",
    "NO_CLIENT_MESSAGE",
    "BatchItem",
    "BatchItemResult",
    "BatchPipeline",
    "BatchSummary",
    "CreateNew",
    "Decision",
    "Document",
    "FileDocument",
    "Skip",
    "TextDocument",
    "UseExisting",
    "parse_name_from_text",
]
