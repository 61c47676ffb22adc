"""SQLAlchemy adapter package for client records and transcripts."""

from __future__ import annotations

from .mappings import client_record_table, create_all_tables, metadata, transcript_table
from .repositories import SqlAlchemyClientRecordRepository, SqlAlchemyTranscriptRepository
from .stores import SqlAlchemyRecordStore, SqlAlchemyTranscriptStore
from .unit_of_work import SqlAlchemyClientUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyClientRecordRepository",
    "SqlAlchemyClientUnitOfWork",
    "SqlAlchemyRecordStore",
    "SqlAlchemyTranscriptRepository",
    "SqlAlchemyTranscriptStore",
    "StartupError",
    "client_record_table",
    "create_all_tables",
    "metadata",
    "shutdown",
    "startup",
    "transcript_table",
]
