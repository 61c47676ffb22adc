"""Async record and transcript stores over the SQLAlchemy unit of work."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from factfind.domain.errors import StoreFailureError
from factfind.domain.ports.persistence import RecordStore, TranscriptStore

from .unit_of_work import SqlAlchemyClientUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable

    from factfind.domain.model.record import ClientRecord
    from factfind.domain.ports.persistence import TranscriptRecord
    from factfind.domain.ports.unit_of_work import ClientUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class SqlAlchemyRecordStore:
    """Client record store; each call runs in its own committed unit of work."""

    uow_factory: Callable[[], ClientUnitOfWork] = field(default=SqlAlchemyClientUnitOfWork)

    async def get_all(self) -> list[ClientRecord]:
        try:
            with self.uow_factory() as uow:
                return uow.repositories.records.list_all()
        except SQLAlchemyError as exc:
            log.error(f"Failed to list client records: {exc}")
            raise StoreFailureError("Failed to list client records") from exc

    async def get(self, record_id: str) -> ClientRecord | None:
        try:
            with self.uow_factory() as uow:
                return uow.repositories.records.get(record_id)
        except SQLAlchemyError as exc:
            log.error(f"Failed to load client record {record_id}: {exc}")
            raise StoreFailureError(f"Failed to load client record {record_id}") from exc

    async def put(self, record: ClientRecord) -> None:
        try:
            with self.uow_factory() as uow:
                uow.repositories.records.upsert(record)
                uow.commit()
        except SQLAlchemyError as exc:
            log.error(f"Failed to save client record {record.get('id')}: {exc}")
            raise StoreFailureError(f"Failed to save client record {record.get('id')}") from exc


@dataclass(slots=True)
class SqlAlchemyTranscriptStore:
    uow_factory: Callable[[], ClientUnitOfWork] = field(default=SqlAlchemyClientUnitOfWork)

    async def put(self, transcript: TranscriptRecord) -> None:
        try:
            with self.uow_factory() as uow:
                uow.repositories.transcripts.add(transcript)
                uow.commit()
        except SQLAlchemyError as exc:
            log.error(f"Failed to save transcript {transcript.file_name}: {exc}")
            raise StoreFailureError(f"Failed to save transcript {transcript.file_name}") from exc


if TYPE_CHECKING:
    _record_store_check: RecordStore = SqlAlchemyRecordStore()
    _transcript_store_check: TranscriptStore = SqlAlchemyTranscriptStore()
