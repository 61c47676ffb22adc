"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import func, insert, select, update

from factfind.adapters.sqlalchemy.mappings import client_record_table, transcript_table
from factfind.domain.model.record import new_id

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from factfind.domain.model.record import ClientRecord
    from factfind.domain.ports.persistence import TranscriptRecord


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(tz=UTC)


class SqlAlchemyClientRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[ClientRecord]:
        """All records ordered by case-insensitive last name."""

        stmt = select(client_record_table.c.payload).order_by(
            func.lower(client_record_table.c.last_name),
            client_record_table.c.created_at,
        )
        return [cast("ClientRecord", payload) for payload in self.session.scalars(stmt)]

    def get(self, record_id: str) -> ClientRecord | None:
        stmt = select(client_record_table.c.payload).where(client_record_table.c.id == record_id)
        payload = self.session.execute(stmt).scalar_one_or_none()
        return cast("ClientRecord | None", payload)

    def upsert(self, record: ClientRecord) -> None:
        record_id = str(record["id"])
        personal: dict[str, Any] = record.get("personal") or {}
        values = {
            "last_name": str(personal.get("lastName") or ""),
            "updated_at": _parse_timestamp(record.get("updatedAt")),
            "payload": record,
        }
        exists = self.session.execute(
            select(client_record_table.c.id).where(client_record_table.c.id == record_id)
        ).first()
        if exists is None:
            self.session.execute(
                insert(client_record_table).values(
                    id=record_id,
                    created_at=_parse_timestamp(record.get("createdAt")),
                    **values,
                )
            )
        else:
            self.session.execute(
                update(client_record_table)
                .where(client_record_table.c.id == record_id)
                .values(**values)
            )


class SqlAlchemyTranscriptRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, transcript: TranscriptRecord) -> str:
        transcript_id = new_id()
        self.session.execute(
            insert(transcript_table).values(
                id=transcript_id,
                client_id=transcript.client_id,
                file_name=transcript.file_name,
                uploaded_at=transcript.uploaded_at,
                content=transcript.content,
            )
        )
        return transcript_id

