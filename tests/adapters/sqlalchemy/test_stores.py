from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from factfind.adapters.sqlalchemy import (
    SqlAlchemyRecordStore,
    SqlAlchemyTranscriptStore,
    transcript_table,
)
from factfind.domain.errors import StoreFailureError
from factfind.domain.ports.persistence import RecordStore, TranscriptRecord, TranscriptStore
from tests.helpers.clients import make_record

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_stores_satisfy_ports() -> None:
    assert isinstance(SqlAlchemyRecordStore(), RecordStore)
    assert isinstance(SqlAlchemyTranscriptStore(), TranscriptStore)


def test_record_round_trip_and_upsert(sqlite_started: Engine) -> None:
    _ = sqlite_started
    store = SqlAlchemyRecordStore()
    record = make_record("Maria", "Lopez", employment={"monthlyGrossIncome": 5000})

    asyncio.run(store.put(record))
    loaded = asyncio.run(store.get(record["id"]))

    assert loaded == record

    record["version"] = 2
    record["personal"]["lastName"] = "Lopez-Garcia"
    asyncio.run(store.put(record))

    reloaded = asyncio.run(store.get(record["id"]))
    assert reloaded is not None
    assert reloaded["version"] == 2
    assert reloaded["personal"]["lastName"] == "Lopez-Garcia"
    assert len(asyncio.run(store.get_all())) == 1


def test_get_unknown_record_returns_none(sqlite_started: Engine) -> None:
    _ = sqlite_started

    assert asyncio.run(SqlAlchemyRecordStore().get("missing")) is None


def test_get_all_orders_by_last_name_case_insensitively(sqlite_started: Engine) -> None:
    _ = sqlite_started
    store = SqlAlchemyRecordStore()
    for first, last in (("Amy", "smith"), ("Bob", "Brown"), ("Cleo", "Adams")):
        asyncio.run(store.put(make_record(first, last)))

    records = asyncio.run(store.get_all())

    assert [record["personal"]["lastName"] for record in records] == ["Adams", "Brown", "smith"]


def test_transcripts_are_appended(sqlite_started: Engine) -> None:
    store = SqlAlchemyTranscriptStore()
    uploaded = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

    for name in ("one.txt", "two.txt"):
        asyncio.run(
            store.put(
                TranscriptRecord(
                    client_id="client-1", file_name=name, content="hello", uploaded_at=uploaded
                )
            )
        )

    with sqlite_started.connect() as connection:
        count = connection.execute(
            select(func.count()).select_from(transcript_table).where(
                transcript_table.c.client_id == "client-1"
            )
        ).scalar_one()
    assert count == 2


def test_database_errors_become_store_failures(sqlite_started: Engine) -> None:
    with sqlite_started.begin() as connection:
        connection.exec_driver_sql("DROP TABLE client_record")

    store = SqlAlchemyRecordStore()

    with pytest.raises(StoreFailureError, match="list client records"):
        asyncio.run(store.get_all())
    with pytest.raises(StoreFailureError, match="save client record"):
        asyncio.run(store.put(make_record()))
