from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, inspect

from factfind.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyClientUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from factfind.domain.ports.persistence import TranscriptRecord
from tests.helpers.clients import make_record

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyClientUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert {"client_record", "transcript"} <= set(inspect(engine_b).get_table_names())


def test_startup_uses_database_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    startup()

    engine = configured_engine()
    assert engine is not None
    assert str(engine.url) == "sqlite+pysqlite:///:memory:"


def test_rollback_on_error_discards_writes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    record = make_record("Amy", "Brown")

    with pytest.raises(RuntimeError, match="boom"), SqlAlchemyClientUnitOfWork() as uow:
        uow.repositories.records.upsert(record)
        raise RuntimeError("boom")

    with SqlAlchemyClientUnitOfWork() as uow:
        assert uow.repositories.records.get(record["id"]) is None


def test_commit_persists_records_and_transcripts(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    record = make_record("Amy", "Brown")

    with SqlAlchemyClientUnitOfWork() as uow:
        uow.repositories.records.upsert(record)
        transcript_id = uow.repositories.transcripts.add(
            TranscriptRecord(
                client_id=record["id"],
                file_name="amy.txt",
                content="Client: Amy Brown",
                uploaded_at=datetime(2025, 3, 1, tzinfo=UTC),
            )
        )
        uow.commit()

    assert transcript_id
    with SqlAlchemyClientUnitOfWork() as uow:
        assert uow.repositories.records.list_all() == [record]


def test_repositories_require_an_open_session(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyClientUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
