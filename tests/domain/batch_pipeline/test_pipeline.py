from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from factfind.domain.batch_pipeline import (
    ABORTED_MESSAGE,
    NO_CLIENT_MESSAGE,
    BatchPipeline,
    CreateNew,
    FileDocument,
    Skip,
    TextDocument,
    UseExisting,
)
from factfind.domain.errors import BatchInProgressError, InvalidDecisionError, StoreFailureError
from factfind.domain.model.enums import BatchItemStatus, MatchType
from factfind.domain.model.extraction import ConfidenceValue, Leaf, Node
from factfind.domain.ports.extraction import ExtractionOutcome, NameCandidate
from tests.helpers.clients import (
    FailingRecordStore,
    FakeTextExtractor,
    InMemoryRecordStore,
    InMemoryTranscriptStore,
    cv,
    make_record,
)

if TYPE_CHECKING:
    from pathlib import Path

    from factfind.domain.batch_pipeline import BatchItemResult, Document
    from factfind.domain.model.record import ClientRecord

NOW = datetime(2025, 3, 1, 9, 30, tzinfo=UTC)
MARIA_TEXT = "Client: Maria Lopez, age 40, works as Engineer at Acme earning 5000 GBP/month"
MARIA_PAYLOAD = {
    "personal": {
        "firstName": cv("Maria", 0.95),
        "lastName": cv("Lopez", 0.95),
        "age": cv(40, 0.9),
    },
    "employment": {
        "jobTitle": cv("Engineer", 0.9),
        "employer": cv("Acme", 0.9),
        "monthlyGrossIncome": cv(5000, 0.9),
        "incomeCurrency": cv("GBP", 0.8),
    },
}


def _pipeline(
    extractor: FakeTextExtractor | None = None,
    records: InMemoryRecordStore | None = None,
    transcripts: InMemoryTranscriptStore | None = None,
) -> BatchPipeline:
    return BatchPipeline(
        extractor=extractor or FakeTextExtractor(),
        records=records if records is not None else InMemoryRecordStore(),
        transcripts=transcripts if transcripts is not None else InMemoryTranscriptStore(),
        clock=lambda: NOW,
    )


async def _collect(pipeline: BatchPipeline, documents: list[Document]) -> list[BatchItemResult]:
    return [result async for result in pipeline.run(documents)]


def test_new_client_is_created_and_auto_merged() -> None:
    records = InMemoryRecordStore()
    transcripts = InMemoryTranscriptStore()
    extractor = FakeTextExtractor(payloads={"Maria": MARIA_PAYLOAD})
    pipeline = _pipeline(extractor, records, transcripts)

    results = asyncio.run(_collect(pipeline, [TextDocument("maria.txt", MARIA_TEXT)]))

    assert [result.status for result in results] == [BatchItemStatus.SUCCESS]
    result = results[0]
    stored = records.records[result.client_id or ""]
    assert stored["personal"]["firstName"] == "Maria"
    assert stored["employment"]["monthlyGrossIncome"] == 5000
    assert stored["version"] == 2
    assert stored["dataCompleteness"] > 0
    assert result.completeness == stored["dataCompleteness"]
    assert result.client_name == "Maria Lopez"
    assert result.fields_updated == 7
    assert stored["dataSources"][0]["type"] == "batch_transcript"
    assert [t.file_name for t in transcripts.transcripts] == ["maria.txt"]
    assert transcripts.transcripts[0].client_id == result.client_id
    # the full extraction sees the freshly created record
    assert extractor.full_calls[0][1] is not None
    assert extractor.full_calls[0][1]["personal"]["lastName"] == "Lopez"
    assert pipeline.summary().success == 1
    assert not pipeline.is_running


def test_extractor_name_is_preferred_over_heuristics() -> None:
    extractor = FakeTextExtractor(names={"Lopez": NameCandidate("Mariana", "Lopez")})
    records = InMemoryRecordStore()

    results = asyncio.run(
        _collect(_pipeline(extractor, records), [TextDocument("m.txt", MARIA_TEXT)])
    )

    assert results[0].client_name == "Mariana Lopez"


def test_partial_extractor_name_falls_back_to_heuristics() -> None:
    extractor = FakeTextExtractor(names={"Lopez": NameCandidate("Maria", " ")})

    results = asyncio.run(_collect(_pipeline(extractor), [TextDocument("m.txt", MARIA_TEXT)]))

    assert results[0].client_name == "Maria Lopez"


def test_name_extractor_exception_falls_back_to_heuristics() -> None:
    @dataclass
    class ExplodingNameExtractor(FakeTextExtractor):
        async def extract_name(self, text: str) -> NameCandidate | None:
            raise TimeoutError("provider timeout")

    results = asyncio.run(
        _collect(_pipeline(ExplodingNameExtractor()), [TextDocument("m.txt", MARIA_TEXT)])
    )

    assert results[0].status is BatchItemStatus.SUCCESS
    assert results[0].client_name == "Maria Lopez"


def test_unidentified_client_is_an_error_result() -> None:
    extractor = FakeTextExtractor()
    records = InMemoryRecordStore()

    results = asyncio.run(
        _collect(_pipeline(extractor, records), [TextDocument("notes.txt", "hello there")])
    )

    assert results[0].status is BatchItemStatus.ERROR
    assert results[0].message == NO_CLIENT_MESSAGE
    assert extractor.full_calls == []
    assert records.records == {}


def test_unreadable_file_is_an_error_result(tmp_path: Path) -> None:
    results = asyncio.run(_collect(_pipeline(), [FileDocument(tmp_path / "missing.txt")]))

    assert results[0].status is BatchItemStatus.ERROR
    assert results[0].file_name == "missing.txt"
    assert (results[0].message or "").startswith("Could not read file:")


def test_file_document_is_read(tmp_path: Path) -> None:
    path = tmp_path / "maria.txt"
    path.write_text(MARIA_TEXT, encoding="utf-8")

    results = asyncio.run(_collect(_pipeline(), [FileDocument(path)]))

    assert results[0].status is BatchItemStatus.SUCCESS
    assert results[0].file_name == "maria.txt"


def test_failed_extraction_keeps_created_client() -> None:
    records = InMemoryRecordStore()
    extractor = FakeTextExtractor(failures={"Maria": "Rate limited"})

    results = asyncio.run(
        _collect(_pipeline(extractor, records), [TextDocument("m.txt", MARIA_TEXT)])
    )

    result = results[0]
    assert result.status is BatchItemStatus.ERROR
    assert result.message == "Rate limited"
    assert result.client_id in records.records
    assert records.records[result.client_id or ""]["version"] == 1


def test_unaddressable_extracted_keys_are_dropped() -> None:
    records = InMemoryRecordStore()
    extractor = FakeTextExtractor(
        payloads={
            "Maria": {
                "personal": {
                    "firstName": cv("Maria"),
                    "notes[x]": cv("odd", 0.9),
                    "": cv("blank", 0.9),
                    "a.b": cv("dotted", 0.9),
                }
            },
            "Amy": {"employment": {"employer": cv("Acme")}},
        }
    )
    documents: list[Document] = [
        TextDocument("maria.txt", MARIA_TEXT),
        TextDocument("amy.txt", "Client: Amy Brown"),
    ]

    results = asyncio.run(_collect(_pipeline(extractor, records), documents))

    assert [result.status for result in results] == [
        BatchItemStatus.SUCCESS,
        BatchItemStatus.SUCCESS,
    ]
    assert results[0].fields_updated == 1
    maria = records.records[results[0].client_id or ""]
    assert set(maria["personal"]) & {"notes[x]", "", "a", "a.b"} == set()
    assert records.records[results[1].client_id or ""]["employment"]["employer"] == "Acme"


def test_unwritable_path_is_an_item_error_and_the_run_continues() -> None:
    @dataclass
    class RawTreeExtractor(FakeTextExtractor):
        async def extract_full(
            self, text: str, existing: ClientRecord | None = None
        ) -> ExtractionOutcome:
            if "Maria" in text:
                odd = Node(children={"notes[x]": Leaf(ConfidenceValue("odd", 0.9))})
                return ExtractionOutcome.ok(Node(children={"personal": odd}))
            return await super().extract_full(text, existing)

    records = InMemoryRecordStore()
    documents: list[Document] = [
        TextDocument("maria.txt", MARIA_TEXT),
        TextDocument("amy.txt", "Client: Amy Brown"),
    ]

    results = asyncio.run(_collect(_pipeline(RawTreeExtractor(), records), documents))

    assert [result.status for result in results] == [
        BatchItemStatus.ERROR,
        BatchItemStatus.SUCCESS,
    ]
    assert "Invalid field path 'personal.notes[x]'" in (results[0].message or "")
    assert results[0].client_id in records.records
    assert len(records.records) == 2


def test_item_suspends_until_decision_and_later_items_wait() -> None:
    existing = make_record("Amy", "Brown")
    records = InMemoryRecordStore([existing])
    transcripts = InMemoryTranscriptStore()
    extractor = FakeTextExtractor()
    pipeline = _pipeline(extractor, records, transcripts)
    documents: list[Document] = [
        TextDocument("one.txt", "Client: Amy Brown first meeting"),
        TextDocument("two.txt", "Client: Amy Brown second meeting"),
    ]

    async def scenario() -> None:
        stream = pipeline.run(documents)

        first = await anext(stream)
        assert first.status is BatchItemStatus.AWAITING_DECISION
        assert [c.match_type for c in first.candidates] == [MatchType.EXACT]
        assert pipeline.items[0].status is BatchItemStatus.AWAITING_DECISION
        assert pipeline.items[1].status is BatchItemStatus.PENDING
        assert len(extractor.name_calls) == 1

        pipeline.submit_decision(first.item_id, CreateNew())
        created = await anext(stream)
        assert created.status is BatchItemStatus.SUCCESS
        assert created.client_id != existing["id"]

        # the second item sees the client created while resolving the first
        second = await anext(stream)
        assert second.status is BatchItemStatus.AWAITING_DECISION
        assert [c.record["id"] for c in second.candidates] == [existing["id"], created.client_id]

        pipeline.submit_decision(second.item_id, UseExisting(candidate_index=0))
        merged = await anext(stream)
        assert merged.status is BatchItemStatus.SUCCESS
        assert merged.client_id == existing["id"]

        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    asyncio.run(scenario())

    summary = pipeline.summary()
    assert (summary.total, summary.success, summary.error, summary.skipped) == (2, 2, 0, 0)
    assert len(summary.client_ids) == 2
    assert len(records.records) == 2
    assert len(transcripts.transcripts) == 2
    assert records.records[existing["id"]]["version"] == 2


def test_skip_decision_leaves_store_untouched() -> None:
    existing = make_record("Amy", "Brown")
    records = InMemoryRecordStore([existing])
    transcripts = InMemoryTranscriptStore()
    pipeline = _pipeline(records=records, transcripts=transcripts)

    async def scenario() -> list[BatchItemResult]:
        results: list[BatchItemResult] = []
        async for result in pipeline.run([TextDocument("a.txt", "Client: Amy Brown")]):
            results.append(result)
            if result.status is BatchItemStatus.AWAITING_DECISION:
                pipeline.submit_decision(result.item_id, Skip())
        return results

    results = asyncio.run(scenario())

    assert [r.status for r in results] == [
        BatchItemStatus.AWAITING_DECISION,
        BatchItemStatus.SKIPPED,
    ]
    assert results[1].message == "Skipped by user"
    assert records.puts == []
    assert transcripts.transcripts == []


def test_invalid_decisions_are_rejected() -> None:
    records = InMemoryRecordStore([make_record("Amy", "Brown")])
    pipeline = _pipeline(records=records)

    async def scenario() -> BatchItemResult:
        stream = pipeline.run([TextDocument("a.txt", "Client: Amy Brown")])
        awaiting = await anext(stream)

        with pytest.raises(InvalidDecisionError):
            pipeline.submit_decision("item-9", CreateNew())
        with pytest.raises(InvalidDecisionError):
            pipeline.submit_decision(awaiting.item_id, UseExisting(candidate_index=1))
        with pytest.raises(InvalidDecisionError):
            pipeline.submit_decision(awaiting.item_id, UseExisting(candidate_index=-1))

        pipeline.submit_decision(awaiting.item_id, UseExisting(candidate_index=0))
        with pytest.raises(InvalidDecisionError):
            pipeline.submit_decision(awaiting.item_id, CreateNew())
        return await anext(stream)

    final = asyncio.run(scenario())

    assert final.status is BatchItemStatus.SUCCESS


def test_use_existing_for_deleted_client_is_an_error() -> None:
    existing = make_record("Amy", "Brown")
    records = InMemoryRecordStore([existing])
    pipeline = _pipeline(records=records)

    async def scenario() -> BatchItemResult:
        stream = pipeline.run([TextDocument("a.txt", "Client: Amy Brown")])
        awaiting = await anext(stream)
        del records.records[existing["id"]]
        pipeline.submit_decision(awaiting.item_id, UseExisting(candidate_index=0))
        return await anext(stream)

    final = asyncio.run(scenario())

    assert final.status is BatchItemStatus.ERROR
    assert final.message == f"Client {existing['id']} no longer exists"


def test_abort_skips_pending_decision_and_stops_queue() -> None:
    records = InMemoryRecordStore([make_record("Amy", "Brown")])
    pipeline = _pipeline(records=records)
    documents: list[Document] = [
        TextDocument("a.txt", "Client: Amy Brown"),
        TextDocument("b.txt", "Client: Maria Lopez"),
    ]

    async def scenario() -> list[BatchItemResult]:
        results: list[BatchItemResult] = []
        async for result in pipeline.run(documents):
            results.append(result)
            if result.status is BatchItemStatus.AWAITING_DECISION:
                pipeline.abort()
        return results

    results = asyncio.run(scenario())

    assert [r.status for r in results] == [
        BatchItemStatus.AWAITING_DECISION,
        BatchItemStatus.SKIPPED,
    ]
    assert results[1].message == ABORTED_MESSAGE
    assert pipeline.items[1].status is BatchItemStatus.PENDING
    assert pipeline.summary().total == 1
    assert len(records.records) == 1


def test_store_failure_halts_the_run() -> None:
    pipeline = _pipeline(records=FailingRecordStore())
    documents: list[Document] = [
        TextDocument("a.txt", "Client: Amy Brown"),
        TextDocument("b.txt", "Client: Maria Lopez"),
    ]

    with pytest.raises(StoreFailureError, match="list client records"):
        asyncio.run(_collect(pipeline, documents))

    assert not pipeline.is_running
    assert pipeline.results == ()
    assert pipeline.items[1].status is BatchItemStatus.PENDING


def test_second_run_while_running_is_rejected() -> None:
    records = InMemoryRecordStore([make_record("Amy", "Brown")])
    pipeline = _pipeline(records=records)

    async def scenario() -> None:
        stream = pipeline.run([TextDocument("a.txt", "Client: Amy Brown")])
        awaiting = await anext(stream)
        assert pipeline.is_running

        with pytest.raises(BatchInProgressError):
            await anext(pipeline.run([TextDocument("b.txt", "Client: Maria Lopez")]))

        pipeline.submit_decision(awaiting.item_id, Skip())
        async for _ in stream:
            pass

    asyncio.run(scenario())

    assert not pipeline.is_running
