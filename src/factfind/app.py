"""Application orchestration entry points."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from factfind.adapters.llm import DemoTextExtractor, HttpTextExtractor
from factfind.adapters.sqlalchemy import SqlAlchemyRecordStore, SqlAlchemyTranscriptStore
from factfind.adapters.sqlalchemy.unit_of_work import is_started, startup
from factfind.config import MissingConfigurationError, get_batch_config, get_extractor_config
from factfind.domain.batch_pipeline import BatchPipeline
from factfind.domain.errors import ExtractionFailedError
from factfind.domain.model.enums import BatchItemStatus
from factfind.domain.reconciliation import find_conflicts, merge_interactive

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from pathlib import Path

    from factfind.config import BatchConfig, ExtractorConfig
    from factfind.domain.batch_pipeline import BatchItemResult, BatchSummary, Decision, Document
    from factfind.domain.model.record import ClientRecord
    from factfind.domain.ports import ExtractionOutcome, RecordStore, TextExtractor, TranscriptStore
    from factfind.domain.reconciliation import ApprovedField, Conflict, MergeResult

    DecisionProvider = Callable[[BatchItemResult], Awaitable[Decision]]
    ResultCallback = Callable[[BatchItemResult], None]

log = getLogger(__name__)


def ensure_database() -> None:
    if not is_started():
        startup()


def build_text_extractor(config: ExtractorConfig | None = None) -> TextExtractor:
    """Return the HTTP extractor, or the demo extractor when no API key is set."""

    if config is None:
        try:
            config = get_extractor_config()
        except MissingConfigurationError:
            log.warning("No FACTFIND_LLM_API_KEY configured; using demo extraction")
            return DemoTextExtractor()
    log.info(f"Using {config.provider} extractor with model {config.effective_model}")
    return HttpTextExtractor(config=config)


def build_batch_pipeline(
    *,
    extractor: TextExtractor | None = None,
    records: RecordStore | None = None,
    transcripts: TranscriptStore | None = None,
    batch_config: BatchConfig | None = None,
) -> BatchPipeline:
    if records is None or transcripts is None:
        ensure_database()
    effective_config = batch_config or get_batch_config()
    return BatchPipeline(
        extractor=extractor or build_text_extractor(),
        records=records or SqlAlchemyRecordStore(),
        transcripts=transcripts or SqlAlchemyTranscriptStore(),
        threshold=effective_config.confidence_threshold,
        policy=effective_config.overwrite_policy,
    )


async def run_batch(
    documents: Iterable[Document],
    *,
    decide: DecisionProvider,
    pipeline: BatchPipeline | None = None,
    on_result: ResultCallback | None = None,
) -> BatchSummary:
    """Drive a batch run to completion, asking ``decide`` about duplicates."""

    active = pipeline or build_batch_pipeline()
    async for result in active.run(documents):
        if on_result is not None:
            on_result(result)
        if result.status is BatchItemStatus.AWAITING_DECISION:
            decision = await decide(result)
            active.submit_decision(result.item_id, decision)
    summary = active.summary()
    log.info(
        f"Finished batch: total={summary.total}, success={summary.success}, "
        f"error={summary.error}, skipped={summary.skipped}, clients={len(summary.client_ids)}"
    )
    return summary


@dataclass(frozen=True, slots=True)
class TranscriptReview:
    outcome: ExtractionOutcome
    conflicts: tuple[Conflict, ...]


async def review_transcript(
    text: str,
    record: ClientRecord | None,
    *,
    extractor: TextExtractor,
) -> TranscriptReview:
    """Extract ``text`` and report conflicts against ``record`` for interactive review."""

    outcome = await extractor.extract_full(text, record)
    if not outcome.success:
        raise ExtractionFailedError(outcome.error or "Extraction failed")
    conflicts = find_conflicts(record, outcome.data) if record is not None else []
    return TranscriptReview(outcome=outcome, conflicts=tuple(conflicts))


async def apply_review(
    record: ClientRecord,
    review: TranscriptReview,
    approved: Iterable[ApprovedField],
    *,
    records: RecordStore,
    file_name: str | None = None,
    now: datetime | None = None,
) -> MergeResult:
    """Merge the reviewer-approved fields and store the updated record."""

    result = merge_interactive(
        record, review.outcome.data, approved, file_name=file_name, now=now
    )
    await records.put(result.record)
    log.info(f"Applied {result.fields_updated} reviewed field(s) to client {record.get('id')}")
    return result


@dataclass(frozen=True, slots=True)
class ClientExport:
    file_name: str
    payload: dict[str, Any]


_WHITESPACE = re.compile(r"\s+")


def export_client(record: ClientRecord, *, now: datetime | None = None) -> ClientExport:
    moment = now or datetime.now(tz=UTC)
    personal = record.get("personal") or {}
    name = f"{personal.get('firstName') or 'Unknown'}_{personal.get('lastName') or 'Client'}"
    return ClientExport(
        file_name=f"client_{_WHITESPACE.sub('_', name)}_{moment.date().isoformat()}.json",
        payload={
            "exportDate": moment.isoformat(),
            "client": record,
            "transcriptCount": len(record.get("dataSources") or []),
            "dataCompleteness": record.get("dataCompleteness") or 0,
        },
    )


async def export_clients(
    out_dir: Path,
    *,
    records: RecordStore | None = None,
    now: datetime | None = None,
) -> list[Path]:
    """Write one JSON export per stored client into ``out_dir``."""

    if records is None:
        ensure_database()
    store = records or SqlAlchemyRecordStore()
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for record in await store.get_all():
        export = export_client(record, now=now)
        target = out_dir / export.file_name
        target.write_text(json.dumps(export.payload, indent=2), encoding="utf-8")
        written.append(target)
    log.info(f"Exported {len(written)} client file(s) to {out_dir}")
    return written
