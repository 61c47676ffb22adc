"""Sequential batch import of transcripts with duplicate-client resolution.

One :class:`BatchPipeline` value owns the queue of a run. Documents are
processed strictly one after another:

1) read the text and resolve the client name (extractor, then regex fallback)
2) match the name against every stored client
3) on a match, yield an ``awaiting-decision`` result and suspend until
   :meth:`BatchPipeline.submit_decision` supplies a decision
4) otherwise create and store a new client
5) store the transcript, run the full extraction and auto-merge it

Per-item failures become ``error`` results. Record or transcript store
failures raise :class:`StoreFailureError` and end the run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from factfind.domain.errors import (
    BatchInProgressError,
    InvalidDecisionError,
    InvalidPathError,
    NoClientIdentifiedError,
    PathConflictError,
    StoreFailureError,
)
from factfind.domain.model.enums import BatchItemStatus, OverwritePolicy
from factfind.domain.model.record import client_display_name, new_client_record
from factfind.domain.ports.persistence import TranscriptRecord
from factfind.domain.reconciliation.identity import find_matches
from factfind.domain.reconciliation.merge import DEFAULT_CONFIDENCE_THRESHOLD, merge_batch

from .heuristics import parse_name_from_text
from .state import BatchItem, BatchItemResult, BatchSummary, CreateNew, Skip, UseExisting

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterable

    from factfind.domain.model.record import ClientRecord
    from factfind.domain.ports.extraction import NameCandidate, TextExtractor
    from factfind.domain.ports.persistence import RecordStore, TranscriptStore

    from .documents import Document
    from .state import Decision

log = getLogger(__name__)

NO_CLIENT_MESSAGE = "Could not identify client name in transcript"
ABORTED_MESSAGE = "Batch aborted"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class BatchPipeline:
    extractor: TextExtractor
    records: RecordStore
    transcripts: TranscriptStore
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    policy: OverwritePolicy = OverwritePolicy.ALWAYS
    clock: Callable[[], datetime] = _utcnow

    _items: list[BatchItem] = field(default_factory=list, init=False)
    _results: list[BatchItemResult] = field(default_factory=list, init=False)
    _pending: dict[str, asyncio.Future[Decision]] = field(default_factory=dict, init=False)
    _running: bool = field(default=False, init=False)
    _aborted: bool = field(default=False, init=False)

    @property
    def items(self) -> tuple[BatchItem, ...]:
        return tuple(self._items)

    @property
    def results(self) -> tuple[BatchItemResult, ...]:
        return tuple(self._results)

    @property
    def is_running(self) -> bool:
        return self._running

    def summary(self) -> BatchSummary:
        return BatchSummary.from_results(self._results)

    async def run(self, documents: Iterable[Document]) -> AsyncIterator[BatchItemResult]:
        """Process ``documents`` in order, yielding each item's result.

        An item awaiting a decision is yielded once with status
        ``awaiting-decision`` and again with its final result after the
        decision has been submitted.
        """

        if self._running:
            raise BatchInProgressError("Batch processing already in progress")
        self._running = True
        self._aborted = False
        self._items = [
            BatchItem(item_id=f"item-{index}", document=document)
            for index, document in enumerate(documents)
        ]
        self._results = []
        log.info("Starting batch of %d document(s)", len(self._items))
        try:
            for item in self._items:
                if self._aborted:
                    log.info("Batch aborted before %s", item.document.name)
                    break
                self._transition(item, BatchItemStatus.PROCESSING)
                result = await self._identify(item)
                if result is None:
                    future: asyncio.Future[Decision] = asyncio.get_running_loop().create_future()
                    self._pending[item.item_id] = future
                    self._transition(item, BatchItemStatus.AWAITING_DECISION)
                    yield self._awaiting_result(item)
                    decision = await future
                    self._pending.pop(item.item_id, None)
                    self._transition(item, BatchItemStatus.PROCESSING)
                    result = await self._resolve(item, decision)
                self._finish(item, result)
                yield result
        except StoreFailureError:
            log.exception("Store failure, halting batch")
            raise
        finally:
            for future in self._pending.values():
                future.cancel()
            self._pending.clear()
            self._running = False
        log.info("Batch complete: %s", self.summary())

    def submit_decision(self, item_id: str, decision: Decision) -> None:
        """Resolve an item that is awaiting a duplicate decision."""

        future = self._pending.get(item_id)
        if future is None or future.done():
            raise InvalidDecisionError(f"Item {item_id!r} is not awaiting a decision")
        if isinstance(decision, UseExisting):
            item = self._item(item_id)
            if not 0 <= decision.candidate_index < len(item.candidates):
                raise InvalidDecisionError(
                    f"Candidate index {decision.candidate_index} out of range "
                    f"for item {item_id!r} ({len(item.candidates)} candidate(s))"
                )
        log.info("Decision for %s: %s", item_id, decision.kind)
        future.set_result(decision)

    def abort(self) -> None:
        """Stop advancing the queue once the in-flight item completes.

        An item awaiting a decision is resolved as skipped.
        """

        self._aborted = True
        for future in self._pending.values():
            if not future.done():
                future.set_result(Skip(reason=ABORTED_MESSAGE))

    def _item(self, item_id: str) -> BatchItem:
        for item in self._items:
            if item.item_id == item_id:
                return item
        raise InvalidDecisionError(f"Unknown batch item {item_id!r}")

    def _transition(self, item: BatchItem, status: BatchItemStatus) -> None:
        log.info("%s (%s): %s -> %s", item.item_id, item.document.name, item.status, status)
        item.status = status

    def _finish(self, item: BatchItem, result: BatchItemResult) -> None:
        if result.status is BatchItemStatus.ERROR:
            log.warning("%s failed: %s", item.document.name, result.message)
        self._transition(item, result.status)
        item.result = result
        self._results.append(result)

    async def _identify(self, item: BatchItem) -> BatchItemResult | None:
        """Resolve the client for ``item``; ``None`` means a decision is needed."""

        try:
            item.text = await item.document.read_text()
            name = await self._resolve_name(item.text)
        except (OSError, UnicodeError) as exc:
            return self._error(item, f"Could not read file: {exc}")
        except NoClientIdentifiedError as exc:
            return self._error(item, str(exc))
        item.name = name

        existing = await self._store(self.records.get_all(), "list client records")
        candidates = find_matches(name.first_name, name.last_name, existing)
        if candidates:
            item.candidates = tuple(candidates)
            return None
        return await self._process_new(item)

    async def _resolve_name(self, text: str) -> NameCandidate:
        name: NameCandidate | None = None
        try:
            name = await self.extractor.extract_name(text)
        except Exception:  # noqa: BLE001
            log.warning("Name extraction failed, falling back to heuristics", exc_info=True)
        if name is None or not name.first_name.strip() or not name.last_name.strip():
            name = parse_name_from_text(text)
        if name is None:
            raise NoClientIdentifiedError(NO_CLIENT_MESSAGE)
        return name

    async def _resolve(self, item: BatchItem, decision: Decision) -> BatchItemResult:
        match decision:
            case Skip(reason=reason):
                return BatchItemResult(
                    item_id=item.item_id,
                    file_name=item.document.name,
                    status=BatchItemStatus.SKIPPED,
                    message=reason,
                )
            case CreateNew():
                return await self._process_new(item)
            case UseExisting(candidate_index=index):
                candidate = item.candidates[index]
                record_id = str(candidate.record.get("id"))
                record = await self._store(self.records.get(record_id), "load client record")
                if record is None:
                    return self._error(item, f"Client {record_id} no longer exists")
                return await self._extract_and_merge(item, record)
            case _:
                raise InvalidDecisionError(f"Unsupported decision: {decision!r}")

    async def _process_new(self, item: BatchItem) -> BatchItemResult:
        name = _name_of(item)
        record = new_client_record(
            first_name=name.first_name,
            last_name=name.last_name,
            now=self.clock(),
        )
        await self._store(self.records.put(record), "save new client record")
        log.info("Created client %s (%s)", client_display_name(record), record["id"])
        return await self._extract_and_merge(item, record)

    async def _extract_and_merge(self, item: BatchItem, record: ClientRecord) -> BatchItemResult:
        text = item.text or ""
        client_id = str(record["id"])
        client_name = client_display_name(record)
        # Not atomic with the record write above; a crash here leaves an empty client.
        await self._store(
            self.transcripts.put(
                TranscriptRecord(
                    client_id=client_id,
                    file_name=item.document.name,
                    content=text,
                    uploaded_at=self.clock(),
                )
            ),
            "save transcript",
        )

        try:
            outcome = await self.extractor.extract_full(text, record)
        except Exception as exc:  # noqa: BLE001
            log.warning("Extractor raised for %s", item.document.name, exc_info=True)
            return self._error(item, str(exc) or "Extraction failed", client_id, client_name)
        if not outcome.success:
            return self._error(item, outcome.error or "Extraction failed", client_id, client_name)

        try:
            merged = merge_batch(
                record,
                outcome.data,
                threshold=self.threshold,
                policy=self.policy,
                file_name=item.document.name,
                now=self.clock(),
            )
        except (InvalidPathError, PathConflictError) as exc:
            return self._error(item, str(exc), client_id, client_name)
        await self._store(self.records.put(merged.record), "save client record")

        return BatchItemResult(
            item_id=item.item_id,
            file_name=item.document.name,
            status=BatchItemStatus.SUCCESS,
            client_id=client_id,
            client_name=client_display_name(merged.record),
            fields_updated=merged.fields_updated,
            completeness=merged.record["dataCompleteness"],
            summary=outcome.summary,
            missing_fields=outcome.missing_fields,
        )

    def _awaiting_result(self, item: BatchItem) -> BatchItemResult:
        name = _name_of(item)
        return BatchItemResult(
            item_id=item.item_id,
            file_name=item.document.name,
            status=BatchItemStatus.AWAITING_DECISION,
            client_name=f"{name.first_name} {name.last_name}",
            message=f"Possible match: {client_display_name(item.candidates[0].record)}",
            candidates=item.candidates,
        )

    def _error(
        self,
        item: BatchItem,
        message: str,
        client_id: str | None = None,
        client_name: str | None = None,
    ) -> BatchItemResult:
        return BatchItemResult(
            item_id=item.item_id,
            file_name=item.document.name,
            status=BatchItemStatus.ERROR,
            client_id=client_id,
            client_name=client_name,
            message=message,
        )

    async def _store[T](self, call: Awaitable[T], action: str) -> T:
        try:
            return await call
        except StoreFailureError:
            raise
        except Exception as exc:
            raise StoreFailureError(f"Failed to {action}: {exc}") from exc


def _name_of(item: BatchItem) -> NameCandidate:
    if item.name is None:
        raise NoClientIdentifiedError(NO_CLIENT_MESSAGE)
    return item.name
