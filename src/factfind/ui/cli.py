# ruff: noqa: T201
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from factfind.adapters.sqlalchemy import SqlAlchemyRecordStore
from factfind.app import (
    build_text_extractor,
    ensure_database,
    export_clients,
    review_transcript,
    run_batch,
)
from factfind.config import configure_logging
from factfind.domain.batch_pipeline import CreateNew, FileDocument, Skip, UseExisting
from factfind.domain.model.enums import BatchItemStatus
from factfind.domain.reconciliation import score_completeness, validate_record

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from types import FrameType

    from factfind.domain.batch_pipeline import BatchItemResult, Decision

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile meeting transcripts into client records"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    batch = subparsers.add_parser("batch", help="Import transcripts, resolving duplicate clients")
    batch.add_argument("files", nargs="+", type=Path, help="Transcript text files")

    conflicts = subparsers.add_parser(
        "conflicts", help="Extract a transcript and list conflicts with a stored client"
    )
    conflicts.add_argument("--client-id", type=str, required=True, help="Stored client id")
    conflicts.add_argument("file", type=Path, help="Transcript text file")

    score = subparsers.add_parser("score", help="Show completeness of a stored client")
    score.add_argument("--client-id", type=str, required=True, help="Stored client id")

    export = subparsers.add_parser("export", help="Write a JSON export of every stored client")
    export.add_argument("--out", type=Path, required=True, help="Output directory")

    return parser.parse_args(list(argv))


def parse_decision(answer: str, *, candidates: int) -> Decision:
    """Map ``e<N>`` / ``n`` / ``s`` to a decision; ``N`` counts from 1."""

    normalized = answer.strip().lower()
    if normalized == "n":
        return CreateNew()
    if normalized == "s":
        return Skip()
    if normalized.startswith("e") and normalized[1:].isdigit():
        number = int(normalized[1:])
        if 1 <= number <= candidates:
            return UseExisting(candidate_index=number - 1)
        raise ValueError(f"Choose a candidate between 1 and {candidates}")
    raise ValueError(f"Unrecognised answer: {answer!r}")


def make_stdin_decider(
    ask: Callable[[str], str] = input,
) -> Callable[[BatchItemResult], Awaitable[Decision]]:
    async def decide(result: BatchItemResult) -> Decision:
        print(f"\nPossible duplicate for {result.client_name} in {result.file_name}:")
        for number, candidate in enumerate(result.candidates, start=1):
            personal = candidate.record.get("personal") or {}
            print(
                f"  e{number}: {personal.get('firstName')} {personal.get('lastName')} "
                f"({candidate.match_type}, completeness "
                f"{candidate.record.get('dataCompleteness') or 0}%)"
            )
        while True:
            answer = await asyncio.to_thread(ask, "[e<N>] use existing, [n] new client, [s] skip: ")
            try:
                return parse_decision(answer, candidates=len(result.candidates))
            except ValueError as exc:
                print(exc)

    return decide


def _print_result(result: BatchItemResult) -> None:
    if result.status is BatchItemStatus.AWAITING_DECISION:
        return
    line = f"[{result.status}] {result.file_name}"
    if result.client_name:
        line += f" -> {result.client_name}"
    if result.status is BatchItemStatus.SUCCESS:
        line += f": {result.fields_updated} fields updated, completeness {result.completeness}%"
    elif result.message:
        line += f": {result.message}"
    print(line)


async def _batch(files: Sequence[Path]) -> None:
    summary = await run_batch(
        [FileDocument(path) for path in files],
        decide=make_stdin_decider(),
        on_result=_print_result,
    )
    print(
        f"\nProcessed {summary.total} file(s): {summary.success} successful, "
        f"{summary.error} errors, {summary.skipped} skipped, "
        f"{len(summary.client_ids)} client(s) updated"
    )


async def _conflicts(client_id: str, file: Path) -> None:
    ensure_database()
    record = await SqlAlchemyRecordStore().get(client_id)
    if record is None:
        raise LookupError(f"Unknown client id: {client_id}")
    text = await FileDocument(file).read_text()
    review = await review_transcript(text, record, extractor=build_text_extractor())
    if not review.conflicts:
        print("No conflicts found")
    for conflict in review.conflicts:
        print(
            f"{conflict.field}: existing={conflict.existing_value!r} "
            f"extracted={conflict.extracted_value!r} (confidence {conflict.confidence:.2f})"
        )


async def _score(client_id: str) -> None:
    ensure_database()
    record = await SqlAlchemyRecordStore().get(client_id)
    if record is None:
        raise LookupError(f"Unknown client id: {client_id}")
    print(f"Completeness: {score_completeness(record)}%")
    for error in validate_record(record).errors:
        print(f"  - {error}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "batch":
            asyncio.run(_batch(parsed_args.files))
        elif parsed_args.command == "conflicts":
            asyncio.run(_conflicts(parsed_args.client_id, parsed_args.file))
        elif parsed_args.command == "score":
            asyncio.run(_score(parsed_args.client_id))
        elif parsed_args.command == "export":
            written = asyncio.run(export_clients(parsed_args.out))
            print(f"Wrote {len(written)} file(s) to {parsed_args.out}")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
