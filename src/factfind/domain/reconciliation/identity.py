"""Duplicate-client matching by name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from factfind.domain.model.enums import MatchType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from factfind.domain.model.record import ClientRecord

SIMILARITY_THRESHOLD: Final[float] = 0.7


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    record: ClientRecord
    match_type: MatchType
    score: float


def normalise_name(name: str | None) -> str:
    return (name or "").strip().lower()


def character_overlap(left: str, right: str) -> float:
    """Share of the shorter string's characters found anywhere in the longer one.

    Order-insensitive and deliberately coarse; catches nickname and spelling
    variants rather than measuring edit distance.
    """

    shorter, longer = (left, right) if len(left) <= len(right) else (right, left)
    if not shorter:
        return 0.0
    hits = sum(1 for char in shorter if char in longer)
    return hits / len(shorter)


def is_similar_first_name(left: str, right: str) -> bool:
    if not left or not right:
        return False
    if left == right or left in right or right in left:
        return True
    return character_overlap(left, right) >= SIMILARITY_THRESHOLD


def find_matches(
    first_name: str, last_name: str, records: Iterable[ClientRecord]
) -> list[MatchCandidate]:
    """Return exact and similar candidates, in the order ``records`` yields them."""

    first = normalise_name(first_name)
    last = normalise_name(last_name)
    matches: list[MatchCandidate] = []
    for record in records:
        personal = record.get("personal") or {}
        record_first = normalise_name(personal.get("firstName"))
        record_last = normalise_name(personal.get("lastName"))
        if record_last != last:
            continue
        if record_first == first:
            matches.append(MatchCandidate(record=record, match_type=MatchType.EXACT, score=1.0))
        elif is_similar_first_name(first, record_first):
            matches.append(
                MatchCandidate(
                    record=record,
                    match_type=MatchType.SIMILAR,
                    score=character_overlap(first, record_first),
                )
            )
    return matches
