"""Regex fallback for finding the client name in a transcript."""

from __future__ import annotations

import re
from typing import Final

from factfind.domain.ports.extraction import NameCandidate

NAME_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"(?:client|participant|attendee)[:\s]+([A-Z][a-z]+)\s+([A-Z][a-z]+)", re.I),
    re.compile(
        r"(?:meeting with|transcript for|interview with)[:\s]+([A-Z][a-z]+)\s+([A-Z][a-z]+)",
        re.I,
    ),
    re.compile(r"(?:Mr|Mrs|Ms|Dr|Miss)\.?\s+([A-Z][a-z]+)\s+([A-Z][a-z]+)", re.I),
)


def parse_name_from_text(text: str) -> NameCandidate | None:
    """Return the first name match, trying the patterns in order."""

    for pattern in NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            return NameCandidate(first_name=match.group(1), last_name=match.group(2))
    return None
