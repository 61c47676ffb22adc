"""Reconciliation of extracted transcript data into client records.

Flow:
1) address record fields by dot/bracket path
2) report conflicts between an extraction and the stored record (interactive)
3) merge approved or confidence-thresholded fields onto a copy of the record
4) rescore completeness
5) match new names against stored clients (batch)
"""

from __future__ import annotations

from .completeness import ValidationResult, score_completeness, validate_record
from .conflicts import Conflict, find_conflicts
from .identity import MatchCandidate, find_matches
from .merge import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    ApprovedField,
    MergeResult,
    apply_field,
    coerce_form_value,
    merge_batch,
    merge_interactive,
)
from .paths import parse_path, resolve_path, set_path

__all__ = [
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "ApprovedField",
    "Conflict",
    "MatchCandidate",
    "MergeResult",
    "ValidationResult",
    "apply_field",
    "coerce_form_value",
    "find_conflicts",
    "find_matches",
    "merge_batch",
    "merge_interactive",
    "parse_path",
    "resolve_path",
    "score_completeness",
    "set_path",
    "validate_record",
]
