"""Detect divergences between an extraction and an existing record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from factfind.domain.model.extraction import iter_leaves

from .paths import resolve_path

if TYPE_CHECKING:
    from factfind.domain.model.extraction import ExtractionTree, Scalar
    from factfind.domain.model.record import ClientRecord


@dataclass(frozen=True, slots=True)
class Conflict:
    field: str
    existing_value: object
    extracted_value: Scalar
    confidence: float


def is_empty(value: object) -> bool:
    """``None``, ``""`` and empty containers count as not yet populated."""

    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, list | dict):
        return len(value) == 0  # type: ignore[arg-type]
    return False


def values_equal(left: object, right: object) -> bool:
    """Strict value equality: numbers compare numerically, nothing else coerces."""

    left_number = isinstance(left, int | float) and not isinstance(left, bool)
    right_number = isinstance(right, int | float) and not isinstance(right, bool)
    if left_number and right_number:
        return left == right
    return type(left) is type(right) and left == right


def find_conflicts(existing: ClientRecord, extracted: ExtractionTree) -> list[Conflict]:
    """Report every scalar leaf where the record already holds a different value.

    Leaves inside extracted arrays are skipped: array extraction is additive.
    Unknown (``None``) extracted values and empty existing values never conflict.
    """

    conflicts: list[Conflict] = []
    for ref in iter_leaves(extracted):
        if ref.in_array or ref.leaf.item is None or not ref.leaf.item.is_known:
            continue
        extracted_value = ref.leaf.item.value
        current = resolve_path(existing, ref.path)
        if is_empty(current) or values_equal(current, extracted_value):
            continue
        conflicts.append(
            Conflict(
                field=ref.path,
                existing_value=current,
                extracted_value=extracted_value,
                confidence=ref.leaf.item.confidence,
            )
        )
    return conflicts
