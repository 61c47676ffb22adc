"""Completeness scoring and minimal validation of client records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from factfind.domain.model.record import ClientRecord


@dataclass(frozen=True, slots=True)
class FieldCategory:
    section: str
    weight: int
    fields: tuple[str, ...]


FIELD_CATEGORIES: Final[tuple[FieldCategory, ...]] = (
    FieldCategory(
        "personal",
        25,
        (
            "firstName",
            "lastName",
            "dateOfBirth",
            "email",
            "phoneMobile",
            "countryOfResidence",
            "nationality",
            "relationshipStatus",
        ),
    ),
    FieldCategory(
        "employment",
        15,
        ("status", "jobTitle", "employer", "monthlyGrossIncome", "retirementAge"),
    ),
    FieldCategory("goals", 15, ("shortTerm", "longTerm", "retirementAge")),
    FieldCategory(
        "riskAttitude", 10, ("riskTolerance", "investmentTimeHorizon", "capacityForLoss")
    ),
)

EXISTENCE_WEIGHTS: Final[dict[str, int]] = {
    "pensions": 10,
    "properties": 10,
    "investments": 5,
    "bankAccounts": 5,
}

EXPENDITURE_WEIGHT: Final[int] = 5
EXPENDITURE_MIN_FIELDS: Final[int] = 3
_EXPENDITURE_IGNORED: Final[frozenset[str]] = frozenset({"notes", "currency", "otherDetails"})


def _populated(value: object) -> bool:
    return value is not None and value != ""


def _filled(value: object) -> bool:
    # Zero and false leave a category field unfilled; expenditure still counts them.
    return bool(value)


def score_completeness(record: ClientRecord) -> int:
    """Return a 0-100 score of how much of the record is filled in.

    Pure: reads the record and nothing else.
    """

    total = 0.0
    for category in FIELD_CATEGORIES:
        section = record.get(category.section) or {}
        filled = sum(1 for name in category.fields if _filled(section.get(name)))
        total += category.weight * filled / len(category.fields)

    for name, weight in EXISTENCE_WEIGHTS.items():
        if record.get(name):
            total += weight

    expenditure = record.get("expenditure") or {}
    populated = sum(
        1
        for key, value in expenditure.items()
        if key not in _EXPENDITURE_IGNORED and _populated(value)
    )
    if populated > EXPENDITURE_MIN_FIELDS:
        total += EXPENDITURE_WEIGHT

    return math.floor(total + 0.5)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_record(record: ClientRecord) -> ValidationResult:
    personal = record.get("personal") or {}
    errors: list[str] = []
    if not str(personal.get("firstName") or "").strip():
        errors.append("First name is required")
    if not str(personal.get("lastName") or "").strip():
        errors.append("Last name is required")
    return ValidationResult(errors=tuple(errors))
