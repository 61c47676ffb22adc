"""Offline extractor used when no API key is configured."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from factfind.domain.batch_pipeline.heuristics import parse_name_from_text
from factfind.domain.model.extraction import build_extraction_tree
from factfind.domain.ports.extraction import ExtractionOutcome, NameCandidate, TextExtractor

if TYPE_CHECKING:
    from factfind.domain.model.record import ClientRecord

log = getLogger(__name__)


def _cv(value: object, confidence: float) -> dict[str, object]:
    return {"value": value, "confidence": confidence}


DEMO_EXTRACTION: Final[dict[str, Any]] = {
    "personal": {
        "firstName": _cv("Simon", 0.95),
        "lastName": _cv("Shaw", 0.95),
        "dateOfBirth": _cv("1970-04-16", 0.9),
        "age": _cv(55, 0.95),
        "countryOfResidence": _cv("Saudi Arabia", 0.9),
        "nationality": _cv("Australian", 0.85),
        "relationshipStatus": _cv("Divorced", 0.9),
    },
    "employment": {
        "status": _cv("Employed", 0.95),
        "jobTitle": _cv("Trojan Project", 0.7),
        "employer": _cv("NEOM", 0.95),
        "monthlyGrossIncome": _cv(85000, 0.9),
        "incomeCurrency": _cv("SAR", 0.95),
        "retirementAge": _cv(65, 0.9),
    },
    "goals": {
        "longTerm": _cv("Retirement planning, tax-efficient savings", 0.85),
        "retirementAge": _cv(65, 0.9),
        "retirementLocation": _cv("Australia", 0.85),
    },
    "children": [
        {"inEducation": _cv(True, 0.8), "school": _cv("University in Australia", 0.75)},
    ],
    "pensions": [
        {
            "type": _cv("Superannuation", 0.9),
            "currentValue": _cv(320000, 0.85),
            "currency": _cv("AUD", 0.9),
            "annualGrowthRate": _cv(6.5, 0.7),
        },
    ],
    "properties": [
        {
            "address": {"state": _cv("Queensland", 0.9), "country": _cv("Australia", 0.95)},
            "currentValue": _cv(1500000, 0.9),
            "currency": _cv("AUD", 0.95),
            "mortgageBalance": _cv(1100000, 0.9),
        },
    ],
}

DEMO_SUMMARY: Final[str] = (
    "Extracted data for Simon Shaw (age 55), currently working at NEOM in Saudi Arabia. "
    "Key financial items include property in Queensland (AUD $1.5M with $1.1M mortgage) "
    "and superannuation of AUD $320K. Primary goal is retirement planning with return to "
    "Australia at age 65."
)

DEMO_MISSING_FIELDS: Final[tuple[str, ...]] = (
    "email",
    "phone",
    "spouse details",
    "detailed expenditure",
)


@dataclass(slots=True)
class DemoTextExtractor:
    """Returns a fixed sample extraction; names come from the regex heuristics."""

    async def extract_full(
        self, text: str, existing: ClientRecord | None = None
    ) -> ExtractionOutcome:
        log.info("No API key configured, returning demo extraction")
        return ExtractionOutcome.ok(
            build_extraction_tree(DEMO_EXTRACTION),
            summary=DEMO_SUMMARY,
            missing_fields=DEMO_MISSING_FIELDS,
        )

    async def extract_name(self, text: str) -> NameCandidate | None:
        return parse_name_from_text(text)


if TYPE_CHECKING:
    _extractor_check: TextExtractor = DemoTextExtractor()
