"""Prompt text for the language-model extractor."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from factfind.domain.model.record import ClientRecord

SYSTEM_PROMPT: Final[str] = """\
You are a financial data extraction assistant. You extract client information \
from meeting transcripts for a financial adviser.

Rules:
1. Extract only information explicitly stated in the transcript.
2. Do not assume or infer data that is not clearly stated.
3. Give every extracted field a confidence score between 0.0 and 1.0.
4. Use null for fields where no information was found.
5. Convert monetary values to numbers without currency symbols.
6. Record the original currency next to monetary values.
7. Convert dates to ISO format (YYYY-MM-DD) where possible.
8. Calculate age from the date of birth if only the date of birth is given.
9. Capture every financial asset and liability mentioned: bank accounts, cash, \
investments, pensions, properties and debts.

Respond only with a valid JSON object in the requested format, without \
explanation or markdown."""

NAME_SYSTEM_PROMPT: Final[str] = (
    "Extract the PRIMARY CLIENT name (not the adviser) from this meeting transcript. "
    'Return ONLY a JSON object: {"firstName": "...", "lastName": "...", '
    '"meetingDate": "YYYY-MM-DD or null"}. No explanation.'
)

_EXTRACTION_SHAPE: Final[str] = """\
{
  "extractedData": {
    "personal": {
      "firstName": {"value": "...", "confidence": 0.95},
      "lastName": {"value": "...", "confidence": 0.95},
      "dateOfBirth": {"value": "YYYY-MM-DD", "confidence": 0.9},
      "age": {"value": 55, "confidence": 0.95},
      "email": {"value": "...", "confidence": 0.8},
      "phoneMobile": {"value": "...", "confidence": 0.8},
      "countryOfResidence": {"value": "...", "confidence": 0.9},
      "nationality": {"value": "...", "confidence": 0.85},
      "relationshipStatus": {"value": "...", "confidence": 0.9},
      "address": {
        "city": {"value": "...", "confidence": 0.8},
        "country": {"value": "...", "confidence": 0.9}
      }
    },
    "employment": {
      "status": {"value": "Employed", "confidence": 0.95},
      "jobTitle": {"value": "...", "confidence": 0.9},
      "employer": {"value": "...", "confidence": 0.95},
      "monthlyGrossIncome": {"value": 22500, "confidence": 0.9},
      "incomeCurrency": {"value": "USD", "confidence": 0.85},
      "retirementAge": {"value": 65, "confidence": 0.9}
    },
    "goals": {
      "shortTerm": {"value": "...", "confidence": 0.8},
      "mediumTerm": {"value": "...", "confidence": 0.7},
      "longTerm": {"value": "...", "confidence": 0.85},
      "retirementAge": {"value": 65, "confidence": 0.9},
      "retirementLocation": {"value": "...", "confidence": 0.8}
    },
    "children": [
      {
        "inEducation": {"value": true, "confidence": 0.8},
        "school": {"value": "University", "confidence": 0.7}
      }
    ],
    "pensions": [
      {
        "type": {"value": "Superannuation", "confidence": 0.9},
        "currentValue": {"value": 320000, "confidence": 0.85},
        "currency": {"value": "AUD", "confidence": 0.9},
        "annualGrowthRate": {"value": 6.5, "confidence": 0.7}
      }
    ],
    "properties": [
      {
        "address": {
          "state": {"value": "Queensland", "confidence": 0.9},
          "country": {"value": "Australia", "confidence": 0.95}
        },
        "currentValue": {"value": 1500000, "confidence": 0.9},
        "currency": {"value": "AUD", "confidence": 0.95},
        "mortgageBalance": {"value": 1100000, "confidence": 0.9}
      }
    ]
  },
  "summary": "Brief summary of key findings",
  "missingCriticalFields": ["list", "of", "important", "missing", "fields"]
}"""

_FINANCIALS_SHAPE: Final[str] = """\
{
  "extractedData": {
    "bankAccounts": [{"bank": {"value": "...", "confidence": 0.9}, "balance": {"value": 1234, "confidence": 0.8}, "currency": {"value": "GBP", "confidence": 0.9}}],
    "investments": [{"provider": {"value": "...", "confidence": 0.9}, "currentValue": {"value": 1234, "confidence": 0.8}, "currency": {"value": "GBP", "confidence": 0.9}, "type": {"value": "...", "confidence": 0.7}}],
    "pensions": [{"provider": {"value": "...", "confidence": 0.9}, "currentValue": {"value": 1234, "confidence": 0.8}, "currency": {"value": "GBP", "confidence": 0.9}, "type": {"value": "...", "confidence": 0.7}}],
    "properties": [{"address": {"line1": {"value": "...", "confidence": 0.7}, "city": {"value": "...", "confidence": 0.8}, "country": {"value": "...", "confidence": 0.8}}, "currentValue": {"value": 1234, "confidence": 0.8}, "currency": {"value": "GBP", "confidence": 0.9}, "mortgageBalance": {"value": 1000, "confidence": 0.8}}],
    "debts": [{"provider": {"value": "...", "confidence": 0.9}, "outstandingBalance": {"value": 1234, "confidence": 0.8}, "currency": {"value": "GBP", "confidence": 0.9}, "type": {"value": "...", "confidence": 0.7}}]
  }
}"""


def _transcript_block(text: str) -> str:
    return f"TRANSCRIPT:\n---\n{text}\n---"


def build_user_prompt(text: str, existing: ClientRecord | None = None) -> str:
    """Full-schema extraction prompt, with the stored record for conflict context."""

    parts = [
        "Extract all client information from the following meeting transcript.",
        "Return a JSON object with this structure "
        "(fill ALL financial assets/liabilities if mentioned):",
        _EXTRACTION_SHAPE,
        "For any field not mentioned in the transcript, set value to null and confidence to 0.",
    ]
    if existing is not None:
        parts.append(
            "EXISTING CLIENT DATA (flag any conflicts):\n" + json.dumps(existing, indent=2)
        )
    parts.append(_transcript_block(text))
    parts.append("Extract all available information and return ONLY the JSON object.")
    return "\n\n".join(parts)


def build_financials_prompt(text: str) -> str:
    return "\n\n".join(
        [
            "Extract ONLY financial assets and liabilities from the transcript.",
            "Return JSON object:",
            _FINANCIALS_SHAPE,
            "Return ONLY the JSON. Use null and confidence 0 if not mentioned.",
            _transcript_block(text),
        ]
    )
