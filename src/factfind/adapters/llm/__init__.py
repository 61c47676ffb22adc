"""Language-model text extractor adapter."""

from __future__ import annotations

from .client import HttpTextExtractor, LlmAPIError
from .demo import DemoTextExtractor
from .followup import merge_extraction_payloads, missing_financials
from .schema import ExtractionEnvelope, NamePayload, parse_json_text

__all__ = [
    "DemoTextExtractor",
    "ExtractionEnvelope",
    "HttpTextExtractor",
    "LlmAPIError",
    "NamePayload",
    "merge_extraction_payloads",
    "missing_financials",
    "parse_json_text",
]
