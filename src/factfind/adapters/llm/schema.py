"""Pydantic models describing language-model provider payloads."""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_JSON_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class LlmBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ClaudeContentBlock(LlmBaseModel):
    type: str | None = None
    text: str = ""


class ClaudeMessageResponse(LlmBaseModel):
    content: list[ClaudeContentBlock] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return self.content[0].text if self.content else ""


class OpenAIContentPart(LlmBaseModel):
    type: str | None = None
    text: str = ""


class OpenAIOutputItem(LlmBaseModel):
    content: list[OpenAIContentPart] = Field(default_factory=list)


class OpenAIResponse(LlmBaseModel):
    output_text: str | None = None
    output: list[OpenAIOutputItem] = Field(default_factory=list)

    @property
    def text(self) -> str:
        if self.output_text:
            return self.output_text
        if self.output and self.output[0].content:
            return self.output[0].content[0].text
        return ""


class ApiErrorDetail(LlmBaseModel):
    type: str | None = None
    message: str | None = None


class ApiErrorResponse(LlmBaseModel):
    error: ApiErrorDetail | None = None


class ExtractionEnvelope(LlmBaseModel):
    extracted_data: dict[str, Any] | None = Field(default=None, alias="extractedData")
    summary: str | None = None
    missing_critical_fields: list[str] = Field(
        default_factory=list, alias="missingCriticalFields"
    )

    @field_validator("missing_critical_fields", mode="before")
    @classmethod
    def _stringify_fields(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item) for item in value if item is not None]  # pyright: ignore[reportUnknownVariableType]
        return value


class NamePayload(LlmBaseModel):
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    meeting_date: str | None = Field(default=None, alias="meetingDate")


def parse_json_text(text: str) -> object:
    """Parse model output, unwrapping a fenced code block if present.

    Raises ``ValueError`` (``json.JSONDecodeError``) when the text is not JSON.
    """

    candidate = text.strip()
    match = _JSON_FENCE.search(candidate)
    if match:
        candidate = match.group(1).strip()
    return json.loads(candidate)
