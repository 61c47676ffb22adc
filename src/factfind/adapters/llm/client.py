"""HTTP text extractor backed by the Anthropic or OpenAI APIs."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from factfind.adapters.http_resilience import ResilientClient
from factfind.config.extractor import LlmProvider
from factfind.domain.model.extraction import build_extraction_tree
from factfind.domain.ports.extraction import ExtractionOutcome, NameCandidate, TextExtractor

from .followup import merge_extraction_payloads, missing_financials
from .prompts import NAME_SYSTEM_PROMPT, SYSTEM_PROMPT, build_financials_prompt, build_user_prompt
from .schema import (
    ApiErrorResponse,
    ClaudeMessageResponse,
    ExtractionEnvelope,
    NamePayload,
    OpenAIResponse,
    parse_json_text,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from factfind.config.extractor import ExtractorConfig
    from factfind.config.http_resilience import ResilienceConfig
    from factfind.domain.model.record import ClientRecord

log = getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_SUMMARY = "Data extracted successfully"


class LlmAPIError(RuntimeError):
    """Raised when a provider call fails or returns unusable output."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpTextExtractor:
    config: ExtractorConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def extract_full(
        self, text: str, existing: ClientRecord | None = None
    ) -> ExtractionOutcome:
        async with self.client_factory(self.config.resilience) as client:
            try:
                envelope = await self._extract_envelope(client, build_user_prompt(text, existing))
            except LlmAPIError as exc:
                log.warning(f"Extraction failed: {exc}")
                return ExtractionOutcome.failed(str(exc))

            data: dict[str, Any] = envelope.extracted_data or {}
            missing = missing_financials(data)
            if missing:
                log.info(f"Running financial follow-up for {', '.join(missing)}")
                try:
                    followup = await self._extract_envelope(client, build_financials_prompt(text))
                except LlmAPIError as exc:
                    log.warning(f"Financial follow-up failed, keeping first pass: {exc}")
                else:
                    data = merge_extraction_payloads(data, followup.extracted_data)

        return ExtractionOutcome.ok(
            build_extraction_tree(data),
            summary=envelope.summary or DEFAULT_SUMMARY,
            missing_fields=tuple(envelope.missing_critical_fields),
        )

    async def extract_name(self, text: str) -> NameCandidate | None:
        async with self.client_factory(self.config.resilience) as client:
            try:
                raw = await self._complete(
                    client,
                    system=NAME_SYSTEM_PROMPT,
                    user=text[: self.config.name_max_chars],
                    max_tokens=self.config.name_max_tokens,
                )
                payload = NamePayload.model_validate(parse_json_text(raw))
            except (LlmAPIError, ValueError) as exc:
                log.warning(f"Name extraction failed: {exc}")
                return None

        first = (payload.first_name or "").strip()
        last = (payload.last_name or "").strip()
        if not first or not last:
            return None
        return NameCandidate(first_name=first, last_name=last, meeting_date=payload.meeting_date)

    async def _extract_envelope(self, client: ResilientClient, prompt: str) -> ExtractionEnvelope:
        raw = await self._complete(
            client, system=SYSTEM_PROMPT, user=prompt, max_tokens=self.config.max_tokens
        )
        try:
            return ExtractionEnvelope.model_validate(parse_json_text(raw))
        except (ValidationError, ValueError) as exc:
            raise LlmAPIError("Failed to parse AI response") from exc

    async def _complete(
        self,
        client: ResilientClient,
        *,
        system: str,
        user: str,
        max_tokens: int,
    ) -> str:
        provider = self.config.provider
        try:
            response = await client.post(
                self.config.api_url,
                json=self._request_body(system=system, user=user, max_tokens=max_tokens),
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise LlmAPIError(f"{provider} request failed: {exc}") from exc

        if response.is_error:
            raise LlmAPIError(_error_message(response), status=response.status_code)

        try:
            payload = response.json()
            if provider is LlmProvider.OPENAI:
                return OpenAIResponse.model_validate(payload).text.strip()
            return ClaudeMessageResponse.model_validate(payload).text.strip()
        except ValueError as exc:
            raise LlmAPIError(f"Unexpected {provider} response payload") from exc

    def _headers(self) -> dict[str, str]:
        if self.config.provider is LlmProvider.OPENAI:
            return {"Authorization": f"Bearer {self.config.api_key}"}
        return {"x-api-key": self.config.api_key, "anthropic-version": ANTHROPIC_VERSION}

    def _request_body(self, *, system: str, user: str, max_tokens: int) -> dict[str, object]:
        model = self.config.effective_model
        if self.config.provider is LlmProvider.OPENAI:
            return {
                "model": model,
                "input": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                "text": {"format": {"type": "json_object"}},
                "max_output_tokens": max_tokens,
            }
        return {
            "model": model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }


def _error_message(response: httpx.Response) -> str:
    try:
        detail = ApiErrorResponse.model_validate(response.json()).error
    except ValueError:
        detail = None
    if detail is not None and detail.message:
        return detail.message
    return f"API request failed with status {response.status_code}"


if TYPE_CHECKING:
    _extractor_check: TextExtractor = HttpTextExtractor(config=ExtractorConfig(api_key="key"))
