"""Language-model extractor configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

LLM_TIMEOUT_SECONDS = 120.0
DEFAULT_MAX_TOKENS = 4096
DEFAULT_NAME_MAX_TOKENS = 256
NAME_PROMPT_MAX_CHARS = 3000


class LlmProvider(StrEnum):
    CLAUDE = "claude"
    OPENAI = "openai"


API_URLS: dict[LlmProvider, str] = {
    LlmProvider.CLAUDE: "https://api.anthropic.com/v1/messages",
    LlmProvider.OPENAI: "https://api.openai.com/v1/responses",
}

DEFAULT_MODELS: dict[LlmProvider, str] = {
    LlmProvider.CLAUDE: "claude-opus-4-20250514",
    LlmProvider.OPENAI: "gpt-4o",
}


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="llm",
        timeout_seconds=LLM_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
    )


@dataclass(frozen=True, slots=True)
class ExtractorConfig:
    """Everything the text extractor needs to talk to a provider.

    Instances are passed to the extractor explicitly; nothing here is cached
    process-wide.
    """

    api_key: str
    provider: LlmProvider = LlmProvider.CLAUDE
    model: str | None = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    name_max_tokens: int = DEFAULT_NAME_MAX_TOKENS
    name_max_chars: int = NAME_PROMPT_MAX_CHARS
    resilience: ResilienceConfig = field(default_factory=_default_resilience)

    @property
    def api_url(self) -> str:
        return self.resilience.base_url or API_URLS[self.provider]

    @property
    def effective_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]


def parse_provider(value: str | None) -> LlmProvider:
    if value is None:
        return LlmProvider.CLAUDE
    try:
        return LlmProvider(value.strip().lower())
    except ValueError as exc:
        raise ConfigurationError(f"Unsupported LLM provider: {value}") from exc


def get_extractor_config(*, resilience: ResilienceConfig | None = None) -> ExtractorConfig:
    values = require_env_vars(("FACTFIND_LLM_API_KEY",))
    return ExtractorConfig(
        api_key=values["FACTFIND_LLM_API_KEY"],
        provider=parse_provider(optional_env_var("FACTFIND_LLM_PROVIDER")),
        model=optional_env_var("FACTFIND_LLM_MODEL"),
        resilience=resilience or _default_resilience(),
    )
