"""Defaults for batch transcript imports."""

from __future__ import annotations

from dataclasses import dataclass

from factfind.domain.model.enums import OverwritePolicy
from factfind.domain.reconciliation.merge import DEFAULT_CONFIDENCE_THRESHOLD

from .env import optional_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class BatchConfig:
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    overwrite_policy: OverwritePolicy = OverwritePolicy.ALWAYS

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigurationError(
                f"Confidence threshold must be within [0, 1]: {self.confidence_threshold}"
            )


def get_batch_config() -> BatchConfig:
    threshold = optional_env_var("FACTFIND_CONFIDENCE_THRESHOLD")
    policy = optional_env_var("FACTFIND_OVERWRITE_POLICY")
    try:
        return BatchConfig(
            confidence_threshold=(
                float(threshold) if threshold is not None else DEFAULT_CONFIDENCE_THRESHOLD
            ),
            overwrite_policy=OverwritePolicy(policy) if policy else OverwritePolicy.ALWAYS,
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid batch configuration: {exc}") from exc
