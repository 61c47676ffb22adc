"""Application configuration helpers."""

from __future__ import annotations

from .batch import BatchConfig, get_batch_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .extractor import ExtractorConfig, LlmProvider, get_extractor_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "BatchConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "ExtractorConfig",
    "LlmProvider",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_batch_config",
    "get_database_config",
    "get_extractor_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
