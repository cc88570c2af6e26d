"""Configuration management for the orchestration service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_positive_int(name: str) -> Optional[int]:
    """Read a limit; unset, zero or negative means no limit."""
    value = os.getenv(name)
    if not value:
        return None
    number = int(value)
    return number if number > 0 else None


@dataclass(frozen=True)
class AzureOpenAIConfig:
    """Azure OpenAI service configuration."""

    api_key: str
    endpoint: str
    api_version: str = "2024-02-15-preview"
    deployment_name: str = "gpt-4"
    max_concurrent: int = 50


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    azure_openai: Optional[AzureOpenAIConfig] = None
    environment: str = "development"
    default_model: str = "gpt-4"
    max_events_to_keep: int = 1000
    max_queue_size: Optional[int] = None
    user_query_timeout_ms: int = 300_000
    enforce_query_timeout: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        azure_key = os.getenv("AZURE_OPENAI_KEY")
        azure_endpoint = os.getenv("AZURE_OPENAI_ENDPOINT")

        azure_config = None
        if azure_key and azure_endpoint:
            azure_config = AzureOpenAIConfig(
                api_key=azure_key,
                endpoint=azure_endpoint,
                api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                deployment_name=os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4"),
                max_concurrent=int(os.getenv("AZURE_OPENAI_MAX_CONCURRENT", "50")),
            )

        return cls(
            azure_openai=azure_config,
            environment=os.getenv("ENVIRONMENT", "development"),
            default_model=os.getenv("AGENTVERSE_DEFAULT_MODEL", "gpt-4"),
            max_events_to_keep=int(os.getenv("AGENTVERSE_MAX_EVENTS", "1000")),
            max_queue_size=_env_positive_int("AGENTVERSE_MAX_QUEUE_SIZE"),
            user_query_timeout_ms=int(os.getenv("AGENTVERSE_USER_QUERY_TIMEOUT_MS", "300000")),
            enforce_query_timeout=_env_flag("AGENTVERSE_ENFORCE_QUERY_TIMEOUT", True),
            log_level=os.getenv("AGENTVERSE_LOG_LEVEL", "INFO"),
        )
