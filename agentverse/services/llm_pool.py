"""LLM client pool for shared model access with concurrency control."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, AsyncIterator, Dict

from openai import AsyncAzureOpenAI

from agentverse.config import AzureOpenAIConfig, Config
from agentverse.core.errors import ModelNotRegisteredError

logger = logging.getLogger(__name__)


class LLMPool:
    """Manages shared LLM clients with per-model concurrency limits."""

    def __init__(self) -> None:
        self._clients: Dict[str, Any] = {}
        self._semaphores: Dict[str, asyncio.Semaphore] = {}
        self._initialized: Dict[str, bool] = {}

    def register_azure_openai(self, name: str, config: AzureOpenAIConfig) -> None:
        """Register an Azure OpenAI deployment; the client is created on first use."""
        self._clients[name] = config
        self._semaphores[name] = asyncio.Semaphore(config.max_concurrent)
        self._initialized[name] = False

    def register_client(self, name: str, client: Any, max_concurrent: int = 10) -> None:
        """Register a ready client exposing ``chat.completions.create``."""
        self._clients[name] = client
        self._semaphores[name] = asyncio.Semaphore(max_concurrent)
        self._initialized[name] = True

    @asynccontextmanager
    async def acquire(self, model_name: str) -> AsyncIterator[Any]:
        """Acquire access to a model client with concurrency control."""
        if model_name not in self._clients:
            raise ModelNotRegisteredError(model_name)

        async with self._semaphores[model_name]:
            if not self._initialized[model_name]:
                self._initialize_client(model_name)
            yield self._clients[model_name]

    def _initialize_client(self, model_name: str) -> None:
        config = self._clients[model_name]
        self._clients[model_name] = AsyncAzureOpenAI(
            api_key=config.api_key,
            api_version=config.api_version,
            azure_endpoint=config.endpoint,
        )
        self._initialized[model_name] = True
        logger.info("Initialized Azure OpenAI client for %s", model_name)


@dataclass
class _Completions:
    model_name: str
    latency: float

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        messages = kwargs.get("messages", [])
        prompt = next(
            (m["content"] for m in reversed(messages) if m["role"] == "user"), ""
        )
        # First line of the framed prompt names the task kind, e.g. "Research Task: ..."
        headline = prompt.strip().splitlines()[0] if prompt.strip() else "empty prompt"
        await asyncio.sleep(self.latency)
        text = f"[{self.model_name}] Draft response to {headline[:160]}"
        message = SimpleNamespace(role="assistant", content=text)
        return SimpleNamespace(
            model=self.model_name,
            choices=[SimpleNamespace(message=message, finish_reason="stop")],
        )


class ScriptedLLMClient:
    """Offline client producing deterministic completions."""

    def __init__(self, model_name: str, latency: float = 0.05) -> None:
        self.chat = SimpleNamespace(completions=_Completions(model_name, latency))


def build_llm_pool(config: Config) -> LLMPool:
    """Register Azure deployments when configured, otherwise an offline client."""
    pool = LLMPool()
    if config.azure_openai:
        pool.register_azure_openai(config.default_model, config.azure_openai)
        if config.azure_openai.deployment_name != config.default_model:
            pool.register_azure_openai(config.azure_openai.deployment_name, config.azure_openai)
    else:
        logger.warning("Azure OpenAI not configured, using offline scripted client")
        pool.register_client(config.default_model, ScriptedLLMClient(config.default_model))
    return pool
