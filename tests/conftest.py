"""Shared fixtures: a scripted model client and a wired orchestrator."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Dict, List, Optional, Set

import pytest

from agentverse.core.models import AgentDescriptor, AgentRole
from agentverse.orchestration.orchestrator import AgentOrchestrator
from agentverse.services.llm_pool import LLMPool

FAKE_MODEL = "fake-model"


@dataclass
class FakeCall:
    agent_name: str
    prompt: str
    messages: List[Dict[str, str]]


@dataclass
class FakeCompletions:
    """Answers as the agent named in the system prompt."""

    replies: Dict[str, str] = field(default_factory=dict)
    failures: Set[str] = field(default_factory=set)
    delays: Dict[str, float] = field(default_factory=dict)
    calls: List[FakeCall] = field(default_factory=list)

    async def create(self, *, model: str, messages: List[Dict[str, str]], **kwargs):
        # System prompts open with "You are <name>, a <role> agent ..."
        name = messages[0]["content"].split(",", 1)[0].removeprefix("You are ")
        self.calls.append(FakeCall(name, messages[-1]["content"], messages))
        await asyncio.sleep(self.delays.get(name, 0))
        if name in self.failures:
            raise RuntimeError(f"{name} backend unavailable")
        text = self.replies.get(name, f"{name} output")
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=text))]
        )

    def called(self) -> List[str]:
        return [call.agent_name for call in self.calls]

    def prompt_for(self, name: str) -> Optional[str]:
        return next((call.prompt for call in self.calls if call.agent_name == name), None)


class FakeLLMClient:
    def __init__(self) -> None:
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def llm_pool(fake_llm: FakeLLMClient) -> LLMPool:
    pool = LLMPool()
    pool.register_client(FAKE_MODEL, fake_llm)
    return pool


@pytest.fixture
def orchestrator(llm_pool: LLMPool) -> AgentOrchestrator:
    return AgentOrchestrator(llm_pool=llm_pool)


def make_agent(
    agent_id: str,
    role: Optional[AgentRole] = AgentRole.RESEARCHER,
    **kwargs,
) -> AgentDescriptor:
    """Descriptor whose display name equals its id, so fake replies key on the id."""
    kwargs.setdefault("name", agent_id)
    kwargs.setdefault("model", FAKE_MODEL)
    return AgentDescriptor(agent_id=agent_id, role=role, **kwargs)
