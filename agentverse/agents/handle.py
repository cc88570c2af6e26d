"""LLM-backed agent handle executing tasks for one registered agent."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from agentverse.agents.roles import RoleProfile, profile_for
from agentverse.core.models import (
    AgentDescriptor,
    AgentMessage,
    AgentRunState,
    AgentStatus,
    ExecutionContext,
    ExecutionResult,
    utcnow,
)

if TYPE_CHECKING:
    from agentverse.services.llm_pool import LLMPool

logger = logging.getLogger(__name__)

MAX_TOKENS = 4096


class AgentHandle:
    """Wraps one agent descriptor and turns task input into model output.

    Role-specific behaviour comes entirely from the ``RoleProfile``; every
    handle shares the same execution contract.
    """

    def __init__(
        self,
        descriptor: AgentDescriptor,
        llm_pool: LLMPool,
        profile: Optional[RoleProfile] = None,
    ) -> None:
        self.descriptor = descriptor
        self.profile = profile or profile_for(descriptor.role)
        self._llm_pool = llm_pool
        self._state = AgentRunState.IDLE
        self._current_task: Optional[str] = None
        self._last_activity = utcnow()
        self.system_prompt = self._build_system_prompt()

    @property
    def agent_id(self) -> str:
        return self.descriptor.agent_id

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def personality(self) -> str:
        return self.descriptor.personality or self.profile.default_personality

    def _build_system_prompt(self) -> str:
        role = self.descriptor.role.value if self.descriptor.role else "executor"
        return (
            f"You are {self.name}, a {role} agent in the AgentVerse system.\n\n"
            f"Personality: {self.personality}\n"
            f"Specialization: {self.descriptor.specialization or 'General purpose'}\n\n"
            f"Your role is to {self.profile.role_description}.\n\n"
            "When responding:\n"
            "- Stay in character according to your personality\n"
            "- Focus on your specialization area\n"
            "- Collaborate effectively with other agents\n"
            "- Provide clear, actionable insights\n\n"
            f"{self.profile.guideline_block()}"
        )

    async def execute(
        self, task_input: str, context: Optional[ExecutionContext] = None
    ) -> ExecutionResult:
        """Run the task against the model; backend failures become failed results."""
        context = context or ExecutionContext()
        started = time.perf_counter()
        self._state = AgentRunState.RUNNING
        self._current_task = context.task_id
        self._last_activity = utcnow()

        try:
            output = await self._complete(self.profile.frame_task(task_input), context)
        except Exception as exc:  # noqa: BLE001
            self._state = AgentRunState.ERROR
            logger.warning(
                "Agent %s failed: %s", self.agent_id, exc,
                extra={"agent_id": self.agent_id, "workflow_id": context.workflow_id},
            )
            return ExecutionResult(
                agent_id=self.agent_id,
                task_id=context.task_id,
                success=False,
                error=str(exc) or type(exc).__name__,
                execution_time_ms=_elapsed_ms(started),
            )
        finally:
            self._current_task = None
            self._last_activity = utcnow()

        self._state = AgentRunState.IDLE
        return ExecutionResult(
            agent_id=self.agent_id,
            task_id=context.task_id,
            success=True,
            result=output,
            execution_time_ms=_elapsed_ms(started),
        )

    async def _complete(self, prompt: str, context: ExecutionContext) -> str:
        messages: List[Dict[str, str]] = [{"role": "system", "content": self.system_prompt}]
        messages.extend(
            {"role": "user" if turn.role == "user" else "assistant", "content": turn.content}
            for turn in context.history
        )
        messages.append({"role": "user", "content": prompt})

        async with self._llm_pool.acquire(self.descriptor.model) as client:
            response = await client.chat.completions.create(
                model=self.descriptor.model,
                messages=messages,
                max_tokens=MAX_TOKENS,
            )
        return response.choices[0].message.content or ""

    def get_status(self) -> AgentStatus:
        return AgentStatus(
            agent_id=self.agent_id,
            status=self._state,
            last_activity=self._last_activity,
            current_task=self._current_task,
        )

    def get_info(self) -> Dict[str, Any]:
        return {
            "id": self.agent_id,
            "name": self.name,
            "role": self.descriptor.role.value if self.descriptor.role else None,
            "model": self.descriptor.model,
            "specialization": self.descriptor.specialization,
            "personality": self.personality,
        }

    def prepare_message(
        self, content: str, to_agent_id: str, task_id: Optional[str] = None
    ) -> AgentMessage:
        """Build an outgoing query addressed to another agent."""
        return AgentMessage(
            from_agent_id=self.agent_id,
            to_agent_id=to_agent_id,
            content=content,
            metadata={"task_id": task_id, "type": "query"},
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
