"""Orchestrator service composing registry, execution, messaging and interaction."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from agentverse.config import Config
from agentverse.core.event_log import CommunicationEventLog
from agentverse.core.message_bus import MessageBus
from agentverse.core.models import (
    AgentDescriptor,
    AgentMessage,
    AgentStatus,
    CollaborativeOutcome,
    CollaborativeTeam,
    CommunicationEvent,
    ExecutionContext,
    ExecutionResult,
)
from agentverse.orchestration.engine import ExecutionEngine
from agentverse.orchestration.interaction import UserInteractionGateway, UserQueryCallback
from agentverse.orchestration.registry import AgentRegistry
from agentverse.services.llm_pool import LLMPool

logger = logging.getLogger(__name__)


class AgentOrchestrator:
    """Coordinate agent registration, execution and communication.

    Built once by the host and passed to whoever needs it.
    """

    def __init__(
        self,
        *,
        llm_pool: LLMPool,
        event_log: Optional[CommunicationEventLog] = None,
        max_queue_size: Optional[int] = None,
        query_timeout_ms: int = 300_000,
        enforce_query_timeout: bool = True,
    ) -> None:
        self.llm_pool = llm_pool
        self.registry = AgentRegistry(llm_pool, name="orchestrator")
        self.event_log = event_log if event_log is not None else CommunicationEventLog()
        self.bus = MessageBus(
            self.event_log,
            name_resolver=self.registry.name_of,
            max_queue_size=max_queue_size,
        )
        self.engine = ExecutionEngine(self.registry, self.event_log)
        self.gateway = UserInteractionGateway(
            self.registry,
            timeout_ms=query_timeout_ms,
            enforce_timeout=enforce_query_timeout,
        )

    @classmethod
    def from_config(cls, config: Config, llm_pool: LLMPool) -> AgentOrchestrator:
        return cls(
            llm_pool=llm_pool,
            event_log=CommunicationEventLog(config.max_events_to_keep),
            max_queue_size=config.max_queue_size,
            query_timeout_ms=config.user_query_timeout_ms,
            enforce_query_timeout=config.enforce_query_timeout,
        )

    # Registration

    def register_agent(self, descriptor: AgentDescriptor) -> None:
        self.registry.register(descriptor)

    def unregister_agent(self, agent_id: str) -> None:
        self.registry.unregister(agent_id)

    def get_all_agent_statuses(self) -> List[AgentStatus]:
        return self.registry.statuses()

    def get_registered_agents(self) -> List[Dict[str, Any]]:
        return self.registry.infos()

    # Execution

    async def execute_single(
        self, agent_id: str, task_input: str, context: Optional[ExecutionContext] = None
    ) -> ExecutionResult:
        return await self.engine.execute_single(agent_id, task_input, context)

    async def execute_pipeline(
        self,
        agent_ids: Sequence[str],
        initial_input: str,
        context: Optional[ExecutionContext] = None,
    ) -> List[ExecutionResult]:
        return await self.engine.execute_pipeline(agent_ids, initial_input, context)

    async def execute_parallel(
        self,
        agent_ids: Sequence[str],
        task_input: str,
        context: Optional[ExecutionContext] = None,
    ) -> List[ExecutionResult]:
        return await self.engine.execute_parallel(agent_ids, task_input, context)

    async def execute_collaborative_workflow(
        self,
        team: CollaborativeTeam,
        task: str,
        context: Optional[ExecutionContext] = None,
    ) -> CollaborativeOutcome:
        return await self.engine.execute_collaborative_workflow(team, task, context)

    async def route_message(self, message: AgentMessage) -> ExecutionResult:
        return await self.engine.route_message(message)

    # Messaging

    async def send_agent_message(
        self,
        from_agent_id: str,
        to_agent_id: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AgentMessage:
        return await self.bus.send_agent_message(from_agent_id, to_agent_id, content, metadata)

    async def broadcast_message(
        self,
        from_agent_id: str,
        to_agent_ids: Sequence[str],
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[AgentMessage]:
        return await self.bus.broadcast_message(from_agent_id, to_agent_ids, content, metadata)

    def get_agent_messages(self, agent_id: str) -> List[AgentMessage]:
        return self.bus.get_agent_messages(agent_id)

    def process_agent_messages(self, agent_id: str) -> List[AgentMessage]:
        return self.bus.process_agent_messages(agent_id)

    # Observability

    def get_communication_events(self, limit: Optional[int] = None) -> List[CommunicationEvent]:
        return self.event_log.get_events(limit)

    def get_events_by_agent(
        self, agent_id: str, limit: Optional[int] = None
    ) -> List[CommunicationEvent]:
        return self.event_log.get_events_by_agent(agent_id, limit)

    def clear_communication_events(self) -> None:
        self.event_log.clear()

    # User interaction

    def set_user_query_callback(self, callback: UserQueryCallback) -> None:
        self.gateway.set_user_query_callback(callback)

    async def request_user_input(
        self,
        workflow_id: str,
        agent_id: str,
        question: str,
        context: Optional[str] = None,
    ) -> str:
        return await self.gateway.request_user_input(workflow_id, agent_id, question, context)

    def clear(self) -> None:
        """Forget every agent, queued message and logged event."""
        self.registry.clear()
        self.bus.clear()
        self.event_log.clear()
        logger.info("Orchestrator state cleared")
