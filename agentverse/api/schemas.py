"""Request and response bodies for the HTTP API."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agentverse.core.models import (
    AgentDescriptor,
    AgentMessage,
    AgentRole,
    AgentStatus,
    CollaborativeTeam,
    CommunicationEvent,
    DepartmentExecutionResult,
    ExecutionResult,
    UserQuery,
    WorkflowStep,
)


class AgentCreateRequest(BaseModel):
    name: str = Field(..., description="Display name of the agent")
    agent_id: Optional[str] = Field(default=None, description="Identifier; generated when omitted")
    role: Optional[str] = Field(default=None, description="researcher, strategist, critic, ...")
    model: Optional[str] = Field(default=None, description="Model name registered in the LLM pool")
    personality: Optional[str] = None
    specialization: Optional[str] = None
    description: Optional[str] = None

    def to_descriptor(self, default_model: str) -> AgentDescriptor:
        return AgentDescriptor(
            agent_id=self.agent_id or str(uuid.uuid4()),
            name=self.name,
            model=self.model or default_model,
            role=AgentRole.parse(self.role),
            personality=self.personality,
            specialization=self.specialization,
            description=self.description,
        )


class AgentResponse(BaseModel):
    agent_id: str
    name: str
    role: Optional[str]
    model: str
    specialization: Optional[str] = None
    personality: Optional[str] = None

    @classmethod
    def from_info(cls, info: Dict[str, Any]) -> "AgentResponse":
        return cls(
            agent_id=info["id"],
            name=info["name"],
            role=info["role"],
            model=info["model"],
            specialization=info["specialization"],
            personality=info["personality"],
        )


class AgentStatusResponse(BaseModel):
    agent_id: str
    status: str
    last_activity: datetime
    current_task: Optional[str] = None

    @classmethod
    def from_status(cls, status: AgentStatus) -> "AgentStatusResponse":
        return cls(
            agent_id=status.agent_id,
            status=status.status.value,
            last_activity=status.last_activity,
            current_task=status.current_task,
        )


class RunRequest(BaseModel):
    input: str = Field(..., min_length=1)
    task_id: Optional[str] = None


class PipelineRequest(BaseModel):
    agent_ids: List[str] = Field(..., min_length=1)
    input: str = Field(..., min_length=1)
    task_id: Optional[str] = None


class CollaborativeRequest(BaseModel):
    task: str = Field(..., min_length=1)
    researcher: Optional[str] = None
    ideator: Optional[str] = None
    strategist: Optional[str] = None
    critic: Optional[str] = None
    task_id: Optional[str] = None

    def team(self) -> CollaborativeTeam:
        return CollaborativeTeam(
            researcher=self.researcher,
            ideator=self.ideator,
            strategist=self.strategist,
            critic=self.critic,
        )


class ExecutionResultResponse(BaseModel):
    agent_id: str
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None
    task_id: Optional[str] = None
    execution_time_ms: int
    timestamp: datetime

    @classmethod
    def from_result(cls, result: ExecutionResult) -> "ExecutionResultResponse":
        return cls(
            agent_id=result.agent_id,
            success=result.success,
            result=result.result,
            error=result.error,
            task_id=result.task_id,
            execution_time_ms=result.execution_time_ms,
            timestamp=result.timestamp,
        )

    @classmethod
    def maybe(cls, result: Optional[ExecutionResult]) -> Optional["ExecutionResultResponse"]:
        return cls.from_result(result) if result is not None else None


class CollaborativeResponse(BaseModel):
    research: Optional[ExecutionResultResponse] = None
    ideas: Optional[ExecutionResultResponse] = None
    strategy: Optional[ExecutionResultResponse] = None
    critique: Optional[ExecutionResultResponse] = None
    final_output: str


class MessageRequest(BaseModel):
    from_agent_id: str
    to_agent_id: str
    content: str = Field(..., min_length=1)
    metadata: Optional[Dict[str, Any]] = None


class BroadcastRequest(BaseModel):
    from_agent_id: str
    to_agent_ids: List[str] = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    metadata: Optional[Dict[str, Any]] = None


class MessageResponse(BaseModel):
    id: str
    from_agent_id: str
    to_agent_id: str
    content: str
    metadata: Optional[Dict[str, Any]] = None
    status: str
    created_at: datetime
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    @classmethod
    def from_message(cls, message: AgentMessage) -> "MessageResponse":
        return cls(
            id=message.id,
            from_agent_id=message.from_agent_id,
            to_agent_id=message.to_agent_id,
            content=message.content,
            metadata=message.metadata,
            status=message.status.value,
            created_at=message.created_at,
            delivered_at=message.delivered_at,
            read_at=message.read_at,
        )


class EventResponse(BaseModel):
    id: str
    type: str
    timestamp: datetime
    content: str
    from_agent_id: Optional[str] = None
    from_agent_name: Optional[str] = None
    to_agent_id: Optional[str] = None
    to_agent_name: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    workflow_id: Optional[str] = None
    task_id: Optional[str] = None

    @classmethod
    def from_event(cls, event: CommunicationEvent) -> "EventResponse":
        return cls(
            id=event.id,
            type=event.type.value,
            timestamp=event.timestamp,
            content=event.content,
            from_agent_id=event.from_agent_id,
            from_agent_name=event.from_agent_name,
            to_agent_id=event.to_agent_id,
            to_agent_name=event.to_agent_name,
            metadata=event.metadata,
            workflow_id=event.workflow_id,
            task_id=event.task_id,
        )


class MarketResearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    target_market: Optional[str] = None
    competitors: List[str] = Field(default_factory=list)
    timeframe: Optional[str] = None
    budget: Optional[str] = None
    specific_questions: List[str] = Field(default_factory=list)


class WorkflowStepResponse(BaseModel):
    step_number: int
    agent_role: str
    description: str
    status: str
    agent_id: Optional[str] = None
    output: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_step(cls, step: WorkflowStep) -> "WorkflowStepResponse":
        return cls(
            step_number=step.step_number,
            agent_role=step.agent_role.value,
            description=step.description,
            status=step.status.value,
            agent_id=step.agent_id,
            output=step.output,
            error=step.error,
        )


class UserQueryResponse(BaseModel):
    id: str
    agent_id: str
    question: str
    status: str
    answer: Optional[str] = None

    @classmethod
    def from_query(cls, query: UserQuery) -> "UserQueryResponse":
        return cls(
            id=query.id,
            agent_id=query.agent_id,
            question=query.question,
            status=query.status.value,
            answer=query.answer,
        )


class DepartmentRunResponse(BaseModel):
    workflow_id: str
    department_id: str
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None
    steps: List[WorkflowStepResponse]
    user_queries: List[UserQueryResponse] = Field(default_factory=list)
    execution_time_ms: int
    timestamp: datetime

    @classmethod
    def from_result(cls, result: DepartmentExecutionResult) -> "DepartmentRunResponse":
        return cls(
            workflow_id=result.workflow_id,
            department_id=result.department_id,
            success=result.success,
            result=result.result,
            error=result.error,
            steps=[WorkflowStepResponse.from_step(step) for step in result.steps],
            user_queries=[UserQueryResponse.from_query(q) for q in result.user_queries or []],
            execution_time_ms=result.execution_time_ms,
            timestamp=result.timestamp,
        )
