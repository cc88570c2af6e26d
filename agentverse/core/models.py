"""Core data models shared across orchestration components."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

CONTEXT_VERSION = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class AgentRole(str, Enum):
    """Specialisations an agent can be registered with."""

    RESEARCHER = "researcher"
    STRATEGIST = "strategist"
    CRITIC = "critic"
    IDEATOR = "ideator"
    COORDINATOR = "coordinator"
    EXECUTOR = "executor"

    @property
    def heading(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional[AgentRole]:
        """Map ``value`` to a role, returning None for absent or unknown roles."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class AgentRunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ERROR = "error"


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class EventType(str, Enum):
    MESSAGE = "message"
    BROADCAST = "broadcast"
    EXECUTION = "execution"
    WORKFLOW_START = "workflow_start"
    WORKFLOW_END = "workflow_end"


class QueryStatus(str, Enum):
    PENDING = "pending"
    ANSWERED = "answered"
    TIMEOUT = "timeout"


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED)


@dataclass(frozen=True, slots=True)
class AgentDescriptor:
    """Registration payload describing one agent."""

    agent_id: str
    name: str
    model: str
    role: Optional[AgentRole] = None
    personality: Optional[str] = None
    specialization: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Outcome of a single agent execution."""

    agent_id: str
    success: bool
    execution_time_ms: int
    timestamp: datetime = field(default_factory=utcnow)
    result: Optional[str] = None
    error: Optional[str] = None
    task_id: Optional[str] = None


@dataclass(slots=True)
class AgentStatus:
    agent_id: str
    status: AgentRunState
    last_activity: datetime
    current_task: Optional[str] = None


_MESSAGE_ORDER = {MessageStatus.SENT: 0, MessageStatus.DELIVERED: 1, MessageStatus.READ: 2}


@dataclass(slots=True)
class AgentMessage:
    """Message exchanged between agents over the message bus.

    Status only ever moves forward: sent -> delivered -> read.
    """

    from_agent_id: str
    to_agent_id: str
    content: str
    metadata: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=lambda: new_id("msg"))
    status: MessageStatus = MessageStatus.SENT
    created_at: datetime = field(default_factory=utcnow)
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    def mark_delivered(self) -> None:
        if _MESSAGE_ORDER[self.status] < _MESSAGE_ORDER[MessageStatus.DELIVERED]:
            self.status = MessageStatus.DELIVERED
            self.delivered_at = utcnow()

    def mark_read(self) -> None:
        if self.status is not MessageStatus.READ:
            self.mark_delivered()
            self.status = MessageStatus.READ
            self.read_at = utcnow()


@dataclass(frozen=True, slots=True)
class CommunicationEvent:
    """Entry of the communication log."""

    id: str
    type: EventType
    timestamp: datetime
    content: str
    from_agent_id: Optional[str] = None
    from_agent_name: Optional[str] = None
    to_agent_id: Optional[str] = None
    to_agent_name: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    workflow_id: Optional[str] = None
    task_id: Optional[str] = None

    def involves(self, agent_id: str) -> bool:
        return agent_id in (self.from_agent_id, self.to_agent_id)


@dataclass(slots=True)
class UserQuery:
    workflow_id: str
    agent_id: str
    question: str
    timeout_at: datetime
    context: Optional[str] = None
    id: str = field(default_factory=lambda: new_id("query"))
    status: QueryStatus = QueryStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    answer: Optional[str] = None
    answered_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class UserInteractionRequest:
    """Payload handed to the host's user query callback."""

    query_id: str
    workflow_id: str
    agent_id: str
    agent_name: str
    question: str
    timeout_ms: int
    context: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StepTemplate:
    step_number: int
    agent_role: AgentRole
    description: str
    user_question: Optional[str] = None


@dataclass(slots=True)
class WorkflowStep:
    step_number: int
    agent_role: AgentRole
    description: str
    status: StepStatus = StepStatus.PENDING
    agent_id: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_template(cls, template: StepTemplate, agent_id: Optional[str]) -> WorkflowStep:
        return cls(
            step_number=template.step_number,
            agent_role=template.agent_role,
            description=template.description,
            agent_id=agent_id,
        )

    def start(self, step_input: str) -> None:
        self.status = StepStatus.IN_PROGRESS
        self.input = step_input
        self.started_at = utcnow()

    def complete(self, output: Optional[str]) -> None:
        self.status = StepStatus.COMPLETED
        self.output = output
        self.completed_at = utcnow()

    def fail(self, error: str) -> None:
        self.status = StepStatus.FAILED
        self.error = error
        self.completed_at = utcnow()


@dataclass(frozen=True, slots=True)
class DepartmentConfig:
    id: str
    name: str
    description: str
    required_roles: Tuple[AgentRole, ...]
    workflow_template: Tuple[StepTemplate, ...]


@dataclass(slots=True)
class DepartmentExecutionResult:
    workflow_id: str
    department_id: str
    success: bool
    steps: List[WorkflowStep]
    execution_time_ms: int
    timestamp: datetime = field(default_factory=utcnow)
    result: Optional[str] = None
    error: Optional[str] = None
    user_queries: Optional[List[UserQuery]] = None


@dataclass(frozen=True, slots=True)
class StepDigest:
    role: AgentRole
    output: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ChatTurn:
    role: str
    content: str


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Typed context threaded through agent executions.

    New information is carried by adding named fields; use ``evolve`` to
    derive a modified copy.
    """

    version: int = CONTEXT_VERSION
    previous_results: Tuple[ExecutionResult, ...] = ()
    workflow_id: Optional[str] = None
    step_number: Optional[int] = None
    prior_steps: Tuple[StepDigest, ...] = ()
    role_outputs: Mapping[AgentRole, str] = field(default_factory=dict)
    task_id: Optional[str] = None
    research: Optional[ExecutionResult] = None
    ideas: Optional[ExecutionResult] = None
    strategy: Optional[ExecutionResult] = None
    source_message: Optional[AgentMessage] = None
    history: Tuple[ChatTurn, ...] = ()

    def evolve(self, **changes: Any) -> ExecutionContext:
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class CollaborativeTeam:
    """Agent ids for each phase of the collaborative workflow."""

    researcher: Optional[str] = None
    ideator: Optional[str] = None
    strategist: Optional[str] = None
    critic: Optional[str] = None


@dataclass(slots=True)
class CollaborativeOutcome:
    final_output: str
    research: Optional[ExecutionResult] = None
    ideas: Optional[ExecutionResult] = None
    strategy: Optional[ExecutionResult] = None
    critique: Optional[ExecutionResult] = None
