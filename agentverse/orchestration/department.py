"""Departments: staffed, template-driven sequential workflows."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from agentverse.core.errors import RoleNotRequiredError
from agentverse.core.event_log import CommunicationEventLog
from agentverse.core.models import (
    AgentDescriptor,
    AgentRole,
    DepartmentConfig,
    DepartmentExecutionResult,
    EventType,
    ExecutionContext,
    StepDigest,
    StepStatus,
    UserQuery,
    WorkflowStep,
)
from agentverse.orchestration.engine import ExecutionEngine
from agentverse.orchestration.interaction import (
    DEFAULT_TIMEOUT_MS,
    UserInteractionGateway,
    UserQueryCallback,
)
from agentverse.orchestration.registry import AgentRegistry
from agentverse.services.llm_pool import LLMPool

logger = logging.getLogger(__name__)


class Department:
    """Runs a department's workflow template against its staffed agents.

    A step that fails is recorded as failed and the workflow moves on to the
    next step; the run only reports success when no step failed.
    """

    def __init__(
        self,
        config: DepartmentConfig,
        llm_pool: LLMPool,
        *,
        event_log: Optional[CommunicationEventLog] = None,
        query_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        enforce_query_timeout: bool = True,
    ) -> None:
        self.config = config
        self._agents: Dict[AgentRole, AgentDescriptor] = {}
        self._registry = AgentRegistry(llm_pool, name=f"department {config.name}")
        self._event_log = event_log if event_log is not None else CommunicationEventLog()
        self._engine = ExecutionEngine(self._registry, self._event_log)
        self._gateway = UserInteractionGateway(
            self._registry,
            timeout_ms=query_timeout_ms,
            enforce_timeout=enforce_query_timeout,
        )

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def event_log(self) -> CommunicationEventLog:
        return self._event_log

    def register_agent(self, descriptor: AgentDescriptor) -> None:
        """Staff the role named by ``descriptor``; replaces any agent already in it."""
        if descriptor.role is None:
            raise RoleNotRequiredError(f"Agent {descriptor.agent_id} does not have a role assigned")
        if descriptor.role not in self.config.required_roles:
            raise RoleNotRequiredError(
                f"Role {descriptor.role.value} is not required for department {self.name}"
            )
        previous = self._agents.get(descriptor.role)
        if previous is not None and previous.agent_id != descriptor.agent_id:
            self._registry.unregister(previous.agent_id)
        self._agents[descriptor.role] = descriptor
        self._registry.register(descriptor)

    def unregister_agent(self, role: AgentRole) -> None:
        descriptor = self._agents.pop(role, None)
        if descriptor is not None:
            self._registry.unregister(descriptor.agent_id)

    def get_agents(self) -> List[AgentDescriptor]:
        return list(self._agents.values())

    def get_agent_by_role(self, role: AgentRole) -> Optional[AgentDescriptor]:
        return self._agents.get(role)

    def is_fully_staffed(self) -> bool:
        return all(role in self._agents for role in self.config.required_roles)

    def missing_roles(self) -> List[AgentRole]:
        return [role for role in self.config.required_roles if role not in self._agents]

    def set_user_query_callback(self, callback: UserQueryCallback) -> None:
        self._gateway.set_user_query_callback(callback)

    async def request_user_input(
        self,
        workflow_id: str,
        agent_id: str,
        question: str,
        context: Optional[str] = None,
    ) -> str:
        return await self._gateway.request_user_input(workflow_id, agent_id, question, context)

    async def execute(
        self,
        task_input: str,
        context: Optional[ExecutionContext] = None,
        enable_user_interaction: bool = False,
    ) -> DepartmentExecutionResult:
        started = time.perf_counter()
        workflow_id = f"workflow-{self.id}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"

        if not self.is_fully_staffed():
            missing = ", ".join(role.value for role in self.missing_roles())
            logger.warning("Department %s is not fully staffed, missing %s", self.id, missing)
            return DepartmentExecutionResult(
                workflow_id=workflow_id,
                department_id=self.id,
                success=False,
                error=f"Department is not fully staffed. Missing roles: {missing}",
                steps=[],
                execution_time_ms=_elapsed_ms(started),
            )

        steps = [
            WorkflowStep.from_template(template, self._agent_id_for(template.agent_role))
            for template in self.config.workflow_template
        ]
        questions = [template.user_question for template in self.config.workflow_template]
        interactive = enable_user_interaction and self._gateway.has_callback
        current_context = (context or ExecutionContext()).evolve(workflow_id=workflow_id)

        self._event_log.log(
            EventType.WORKFLOW_START,
            f"{self.name} workflow started",
            metadata={"department_id": self.id, "steps": len(steps)},
            workflow_id=workflow_id,
        )

        for index, step in enumerate(steps):
            descriptor = self._agents.get(step.agent_role)
            if descriptor is None:
                step.fail(f"Agent with role {step.agent_role.value} not found")
                continue

            previous_output = steps[index - 1].output if index > 0 else None
            step_input = previous_output or task_input
            question = questions[index]
            step.start(step_input)

            try:
                if interactive and question:
                    answer = await self._gateway.request_user_input(
                        workflow_id, descriptor.agent_id, question, step.description
                    )
                    step_input = f"{step_input}\n\nUser input: {answer}"
                    step.input = step_input

                result = await self._engine.execute_single(
                    descriptor.agent_id,
                    step_input,
                    current_context.evolve(
                        step_number=step.step_number,
                        prior_steps=tuple(
                            StepDigest(role=prior.agent_role, output=prior.output)
                            for prior in steps[:index]
                        ),
                    ),
                )
            except Exception as exc:  # noqa: BLE001
                step.fail(str(exc) or type(exc).__name__)
                logger.warning(
                    "Step %d (%s) of %s raised: %s",
                    step.step_number, step.agent_role.value, workflow_id, exc,
                )
                continue

            if not result.success:
                step.fail(result.error or "Agent execution failed")
                logger.warning(
                    "Step %d (%s) of %s failed: %s",
                    step.step_number, step.agent_role.value, workflow_id, step.error,
                )
                continue

            step.complete(result.result)
            current_context = current_context.evolve(
                role_outputs={**current_context.role_outputs, step.agent_role: result.result or ""}
            )

        failed = [step for step in steps if step.status is StepStatus.FAILED]
        completed = [step for step in steps if step.status is StepStatus.COMPLETED]
        self._event_log.log(
            EventType.WORKFLOW_END,
            f"{self.name} workflow finished: {len(completed)} of {len(steps)} steps completed",
            metadata={"department_id": self.id, "failed_steps": [s.step_number for s in failed]},
            workflow_id=workflow_id,
        )

        user_queries: List[UserQuery] = self._gateway.resolved_queries(workflow_id)
        return DepartmentExecutionResult(
            workflow_id=workflow_id,
            department_id=self.id,
            success=not failed,
            result=self.compile_report(steps),
            steps=steps,
            user_queries=user_queries or None,
            execution_time_ms=_elapsed_ms(started),
        )

    def _agent_id_for(self, role: AgentRole) -> Optional[str]:
        descriptor = self._agents.get(role)
        return descriptor.agent_id if descriptor else None

    def compile_report(self, steps: List[WorkflowStep]) -> str:
        """Summarise completed steps under role headings with a completion tally."""
        completed = [step for step in steps if step.status is StepStatus.COMPLETED]
        if not completed:
            return "No steps completed successfully"

        sections = [f"# {self.name} - Workflow Results\n"]
        for step in completed:
            sections.append(f"## {step.agent_role.heading} Analysis\n{step.output}\n")
        sections.append("---\n")
        sections.append(
            f"**Workflow Summary**: Completed {len(completed)} of {len(steps)} steps successfully.\n"
        )
        return "\n".join(sections)

    def get_info(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.config.description,
            "required_roles": [role.value for role in self.config.required_roles],
            "registered_agents": [
                {"role": role.value, "agent_id": agent.agent_id, "agent_name": agent.name}
                for role, agent in self._agents.items()
            ],
            "is_fully_staffed": self.is_fully_staffed(),
            "missing_roles": [role.value for role in self.missing_roles()],
        }


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
