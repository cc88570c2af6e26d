"""Execution patterns over the agent registry."""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from agentverse.agents.handle import AgentHandle
from agentverse.core.event_log import CommunicationEventLog
from agentverse.core.models import (
    AgentMessage,
    CollaborativeOutcome,
    CollaborativeTeam,
    EventType,
    ExecutionContext,
    ExecutionResult,
    new_id,
)
from agentverse.orchestration.registry import AgentRegistry

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"
PREVIEW_CHARS = 100


class ExecutionEngine:
    """Run agents singly, as a pipeline, in parallel or as a collaborative team."""

    def __init__(self, registry: AgentRegistry, event_log: CommunicationEventLog) -> None:
        self._registry = registry
        self._event_log = event_log

    async def execute_single(
        self,
        agent_id: str,
        task_input: str,
        context: Optional[ExecutionContext] = None,
    ) -> ExecutionResult:
        """Execute one agent; raises ``AgentNotFoundError`` for unknown ids."""
        handle = self._registry.get(agent_id)
        return await self._dispatch(handle, task_input, context or ExecutionContext())

    async def _dispatch(
        self, handle: AgentHandle, task_input: str, context: ExecutionContext
    ) -> ExecutionResult:
        preview = task_input if len(task_input) <= PREVIEW_CHARS else task_input[:PREVIEW_CHARS] + "..."
        self._event_log.log(
            EventType.EXECUTION,
            f"Executing task: {preview}",
            from_agent_id=handle.agent_id,
            from_agent_name=handle.name,
            metadata={"role": _role_value(handle), "step_number": context.step_number},
            workflow_id=context.workflow_id,
            task_id=context.task_id,
        )
        return await handle.execute(task_input, context)

    async def execute_pipeline(
        self,
        agent_ids: Sequence[str],
        initial_input: str,
        context: Optional[ExecutionContext] = None,
    ) -> List[ExecutionResult]:
        """Chain agents so each consumes the previous agent's output.

        Stops after the first unsuccessful result; that result is included.
        """
        results: List[ExecutionResult] = []
        current_input = initial_input
        current_context = context or ExecutionContext()

        for agent_id in agent_ids:
            result = await self.execute_single(agent_id, current_input, current_context)
            results.append(result)

            if not (result.success and result.result):
                logger.info(
                    "Pipeline stopped at agent %s after %d of %d steps",
                    agent_id, len(results), len(agent_ids),
                )
                break

            current_input = result.result
            current_context = current_context.evolve(
                previous_results=current_context.previous_results + (result,)
            )

        return results

    async def execute_parallel(
        self,
        agent_ids: Sequence[str],
        task_input: str,
        context: Optional[ExecutionContext] = None,
    ) -> List[ExecutionResult]:
        """Run all agents concurrently on the same input.

        Results follow the order of ``agent_ids``. The first exception raised by
        any execution propagates and no partial results are returned; the other
        executions are left to finish on their own.
        """
        handles = [self._registry.get(agent_id) for agent_id in agent_ids]
        shared_context = context or ExecutionContext()
        results = await asyncio.gather(
            *(self._dispatch(handle, task_input, shared_context) for handle in handles)
        )
        return list(results)

    async def execute_collaborative_workflow(
        self,
        team: CollaborativeTeam,
        task: str,
        context: Optional[ExecutionContext] = None,
    ) -> CollaborativeOutcome:
        """Research, ideate, strategize and critique ``task`` in that order.

        Each phase runs only when the team names an agent for it and builds on
        the result of the closest earlier phase that ran. The critique needs a
        successful strategy.
        """
        base = context or ExecutionContext()
        workflow_id = base.workflow_id or new_id("collab")
        base = base.evolve(workflow_id=workflow_id)
        outcome = CollaborativeOutcome(final_output="")

        self._event_log.log(
            EventType.WORKFLOW_START,
            f"Collaborative workflow started: {task}",
            metadata={"team": _team_members(team)},
            workflow_id=workflow_id,
            task_id=base.task_id,
        )
        logger.info("Collaborative workflow %s started", workflow_id)

        try:
            previous: Optional[ExecutionResult] = None
            lead_in = ""

            if team.researcher:
                outcome.research = await self.execute_single(
                    team.researcher, f"Research the following task: {task}", base
                )
                previous, lead_in = outcome.research, "Based on this research"

            if team.ideator:
                outcome.ideas = await self.execute_single(
                    team.ideator,
                    _build_on(previous, lead_in, f"Generate creative ideas for: {task}"),
                    base.evolve(research=outcome.research),
                )
                previous, lead_in = outcome.ideas, "Based on these ideas"

            if team.strategist:
                outcome.strategy = await self.execute_single(
                    team.strategist,
                    _build_on(previous, lead_in, f"Create a strategic plan for: {task}"),
                    base.evolve(research=outcome.research, ideas=outcome.ideas),
                )

            strategy = outcome.strategy
            if team.critic and strategy is not None and strategy.success and strategy.result:
                outcome.critique = await self.execute_single(
                    team.critic,
                    f"Evaluate this strategic plan:\n{strategy.result}\n\nOriginal task: {task}",
                    base.evolve(
                        research=outcome.research, ideas=outcome.ideas, strategy=strategy
                    ),
                )
            elif team.critic:
                logger.info("Skipping critique in %s: no strategy to evaluate", workflow_id)

            outcome.final_output = compile_workflow_output(outcome)
        finally:
            self._event_log.log(
                EventType.WORKFLOW_END,
                f"Collaborative workflow finished: {task}",
                metadata={"phases": _phases_run(outcome)},
                workflow_id=workflow_id,
                task_id=base.task_id,
            )
            logger.info("Collaborative workflow %s finished", workflow_id)

        return outcome

    async def route_message(self, message: AgentMessage) -> ExecutionResult:
        """Have the message's recipient execute its content."""
        task_id = (message.metadata or {}).get("task_id")
        return await self.execute_single(
            message.to_agent_id,
            message.content,
            ExecutionContext(source_message=message, task_id=task_id),
        )


_SECTIONS = (
    ("research", "Research Findings"),
    ("ideas", "Creative Ideas"),
    ("strategy", "Strategic Plan"),
    ("critique", "Critical Evaluation"),
)


def compile_workflow_output(outcome: CollaborativeOutcome) -> str:
    """Join each phase that produced a result under its heading."""
    sections = []
    for attr, heading in _SECTIONS:
        phase = getattr(outcome, attr)
        if phase is not None and phase.result:
            sections.append(f"## {heading}\n{phase.result}")
    return SECTION_SEPARATOR.join(sections)


def _build_on(previous: Optional[ExecutionResult], lead_in: str, instruction: str) -> str:
    if previous is not None and previous.success and previous.result:
        return f"{lead_in}:\n{previous.result}\n\n{instruction}"
    return instruction


def _role_value(handle: AgentHandle) -> Optional[str]:
    role = handle.descriptor.role
    return role.value if role is not None else None


def _team_members(team: CollaborativeTeam) -> dict:
    return {
        phase: agent_id
        for phase, agent_id in (
            ("researcher", team.researcher),
            ("ideator", team.ideator),
            ("strategist", team.strategist),
            ("critic", team.critic),
        )
        if agent_id
    }


def _phases_run(outcome: CollaborativeOutcome) -> List[str]:
    return [attr for attr, _ in _SECTIONS if getattr(outcome, attr) is not None]
