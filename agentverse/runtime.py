"""Application runtime composition helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from agentverse.config import Config
from agentverse.departments.market_research import MarketResearchDepartment
from agentverse.orchestration.department import Department
from agentverse.orchestration.orchestrator import AgentOrchestrator
from agentverse.services.llm_pool import LLMPool, build_llm_pool


@dataclass
class Runtime:
    """Services built once at startup and shared by request handlers."""

    config: Config
    llm_pool: LLMPool
    orchestrator: AgentOrchestrator

    def new_market_research_department(self) -> MarketResearchDepartment:
        """Build a department staffed from the orchestrator's registered agents."""
        department = MarketResearchDepartment(
            self.llm_pool,
            event_log=self.orchestrator.event_log,
            query_timeout_ms=self.config.user_query_timeout_ms,
            enforce_query_timeout=self.config.enforce_query_timeout,
        )
        staff_department(department, self.orchestrator)
        return department


def build_runtime(
    config: Optional[Config] = None,
    llm_pool: Optional[LLMPool] = None,
) -> Runtime:
    config = config or Config.from_env()
    llm_pool = llm_pool or build_llm_pool(config)
    return Runtime(
        config=config,
        llm_pool=llm_pool,
        orchestrator=AgentOrchestrator.from_config(config, llm_pool),
    )


def staff_department(department: Department, orchestrator: AgentOrchestrator) -> None:
    """Register the first orchestrator agent found for each role the department needs."""
    for handle in orchestrator.registry.handles():
        role = handle.descriptor.role
        if role in department.config.required_roles and department.get_agent_by_role(role) is None:
            department.register_agent(handle.descriptor)


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_orchestrator(runtime: Runtime = Depends(get_runtime)) -> AgentOrchestrator:
    return runtime.orchestrator
