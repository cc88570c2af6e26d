"""Market Research department.

Coordinates four agents to run a market study:

1. Researcher gathers market data and competitive intelligence.
2. Strategist analyses trends and opportunities.
3. Critic identifies risks, gaps and challenges.
4. Ideator proposes solutions for the gaps found.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agentverse.core.models import (
    AgentRole,
    DepartmentConfig,
    DepartmentExecutionResult,
    ExecutionContext,
    StepTemplate,
)
from agentverse.orchestration.department import Department
from agentverse.services.llm_pool import LLMPool

MARKET_RESEARCH_CONFIG = DepartmentConfig(
    id="market-research",
    name="Market Research Department",
    description=(
        "Comprehensive market analysis and strategic recommendations through "
        "collaborative agent workflow"
    ),
    required_roles=(
        AgentRole.RESEARCHER,
        AgentRole.STRATEGIST,
        AgentRole.CRITIC,
        AgentRole.IDEATOR,
    ),
    workflow_template=(
        StepTemplate(
            step_number=1,
            agent_role=AgentRole.RESEARCHER,
            description="Gather comprehensive market data, competitor information, and industry trends",
        ),
        StepTemplate(
            step_number=2,
            agent_role=AgentRole.STRATEGIST,
            description="Analyze research findings to identify strategic opportunities and market positioning",
        ),
        StepTemplate(
            step_number=3,
            agent_role=AgentRole.CRITIC,
            description="Evaluate strategy for risks, gaps, weaknesses, and potential challenges",
        ),
        StepTemplate(
            step_number=4,
            agent_role=AgentRole.IDEATOR,
            description="Propose innovative solutions to address identified gaps and capitalize on opportunities",
        ),
    ),
)

CAPABILITIES = (
    "Competitive Analysis",
    "Market Trend Identification",
    "Strategic Opportunity Assessment",
    "Risk Analysis",
    "Innovation Strategy",
    "Market Positioning Recommendations",
)


@dataclass
class MarketResearchOptions:
    target_market: Optional[str] = None
    competitors: List[str] = field(default_factory=list)
    timeframe: Optional[str] = None
    budget: Optional[str] = None
    specific_questions: List[str] = field(default_factory=list)


class MarketResearchDepartment(Department):
    """Department preconfigured for market research requests."""

    def __init__(self, llm_pool: LLMPool, **kwargs: Any) -> None:
        super().__init__(MARKET_RESEARCH_CONFIG, llm_pool, **kwargs)

    async def conduct_market_research(
        self,
        market_query: str,
        options: Optional[MarketResearchOptions] = None,
        context: Optional[ExecutionContext] = None,
    ) -> DepartmentExecutionResult:
        return await self.execute(build_enhanced_query(market_query, options), context)

    def get_research_status(self) -> Dict[str, Any]:
        info = self.get_info()
        info["capabilities"] = list(CAPABILITIES)
        info["workflow_steps"] = [
            f"{template.description} ({template.agent_role.heading})"
            for template in self.config.workflow_template
        ]
        return info


def build_enhanced_query(query: str, options: Optional[MarketResearchOptions] = None) -> str:
    """Prefix the query with the structured research brief."""
    options = options or MarketResearchOptions()
    lines = [f"Market Research Request: {query}", ""]

    if options.target_market:
        lines.append(f"Target Market: {options.target_market}")
    if options.competitors:
        lines.append(f"Key Competitors: {', '.join(options.competitors)}")
    if options.timeframe:
        lines.append(f"Timeframe: {options.timeframe}")
    if options.budget:
        lines.append(f"Budget Considerations: {options.budget}")
    if options.specific_questions:
        lines.append("")
        lines.append("Specific Questions to Address:")
        lines.extend(f"{i}. {q}" for i, q in enumerate(options.specific_questions, 1))

    lines.append("")
    lines.append("Please provide comprehensive analysis based on your role and expertise.")
    return "\n".join(lines)


def create_market_research_department(llm_pool: LLMPool, **kwargs: Any) -> MarketResearchDepartment:
    return MarketResearchDepartment(llm_pool, **kwargs)
