"""CLI demonstration of collaborative execution, messaging and departments."""
from __future__ import annotations

import asyncio

from agentverse.config import Config
from agentverse.core.models import AgentDescriptor, AgentRole, CollaborativeTeam
from agentverse.departments.market_research import MarketResearchOptions
from agentverse.runtime import Runtime, build_runtime

DEMO_AGENTS = (
    AgentDescriptor(agent_id="agent-1", name="Research Agent", model="gpt-4", role=AgentRole.RESEARCHER),
    AgentDescriptor(agent_id="agent-2", name="Strategic Planner", model="gpt-4", role=AgentRole.STRATEGIST),
    AgentDescriptor(agent_id="agent-3", name="Idea Generator", model="gpt-4", role=AgentRole.IDEATOR),
    AgentDescriptor(agent_id="agent-4", name="Quality Critic", model="gpt-4", role=AgentRole.CRITIC),
)


async def generate_demo_events(runtime: Runtime) -> int:
    """Simulate a short exchange between the demo agents; returns the log size."""
    orchestrator = runtime.orchestrator
    await orchestrator.send_agent_message(
        "agent-1", "agent-2",
        "Market research is done. Demand in the healthcare sector is strong.",
        {"priority": "high", "type": "response"},
    )
    await orchestrator.broadcast_message(
        "agent-2", ["agent-3", "agent-1"],
        "Team update: we are focusing on a healthcare market entry strategy.",
        {"priority": "medium", "type": "notification"},
    )
    await orchestrator.send_agent_message(
        "agent-3", "agent-2",
        "Consider partnering with existing providers and a phased rollout starting with small clinics.",
        {"priority": "medium", "type": "response"},
    )
    return len(orchestrator.get_communication_events())


async def main() -> None:
    runtime = build_runtime(Config())
    orchestrator = runtime.orchestrator
    for descriptor in DEMO_AGENTS:
        orchestrator.register_agent(descriptor)

    outcome = await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(
            researcher="agent-1", ideator="agent-3", strategist="agent-2", critic="agent-4"
        ),
        "Launch a telehealth product for small clinics",
    )
    print(outcome.final_output)

    event_count = await generate_demo_events(runtime)
    inbox = orchestrator.process_agent_messages("agent-2")
    print(f"\nagent-2 read {len(inbox)} messages; {event_count} events logged")

    department = runtime.new_market_research_department()
    result = await department.conduct_market_research(
        "Telehealth for small clinics",
        MarketResearchOptions(target_market="EU", competitors=["Doctolib", "Kry"]),
    )
    print(f"\n{department.name}: success={result.success}")
    print(result.result)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
