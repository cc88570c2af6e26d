"""Tests for single, pipeline, parallel and collaborative execution."""
from __future__ import annotations

import asyncio

import pytest

from agentverse.core.errors import AgentNotFoundError
from agentverse.core.models import (
    AgentMessage,
    AgentRole,
    CollaborativeTeam,
    EventType,
    ExecutionContext,
)
from agentverse.orchestration.orchestrator import AgentOrchestrator
from conftest import make_agent


def _register(orchestrator: AgentOrchestrator, *specs) -> None:
    for agent_id, role in specs:
        orchestrator.register_agent(make_agent(agent_id, role))


@pytest.mark.anyio
async def test_execute_single_logs_execution_event(orchestrator: AgentOrchestrator) -> None:
    _register(orchestrator, ("r", AgentRole.RESEARCHER))

    result = await orchestrator.execute_single(
        "r", "study", ExecutionContext(workflow_id="wf", task_id="t")
    )

    assert result.success
    (event,) = orchestrator.get_communication_events()
    assert event.type is EventType.EXECUTION
    assert event.from_agent_id == "r"
    assert (event.workflow_id, event.task_id) == ("wf", "t")


@pytest.mark.anyio
async def test_execution_event_records_declared_role(orchestrator: AgentOrchestrator) -> None:
    _register(orchestrator, ("co", AgentRole.COORDINATOR), ("plain", None))

    await orchestrator.execute_single("co", "plan the week")
    await orchestrator.execute_single("plain", "anything")

    roles = [e.metadata["role"] for e in orchestrator.get_communication_events()]
    assert roles == ["coordinator", None]


@pytest.mark.anyio
async def test_execute_single_unknown_agent(orchestrator: AgentOrchestrator) -> None:
    with pytest.raises(AgentNotFoundError):
        await orchestrator.execute_single("ghost", "x")


@pytest.mark.anyio
async def test_pipeline_feeds_previous_output(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("a", AgentRole.RESEARCHER), ("b", AgentRole.STRATEGIST))
    fake_llm.completions.replies["a"] = "facts from a"
    seen_contexts = []
    handle_b = orchestrator.registry.get("b")
    original = handle_b.execute

    async def spy(task_input, context=None):
        seen_contexts.append(context)
        return await original(task_input, context)

    handle_b.execute = spy

    results = await orchestrator.execute_pipeline(["a", "b"], "x")

    assert [r.agent_id for r in results] == ["a", "b"]
    assert fake_llm.completions.prompt_for("b").startswith("Strategic Planning Task: facts from a")
    assert seen_contexts[0].previous_results == (results[0],)


@pytest.mark.anyio
async def test_pipeline_stops_on_first_failure(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("a", AgentRole.RESEARCHER), ("b", AgentRole.STRATEGIST))
    fake_llm.completions.failures.add("a")

    results = await orchestrator.execute_pipeline(["a", "b"], "x")

    assert len(results) == 1
    assert not results[0].success
    assert "b" not in fake_llm.completions.called()


@pytest.mark.anyio
async def test_pipeline_failure_at_k_returns_k_results(orchestrator: AgentOrchestrator, fake_llm) -> None:
    ids = ["p1", "p2", "p3", "p4"]
    _register(orchestrator, *((i, AgentRole.RESEARCHER) for i in ids))
    fake_llm.completions.failures.add("p3")

    results = await orchestrator.execute_pipeline(ids, "x")

    assert [r.success for r in results] == [True, True, False]
    assert fake_llm.completions.called() == ["p1", "p2", "p3"]


@pytest.mark.anyio
async def test_parallel_preserves_input_order(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("a", None), ("b", None), ("c", None))
    fake_llm.completions.delays.update({"a": 0.03, "b": 0.0, "c": 0.01})

    results = await orchestrator.execute_parallel(["a", "b", "c"], "same input")

    assert [r.agent_id for r in results] == ["a", "b", "c"]
    assert all(r.success for r in results)
    prompts = {call.prompt for call in fake_llm.completions.calls}
    assert len(prompts) == 1
    assert prompts.pop().startswith("Research Task: same input")


@pytest.mark.anyio
async def test_parallel_starts_all_before_any_finishes(orchestrator: AgentOrchestrator) -> None:
    _register(orchestrator, ("a", None), ("b", None))
    started = []
    all_started = asyncio.Event()

    def gated(agent_id):
        async def execute(task_input, context=None):
            started.append(agent_id)
            if len(started) == 2:
                all_started.set()
            # Deadlocks (and times out) if executions ran one after another.
            await asyncio.wait_for(all_started.wait(), timeout=1)
            return await original[agent_id](task_input, context)
        return execute

    original = {i: orchestrator.registry.get(i).execute for i in ("a", "b")}
    for agent_id in ("a", "b"):
        orchestrator.registry.get(agent_id).execute = gated(agent_id)

    results = await orchestrator.execute_parallel(["a", "b"], "x")

    assert sorted(started) == ["a", "b"]
    assert [r.agent_id for r in results] == ["a", "b"]


@pytest.mark.anyio
async def test_parallel_rejects_whole_batch(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("a", None), ("b", None))
    fake_llm.completions.delays["a"] = 0.02
    finished = asyncio.Event()
    handle_a = orchestrator.registry.get("a")
    original = handle_a.execute

    async def slow_success(task_input, context=None):
        result = await original(task_input, context)
        finished.set()
        return result

    async def boom(task_input, context=None):
        raise RuntimeError("transport closed")

    handle_a.execute = slow_success
    orchestrator.registry.get("b").execute = boom

    with pytest.raises(RuntimeError, match="transport closed"):
        await orchestrator.execute_parallel(["a", "b"], "x")

    # The sibling is not cancelled; it still runs to completion.
    await asyncio.wait_for(finished.wait(), timeout=1)


@pytest.mark.anyio
async def test_parallel_unknown_agent_starts_nothing(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("a", None))

    with pytest.raises(AgentNotFoundError):
        await orchestrator.execute_parallel(["a", "ghost"], "x")
    assert fake_llm.completions.calls == []


@pytest.mark.anyio
async def test_collaborative_research_and_strategy_only(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("r", AgentRole.RESEARCHER), ("s", AgentRole.STRATEGIST))
    fake_llm.completions.replies.update({"r": "market facts", "s": "go-to-market plan"})

    outcome = await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(researcher="r", strategist="s"), "launch plan"
    )

    output = outcome.final_output
    assert output.index("## Research Findings") < output.index("## Strategic Plan")
    assert "Creative Ideas" not in output
    assert "Critical Evaluation" not in output
    assert "\n\n---\n\n" in output
    assert outcome.ideas is None and outcome.critique is None
    # Strategy builds on the research since ideation was skipped.
    assert "Based on this research:\nmarket facts" in fake_llm.completions.prompt_for("s")

    types = [e.type for e in orchestrator.get_communication_events()]
    assert types[0] is EventType.WORKFLOW_START
    assert types[-1] is EventType.WORKFLOW_END
    assert types.count(EventType.EXECUTION) == 2


@pytest.mark.anyio
async def test_collaborative_full_team_chains_phases(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(
        orchestrator,
        ("r", AgentRole.RESEARCHER),
        ("i", AgentRole.IDEATOR),
        ("s", AgentRole.STRATEGIST),
        ("c", AgentRole.CRITIC),
    )
    fake_llm.completions.replies.update({"r": "R", "i": "I", "s": "S", "c": "C"})

    outcome = await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(researcher="r", ideator="i", strategist="s", critic="c"), "task"
    )

    assert fake_llm.completions.called() == ["r", "i", "s", "c"]
    assert "Based on these ideas:\nI" in fake_llm.completions.prompt_for("s")
    assert "Evaluate this strategic plan:\nS" in fake_llm.completions.prompt_for("c")
    assert outcome.final_output == (
        "## Research Findings\nR\n\n---\n\n## Creative Ideas\nI"
        "\n\n---\n\n## Strategic Plan\nS\n\n---\n\n## Critical Evaluation\nC"
    )


@pytest.mark.anyio
async def test_collaborative_skips_critique_without_strategy(
    orchestrator: AgentOrchestrator, fake_llm
) -> None:
    _register(orchestrator, ("r", AgentRole.RESEARCHER), ("s", AgentRole.STRATEGIST), ("c", AgentRole.CRITIC))
    fake_llm.completions.failures.add("s")

    outcome = await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(researcher="r", strategist="s", critic="c"), "task"
    )

    assert outcome.strategy is not None and not outcome.strategy.success
    assert outcome.critique is None
    assert "c" not in fake_llm.completions.called()
    assert "Strategic Plan" not in outcome.final_output


@pytest.mark.anyio
async def test_collaborative_skips_critique_without_strategist(
    orchestrator: AgentOrchestrator, fake_llm
) -> None:
    _register(orchestrator, ("r", AgentRole.RESEARCHER), ("c", AgentRole.CRITIC))

    outcome = await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(researcher="r", critic="c"), "task"
    )

    assert fake_llm.completions.called() == ["r"]
    assert outcome.strategy is None and outcome.critique is None


@pytest.mark.anyio
async def test_collaborative_skips_critique_for_empty_strategy(
    orchestrator: AgentOrchestrator, fake_llm
) -> None:
    _register(orchestrator, ("s", AgentRole.STRATEGIST), ("c", AgentRole.CRITIC))
    fake_llm.completions.replies["s"] = ""

    outcome = await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(strategist="s", critic="c"), "task"
    )

    assert outcome.strategy.success and outcome.strategy.result == ""
    assert outcome.critique is None
    assert "c" not in fake_llm.completions.called()


@pytest.mark.anyio
async def test_collaborative_does_not_build_on_failed_phase(
    orchestrator: AgentOrchestrator, fake_llm
) -> None:
    _register(orchestrator, ("r", AgentRole.RESEARCHER), ("i", AgentRole.IDEATOR))
    fake_llm.completions.failures.add("r")

    await orchestrator.execute_collaborative_workflow(
        CollaborativeTeam(researcher="r", ideator="i"), "task"
    )

    assert "Based on" not in fake_llm.completions.prompt_for("i")


@pytest.mark.anyio
async def test_collaborative_logs_end_event_on_error(orchestrator: AgentOrchestrator) -> None:
    with pytest.raises(AgentNotFoundError):
        await orchestrator.execute_collaborative_workflow(
            CollaborativeTeam(researcher="ghost"), "task"
        )

    types = [e.type for e in orchestrator.get_communication_events()]
    assert types == [EventType.WORKFLOW_START, EventType.WORKFLOW_END]


@pytest.mark.anyio
async def test_route_message_runs_recipient(orchestrator: AgentOrchestrator, fake_llm) -> None:
    _register(orchestrator, ("b", AgentRole.CRITIC))
    message = AgentMessage(from_agent_id="a", to_agent_id="b", content="review this")

    result = await orchestrator.route_message(message)

    assert result.agent_id == "b"
    assert fake_llm.completions.prompt_for("b").startswith("Critical Evaluation Task: review this")

    with pytest.raises(AgentNotFoundError):
        await orchestrator.route_message(
            AgentMessage(from_agent_id="a", to_agent_id="ghost", content="x")
        )
