"""HTTP surface tests against an app wired to the scripted model client."""
from __future__ import annotations

import logging
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from agentverse import main
from agentverse.config import Config
from agentverse.core.logging_config import StructuredFormatter
from agentverse.main import create_app
from agentverse.runtime import build_runtime
from agentverse.services.llm_pool import LLMPool
from conftest import FAKE_MODEL


@pytest.fixture
def client(llm_pool: LLMPool) -> Iterator[TestClient]:
    runtime = build_runtime(Config(default_model=FAKE_MODEL), llm_pool)
    with TestClient(create_app(runtime)) as client:
        yield client


def _create(client: TestClient, agent_id: str, role: str) -> None:
    response = client.post("/agents", json={"agent_id": agent_id, "name": agent_id, "role": role})
    assert response.status_code == 201


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_list_agents(client: TestClient) -> None:
    response = client.post("/agents", json={"name": "Scout", "role": "Researcher"})
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "researcher"
    assert body["model"] == FAKE_MODEL

    listed = client.get("/agents").json()
    assert [agent["agent_id"] for agent in listed] == [body["agent_id"]]


def test_unknown_agent_is_404(client: TestClient) -> None:
    assert client.get("/agents/ghost/status").status_code == 404
    response = client.post("/agents/ghost/run", json={"input": "x"})
    assert response.status_code == 404
    assert "ghost" in response.json()["detail"]


def test_run_agent(client: TestClient, fake_llm) -> None:
    _create(client, "s", "strategist")
    fake_llm.completions.replies["s"] = "plan"

    response = client.post("/agents/s/run", json={"input": "grow", "task_id": "t-9"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"] == "plan"
    assert body["task_id"] == "t-9"
    assert client.get("/agents/s/status").json()["status"] == "idle"


def test_delete_agent(client: TestClient) -> None:
    _create(client, "a", "critic")
    assert client.delete("/agents/a").status_code == 204
    assert client.get("/agents").json() == []


def test_pipeline_and_parallel(client: TestClient) -> None:
    _create(client, "a", "researcher")
    _create(client, "b", "critic")

    pipeline = client.post("/executions/pipeline", json={"agent_ids": ["a", "b"], "input": "x"})
    parallel = client.post("/executions/parallel", json={"agent_ids": ["b", "a"], "input": "x"})

    assert [r["agent_id"] for r in pipeline.json()] == ["a", "b"]
    assert [r["agent_id"] for r in parallel.json()] == ["b", "a"]


def test_collaborative(client: TestClient) -> None:
    _create(client, "r", "researcher")
    _create(client, "s", "strategist")

    response = client.post(
        "/executions/collaborative", json={"task": "launch", "researcher": "r", "strategist": "s"}
    )

    body = response.json()
    assert body["ideas"] is None and body["critique"] is None
    assert body["final_output"].startswith("## Research Findings\nr output")


def test_broadcast_then_events(client: TestClient) -> None:
    _create(client, "a", "researcher")
    _create(client, "b", "critic")
    _create(client, "c", "ideator")

    response = client.post(
        "/messages/broadcast",
        json={"from_agent_id": "a", "to_agent_ids": ["b", "c"], "content": "hi"},
    )
    assert response.status_code == 201
    assert len(response.json()) == 2

    types = [event["type"] for event in client.get("/communication-events").json()]
    assert types.count("broadcast") == 1
    assert types.count("message") == 2

    assert len(client.get("/agents/b/messages").json()) == 1
    processed = client.post("/agents/b/messages/process").json()
    assert processed[0]["status"] == "read"
    assert client.get("/agents/b/messages").json() == []

    only_c = client.get("/communication-events", params={"agent_id": "c"}).json()
    assert {event["to_agent_id"] for event in only_c} == {"c"}

    assert client.delete("/communication-events").status_code == 204
    assert client.get("/communication-events").json() == []


def test_market_research_requires_full_staff(client: TestClient) -> None:
    _create(client, "r", "researcher")

    response = client.post("/departments/market-research/run", json={"query": "EV chargers"})

    assert response.status_code == 400
    assert "strategist" in response.json()["detail"]


def test_market_research_run(client: TestClient, fake_llm) -> None:
    for role in ("researcher", "strategist", "critic", "ideator"):
        _create(client, role, role)

    response = client.post(
        "/departments/market-research/run",
        json={"query": "EV chargers", "target_market": "Nordics"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [step["status"] for step in body["steps"]] == ["completed"] * 4
    assert "Completed 4 of 4 steps" in body["result"]

    fake_llm.completions.failures.add("critic")
    failed = client.post("/departments/market-research/run", json={"query": "EV chargers"})
    assert failed.status_code == 500
    assert failed.json()["steps"][2]["status"] == "failed"


def test_list_departments(client: TestClient) -> None:
    (department,) = client.get("/departments").json()
    assert department["id"] == "market-research"
    assert department["is_fully_staffed"] is False


def test_logging_configured_before_runtime_is_built(
    monkeypatch: pytest.MonkeyPatch, llm_pool: LLMPool
) -> None:
    monkeypatch.setattr(logging.getLogger("agentverse"), "handlers", [])
    seen_handlers = []

    def fake_build_runtime(config: Config):
        handlers = logging.getLogger("agentverse").handlers
        seen_handlers.extend(type(h.formatter) for h in handlers)
        return build_runtime(config, llm_pool)

    monkeypatch.setattr(main, "build_runtime", fake_build_runtime)
    with TestClient(main.create_app()) as client:
        assert client.get("/health").status_code == 200

    assert StructuredFormatter in seen_handlers
