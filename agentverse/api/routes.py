"""HTTP API for agent registration and execution."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from agentverse.api.schemas import (
    AgentCreateRequest,
    AgentResponse,
    AgentStatusResponse,
    CollaborativeRequest,
    CollaborativeResponse,
    ExecutionResultResponse,
    PipelineRequest,
    RunRequest,
)
from agentverse.core.models import ExecutionContext
from agentverse.orchestration.orchestrator import AgentOrchestrator
from agentverse.runtime import Runtime, get_orchestrator, get_runtime

router = APIRouter(tags=["agents"])


@router.post("/agents", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    request: AgentCreateRequest,
    runtime: Runtime = Depends(get_runtime),
) -> AgentResponse:
    descriptor = request.to_descriptor(runtime.config.default_model)
    runtime.orchestrator.register_agent(descriptor)
    handle = runtime.orchestrator.registry.get(descriptor.agent_id)
    return AgentResponse.from_info(handle.get_info())


@router.get("/agents", response_model=List[AgentResponse])
async def list_agents(orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> List[AgentResponse]:
    return [AgentResponse.from_info(info) for info in orchestrator.get_registered_agents()]


@router.delete("/agents/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(agent_id: str, orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> None:
    orchestrator.unregister_agent(agent_id)


@router.get("/agents/{agent_id}/status", response_model=AgentStatusResponse)
async def agent_status(
    agent_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentStatusResponse:
    return AgentStatusResponse.from_status(orchestrator.registry.get(agent_id).get_status())


@router.post("/agents/{agent_id}/run", response_model=ExecutionResultResponse)
async def run_agent(
    agent_id: str,
    request: RunRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> ExecutionResultResponse:
    result = await orchestrator.execute_single(
        agent_id, request.input, ExecutionContext(task_id=request.task_id)
    )
    return ExecutionResultResponse.from_result(result)


@router.post("/executions/pipeline", response_model=List[ExecutionResultResponse])
async def run_pipeline(
    request: PipelineRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[ExecutionResultResponse]:
    results = await orchestrator.execute_pipeline(
        request.agent_ids, request.input, ExecutionContext(task_id=request.task_id)
    )
    return [ExecutionResultResponse.from_result(result) for result in results]


@router.post("/executions/parallel", response_model=List[ExecutionResultResponse])
async def run_parallel(
    request: PipelineRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[ExecutionResultResponse]:
    results = await orchestrator.execute_parallel(
        request.agent_ids, request.input, ExecutionContext(task_id=request.task_id)
    )
    return [ExecutionResultResponse.from_result(result) for result in results]


@router.post("/executions/collaborative", response_model=CollaborativeResponse)
async def run_collaborative(
    request: CollaborativeRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> CollaborativeResponse:
    outcome = await orchestrator.execute_collaborative_workflow(
        request.team(), request.task, ExecutionContext(task_id=request.task_id)
    )
    return CollaborativeResponse(
        research=ExecutionResultResponse.maybe(outcome.research),
        ideas=ExecutionResultResponse.maybe(outcome.ideas),
        strategy=ExecutionResultResponse.maybe(outcome.strategy),
        critique=ExecutionResultResponse.maybe(outcome.critique),
        final_output=outcome.final_output,
    )
