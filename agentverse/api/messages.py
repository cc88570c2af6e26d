"""HTTP API for inter-agent messages and the communication log."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from agentverse.api.schemas import (
    BroadcastRequest,
    EventResponse,
    MessageRequest,
    MessageResponse,
)
from agentverse.orchestration.orchestrator import AgentOrchestrator
from agentverse.runtime import get_orchestrator

router = APIRouter(tags=["messages"])


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    request: MessageRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> MessageResponse:
    message = await orchestrator.send_agent_message(
        request.from_agent_id, request.to_agent_id, request.content, request.metadata
    )
    return MessageResponse.from_message(message)


@router.post(
    "/messages/broadcast",
    response_model=List[MessageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def broadcast_message(
    request: BroadcastRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[MessageResponse]:
    messages = await orchestrator.broadcast_message(
        request.from_agent_id, request.to_agent_ids, request.content, request.metadata
    )
    return [MessageResponse.from_message(message) for message in messages]


@router.get("/agents/{agent_id}/messages", response_model=List[MessageResponse])
async def peek_messages(
    agent_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[MessageResponse]:
    return [MessageResponse.from_message(m) for m in orchestrator.get_agent_messages(agent_id)]


@router.post("/agents/{agent_id}/messages/process", response_model=List[MessageResponse])
async def process_messages(
    agent_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[MessageResponse]:
    return [MessageResponse.from_message(m) for m in orchestrator.process_agent_messages(agent_id)]


@router.get("/communication-events", response_model=List[EventResponse])
async def communication_events(
    limit: Optional[int] = Query(default=None, ge=0),
    agent_id: Optional[str] = None,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[EventResponse]:
    if agent_id:
        events = orchestrator.get_events_by_agent(agent_id, limit)
    else:
        events = orchestrator.get_communication_events(limit)
    return [EventResponse.from_event(event) for event in events]


@router.delete("/communication-events", status_code=status.HTTP_204_NO_CONTENT)
async def clear_communication_events(
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> None:
    orchestrator.clear_communication_events()
