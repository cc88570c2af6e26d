"""Bounded, append-only log of agent communication events."""
from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Optional

from .models import CommunicationEvent, EventType, new_id, utcnow

DEFAULT_MAX_EVENTS = 1000


class CommunicationEventLog:
    """Keeps the most recent ``max_events_to_keep`` events in logging order."""

    def __init__(self, max_events_to_keep: int = DEFAULT_MAX_EVENTS) -> None:
        if max_events_to_keep < 1:
            raise ValueError("max_events_to_keep must be positive")
        self.max_events_to_keep = max_events_to_keep
        self._events: Deque[CommunicationEvent] = deque(maxlen=max_events_to_keep)

    def log(
        self,
        event_type: EventType,
        content: str,
        *,
        from_agent_id: Optional[str] = None,
        from_agent_name: Optional[str] = None,
        to_agent_id: Optional[str] = None,
        to_agent_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        workflow_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> CommunicationEvent:
        """Stamp and append an event, evicting the oldest entries past capacity."""
        event = CommunicationEvent(
            id=new_id("evt"),
            type=event_type,
            timestamp=utcnow(),
            content=content,
            from_agent_id=from_agent_id,
            from_agent_name=from_agent_name,
            to_agent_id=to_agent_id,
            to_agent_name=to_agent_name,
            metadata=metadata,
            workflow_id=workflow_id,
            task_id=task_id,
        )
        self._events.append(event)
        return event

    def get_events(self, limit: Optional[int] = None) -> List[CommunicationEvent]:
        events = list(self._events)
        if limit is None:
            return events
        return events[-limit:] if limit > 0 else []

    def get_events_by_agent(
        self, agent_id: str, limit: Optional[int] = None
    ) -> List[CommunicationEvent]:
        events = [event for event in self._events if event.involves(agent_id)]
        if limit is None:
            return events
        return events[-limit:] if limit > 0 else []

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
