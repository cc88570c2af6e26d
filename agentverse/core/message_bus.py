"""In-memory bus delivering messages between agents."""
from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence

from .event_log import CommunicationEventLog
from .models import AgentMessage, EventType

logger = logging.getLogger(__name__)

NameResolver = Callable[[str], Optional[str]]


class MessageBus:
    """Per-recipient FIFO mailboxes with broadcast support.

    Delivery is local, so a message is marked delivered as soon as it lands in
    the recipient's mailbox. It becomes read only when the recipient drains
    its queue with ``process_agent_messages``.
    """

    def __init__(
        self,
        event_log: CommunicationEventLog,
        *,
        name_resolver: Optional[NameResolver] = None,
        max_queue_size: Optional[int] = None,
    ) -> None:
        if max_queue_size is not None and max_queue_size < 1:
            raise ValueError("max_queue_size must be positive or None")
        self._event_log = event_log
        self._resolve_name = name_resolver or (lambda _agent_id: None)
        self._max_queue_size = max_queue_size
        self._mailboxes: Dict[str, Deque[AgentMessage]] = defaultdict(
            lambda: deque(maxlen=max_queue_size)
        )

    async def send_agent_message(
        self,
        from_agent_id: str,
        to_agent_id: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AgentMessage:
        """Queue a message for ``to_agent_id`` and log it."""
        message = AgentMessage(
            from_agent_id=from_agent_id,
            to_agent_id=to_agent_id,
            content=content,
            metadata=metadata,
        )
        mailbox = self._mailboxes[to_agent_id]
        if self._max_queue_size is not None and len(mailbox) == self._max_queue_size:
            logger.warning("Mailbox for %s is full, dropping oldest message", to_agent_id)
        mailbox.append(message)
        message.mark_delivered()

        self._event_log.log(
            EventType.MESSAGE,
            content,
            from_agent_id=from_agent_id,
            from_agent_name=self._resolve_name(from_agent_id),
            to_agent_id=to_agent_id,
            to_agent_name=self._resolve_name(to_agent_id),
            metadata=metadata,
            task_id=(metadata or {}).get("task_id"),
        )
        return message

    async def broadcast_message(
        self,
        from_agent_id: str,
        to_agent_ids: Sequence[str],
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[AgentMessage]:
        """Send ``content`` to every recipient, logging one broadcast event first."""
        recipients = list(to_agent_ids)
        self._event_log.log(
            EventType.BROADCAST,
            f"Broadcast to {len(recipients)} agents: {content}",
            from_agent_id=from_agent_id,
            from_agent_name=self._resolve_name(from_agent_id),
            metadata={**(metadata or {}), "recipients": recipients},
        )
        return [
            await self.send_agent_message(from_agent_id, recipient, content, metadata)
            for recipient in recipients
        ]

    def get_agent_messages(self, agent_id: str) -> List[AgentMessage]:
        """Return queued messages without draining the mailbox."""
        mailbox = self._mailboxes.get(agent_id)
        return list(mailbox) if mailbox else []

    def process_agent_messages(self, agent_id: str) -> List[AgentMessage]:
        """Drain the mailbox and mark every message read."""
        mailbox = self._mailboxes.pop(agent_id, None)
        if not mailbox:
            return []
        messages = list(mailbox)
        for message in messages:
            message.mark_read()
        return messages

    def pending_count(self, agent_id: str) -> int:
        mailbox = self._mailboxes.get(agent_id)
        return len(mailbox) if mailbox else 0

    def clear(self) -> None:
        self._mailboxes.clear()
