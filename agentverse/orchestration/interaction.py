"""Brokers blocking questions from agents to a human through a host callback."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import timedelta
from typing import Awaitable, Callable, Deque, Dict, List, Optional

from agentverse.core.errors import (
    UserQueryCallbackMissingError,
    UserQueryTimeoutError,
)
from agentverse.core.models import (
    QueryStatus,
    UserInteractionRequest,
    UserQuery,
    utcnow,
)
from agentverse.orchestration.registry import AgentRegistry

logger = logging.getLogger(__name__)

UserQueryCallback = Callable[[UserInteractionRequest], Awaitable[str]]

DEFAULT_TIMEOUT_MS = 300_000


class UserInteractionGateway:
    """Tracks pending user queries and settles them as answered or timed out.

    With ``enforce_timeout`` the callback is abandoned once the deadline
    passes; otherwise ``timeout_at`` is informational and a callback that
    never resolves blocks the caller.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        enforce_timeout: bool = True,
        max_resolved_queries: int = 500,
    ) -> None:
        self._registry = registry
        self.timeout_ms = timeout_ms
        self.enforce_timeout = enforce_timeout
        self._callback: Optional[UserQueryCallback] = None
        self._pending: Dict[str, UserQuery] = {}
        self._resolved: Deque[UserQuery] = deque(maxlen=max_resolved_queries)

    def set_user_query_callback(self, callback: UserQueryCallback) -> None:
        self._callback = callback

    @property
    def has_callback(self) -> bool:
        return self._callback is not None

    async def request_user_input(
        self,
        workflow_id: str,
        agent_id: str,
        question: str,
        context: Optional[str] = None,
    ) -> str:
        """Ask the human ``question`` on behalf of ``agent_id`` and wait for the answer."""
        if self._callback is None:
            raise UserQueryCallbackMissingError("User query callback not set")
        agent = self._registry.get(agent_id)

        query = UserQuery(
            workflow_id=workflow_id,
            agent_id=agent_id,
            question=question,
            context=context,
            timeout_at=utcnow() + timedelta(milliseconds=self.timeout_ms),
        )
        request = UserInteractionRequest(
            query_id=query.id,
            workflow_id=workflow_id,
            agent_id=agent_id,
            agent_name=agent.name,
            question=question,
            context=context,
            timeout_ms=self.timeout_ms,
        )
        self._pending[query.id] = query

        try:
            answer = await self._await_answer(self._callback, request)
        except asyncio.TimeoutError as exc:
            query.status = QueryStatus.TIMEOUT
            logger.warning("User query %s timed out after %d ms", query.id, self.timeout_ms)
            raise UserQueryTimeoutError(
                f"No answer to query {query.id} within {self.timeout_ms} ms"
            ) from exc
        except Exception:
            query.status = QueryStatus.TIMEOUT
            logger.warning("User query %s failed", query.id, exc_info=True)
            raise
        else:
            query.status = QueryStatus.ANSWERED
            query.answer = answer
            query.answered_at = utcnow()
            return answer
        finally:
            self._pending.pop(query.id, None)
            self._resolved.append(query)

    async def _await_answer(
        self, callback: UserQueryCallback, request: UserInteractionRequest
    ) -> str:
        if not self.enforce_timeout:
            return await callback(request)
        return await asyncio.wait_for(callback(request), self.timeout_ms / 1000)

    def pending_queries(self, workflow_id: Optional[str] = None) -> List[UserQuery]:
        return [
            query for query in self._pending.values()
            if workflow_id is None or query.workflow_id == workflow_id
        ]

    def resolved_queries(self, workflow_id: Optional[str] = None) -> List[UserQuery]:
        return [
            query for query in self._resolved
            if workflow_id is None or query.workflow_id == workflow_id
        ]
