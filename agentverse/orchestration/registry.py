"""Registry mapping agent ids to executable handles."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from agentverse.agents.handle import AgentHandle
from agentverse.agents.roles import RoleProfile, profile_for
from agentverse.core.errors import AgentNotFoundError
from agentverse.core.models import AgentDescriptor, AgentRole, AgentStatus
from agentverse.services.llm_pool import LLMPool

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Owns the handles for every registered agent."""

    def __init__(
        self,
        llm_pool: LLMPool,
        *,
        profiles: Optional[Dict[AgentRole, RoleProfile]] = None,
        name: str = "registry",
    ) -> None:
        self._llm_pool = llm_pool
        self._profiles = dict(profiles or {})
        self._handles: Dict[str, AgentHandle] = {}
        self.name = name

    def _resolve_profile(self, role: Optional[AgentRole]) -> RoleProfile:
        if role is not None and role in self._profiles:
            return self._profiles[role]
        return profile_for(role)

    def register(self, descriptor: AgentDescriptor) -> AgentHandle:
        """Create a handle for ``descriptor``, replacing any handle with the same id."""
        handle = AgentHandle(
            descriptor,
            self._llm_pool,
            profile=self._resolve_profile(descriptor.role),
        )
        replaced = descriptor.agent_id in self._handles
        self._handles[descriptor.agent_id] = handle
        logger.info(
            "%s agent %s (%s) as %s",
            "Re-registered" if replaced else "Registered",
            descriptor.agent_id,
            descriptor.name,
            handle.profile.title,
        )
        return handle

    def unregister(self, agent_id: str) -> None:
        if self._handles.pop(agent_id, None) is not None:
            logger.info("Unregistered agent %s", agent_id)

    def get(self, agent_id: str) -> AgentHandle:
        handle = self._handles.get(agent_id)
        if handle is None:
            raise AgentNotFoundError(agent_id, self.name)
        return handle

    def name_of(self, agent_id: str) -> Optional[str]:
        handle = self._handles.get(agent_id)
        return handle.name if handle else None

    def handles(self) -> List[AgentHandle]:
        return list(self._handles.values())

    def statuses(self) -> List[AgentStatus]:
        return [handle.get_status() for handle in self._handles.values()]

    def infos(self) -> List[Dict[str, Any]]:
        return [handle.get_info() for handle in self._handles.values()]

    def clear(self) -> None:
        self._handles.clear()

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)
