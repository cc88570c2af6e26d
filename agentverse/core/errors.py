"""Exception types raised by the orchestration core.

Execution failures are reported through result objects; only lookups of
missing entities, misconfiguration and batch-level parallel failures raise.
"""
from __future__ import annotations


class AgentVerseError(Exception):
    """Base class for orchestration errors."""


class AgentNotFoundError(AgentVerseError, KeyError):
    """Raised when an agent id is not present in a registry."""

    def __init__(self, agent_id: str, where: str = "registry") -> None:
        super().__init__(f"Agent {agent_id} not found in {where}")
        self.agent_id = agent_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class RoleNotRequiredError(AgentVerseError, ValueError):
    """Raised when an agent's role is missing or not needed by a department."""


class UserQueryCallbackMissingError(AgentVerseError, RuntimeError):
    """Raised when user input is requested before a callback is installed."""


class UserQueryTimeoutError(AgentVerseError, TimeoutError):
    """Raised when the human did not answer before the query deadline."""


class ModelNotRegisteredError(AgentVerseError, KeyError):
    def __init__(self, model_name: str) -> None:
        super().__init__(f"Model '{model_name}' not registered in LLM pool")
        self.model_name = model_name

    def __str__(self) -> str:
        return str(self.args[0])
