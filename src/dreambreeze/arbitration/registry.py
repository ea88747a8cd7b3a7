"""Agent registry — decouples the controller from concrete agents.

The controller runs whatever is registered, in registration order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RegisteredAgent:
    """An agent id bound to its zero-argument ``run`` callable."""

    id: str
    run: Callable[[], None]


class AgentRegistry:
    """Ordered collection of agents, unique by id."""

    def __init__(self, agents: list[RegisteredAgent] | None = None) -> None:
        self._agents: list[RegisteredAgent] = []
        for agent in agents or []:
            self.register(agent)

    def register(self, agent: RegisteredAgent) -> None:
        """Add *agent*, replacing any agent already registered under its id."""
        self._agents = [a for a in self._agents if a.id != agent.id]
        self._agents.append(agent)
        logger.debug("agent_registry.registered", agent=agent.id)

    def unregister(self, agent_id: str) -> bool:
        before = len(self._agents)
        self._agents = [a for a in self._agents if a.id != agent_id]
        return len(self._agents) < before

    def get_all(self) -> tuple[RegisteredAgent, ...]:
        return tuple(self._agents)

    def clear(self) -> None:
        self._agents = []

    def __len__(self) -> int:
        return len(self._agents)
