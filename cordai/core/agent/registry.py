from typing import Dict, List, Optional

from .base import Agent


class AgentRegistry:
    """Resolves agents by logical name."""

    def __init__(self) -> None:
        self._agents: Dict[str, Agent] = {}

    def register(self, key: str, agent: Agent) -> None:
        self._agents[key] = agent

    def get(self, key: str) -> Optional[Agent]:
        return self._agents.get(key)

    def names(self) -> List[str]:
        return list(self._agents)
