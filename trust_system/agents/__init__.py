"""Pipeline agents: crawlers acquire candidates, sifters turn them into claims."""

from trust_system.agents.base_agent import BaseAgent

__all__ = ["BaseAgent"]
