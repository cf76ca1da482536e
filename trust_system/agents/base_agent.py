"""Common base for the pipeline stages that run as agents (collector, sifters)."""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from loguru import logger


class BaseAgent(ABC):
    """
    One stage of the claim pipeline.

    Each instance gets an id and a loguru logger bound with that id and the
    stage name, so log lines from concurrent stages can be told apart.
    Subclasses implement ``process()`` (dict in, dict out with a ``success``
    key) and ``get_capabilities()``.

    Attributes:
        agent_id: UUID of this instance
        name: Stage name, also used as the log ``component``
        description: Short human-readable purpose
        created_at: UTC construction time
    """

    def __init__(self, name: str, description: str = ""):
        self.agent_id = str(uuid.uuid4())
        self.name = name
        self.description = description
        self.created_at = datetime.now(timezone.utc)
        self.logger = logger.bind(component=name, agent_id=self.agent_id)
        self.logger.debug("Stage created")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    @abstractmethod
    async def process(self, input_data: dict) -> dict:
        """Run the stage on a dict payload and return a result dict."""

    @abstractmethod
    def get_capabilities(self) -> list[str]:
        """Capability tags advertised by the stage."""

    def describe(self) -> dict:
        return {
            "agent_id": self.agent_id,
            "name": self.name,
            "description": self.description,
            "capabilities": self.get_capabilities(),
            "created_at": self.created_at.isoformat(),
        }
