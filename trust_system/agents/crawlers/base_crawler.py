"""Base class for stages that pull raw material from news sources."""

from abc import abstractmethod
from typing import Any, Dict, Optional

from trust_system.agents.base_agent import BaseAgent


class BaseCrawler(BaseAgent):
    """
    A stage that reads from configured sources.

    ``source_configs`` maps a source key to its settings dict (see
    ``config/news_sources.py``). Parsing a fetched payload is left to the
    source adapters; crawlers only own the I/O.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        source_configs: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        super().__init__(name=name, description=description)
        self.source_configs = source_configs or {}

    @abstractmethod
    async def fetch_data(self, source: str, **kwargs) -> dict:
        """
        Fetch the raw payload of one source.

        Args:
            source: Key in ``source_configs``

        Returns:
            Dict with at least ``source`` and ``error`` (None on success)
        """

    def get_capabilities(self) -> list[str]:
        return ["source_fetching"]
