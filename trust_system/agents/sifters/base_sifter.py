"""Base class for stages that turn collected material into claims.

- ClaimExtractionAgent: candidates -> claims
- CrossChecker: claims -> status-labelled claims
"""

from abc import abstractmethod

from trust_system.agents.base_agent import BaseAgent


class BaseSifter(BaseAgent):
    """
    ``process()`` unwraps ``input_data["content"]`` and hands it to ``sift()``.

    A failing ``sift()`` is reported as ``success=False`` rather than raised,
    and counted in ``error_count``.
    """

    def __init__(self, name: str, description: str = ""):
        super().__init__(name=name, description=description)
        self.processed_count = 0
        self.error_count = 0

    @abstractmethod
    async def sift(self, content: dict) -> list[dict]:
        """Transform a content dict into a list of camelCase claim dicts."""

    async def process(self, input_data: dict) -> dict:
        try:
            results = await self.sift(input_data.get("content", {}))
        except Exception as e:
            self.error_count += 1
            self.logger.error("Sift failed", error=str(e))
            return {"success": False, "error": str(e), "results": []}

        self.processed_count += 1
        return {"success": True, "results": results, "count": len(results)}

    def get_capabilities(self) -> list[str]:
        return ["claim_sifting"]

    def get_stats(self) -> dict:
        total = self.processed_count + self.error_count
        return {
            "processed_count": self.processed_count,
            "error_count": self.error_count,
            "error_rate": self.error_count / total if total else 0.0,
        }
