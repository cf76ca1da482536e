"""Fact-check verdicts for published events.

The fact-check service is asked about each event that has no verdict yet. The
verdict is written back as ``verified`` together with ``enrichedAt`` under the
event's transaction. A negative verdict is what the retention manager treats
as a failed fact-check.

When the service is not configured no verdict is recorded; events keep
``verified=None`` and are judged by score alone.

Usage:
    checker = FactChecker(event_store)
    stats = await checker.check_unverified()
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from trust_system.data_management.event_store import EventStore
from trust_system.data_management.schemas import FactCheckVerdict
from trust_system.llm.classification_client import ClassificationServiceClient
from trust_system.scoring.votes import EventNotFoundError
from trust_system.utils.logging import get_structured_logger


@dataclass
class FactCheckStats:
    """Counters for one fact-check sweep."""

    scanned: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.scanned,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": self.errors,
        }


class FactChecker:
    """
    Records fact-check verdicts on events.

    Attributes:
        events: Published event repository
        client: Fact-check service client
    """

    def __init__(
        self,
        events: EventStore,
        client: Optional[ClassificationServiceClient] = None,
    ) -> None:
        self.events = events
        self.client = client or ClassificationServiceClient.for_fact_check()
        self._logger = get_structured_logger("FactChecker", service=self.client.name)

    async def record_verdict(
        self,
        event_id: str,
        verified: bool,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Write a verdict onto an event.

        Returns:
            False when the event no longer exists.
        """
        now = now or datetime.now(timezone.utc)
        async with self.events.transaction(event_id):
            if await self.events.get(event_id) is None:
                return False
            await self.events.update_fields(
                event_id,
                {"verified": verified, "enrichedAt": now.isoformat()},
            )
        self._logger.info("fact_check_recorded", event_id=event_id, verified=verified)
        return True

    async def check(self, event_id: str) -> Optional[FactCheckVerdict]:
        """
        Fact-check one event and record the verdict.

        Returns:
            The verdict, or None when the service is not configured.

        Raises:
            EventNotFoundError: event does not exist
        """
        if not self.client.configured:
            self._logger.debug("fact_check_not_configured", event_id=event_id)
            return None

        event = await self.events.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        # The service call runs outside the event lock; votes may land meanwhile
        verdict = await self.client.fact_check(event)
        if not await self.record_verdict(event_id, verdict.verified):
            raise EventNotFoundError(event_id)
        return verdict

    async def check_unverified(self) -> FactCheckStats:
        """Fact-check every event without a verdict. Per-event errors are counted."""
        stats = FactCheckStats()
        for event in await self.events.list_events():
            if event.verified is not None:
                continue
            stats.scanned += 1
            try:
                verdict = await self.check(event.id)
            except Exception as e:
                stats.errors += 1
                self._logger.error("fact_check_failed", event_id=event.id, error=str(e))
                continue

            if verdict is None:
                stats.skipped += 1
            elif verdict.verified:
                stats.passed += 1
            else:
                stats.failed += 1

        self._logger.info("fact_check_sweep_complete", **stats.to_dict())
        return stats
