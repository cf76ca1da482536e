"""Score aggregator - the only writer of an event's score fields.

Every vote write triggers a full recompute from the event's current votes,
not an incremental delta. The read of the votes and the write of the scores
happen under the event's transaction lock, so two concurrent votes on the same
event cannot produce a lost update.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger

from trust_system.data_management.event_store import EventStore
from trust_system.scoring.formulas import community_score, final_score, tally_votes


@dataclass
class ScoreUpdate:
    """Result of one recompute."""

    event_id: str
    ai_score: float
    community_score: float
    final_score: float
    up: int = 0
    down: int = 0
    vote_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "ai_score": self.ai_score,
            "community_score": self.community_score,
            "final_score": self.final_score,
            "up": self.up,
            "down": self.down,
            "vote_count": self.vote_count,
        }


@dataclass
class RecomputeStats:
    """Summary of a full re-score sweep."""

    events_scanned: int = 0
    events_updated: int = 0
    errors: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events_scanned": self.events_scanned,
            "events_updated": self.events_updated,
            "errors": self.errors,
            "started_at": self.started_at.isoformat(),
        }


class ScoreAggregator:
    """
    Recomputes community and final scores for published events.

    Usage:
        aggregator = ScoreAggregator(event_store)
        update = await aggregator.recompute(event_id)

    ``recompute`` takes the event transaction itself. Callers that already
    hold it (the vote service, revisions) use ``recompute_locked`` /
    ``apply_automated_score_locked``.
    """

    def __init__(self, events: EventStore):
        self.events = events
        self.logger = logger.bind(component="ScoreAggregator")

    async def recompute(self, event_id: str) -> Optional[ScoreUpdate]:
        """
        Recompute scores from all current votes.

        Returns:
            ScoreUpdate, or None if the event no longer exists.
        """
        async with self.events.transaction(event_id):
            return await self.recompute_locked(event_id)

    async def recompute_locked(self, event_id: str) -> Optional[ScoreUpdate]:
        event = await self.events.get(event_id)
        if event is None:
            self.logger.debug("Recompute skipped, event gone", event_id=event_id)
            return None

        votes = await self.events.list_votes(event_id)
        up, down = tally_votes(votes)
        community = community_score(votes)
        final = final_score(event.ai_score, community)

        await self.events.update_fields(
            event_id,
            {"communityScore": community, "finalScore": final},
        )

        update = ScoreUpdate(
            event_id=event_id,
            ai_score=event.ai_score,
            community_score=community,
            final_score=final,
            up=up,
            down=down,
            vote_count=len(votes),
        )
        self.logger.info(
            f"Scores recomputed: community={community:.3f} final={final:.3f}",
            event_id=event_id,
            votes=len(votes),
        )
        return update

    async def apply_automated_score(
        self, event_id: str, ai_score: float
    ) -> Optional[ScoreUpdate]:
        """Replace the automated score and re-blend with the current community score."""
        async with self.events.transaction(event_id):
            return await self.apply_automated_score_locked(event_id, ai_score)

    async def apply_automated_score_locked(
        self, event_id: str, ai_score: float
    ) -> Optional[ScoreUpdate]:
        event = await self.events.get(event_id)
        if event is None:
            return None

        final = final_score(ai_score, event.community_score)
        await self.events.update_fields(
            event_id,
            {"aiScore": ai_score, "finalScore": final},
        )
        self.logger.info(
            f"Automated score applied: ai={ai_score:.3f} final={final:.3f}",
            event_id=event_id,
        )
        return ScoreUpdate(
            event_id=event_id,
            ai_score=ai_score,
            community_score=event.community_score,
            final_score=final,
        )

    async def recompute_all(self) -> RecomputeStats:
        """Re-score every published event. Per-event errors are counted and skipped."""
        stats = RecomputeStats()
        for event in await self.events.list_events():
            stats.events_scanned += 1
            try:
                if await self.recompute(event.id) is not None:
                    stats.events_updated += 1
            except Exception as e:
                stats.errors += 1
                self.logger.error("Recompute failed", event_id=event.id, error=str(e))

        self.logger.info("Re-score sweep complete", **stats.to_dict())
        return stats
