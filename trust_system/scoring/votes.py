"""Vote writes.

Every create, change or removal of a vote recomputes the event's scores under
the same per-event transaction as the vote write itself.
"""

from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from trust_system.data_management.event_store import EventStore
from trust_system.data_management.schemas import Vote
from trust_system.scoring.aggregator import ScoreAggregator, ScoreUpdate

VALID_VOTE_VALUES = (-1, 0, 1)


class EventNotFoundError(LookupError):
    """Raised when a vote targets an event that does not exist."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class VoteService:
    """
    User-facing vote operations.

    Usage:
        service = VoteService(event_store, aggregator)
        update = await service.cast_vote(event_id, "user-1", 1, role="journalist")
    """

    def __init__(self, events: EventStore, aggregator: Optional[ScoreAggregator] = None):
        self.events = events
        self.aggregator = aggregator or ScoreAggregator(events)
        self.logger = logger.bind(component="VoteService")

    async def cast_vote(
        self,
        event_id: str,
        user_id: str,
        value: int,
        role: str = "user",
    ) -> ScoreUpdate:
        """
        Create or replace a user's vote and recompute the event's scores.

        Raises:
            ValueError: value not in {-1, 0, 1}
            EventNotFoundError: event does not exist
        """
        if value not in VALID_VOTE_VALUES:
            raise ValueError(f"Vote value must be one of {VALID_VOTE_VALUES}, got {value!r}")

        async with self.events.transaction(event_id):
            if await self.events.get(event_id) is None:
                raise EventNotFoundError(event_id)

            vote = Vote(
                event_id=event_id,
                user_id=user_id,
                value=value,
                role=role,
                updated_at=datetime.now(timezone.utc),
            )
            await self.events.put_vote(vote)
            self.logger.debug("Vote stored", event_id=event_id, user_id=user_id, value=value)
            return await self.aggregator.recompute_locked(event_id)

    async def remove_vote(self, event_id: str, user_id: str) -> Optional[ScoreUpdate]:
        """
        Remove a user's vote and recompute.

        Returns:
            ScoreUpdate, or None if the event no longer exists.
        """
        async with self.events.transaction(event_id):
            removed = await self.events.delete_vote(event_id, user_id)
            if removed:
                self.logger.debug("Vote removed", event_id=event_id, user_id=user_id)
            return await self.aggregator.recompute_locked(event_id)
