"""Published event storage: events, their votes and their version logs.

Usage:
    from trust_system.data_management.event_store import EventStore

    events = EventStore(DocumentStore())
    await events.create(event, first_version)
    async with events.transaction(event.id):
        current = await events.get(event.id)
        ...
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from loguru import logger

from trust_system.data_management.document_store import (
    EVENT_VERSIONS,
    EVENTS,
    DocumentStore,
    votes_collection,
)
from trust_system.data_management.schemas import Event, Version, Vote


class EventStore:
    """
    Repository for the ``events`` collection and its satellites.

    - ``events``: one document per published event
    - ``events/{id}/votes``: one document per voting user (doc id = user id)
    - ``eventVersions``: ordered log of Version entries per event
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self.logger = logger.bind(component="EventStore")

    @asynccontextmanager
    async def transaction(self, event_id: str) -> AsyncIterator[None]:
        """Per-event lock for read-modify-write on the event document."""
        async with self.store.transaction(EVENTS, event_id):
            yield

    async def create(self, event: Event, version: Version) -> Event:
        """Persist a new event with its first version."""
        version.event_id = event.id
        version.index = 0
        event.version_count = 1
        await self.store.add(EVENTS, event.model_dump(mode="json", by_alias=True), doc_id=event.id)
        await self.store.append_log(
            EVENT_VERSIONS, event.id, version.model_dump(mode="json", by_alias=True)
        )
        self.logger.info("Event created", event_id=event.id, title=event.title[:80])
        return event

    async def get(self, event_id: str) -> Optional[Event]:
        doc = await self.store.get(EVENTS, event_id)
        return Event.model_validate(doc) if doc else None

    async def list_events(self) -> List[Event]:
        docs = await self.store.list_documents(EVENTS)
        return [Event.model_validate(doc) for doc in docs]

    async def update_fields(self, event_id: str, changes: Dict[str, Any]) -> bool:
        """Merge already-serialized (camelCase) field changes into an event."""
        return await self.store.update(EVENTS, event_id, changes)

    async def append_version(self, event_id: str, version: Version) -> int:
        """
        Append a version to the event's log and bump ``versionCount``.

        Callers must hold the event transaction.

        Returns:
            Index of the new version.
        """
        existing = await self.store.read_log(EVENT_VERSIONS, event_id)
        version.event_id = event_id
        version.index = len(existing)
        index = await self.store.append_log(
            EVENT_VERSIONS, event_id, version.model_dump(mode="json", by_alias=True)
        )
        await self.store.update(EVENTS, event_id, {"versionCount": index + 1})
        return index

    async def get_versions(self, event_id: str) -> List[Version]:
        """Return the event's versions in insertion order."""
        entries = await self.store.read_log(EVENT_VERSIONS, event_id)
        return [Version.model_validate(entry) for entry in entries]

    async def delete(self, event_id: str) -> bool:
        """
        Delete an event and its votes.

        The version log is kept as provenance.
        """
        deleted = await self.store.delete(EVENTS, event_id)
        if deleted:
            removed_votes = await self.store.delete_collection(votes_collection(event_id))
            self.logger.info(
                "Event deleted",
                event_id=event_id,
                votes_removed=removed_votes,
            )
        return deleted

    async def put_vote(self, vote: Vote) -> None:
        """Create or replace a user's vote (last write wins)."""
        await self.store.add(
            votes_collection(vote.event_id),
            vote.model_dump(mode="json", by_alias=True),
            doc_id=vote.user_id,
        )

    async def delete_vote(self, event_id: str, user_id: str) -> bool:
        return await self.store.delete(votes_collection(event_id), user_id)

    async def list_votes(self, event_id: str) -> List[Vote]:
        docs = await self.store.list_documents(votes_collection(event_id))
        return [Vote.model_validate(doc) for doc in docs]
