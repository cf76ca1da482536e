"""Pending record storage on top of the document store.

Pending records are keyed by their submission key, so creating one is a single
insert-if-absent: a duplicate submission (same normalized title and source set)
racing with the original can never produce a second record.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

from loguru import logger

from trust_system.data_management.document_store import PENDING_EVENTS, DocumentStore
from trust_system.data_management.schemas import ClaimStatus, PendingRecord


class PendingStore:
    """Repository for the ``pendingEvents`` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.logger = logger.bind(component="PendingStore")

    async def create(self, record: PendingRecord) -> bool:
        """
        Persist a new pending record unless an identical submission exists.

        Returns:
            True if created, False if a record with the same key already exists.
        """
        created = await self.store.insert_if_absent(
            PENDING_EVENTS,
            record.id,
            record.model_dump(mode="json", by_alias=True),
        )
        if not created:
            self.logger.debug(
                "Duplicate submission skipped",
                pending_id=record.id,
                title=record.title[:80],
            )
        return created

    async def get(self, pending_id: str) -> Optional[PendingRecord]:
        doc = await self.store.get(PENDING_EVENTS, pending_id)
        return PendingRecord.model_validate(doc) if doc else None

    async def list_records(
        self, status: Optional[ClaimStatus] = None
    ) -> List[PendingRecord]:
        """List pending records, optionally filtered by moderation status."""
        docs = await self.store.list_documents(PENDING_EVENTS)
        records = [PendingRecord.model_validate(doc) for doc in docs]
        if status is not None:
            records = [r for r in records if r.status == status]
        return records

    @asynccontextmanager
    async def transaction(self, pending_id: str) -> AsyncIterator[None]:
        """Per-record lock held across a whole moderation."""
        async with self.store.transaction(PENDING_EVENTS, pending_id):
            yield

    async def mark_moderated(self, pending_id: str, status: ClaimStatus) -> bool:
        """
        Apply the single moderation transition to a record.

        Callers must hold the record transaction.

        Returns:
            True if the transition was applied, False if the record does not
            exist or was already moderated.
        """
        doc = await self.store.get(PENDING_EVENTS, pending_id)
        if doc is None or doc.get("moderatedAt"):
            return False
        return await self.store.update(
            PENDING_EVENTS,
            pending_id,
            {
                "status": status.value,
                "moderatedAt": datetime.now(timezone.utc).isoformat(),
            },
        )
