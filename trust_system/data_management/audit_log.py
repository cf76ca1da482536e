"""Append-only audit log.

Two instances exist in practice: ``auditLogs`` for moderation decisions and
``system_logs`` for retention deletions. Entries are only ever added.
"""

from typing import List, Optional

from trust_system.data_management.document_store import AUDIT_LOGS, DocumentStore
from trust_system.data_management.schemas import AuditLogEntry
from trust_system.utils.logging import get_structured_logger


class AuditLog:
    """Append-only collection of AuditLogEntry records."""

    def __init__(self, store: DocumentStore, collection: str = AUDIT_LOGS) -> None:
        self.store = store
        self.collection = collection
        self._logger = get_structured_logger("AuditLog", collection=collection)

    async def append(self, entry: AuditLogEntry) -> str:
        """Insert an entry. Returns the entry id."""
        entry_id = await self.store.add(
            self.collection,
            entry.model_dump(mode="json", by_alias=True),
            doc_id=entry.id,
        )
        self._logger.info(
            "audit_entry_written",
            entry_type=entry.type,
            subject_id=entry.subject_id,
            status=entry.status,
            actor=entry.actor,
        )
        return entry_id

    async def list_entries(
        self,
        entry_type: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> List[AuditLogEntry]:
        """List entries in write order, optionally filtered."""
        docs = await self.store.list_documents(self.collection)
        entries = [AuditLogEntry.model_validate(doc) for doc in docs]
        if entry_type is not None:
            entries = [e for e in entries if e.type == entry_type]
        if subject_id is not None:
            entries = [e for e in entries if e.subject_id == subject_id]
        return entries
