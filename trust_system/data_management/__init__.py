"""Data management package.

Provides the document store and typed repositories for:
- Pending records (PendingStore) - submissions awaiting moderation
- Events (EventStore) - published events, their votes and version logs
- Audit entries (AuditLog) - append-only moderation/retention trail
"""

from trust_system.data_management.audit_log import AuditLog
from trust_system.data_management.document_store import DocumentStore
from trust_system.data_management.event_store import EventStore
from trust_system.data_management.pending_store import PendingStore

__all__ = [
    "AuditLog",
    "DocumentStore",
    "EventStore",
    "PendingStore",
]
