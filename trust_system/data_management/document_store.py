"""Transactional document store with collection-based organization.

Features:
- In-memory storage with optional JSON persistence
- Collections of JSON documents keyed by document id
- Sub-collections addressed by path (``events/{id}/votes``)
- Atomic insert-if-absent for de-duplicated submissions
- Per-document transaction locks for read-modify-write sequences
- Ordered append-only logs keyed by subject id (versions)

For production this would be replaced by a database backend offering the
same primitives (transactions scoped to one document, conditional create).
"""

import asyncio
import copy
import json
import uuid
import weakref
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

from loguru import logger

# Collection names
PENDING_EVENTS = "pendingEvents"
EVENTS = "events"
AUDIT_LOGS = "auditLogs"
SYSTEM_LOGS = "system_logs"
EVENT_VERSIONS = "eventVersions"


def votes_collection(event_id: str) -> str:
    """Path of the votes sub-collection of an event."""
    return f"{EVENTS}/{event_id}/votes"


class DocumentStore:
    """
    Generic async document store.

    Data structure:
    {
        "collections": {
            "events": {"doc_id": {...}, ...},
            "events/<id>/votes": {"user_id": {...}, ...},
            ...
        },
        "logs": {
            "eventVersions": {"event_id": [{...}, {...}], ...}
        }
    }

    Documents are stored and returned as deep copies, so callers never hold a
    reference into the store. Every stored document carries its id under "id".

    The store-wide lock guards structural access and is held only for the
    duration of one primitive. ``transaction()`` hands out a separate lock per
    (collection, doc_id) that callers hold across a whole read-modify-write.
    """

    def __init__(self, persistence_path: Optional[str] = None):
        """
        Initialize document store.

        Args:
            persistence_path: Optional path to JSON file for persistence.
                            If None, storage is memory-only.
        """
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._logs: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
        # Entries vanish once no transaction holds or awaits the lock
        self._doc_locks: "weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

        self._lock = asyncio.Lock()
        self.persistence_path = Path(persistence_path) if persistence_path else None
        self.logger = logger.bind(component="DocumentStore")

        if self.persistence_path and self.persistence_path.exists():
            self._load_from_file()

        self.logger.info(
            "DocumentStore initialized",
            persistence_enabled=self.persistence_path is not None,
        )

    @asynccontextmanager
    async def transaction(self, collection: str, doc_id: str) -> AsyncIterator[None]:
        """
        Serialize read-modify-write sequences on a single document.

        Concurrent transactions on the same (collection, doc_id) run one after
        the other; transactions on different documents do not block each other.

        Example:
            async with store.transaction("events", event_id):
                event = await store.get("events", event_id)
                await store.update("events", event_id, {...})
        """
        key = (collection, doc_id)
        lock = self._doc_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._doc_locks[key] = lock
        async with lock:
            yield

    async def add(
        self,
        collection: str,
        data: Dict[str, Any],
        doc_id: Optional[str] = None,
    ) -> str:
        """
        Add a document, generating an id when none is given.

        Overwrites an existing document with the same id.

        Returns:
            The document id.
        """
        doc_id = doc_id or data.get("id") or str(uuid.uuid4())
        async with self._lock:
            docs = self._collections.setdefault(collection, {})
            docs[doc_id] = {**copy.deepcopy(data), "id": doc_id}
            self._persist()
        self.logger.debug(f"Added document {collection}/{doc_id}")
        return doc_id

    async def insert_if_absent(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
    ) -> bool:
        """
        Create a document only if no document with this id exists.

        The existence check and the write happen under one lock acquisition,
        so two concurrent inserts with the same id cannot both succeed.

        Returns:
            True if the document was created, False if it already existed.
        """
        async with self._lock:
            docs = self._collections.setdefault(collection, {})
            if doc_id in docs:
                return False
            docs[doc_id] = {**copy.deepcopy(data), "id": doc_id}
            self._persist()
            return True

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a document by id, or None."""
        async with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    async def exists(self, collection: str, doc_id: str) -> bool:
        async with self._lock:
            return doc_id in self._collections.get(collection, {})

    async def update(
        self,
        collection: str,
        doc_id: str,
        changes: Dict[str, Any],
    ) -> bool:
        """
        Merge ``changes`` into an existing document.

        Returns:
            True if updated, False if the document does not exist.
        """
        async with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                return False
            doc.update(copy.deepcopy(changes))
            doc["id"] = doc_id
            self._persist()
            return True

    async def delete(self, collection: str, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if deleted, False if not found.
        """
        async with self._lock:
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                return False
            del docs[doc_id]
            self._persist()
            return True

    async def delete_collection(self, collection: str) -> int:
        """Delete every document of a collection. Returns the number removed."""
        async with self._lock:
            docs = self._collections.pop(collection, {})
            if docs:
                self._persist()
            return len(docs)

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        """Return all documents of a collection in insertion order."""
        async with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collections.get(collection, {}).values()
            ]

    async def count(self, collection: str) -> int:
        async with self._lock:
            return len(self._collections.get(collection, {}))

    async def append_log(
        self,
        log: str,
        subject_id: str,
        entry: Dict[str, Any],
    ) -> int:
        """
        Append an entry to the ordered log of a subject.

        Returns:
            Zero-based index of the appended entry.
        """
        async with self._lock:
            entries = self._logs.setdefault(log, {}).setdefault(subject_id, [])
            entries.append(copy.deepcopy(entry))
            self._persist()
            return len(entries) - 1

    async def read_log(self, log: str, subject_id: str) -> List[Dict[str, Any]]:
        """Return a subject's log entries in insertion order."""
        async with self._lock:
            return copy.deepcopy(self._logs.get(log, {}).get(subject_id, []))

    async def get_storage_stats(self) -> Dict[str, Any]:
        """
        Get overall storage statistics.

        Returns:
            Dictionary with per-collection document counts and log sizes
        """
        async with self._lock:
            return {
                "collections": {
                    name: len(docs) for name, docs in self._collections.items()
                },
                "logs": {
                    name: sum(len(entries) for entries in subjects.values())
                    for name, subjects in self._logs.items()
                },
                "persistence_enabled": self.persistence_path is not None,
                "persistence_path": str(self.persistence_path) if self.persistence_path else None,
            }

    def _persist(self) -> None:
        if self.persistence_path:
            self._save_to_file()

    def _save_to_file(self) -> None:
        """Save current storage to JSON file (synchronous)."""
        if not self.persistence_path:
            return

        try:
            self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
            data = {"collections": self._collections, "logs": self._logs}
            with open(self.persistence_path, "w") as f:
                json.dump(data, f, indent=2, default=str)

            self.logger.debug(f"Persisted to {self.persistence_path}")

        except Exception as e:
            self.logger.error("Failed to persist to file", path=str(self.persistence_path), error=str(e))

    def _load_from_file(self) -> None:
        """Load storage from JSON file (synchronous)."""
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            with open(self.persistence_path, "r") as f:
                data = json.load(f)

            self._collections = data.get("collections", {})
            self._logs = data.get("logs", {})

            self.logger.info(
                "Loaded store from file",
                path=str(self.persistence_path),
                collections=len(self._collections),
            )

        except Exception as e:
            self.logger.error("Failed to load from file", path=str(self.persistence_path), error=str(e))
            self._collections = {}
            self._logs = {}
