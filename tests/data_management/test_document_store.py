"""Tests for DocumentStore.

Tests cover:
1. Add / get / update / delete documents
2. Atomic insert-if-absent under concurrency
3. Per-document transaction serialization
4. Ordered logs
5. Sub-collection deletion
6. Persistence (save/load cycle)
"""

import asyncio
import gc
import tempfile
from pathlib import Path

import pytest

from trust_system.data_management.document_store import (
    EVENT_VERSIONS,
    EVENTS,
    DocumentStore,
    votes_collection,
)


class TestDocumentStoreBasics:
    """Tests for basic document operations."""

    @pytest.fixture
    def store(self):
        return DocumentStore()

    @pytest.mark.asyncio
    async def test_add_and_get(self, store):
        doc_id = await store.add(EVENTS, {"title": "Quake"}, doc_id="e-1")
        doc = await store.get(EVENTS, "e-1")

        assert doc_id == "e-1"
        assert doc == {"title": "Quake", "id": "e-1"}

    @pytest.mark.asyncio
    async def test_add_generates_id(self, store):
        doc_id = await store.add(EVENTS, {"title": "Quake"})
        assert doc_id
        assert await store.exists(EVENTS, doc_id)

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, store):
        await store.add(EVENTS, {"sources": ["a"]}, doc_id="e-1")
        doc = await store.get(EVENTS, "e-1")
        doc["sources"].append("b")

        stored = await store.get(EVENTS, "e-1")
        assert stored["sources"] == ["a"]

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get(EVENTS, "nope") is None

    @pytest.mark.asyncio
    async def test_update_merges(self, store):
        await store.add(EVENTS, {"title": "Quake", "finalScore": 0.5}, doc_id="e-1")
        updated = await store.update(EVENTS, "e-1", {"finalScore": 0.9})

        doc = await store.get(EVENTS, "e-1")
        assert updated is True
        assert doc["title"] == "Quake"
        assert doc["finalScore"] == 0.9

    @pytest.mark.asyncio
    async def test_update_missing_returns_false(self, store):
        assert await store.update(EVENTS, "nope", {"x": 1}) is False

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.add(EVENTS, {"title": "Quake"}, doc_id="e-1")

        assert await store.delete(EVENTS, "e-1") is True
        assert await store.delete(EVENTS, "e-1") is False
        assert await store.count(EVENTS) == 0

    @pytest.mark.asyncio
    async def test_list_documents_in_insertion_order(self, store):
        for i in range(3):
            await store.add(EVENTS, {"n": i}, doc_id=f"e-{i}")

        docs = await store.list_documents(EVENTS)
        assert [d["n"] for d in docs] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_delete_collection(self, store):
        coll = votes_collection("e-1")
        await store.add(coll, {"value": 1}, doc_id="u-1")
        await store.add(coll, {"value": -1}, doc_id="u-2")

        removed = await store.delete_collection(coll)
        assert removed == 2
        assert await store.list_documents(coll) == []


class TestInsertIfAbsent:
    """Tests for conditional create."""

    @pytest.fixture
    def store(self):
        return DocumentStore()

    @pytest.mark.asyncio
    async def test_second_insert_refused(self, store):
        first = await store.insert_if_absent("pendingEvents", "k1", {"title": "A"})
        second = await store.insert_if_absent("pendingEvents", "k1", {"title": "B"})

        assert first is True
        assert second is False
        doc = await store.get("pendingEvents", "k1")
        assert doc["title"] == "A"

    @pytest.mark.asyncio
    async def test_concurrent_inserts_one_wins(self, store):
        results = await asyncio.gather(
            *[store.insert_if_absent("pendingEvents", "k1", {"n": i}) for i in range(10)]
        )
        assert results.count(True) == 1
        assert await store.count("pendingEvents") == 1


class TestTransactions:
    """Tests for per-document transaction locks."""

    @pytest.fixture
    def store(self):
        return DocumentStore()

    @pytest.mark.asyncio
    async def test_read_modify_write_is_serialized(self, store):
        await store.add(EVENTS, {"counter": 0}, doc_id="e-1")

        async def increment():
            async with store.transaction(EVENTS, "e-1"):
                doc = await store.get(EVENTS, "e-1")
                await asyncio.sleep(0)
                await store.update(EVENTS, "e-1", {"counter": doc["counter"] + 1})

        await asyncio.gather(*[increment() for _ in range(20)])

        doc = await store.get(EVENTS, "e-1")
        assert doc["counter"] == 20

    @pytest.mark.asyncio
    async def test_different_documents_do_not_block(self, store):
        order = []

        async def hold(doc_id, delay):
            async with store.transaction(EVENTS, doc_id):
                await asyncio.sleep(delay)
                order.append(doc_id)

        await asyncio.gather(hold("slow", 0.05), hold("fast", 0.0))
        assert order == ["fast", "slow"]

    @pytest.mark.asyncio
    async def test_locks_released_after_use(self, store):
        async def touch(doc_id):
            async with store.transaction(EVENTS, doc_id):
                await asyncio.sleep(0)

        await asyncio.gather(*[touch(f"e-{i % 3}") for i in range(9)])
        gc.collect()

        assert len(store._doc_locks) == 0


class TestLogs:
    """Tests for ordered per-subject logs."""

    @pytest.mark.asyncio
    async def test_append_returns_index_and_preserves_order(self):
        store = DocumentStore()

        first = await store.append_log(EVENT_VERSIONS, "e-1", {"title": "v0"})
        second = await store.append_log(EVENT_VERSIONS, "e-1", {"title": "v1"})
        await store.append_log(EVENT_VERSIONS, "e-2", {"title": "other"})

        entries = await store.read_log(EVENT_VERSIONS, "e-1")
        assert (first, second) == (0, 1)
        assert [e["title"] for e in entries] == ["v0", "v1"]

    @pytest.mark.asyncio
    async def test_read_missing_log_is_empty(self):
        store = DocumentStore()
        assert await store.read_log(EVENT_VERSIONS, "nope") == []


class TestPersistence:
    """Tests for JSON file persistence."""

    @pytest.mark.asyncio
    async def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "store.json"

            store = DocumentStore(persistence_path=str(path))
            await store.add(EVENTS, {"title": "Quake"}, doc_id="e-1")
            await store.append_log(EVENT_VERSIONS, "e-1", {"title": "v0"})
            assert path.exists()

            reloaded = DocumentStore(persistence_path=str(path))
            assert (await reloaded.get(EVENTS, "e-1"))["title"] == "Quake"
            assert len(await reloaded.read_log(EVENT_VERSIONS, "e-1")) == 1

    @pytest.mark.asyncio
    async def test_storage_stats(self):
        store = DocumentStore()
        await store.add(EVENTS, {"title": "Quake"}, doc_id="e-1")
        await store.append_log(EVENT_VERSIONS, "e-1", {"title": "v0"})

        stats = await store.get_storage_stats()
        assert stats["collections"][EVENTS] == 1
        assert stats["logs"][EVENT_VERSIONS] == 1
        assert stats["persistence_enabled"] is False
