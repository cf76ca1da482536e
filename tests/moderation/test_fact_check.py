"""Tests for FactChecker.

Tests cover:
1. Verdicts written with enrichedAt under the event transaction
2. Negative verdicts picked up by retention
3. Unconfigured service leaves events unchecked
4. Sweep skips events that already carry a verdict
5. Per-event service errors counted
"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from trust_system.data_management import AuditLog, DocumentStore, EventStore
from trust_system.data_management.document_store import SYSTEM_LOGS
from trust_system.data_management.schemas import AUDIT_TYPE_EVENT_DELETED, Event, Version
from trust_system.llm import ClassificationServiceClient
from trust_system.moderation import FactChecker
from trust_system.retention import RetentionManager
from trust_system.scoring import EventNotFoundError

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def service_client(handler):
    return ClassificationServiceClient(
        "https://factcheck.example/v1",
        "key",
        max_retries=1,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        name="fact_check",
    )


def verdict_handler(verified, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(200, json={"verified": verified, "summary": "checked"})

    return handler


async def add_event(events, title="Bridge collapses", age_days=30, **fields):
    event = Event(
        title=title,
        description="A bridge collapsed during rush hour.",
        sources=["https://a.example/1", "https://b.example/2"],
        ai_score=0.9,
        final_score=0.63,
        created_at=NOW - timedelta(days=age_days),
        **fields,
    )
    await events.create(event, Version(event_id=event.id, title=event.title))
    return event


class TestCheck:
    """Tests for single-event fact-checks."""

    @pytest.fixture
    def events(self):
        return EventStore(DocumentStore())

    @pytest.mark.asyncio
    async def test_negative_verdict_recorded(self, events):
        seen = []
        checker = FactChecker(events, client=service_client(verdict_handler(False, seen)))
        event = await add_event(events)

        verdict = await checker.check(event.id)

        assert verdict.verified is False
        stored = await events.get(event.id)
        assert stored.verified is False
        assert stored.enriched_at is not None
        assert seen[0]["title"] == "Bridge collapses"
        assert seen[0]["eventId"] == event.id

    @pytest.mark.asyncio
    async def test_unconfigured_service_leaves_event_unchecked(self, events):
        checker = FactChecker(events, client=ClassificationServiceClient(None, None))
        event = await add_event(events)

        assert await checker.check(event.id) is None
        assert (await events.get(event.id)).verified is None

    @pytest.mark.asyncio
    async def test_missing_event_raises(self, events):
        checker = FactChecker(events, client=service_client(verdict_handler(True)))

        with pytest.raises(EventNotFoundError):
            await checker.check("gone")

    @pytest.mark.asyncio
    async def test_record_verdict_on_deleted_event(self, events):
        checker = FactChecker(events, client=ClassificationServiceClient(None, None))

        assert await checker.record_verdict("gone", False) is False


class TestVerdictFeedsRetention:
    """Tests for the fact-check to retention hand-off."""

    @pytest.fixture
    def store(self):
        return DocumentStore()

    @pytest.fixture
    def events(self, store):
        return EventStore(store)

    @pytest.fixture
    def manager(self, store, events):
        return RetentionManager(events, AuditLog(store, SYSTEM_LOGS), threshold=40, retention_days=7)

    @pytest.mark.asyncio
    async def test_fresh_failed_check_flagged(self, events, manager):
        checker = FactChecker(events, client=service_client(verdict_handler(False)))
        event = await add_event(events)
        await checker.check(event.id)

        stats = await manager.run(now=datetime.now(timezone.utc))

        stored = await events.get(event.id)
        assert stored is not None
        assert stored.flagged is True
        assert stats.flagged == 1

    @pytest.mark.asyncio
    async def test_stale_failed_check_deleted(self, store, events, manager):
        checker = FactChecker(events, client=ClassificationServiceClient(None, None))
        event = await add_event(events)
        await checker.record_verdict(event.id, False, now=NOW - timedelta(days=10))

        stats = await manager.run(now=NOW)

        assert stats.deleted == 1
        assert await events.get(event.id) is None
        entries = await AuditLog(store, SYSTEM_LOGS).list_entries(
            entry_type=AUDIT_TYPE_EVENT_DELETED
        )
        assert entries[0].reason.startswith("Failed fact-check")

    @pytest.mark.asyncio
    async def test_passed_check_untouched(self, events, manager):
        checker = FactChecker(events, client=service_client(verdict_handler(True)))
        event = await add_event(events)
        await checker.check(event.id)

        stats = await manager.run(now=datetime.now(timezone.utc))

        assert (await events.get(event.id)).flagged is False
        assert stats.flagged == 0


class TestCheckUnverified:
    """Tests for the sweep over unchecked events."""

    @pytest.mark.asyncio
    async def test_sweep_counts_and_skips_checked(self):
        events = EventStore(DocumentStore())
        seen = []
        checker = FactChecker(events, client=service_client(verdict_handler(True, seen)))
        await add_event(events, title="Unchecked")
        await add_event(events, title="Already checked", verified=False)

        stats = await checker.check_unverified()

        assert stats.scanned == 1
        assert stats.passed == 1
        assert [body["title"] for body in seen] == ["Unchecked"]

    @pytest.mark.asyncio
    async def test_service_error_counted(self):
        def handler(request):
            return httpx.Response(400, json={"error": "bad request"})

        events = EventStore(DocumentStore())
        checker = FactChecker(events, client=service_client(handler))
        event = await add_event(events)

        stats = await checker.check_unverified()

        assert stats.errors == 1
        assert (await events.get(event.id)).verified is None

    @pytest.mark.asyncio
    async def test_unconfigured_sweep_skips(self):
        events = EventStore(DocumentStore())
        checker = FactChecker(events, client=ClassificationServiceClient(None, None))
        await add_event(events)

        stats = await checker.check_unverified()

        assert stats.skipped == 1
        assert stats.errors == 0
