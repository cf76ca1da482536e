"""Tests for RetentionManager.

Tests cover:
1. Young low-credibility events flagged but kept
2. Old low-credibility events deleted with one system log entry
3. Failed fact-checks flagged regardless of score
4. Healthy events untouched
5. Age measured from the most recent activity
6. Per-event error isolation
"""

from datetime import datetime, timedelta, timezone

import pytest

from trust_system.data_management import AuditLog, DocumentStore, EventStore
from trust_system.data_management.document_store import SYSTEM_LOGS
from trust_system.data_management.schemas import AUDIT_TYPE_EVENT_DELETED, Event, Version, Vote
from trust_system.retention import RETENTION_ACTOR, RetentionManager

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class BrokenEventStore(EventStore):
    """Fails reads of one event id."""

    def __init__(self, store, broken_id):
        super().__init__(store)
        self.broken_id = broken_id

    async def get(self, event_id):
        if event_id == self.broken_id:
            raise RuntimeError("storage unavailable")
        return await super().get(event_id)


async def add_event(events, final_score, age_days, **fields):
    event = Event(
        title=fields.pop("title", "Low trust story"),
        ai_score=0.4,
        final_score=final_score,
        created_at=NOW - timedelta(days=age_days),
        **fields,
    )
    await events.create(event, Version(event_id=event.id, title=event.title))
    return event


class TestRetention:
    """Tests for flagging and deletion."""

    @pytest.fixture
    def store(self):
        return DocumentStore()

    @pytest.fixture
    def events(self, store):
        return EventStore(store)

    @pytest.fixture
    def system_log(self, store):
        return AuditLog(store, SYSTEM_LOGS)

    @pytest.fixture
    def manager(self, events, system_log):
        return RetentionManager(events, system_log, threshold=40, retention_days=7)

    @pytest.mark.asyncio
    async def test_young_low_score_flagged_not_deleted(self, events, system_log, manager):
        event = await add_event(events, final_score=0.30, age_days=6.9)

        stats = await manager.run(now=NOW)

        stored = await events.get(event.id)
        assert stored.flagged is True
        assert stored.flagged_at is not None
        assert stats.flagged == 1
        assert stats.deleted == 0
        assert await system_log.list_entries() == []

    @pytest.mark.asyncio
    async def test_old_low_score_deleted_and_logged(self, events, system_log, manager):
        event = await add_event(events, final_score=0.30, age_days=7.1)

        stats = await manager.run(now=NOW)

        assert await events.get(event.id) is None
        assert stats.deleted == 1
        entries = await system_log.list_entries(entry_type=AUDIT_TYPE_EVENT_DELETED)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.subject_id == event.id
        assert entry.actor == RETENTION_ACTOR
        assert entry.details["credibilityScore"] == 30
        assert entry.details["ageInDays"] == 7.1
        assert entry.details["title"] == "Low trust story"

    @pytest.mark.asyncio
    async def test_failed_fact_check_flagged(self, events, manager):
        event = await add_event(events, final_score=0.9, age_days=1, verified=False)

        await manager.run(now=NOW)

        assert (await events.get(event.id)).flagged is True

    @pytest.mark.asyncio
    async def test_threshold_boundary_not_flagged(self, events, manager):
        event = await add_event(events, final_score=0.40, age_days=30)

        stats = await manager.run(now=NOW)

        stored = await events.get(event.id)
        assert stored is not None
        assert stored.flagged is False
        assert stats.flagged == 0
        assert stats.deleted == 0

    @pytest.mark.asyncio
    async def test_just_below_threshold_compared_unrounded(self, events, system_log, manager):
        event = await add_event(events, final_score=0.396, age_days=30)

        stats = await manager.run(now=NOW)

        assert await events.get(event.id) is None
        assert stats.deleted == 1
        entries = await system_log.list_entries(entry_type=AUDIT_TYPE_EVENT_DELETED)
        assert entries[0].details["credibilityScore"] == 40

    @pytest.mark.asyncio
    async def test_recent_update_resets_age(self, events, manager):
        event = await add_event(
            events,
            final_score=0.10,
            age_days=30,
            updated_at=NOW - timedelta(days=2),
        )

        stats = await manager.run(now=NOW)

        assert await events.get(event.id) is not None
        assert stats.flagged == 1

    @pytest.mark.asyncio
    async def test_second_run_keeps_first_flag_time(self, events, manager):
        event = await add_event(events, final_score=0.30, age_days=1)

        await manager.run(now=NOW)
        first = (await events.get(event.id)).flagged_at
        await manager.run(now=NOW + timedelta(hours=1))

        assert (await events.get(event.id)).flagged_at == first

    @pytest.mark.asyncio
    async def test_votes_removed_with_event(self, events, manager):
        event = await add_event(events, final_score=0.05, age_days=10)
        await events.put_vote(Vote(event_id=event.id, user_id="u1", value=-1))

        await manager.run(now=NOW)

        assert await events.list_votes(event.id) == []


class TestRetentionErrors:
    """Tests for per-event error isolation."""

    @pytest.mark.asyncio
    async def test_error_counted_scan_continues(self):
        store = DocumentStore()
        healthy = EventStore(store)
        bad = await add_event(healthy, final_score=0.1, age_days=10, title="Broken")
        good = await add_event(healthy, final_score=0.1, age_days=10, title="Deletable")

        events = BrokenEventStore(store, bad.id)
        manager = RetentionManager(events, AuditLog(store, SYSTEM_LOGS), threshold=40, retention_days=7)

        stats = await manager.run(now=NOW)

        assert stats.scanned == 2
        assert stats.errors == 1
        assert stats.deleted == 1
        assert await healthy.get(good.id) is None
