"""Retention manager: flags low-trust events and evicts stale ones.

An event is flagged when its fact-check verdict is explicitly negative
(verified is False) or its credibility score is below the threshold. The
credibility score is the 0-100 view of final_score:

    flagged iff final_score * 100 < threshold (unrounded)

The rounded credibility score is only reported in logs and audit details.

Age is measured from the first non-null of updated_at, enriched_at,
created_at. Flagged events at least ``retention_days`` old are deleted and the
deletion is written to ``system_logs``; younger flagged events are only
marked. Unflagged events are never touched.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger

from trust_system.config.settings import settings
from trust_system.data_management.audit_log import AuditLog
from trust_system.data_management.event_store import EventStore
from trust_system.data_management.schemas import AUDIT_TYPE_EVENT_DELETED, AuditLogEntry, Event
from trust_system.scoring.formulas import credibility_score

RETENTION_ACTOR = "cleanup-bot"
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class RetentionStats:
    """Summary of one retention scan.

    ``flagged`` counts flagged events that were kept (younger than the grace
    period); deleted events are counted only under ``deleted``.
    """

    scanned: int = 0
    flagged: int = 0
    deleted: int = 0
    errors: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.scanned,
            "flagged": self.flagged,
            "deleted": self.deleted,
            "errors": self.errors,
            "duration_seconds": round(self.duration_seconds, 3),
        }


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def age_in_days(event: Event, now: datetime) -> float:
    return (_as_utc(now) - _as_utc(event.last_activity)).total_seconds() / SECONDS_PER_DAY


class RetentionManager:
    """
    Periodic low-trust event eviction.

    Usage:
        manager = RetentionManager(event_store, AuditLog(store, SYSTEM_LOGS))
        stats = await manager.run()

    Attributes:
        threshold: Credibility score (0-100) below which events are flagged
        retention_days: Age at which a flagged event is deleted
    """

    def __init__(
        self,
        events: EventStore,
        system_log: AuditLog,
        threshold: Optional[int] = None,
        retention_days: Optional[float] = None,
    ):
        self.events = events
        self.system_log = system_log
        self.threshold = threshold if threshold is not None else settings.retention_threshold
        self.retention_days = (
            retention_days if retention_days is not None else settings.retention_days
        )
        self.logger = logger.bind(component="RetentionManager")

    def flag_reason(self, event: Event) -> Optional[str]:
        """Why an event is flagged, or None when it is not."""
        if event.verified is False:
            return f"Failed fact-check, not corrected after {self.retention_days:g} days"
        if event.final_score * 100 < self.threshold:
            return f"Low credibility, not corrected after {self.retention_days:g} days"
        return None

    async def run(self, now: Optional[datetime] = None) -> RetentionStats:
        """
        Scan every event once. Per-event errors are counted and skipped.

        Args:
            now: Reference time (default: current UTC time)
        """
        start = time.monotonic()
        now = now or datetime.now(timezone.utc)
        stats = RetentionStats()

        for event in await self.events.list_events():
            stats.scanned += 1
            try:
                await self._process(event.id, now, stats)
            except Exception as e:
                stats.errors += 1
                self.logger.error("Retention failed for event", event_id=event.id, error=str(e))

        stats.duration_seconds = time.monotonic() - start
        self.logger.info("Retention scan complete", **stats.to_dict())
        return stats

    async def _process(self, event_id: str, now: datetime, stats: RetentionStats) -> None:
        async with self.events.transaction(event_id):
            # Re-read under the lock; a concurrent revision or vote may have changed it
            event = await self.events.get(event_id)
            if event is None:
                return

            reason = self.flag_reason(event)
            if reason is None:
                return

            age = age_in_days(event, now)
            if age >= self.retention_days:
                await self._delete(event, age, reason)
                stats.deleted += 1
                return

            if not event.flagged:
                await self.events.update_fields(
                    event_id,
                    {"flagged": True, "flaggedAt": _as_utc(now).isoformat()},
                )
            stats.flagged += 1
            self.logger.debug(
                "Event flagged",
                event_id=event_id,
                age_days=round(age, 1),
                credibility_score=credibility_score(event.final_score),
            )

    async def _delete(self, event: Event, age: float, reason: str) -> None:
        if not await self.events.delete(event.id):
            return

        score = credibility_score(event.final_score)
        await self.system_log.append(
            AuditLogEntry(
                type=AUDIT_TYPE_EVENT_DELETED,
                subject_id=event.id,
                status="deleted",
                reason=reason,
                actor=RETENTION_ACTOR,
                details={
                    "eventId": event.id,
                    "title": event.title,
                    "credibilityScore": score,
                    "ageInDays": round(age, 1),
                    "reason": reason,
                },
            )
        )
        self.logger.info(
            "Event deleted by retention",
            event_id=event.id,
            age_days=round(age, 1),
            credibility_score=score,
        )
