"""Moderation gate: the only path from a pending record to a published event.

Per pending record, one terminal transition: pending -> verified | disputed |
rejected. The sequence for one record is:

1. Ask the policy for a decision
2. Append a moderation audit entry (always, before any other write)
3. Rejected: mark the record rejected
4. Approved: resolve the status, compute the automated score, then either
   publish a new event or apply a revision to the target event
5. Mark the record with the resolved status

Any exception in that sequence fails closed: the record ends up rejected, an
audit entry records the error, and nothing propagates to the caller.

Usage:
    gate = ModerationGate(pending_store, event_store, AuditLog(store))
    outcome = await gate.submit(claim, author="scraper@system")
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from trust_system.config.settings import FallbackPolicy
from trust_system.data_management.audit_log import AuditLog
from trust_system.data_management.event_store import EventStore
from trust_system.data_management.pending_store import PendingStore
from trust_system.data_management.schemas import (
    AUDIT_TYPE_MODERATION,
    AuditLogEntry,
    Claim,
    ClaimStatus,
    Event,
    ModerationDecision,
    PendingRecord,
    Version,
    unique_sources,
)
from trust_system.llm.classification_client import ClassificationServiceClient
from trust_system.moderation.policy import ModerationPolicy, select_policy
from trust_system.scoring.aggregator import ScoreAggregator
from trust_system.scoring.formulas import automated_score, final_score
from trust_system.scoring.votes import EventNotFoundError
from trust_system.utils.logging import get_structured_logger

MODERATION_ACTOR = "ai-moderation"


class PendingRecordNotFoundError(LookupError):
    """Raised when a record handed to the gate was never persisted."""

    def __init__(self, pending_id: str):
        super().__init__(f"Pending record not found: {pending_id}")
        self.pending_id = pending_id


def resolve_status(decision: ModerationDecision, record: PendingRecord) -> ClaimStatus:
    """Decision status (default verified), forced to disputed by counter-claims."""
    if record.is_disputed:
        return ClaimStatus.DISPUTED
    if decision.status in (ClaimStatus.VERIFIED, ClaimStatus.DISPUTED):
        return decision.status
    return ClaimStatus.VERIFIED


@dataclass
class ModerationOutcome:
    """What happened to one pending record."""

    pending_id: str
    status: ClaimStatus
    approved: bool = False
    event_id: Optional[str] = None
    revision: bool = False
    reason: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pending_id": self.pending_id,
            "status": self.status.value,
            "approved": self.approved,
            "event_id": self.event_id,
            "revision": self.revision,
            "reason": self.reason,
            "error": self.error,
            "skipped": self.skipped,
        }


@dataclass
class ModerationStats:
    """Counters for a moderation sweep."""

    processed: int = 0
    published: int = 0
    revised: int = 0
    rejected: int = 0
    failed: int = 0
    skipped: int = 0

    def record(self, outcome: ModerationOutcome) -> None:
        if outcome.skipped:
            self.skipped += 1
            return
        self.processed += 1
        if outcome.error:
            self.failed += 1
        elif not outcome.approved:
            self.rejected += 1
        elif outcome.revision:
            self.revised += 1
        else:
            self.published += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "published": self.published,
            "revised": self.revised,
            "rejected": self.rejected,
            "failed": self.failed,
            "skipped": self.skipped,
        }


class ModerationGate:
    """
    Moderates pending records and publishes accepted ones.

    Attributes:
        pending: Pending record repository
        events: Published event repository
        audit: Moderation audit log (``auditLogs``)
        aggregator: Score writer used for revisions
        policy: Decision source chosen from configuration
    """

    def __init__(
        self,
        pending: PendingStore,
        events: EventStore,
        audit: AuditLog,
        aggregator: Optional[ScoreAggregator] = None,
        policy: Optional[ModerationPolicy] = None,
        client: Optional[ClassificationServiceClient] = None,
        fallback_policy: Optional[FallbackPolicy] = None,
    ) -> None:
        self.pending = pending
        self.events = events
        self.audit = audit
        self.aggregator = aggregator or ScoreAggregator(events)
        self.policy = policy or select_policy(client, fallback_policy)
        self._logger = get_structured_logger("ModerationGate", policy=self.policy.name)

    async def submit(self, claim: Claim, author: str) -> Optional[ModerationOutcome]:
        """
        Persist a claim as a pending record and moderate it.

        Returns:
            The outcome, or None when an identical submission already exists.
        """
        record = PendingRecord.from_claim(claim, author)
        if not await self.pending.create(record):
            self._logger.info("duplicate_submission", pending_id=record.id)
            return None
        return await self.moderate(record)

    async def moderate(self, record: PendingRecord) -> ModerationOutcome:
        """Run the single moderation transition for a record. Never raises."""
        async with self.pending.transaction(record.id):
            stored = await self.pending.get(record.id)
            if stored is None:
                return await self._fail_closed(record, PendingRecordNotFoundError(record.id))
            if stored.is_moderated:
                self._logger.debug("already_moderated", pending_id=record.id)
                return ModerationOutcome(
                    pending_id=record.id, status=stored.status, skipped=True
                )

            try:
                return await self._moderate_locked(record)
            except Exception as e:
                return await self._fail_closed(record, e)

    async def moderate_pending(self) -> ModerationStats:
        """Moderate every record still awaiting a decision."""
        stats = ModerationStats()
        for record in await self.pending.list_records(status=ClaimStatus.PENDING):
            stats.record(await self.moderate(record))
        self._logger.info("moderation_sweep_complete", **stats.to_dict())
        return stats

    async def _moderate_locked(self, record: PendingRecord) -> ModerationOutcome:
        decision = await self.policy.decide(record)
        status = resolve_status(decision, record) if decision.approved else ClaimStatus.REJECTED

        await self.audit.append(
            AuditLogEntry(
                type=AUDIT_TYPE_MODERATION,
                subject_id=record.id,
                status=status.value,
                reason=decision.reason,
                actor=MODERATION_ACTOR,
                details={
                    "title": record.title,
                    "approved": decision.approved,
                    "targetEventId": decision.target_event_id,
                },
            )
        )

        if not decision.approved:
            await self.pending.mark_moderated(record.id, ClaimStatus.REJECTED)
            self._logger.info("claim_rejected", pending_id=record.id, reason=decision.reason)
            return ModerationOutcome(
                pending_id=record.id,
                status=ClaimStatus.REJECTED,
                reason=decision.reason,
            )

        ai_score = automated_score(record.sources, status)
        if decision.target_event_id:
            event_id = await self._apply_revision(
                decision.target_event_id, record, status, ai_score
            )
            revision = True
        else:
            event_id = await self._publish(record, status, ai_score)
            revision = False

        await self.pending.mark_moderated(record.id, status)
        self._logger.info(
            "claim_accepted",
            pending_id=record.id,
            event_id=event_id,
            status=status.value,
            ai_score=ai_score,
            revision=revision,
        )
        return ModerationOutcome(
            pending_id=record.id,
            status=status,
            approved=True,
            event_id=event_id,
            revision=revision,
            reason=decision.reason,
        )

    def _version_for(self, record: PendingRecord, status: ClaimStatus, event_id: str) -> Version:
        return Version(
            event_id=event_id,
            pending_id=record.id,
            date=record.date,
            title=record.title,
            description=record.description,
            sources=unique_sources(record.sources),
            disputed_claims=list(record.disputed_claims),
            status=status,
            created_by=record.author,
        )

    async def _publish(self, record: PendingRecord, status: ClaimStatus, ai_score: float) -> str:
        event = Event(
            date=record.date,
            title=record.title,
            description=record.description,
            sources=record.sources,
            disputed_claims=list(record.disputed_claims),
            status=status,
            ai_score=ai_score,
            community_score=0.0,
            final_score=final_score(ai_score, 0.0),
            author=record.author,
        )
        await self.events.create(event, self._version_for(record, status, event.id))
        return event.id

    async def _apply_revision(
        self,
        event_id: str,
        record: PendingRecord,
        status: ClaimStatus,
        ai_score: float,
    ) -> str:
        async with self.events.transaction(event_id):
            if await self.events.get(event_id) is None:
                raise EventNotFoundError(event_id)

            await self.events.update_fields(
                event_id,
                {
                    "date": record.date,
                    "title": record.title,
                    "description": record.description,
                    "sources": unique_sources(record.sources),
                    "disputedClaims": [
                        d.model_dump(mode="json", by_alias=True)
                        for d in record.disputed_claims
                    ],
                    "status": status.value,
                    "updatedAt": datetime.now(timezone.utc).isoformat(),
                },
            )
            await self.events.append_version(
                event_id, self._version_for(record, status, event_id)
            )
            await self.aggregator.apply_automated_score_locked(event_id, ai_score)
        return event_id

    async def _fail_closed(self, record: PendingRecord, error: Exception) -> ModerationOutcome:
        """Reject the record after an error. Best effort; never raises."""
        self._logger.error(
            "moderation_failed",
            pending_id=record.id,
            error=str(error),
            error_type=type(error).__name__,
        )
        try:
            await self.audit.append(
                AuditLogEntry(
                    type=AUDIT_TYPE_MODERATION,
                    subject_id=record.id,
                    status=ClaimStatus.REJECTED.value,
                    reason=f"error: {error}",
                    actor=MODERATION_ACTOR,
                    details={"title": record.title, "errorType": type(error).__name__},
                )
            )
            await self.pending.mark_moderated(record.id, ClaimStatus.REJECTED)
        except Exception as cleanup_error:
            self._logger.error(
                "fail_closed_write_failed",
                pending_id=record.id,
                error=str(cleanup_error),
            )
        return ModerationOutcome(
            pending_id=record.id,
            status=ClaimStatus.REJECTED,
            reason=str(error),
            error=str(error),
        )
