"""Published event, version and vote schemas.

An Event is the single long-lived entity of the system. Its content fields
(title, description, sources, status) change only through accepted revisions;
its score fields (ai_score, community_score, final_score) change only through
the score aggregator.

Revisions are not stored inline. Each accepted revision is appended as a
Version to an ordered per-event log, and ``version_count`` mirrors its length.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from trust_system.data_management.schemas.claim_schema import (
    ClaimStatus,
    DisputedClaim,
    unique_sources,
)

# Roles whose votes count double
WEIGHTED_ROLES = frozenset({"admin", "journalist"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """Published, versioned claim with a blended trust score.

    Attributes:
        id: Document identifier in ``events``.
        sources: Unique source list (duplicates removed at write time).
        status: verified or disputed.
        ai_score: Automated trust estimate, 0-1.
        community_score: Role-weighted net vote signal, -1..1.
        final_score: clamp(0.7*ai + 0.3*community, 0, 1).
        verified: Explicit fact-check verdict, None when never checked.
        flagged: Set by the retention manager for low-trust events.
        version_count: Number of entries in the event's version log.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    date: str = ""
    title: str
    description: str = ""
    sources: list[str] = Field(default_factory=list)
    disputed_claims: list[DisputedClaim] = Field(
        default_factory=list, alias="disputedClaims"
    )
    status: ClaimStatus = ClaimStatus.VERIFIED
    ai_score: float = Field(default=0.0, ge=0.0, le=1.0, alias="aiScore")
    community_score: float = Field(
        default=0.0, ge=-1.0, le=1.0, alias="communityScore"
    )
    final_score: float = Field(default=0.0, ge=0.0, le=1.0, alias="finalScore")
    author: str = ""
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    enriched_at: Optional[datetime] = Field(default=None, alias="enrichedAt")
    verified: Optional[bool] = None
    flagged: bool = False
    flagged_at: Optional[datetime] = Field(default=None, alias="flaggedAt")
    version_count: int = Field(default=0, alias="versionCount")

    model_config = {"populate_by_name": True}

    @field_validator("sources")
    @classmethod
    def _dedupe_sources(cls, value: list[str]) -> list[str]:
        return unique_sources(value)

    @property
    def last_activity(self) -> datetime:
        """Most recent of updated_at / enriched_at / created_at (first non-null wins)."""
        return self.updated_at or self.enriched_at or self.created_at


class Version(BaseModel):
    """Snapshot of an event's content at one accepted submission."""

    event_id: str = Field(..., alias="eventId")
    index: int = 0
    pending_id: Optional[str] = Field(default=None, alias="pendingId")
    date: str = ""
    title: str
    description: str = ""
    sources: list[str] = Field(default_factory=list)
    disputed_claims: list[DisputedClaim] = Field(
        default_factory=list, alias="disputedClaims"
    )
    status: ClaimStatus = ClaimStatus.VERIFIED
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    created_by: str = Field(default="", alias="createdBy")

    model_config = {"populate_by_name": True}


class Vote(BaseModel):
    """One user's vote on one event. Last write wins per (event_id, user_id)."""

    event_id: str = Field(..., alias="eventId")
    user_id: str = Field(..., alias="userId")
    value: Literal[-1, 0, 1]
    role: str = "user"
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    model_config = {"populate_by_name": True}

    @property
    def weight(self) -> int:
        return 2 if self.role in WEIGHTED_ROLES else 1
