"""Audit log, moderation decision and fact-check verdict schemas."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from trust_system.data_management.schemas.claim_schema import ClaimStatus

AUDIT_TYPE_MODERATION = "moderation"
AUDIT_TYPE_EVENT_DELETED = "event_deleted"


class AuditLogEntry(BaseModel):
    """Append-only record of one moderation decision or retention deletion.

    Attributes:
        type: ``moderation`` or ``event_deleted``.
        subject_id: Pending record id (moderation) or event id (deletion).
        status: Outcome status at the time of writing.
        reason: Free-text reason, if any.
        actor: Component or user that took the action.
        details: Extra context (title, scores, age, target event...).
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: str
    subject_id: str = Field(..., alias="subjectId")
    status: Optional[str] = None
    reason: Optional[str] = None
    actor: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class ModerationDecision(BaseModel):
    """Response of the moderation service.

    ``target_event_id`` names an existing event when the submission is a
    revision of it; otherwise a new event is published.
    """

    approved: bool
    status: Optional[ClaimStatus] = None
    reason: Optional[str] = None
    target_event_id: Optional[str] = Field(default=None, alias="targetEventId")

    model_config = {"populate_by_name": True}


class FactCheckVerdict(BaseModel):
    """Response of the fact-check service for one published event."""

    verified: bool
    summary: Optional[str] = None
