"""Schema package for candidates, claims, pending records, events and audit entries.

All models are pydantic v2 models. Python attributes are snake_case; the stored
and wire JSON shape is camelCase (``model_dump(by_alias=True)``).

Usage:
    from trust_system.data_management.schemas import Claim, ClaimStatus
    claim = Claim(date="2026-10-18", title="...", description="...", sources=["a"])
"""

from trust_system.data_management.schemas.claim_schema import (
    Candidate,
    Claim,
    ClaimStatus,
    DisputedClaim,
    unique_sources,
)
from trust_system.data_management.schemas.pending_schema import (
    PendingRecord,
    compute_submission_key,
)
from trust_system.data_management.schemas.event_schema import (
    WEIGHTED_ROLES,
    Event,
    Version,
    Vote,
)
from trust_system.data_management.schemas.audit_schema import (
    AUDIT_TYPE_EVENT_DELETED,
    AUDIT_TYPE_MODERATION,
    AuditLogEntry,
    FactCheckVerdict,
    ModerationDecision,
)

__all__ = [
    # Claims
    "Candidate",
    "Claim",
    "ClaimStatus",
    "DisputedClaim",
    "unique_sources",
    # Pending
    "PendingRecord",
    "compute_submission_key",
    # Events
    "Event",
    "Version",
    "Vote",
    "WEIGHTED_ROLES",
    # Audit
    "AuditLogEntry",
    "FactCheckVerdict",
    "ModerationDecision",
    "AUDIT_TYPE_MODERATION",
    "AUDIT_TYPE_EVENT_DELETED",
]
