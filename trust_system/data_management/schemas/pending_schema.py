"""Pending record schema - a persisted claim awaiting moderation.

The record carries two statuses on purpose:

- ``status`` is the moderation state machine. It starts at ``pending`` and is
  moved exactly once by the moderation gate to verified, disputed or rejected.
- ``cross_check_status`` is the label the Cross-Checker assigned to the claim's
  group before submission. It never changes.

Pending records are never deleted; together with the audit log they form the
provenance trail of every published event.
"""

import hashlib
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from trust_system.data_management.schemas.claim_schema import Claim, ClaimStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PendingRecord(Claim):
    """Claim plus submission metadata.

    Attributes:
        id: Document identifier in ``pendingEvents``.
        author: Submitting user or ``scraper@system``.
        status: Moderation state (pending -> verified|disputed|rejected).
        cross_check_status: Group label from the Cross-Checker, if any.
        submitted_at: UTC submission time.
        moderated_at: UTC time of the single moderation transition.
        submission_key: Key used for insert-if-absent de-duplication.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    author: str = ""
    status: ClaimStatus = ClaimStatus.PENDING
    cross_check_status: Optional[ClaimStatus] = Field(
        default=None, alias="crossCheckStatus"
    )
    submitted_at: datetime = Field(default_factory=_utcnow, alias="submittedAt")
    moderated_at: Optional[datetime] = Field(default=None, alias="moderatedAt")
    submission_key: str = Field(default="", alias="submissionKey")

    @property
    def is_moderated(self) -> bool:
        return self.moderated_at is not None

    @classmethod
    def from_claim(cls, claim: Claim, author: str) -> "PendingRecord":
        """Build a pending record from a (possibly cross-checked) claim."""
        key = compute_submission_key(claim.title, claim.sources, claim.description)
        return cls(
            id=key,
            submission_key=key,
            date=claim.date,
            title=claim.title,
            description=claim.description,
            sources=list(claim.sources),
            disputed_claims=list(claim.disputed_claims),
            author=author,
            cross_check_status=claim.status,
        )


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def compute_submission_key(title: str, sources: list[str], description: str = "") -> str:
    """SHA256 over the normalized title, normalized description and sorted source set.

    Only a re-submission of the same extraction shares a key; distinct claims
    that happen to share a title and sources stay separate records.
    """
    payload = "|".join(
        [_normalize(title), _normalize(description)] + sorted(set(sources))
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
