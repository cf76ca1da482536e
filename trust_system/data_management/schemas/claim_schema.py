"""Candidate and claim schemas - the pre-publication half of the pipeline.

A Candidate is a raw scraped item: link, title, the source it came from and the
article body. It is never persisted. The Extractor turns a Candidate into a
Claim, and the Cross-Checker annotates Claims with a verification status.

Python attributes are snake_case; the JSON shape exchanged with the
classification service and the document store is camelCase via aliases.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ClaimStatus(str, Enum):
    """Verification status of a claim, pending record or event.

    PENDING: not corroborated (single source, single extraction) / awaiting moderation
    VERIFIED: corroborated by two or more sources or extractions
    DISPUTED: at least one counter-claim recorded against it
    REJECTED: refused by the moderation gate (pending records only)
    """

    PENDING = "pending"
    VERIFIED = "verified"
    DISPUTED = "disputed"
    REJECTED = "rejected"


class Candidate(BaseModel):
    """Raw item produced by the collector.

    Attributes:
        link: Canonical article URL.
        title: Headline as scraped from the listing page.
        source_name: Display name of the source that listed it.
        raw_text: Article body text (empty until retrieved).
    """

    link: str
    title: str
    source_name: str = Field(default="", alias="sourceName")
    raw_text: str = Field(default="", alias="rawText")

    model_config = {"populate_by_name": True}


class DisputedClaim(BaseModel):
    """A recorded counter-assertion contradicting the main claim."""

    claim_text: str = Field(..., alias="claimText")
    source: str = ""
    timestamp: Optional[str] = None

    model_config = {"populate_by_name": True}


class Claim(BaseModel):
    """Structured, not-yet-published assertion.

    Hard requirements: date, title, description (non-empty).
    ``status`` is None until the Cross-Checker labels the claim.
    """

    date: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    sources: list[str] = Field(default_factory=list)
    disputed_claims: list[DisputedClaim] = Field(
        default_factory=list, alias="disputedClaims"
    )
    status: Optional[ClaimStatus] = None

    model_config = {"populate_by_name": True}

    @property
    def is_disputed(self) -> bool:
        """True when at least one counter-claim is attached."""
        return len(self.disputed_claims) > 0


def unique_sources(sources: list[str]) -> list[str]:
    """Order-preserving de-duplication of a source list, dropping blanks."""
    seen: set[str] = set()
    result: list[str] = []
    for source in sources:
        if source and source not in seen:
            seen.add(source)
            result.append(source)
    return result
