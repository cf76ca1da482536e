"""Sifter agents for claim extraction and cross-checking."""

from trust_system.agents.sifters.base_sifter import BaseSifter
from trust_system.agents.sifters.claim_extraction_agent import (
    ClaimExtractionAgent,
    ExtractionStats,
)
from trust_system.agents.sifters.cross_checker import (
    ClaimGroup,
    CrossChecker,
    CrossCheckStats,
    group_claims,
    normalize_title,
)

__all__ = [
    "BaseSifter",
    "ClaimExtractionAgent",
    "ClaimGroup",
    "CrossChecker",
    "CrossCheckStats",
    "ExtractionStats",
    "group_claims",
    "normalize_title",
]
