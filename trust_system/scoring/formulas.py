"""Trust score formulas.

Internal scale is 0.0-1.0 for ai_score and final_score, -1.0..1.0 for
community_score. The 0-100 credibility score used by retention is derived from
final_score and never stored.

Formulas:
- ai_score = clamp(0.4 + 0.25 * min(unique_sources, 3), 0, 1), capped at 0.7
  when the resolved status is disputed
- community_score = (up - down) / (up + down), 0 with no weighted votes
- final_score = clamp(0.7 * ai_score + 0.3 * community_score, 0, 1)
"""

from typing import Iterable, Sequence

from trust_system.data_management.schemas import (
    WEIGHTED_ROLES,
    ClaimStatus,
    Vote,
    unique_sources,
)

AI_BASE = 0.4
AI_PER_SOURCE = 0.25
AI_SOURCE_CAP = 3
DISPUTED_AI_CAP = 0.7

AI_WEIGHT = 0.7
COMMUNITY_WEIGHT = 0.3

WEIGHTED_ROLE_WEIGHT = 2
DEFAULT_ROLE_WEIGHT = 1


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def automated_score(sources: Sequence[str], status: ClaimStatus) -> float:
    """
    Source-count heuristic for the automated trust estimate.

    Args:
        sources: Claim sources (duplicates and blanks ignored)
        status: Resolved publication status

    Returns:
        ai_score in [0, 1]
    """
    count = len(unique_sources(list(sources)))
    score = clamp(AI_BASE + AI_PER_SOURCE * min(count, AI_SOURCE_CAP), 0.0, 1.0)
    if status == ClaimStatus.DISPUTED:
        score = min(score, DISPUTED_AI_CAP)
    return score


def vote_weight(role: str) -> int:
    return WEIGHTED_ROLE_WEIGHT if role in WEIGHTED_ROLES else DEFAULT_ROLE_WEIGHT


def tally_votes(votes: Iterable[Vote]) -> tuple[int, int]:
    """Weighted (up, down) totals. Zero-valued votes count for neither."""
    up = 0
    down = 0
    for vote in votes:
        weight = vote_weight(vote.role)
        if vote.value > 0:
            up += weight
        elif vote.value < 0:
            down += weight
    return up, down


def community_score(votes: Iterable[Vote]) -> float:
    up, down = tally_votes(votes)
    total = up + down
    if total == 0:
        return 0.0
    return (up - down) / total


def final_score(ai_score: float, community: float) -> float:
    return clamp(AI_WEIGHT * ai_score + COMMUNITY_WEIGHT * community, 0.0, 1.0)


def credibility_score(final: float) -> int:
    """Convert a 0-1 final score to the 0-100 credibility scale."""
    return int(round(final * 100))
