"""Trust scoring: formulas, the score aggregator and vote writes."""

from trust_system.scoring.aggregator import RecomputeStats, ScoreAggregator, ScoreUpdate
from trust_system.scoring.formulas import (
    automated_score,
    clamp,
    community_score,
    credibility_score,
    final_score,
    vote_weight,
)
from trust_system.scoring.votes import EventNotFoundError, VoteService

__all__ = [
    "EventNotFoundError",
    "RecomputeStats",
    "ScoreAggregator",
    "ScoreUpdate",
    "VoteService",
    "automated_score",
    "clamp",
    "community_score",
    "credibility_score",
    "final_score",
    "vote_weight",
]
