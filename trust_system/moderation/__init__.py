"""Moderation gate, its decision policies and fact-check verdicts."""

from trust_system.moderation.fact_check import FactChecker, FactCheckStats
from trust_system.moderation.gate import (
    MODERATION_ACTOR,
    ModerationGate,
    ModerationOutcome,
    ModerationStats,
    PendingRecordNotFoundError,
    resolve_status,
)
from trust_system.moderation.policy import (
    NOT_CONFIGURED_REASON,
    ModerationPolicy,
    PermissiveDefaultPolicy,
    ServiceModerationPolicy,
    StrictPolicy,
    select_policy,
)

__all__ = [
    "FactCheckStats",
    "FactChecker",
    "MODERATION_ACTOR",
    "NOT_CONFIGURED_REASON",
    "ModerationGate",
    "ModerationOutcome",
    "ModerationPolicy",
    "ModerationStats",
    "PendingRecordNotFoundError",
    "PermissiveDefaultPolicy",
    "ServiceModerationPolicy",
    "StrictPolicy",
    "resolve_status",
    "select_policy",
]
