"""Retention policy for low-trust published events."""

from trust_system.retention.manager import (
    RETENTION_ACTOR,
    RetentionManager,
    RetentionStats,
    age_in_days,
)

__all__ = ["RETENTION_ACTOR", "RetentionManager", "RetentionStats", "age_in_days"]
