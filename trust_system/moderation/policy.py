"""Moderation decision sources.

The gate asks exactly one policy for a decision. Which one is chosen by
configuration, never by a silent code path:

- ServiceModerationPolicy: the external moderation service is configured
- PermissiveDefaultPolicy: service absent, fallback_policy=permissive_default
- StrictPolicy: service absent, fallback_policy=strict
"""

from abc import ABC, abstractmethod
from typing import Optional

from trust_system.config.settings import FallbackPolicy, settings
from trust_system.data_management.schemas import ModerationDecision, PendingRecord
from trust_system.llm.classification_client import ClassificationServiceClient

NOT_CONFIGURED_REASON = "moderation service not configured"


class ModerationPolicy(ABC):
    """Produces a decision for one pending record."""

    name: str = "base"

    @abstractmethod
    async def decide(self, record: PendingRecord) -> ModerationDecision:
        pass


class ServiceModerationPolicy(ModerationPolicy):
    name = "service"

    def __init__(self, client: ClassificationServiceClient):
        self.client = client

    async def decide(self, record: PendingRecord) -> ModerationDecision:
        return await self.client.moderate(record)


class PermissiveDefaultPolicy(ModerationPolicy):
    """Approves everything. An operational choice, not a security boundary."""

    name = FallbackPolicy.PERMISSIVE_DEFAULT.value

    async def decide(self, record: PendingRecord) -> ModerationDecision:
        return ModerationDecision(approved=True)


class StrictPolicy(ModerationPolicy):
    name = FallbackPolicy.STRICT.value

    async def decide(self, record: PendingRecord) -> ModerationDecision:
        return ModerationDecision(approved=False, reason=NOT_CONFIGURED_REASON)


def select_policy(
    client: Optional[ClassificationServiceClient] = None,
    fallback_policy: Optional[FallbackPolicy] = None,
) -> ModerationPolicy:
    """Pick the decision source from the client's configuration and the fallback posture."""
    client = client or ClassificationServiceClient.for_moderation()
    if client.configured:
        return ServiceModerationPolicy(client)
    if (fallback_policy or settings.fallback_policy) == FallbackPolicy.STRICT:
        return StrictPolicy()
    return PermissiveDefaultPolicy()
