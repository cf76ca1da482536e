"""Client for the external classification and moderation service."""

from trust_system.llm.classification_client import (
    ClassificationServiceClient,
    ServiceNotConfiguredError,
)

__all__ = ["ClassificationServiceClient", "ServiceNotConfiguredError"]
