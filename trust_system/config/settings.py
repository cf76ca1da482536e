"""Application settings using Pydantic BaseSettings for environment variable management."""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class FallbackPolicy(str, Enum):
    """Posture used when an external classification service is not configured.

    PERMISSIVE_DEFAULT: extraction falls back to the heuristic mapping and
        moderation approves.
    STRICT: extraction yields nothing and moderation rejects.
    """

    PERMISSIVE_DEFAULT = "permissive_default"
    STRICT = "strict"


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        fallback_policy: Behaviour when extraction/moderation services are absent
        extraction_endpoint: URL of the claim extraction service
        extraction_api_key: Bearer token for the extraction service
        moderation_endpoint: URL of the moderation service
        moderation_api_key: Bearer token for the moderation service
        fact_check_endpoint: URL of the fact-check service
        fact_check_api_key: Bearer token for the fact-check service
        service_timeout: Timeout for classification service calls (seconds)
        source_timeout: Timeout per source adapter fetch (seconds)
        max_concurrent_sources: Upper bound on parallel source fetches
        max_concurrent_fetches: Upper bound on parallel body text fetches
        min_text_length: Minimum body text length for a usable candidate
        retention_days: Grace period before a flagged event is deleted
        retention_threshold: Credibility score (0-100) below which events are flagged
        min_run_interval_seconds: Minimum spacing between two runs of the same job
        store_path: Optional JSON file used to persist the document store
        user_agent: Identifying User-Agent header for source fetches
        include_feed_sources: Also fetch the RSS/Atom feed sources by default
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log output format: json or console")
    fallback_policy: FallbackPolicy = Field(
        default=FallbackPolicy.PERMISSIVE_DEFAULT,
        description="Posture when classification services are not configured",
    )
    extraction_endpoint: Optional[str] = Field(
        default=None, description="Claim extraction service URL"
    )
    extraction_api_key: Optional[str] = Field(
        default=None, description="Claim extraction service API key"
    )
    moderation_endpoint: Optional[str] = Field(
        default=None, description="Moderation service URL"
    )
    moderation_api_key: Optional[str] = Field(
        default=None, description="Moderation service API key"
    )
    fact_check_endpoint: Optional[str] = Field(
        default=None, description="Fact-check service URL"
    )
    fact_check_api_key: Optional[str] = Field(
        default=None, description="Fact-check service API key"
    )
    service_timeout: float = Field(
        default=30.0, description="Classification service timeout in seconds"
    )
    source_timeout: float = Field(
        default=15.0, description="Per-source fetch timeout in seconds"
    )
    max_concurrent_sources: int = Field(
        default=4, description="Maximum source adapters fetched at once"
    )
    max_concurrent_fetches: int = Field(
        default=5, description="Maximum article body fetches at once"
    )
    min_text_length: int = Field(
        default=200, description="Minimum article body length in characters"
    )
    retention_days: float = Field(
        default=7.0, description="Days a flagged event survives before deletion"
    )
    retention_threshold: int = Field(
        default=40, description="Credibility score (0-100) below which events are flagged"
    )
    min_run_interval_seconds: float = Field(
        default=60.0, description="Minimum seconds between runs of the same job"
    )
    store_path: Optional[str] = Field(
        default=None, description="JSON persistence path for the document store"
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; TrustSystemBot/0.1)",
        description="User-Agent header sent to news sources",
    )
    include_feed_sources: bool = Field(
        default=False, description="Add feed sources to the default source set"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "TRUST_",
    }


# Singleton instance - import this throughout the application
settings = Settings()
