"""Source adapters for the news collector."""

from trust_system.agents.crawlers.sources.adapters import (
    ADAPTERS,
    SourceConfig,
    canonical_link,
    get_adapter,
    parse_html_links,
    parse_rss,
)

__all__ = [
    "ADAPTERS",
    "SourceConfig",
    "canonical_link",
    "get_adapter",
    "parse_html_links",
    "parse_rss",
]
