"""Crawler agents for news collection."""

from trust_system.agents.crawlers.base_crawler import BaseCrawler
from trust_system.agents.crawlers.news_collector import (
    CollectionStats,
    NewsCollector,
    merge_candidates,
)

__all__ = ["BaseCrawler", "CollectionStats", "NewsCollector", "merge_candidates"]
