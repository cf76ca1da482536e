"""NewsCollector: fetches candidate articles from configured news sources.

Features:
- One shared httpx.AsyncClient with a fixed identifying User-Agent
- Bounded source fan-out and body fetch fan-out via aiometer
- Per-source timeout; a slow or failing source contributes nothing
- Merge and de-duplicate by canonical link (first occurrence wins)
- Body text retrieval with trafilatura / <p> fallback
- Candidates with missing or short body text are dropped (logged)
"""

import asyncio
import functools
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import aiometer
import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from trust_system.agents.crawlers.base_crawler import BaseCrawler
from trust_system.agents.crawlers.extractors.article_text import ArticleTextExtractor
from trust_system.agents.crawlers.sources.adapters import SourceConfig, get_adapter
from trust_system.config.news_sources import default_sources
from trust_system.config.settings import settings
from trust_system.data_management.schemas import Candidate


@dataclass
class CollectionStats:
    """Summary of one collection run."""

    sources_attempted: int = 0
    sources_failed: int = 0
    candidates_found: int = 0
    duplicates_dropped: int = 0
    texts_failed: int = 0
    texts_too_short: int = 0
    candidates_returned: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources_attempted": self.sources_attempted,
            "sources_failed": self.sources_failed,
            "candidates_found": self.candidates_found,
            "duplicates_dropped": self.duplicates_dropped,
            "texts_failed": self.texts_failed,
            "texts_too_short": self.texts_too_short,
            "candidates_returned": self.candidates_returned,
            "duration_seconds": round(self.duration_seconds, 3),
        }


def merge_candidates(batches: Iterable[List[Candidate]]) -> tuple[List[Candidate], int]:
    """
    Merge per-source candidate lists, keeping the first occurrence of each link.

    Returns:
        (merged candidates, number of duplicates dropped)
    """
    merged: List[Candidate] = []
    seen: set[str] = set()
    duplicates = 0
    for batch in batches:
        for candidate in batch:
            if candidate.link in seen:
                duplicates += 1
                continue
            seen.add(candidate.link)
            merged.append(candidate)
    return merged, duplicates


class NewsCollector(BaseCrawler):
    """
    Collects candidates from configured sources.

    Typical usage:
        async with NewsCollector() as collector:
            candidates = await collector.collect()
            print(collector.last_stats.to_dict())

    Attributes:
        source_timeout: Seconds allowed for one source (fetch + parse)
        max_concurrent_sources: aiometer bound on parallel source fetches
        max_concurrent_fetches: aiometer bound on parallel body fetches
        min_text_length: Minimum body text length to keep a candidate
        max_retries: Attempts per HTTP GET on transport errors
        last_stats: CollectionStats of the most recent run
    """

    def __init__(
        self,
        source_configs: Optional[Dict[str, Dict[str, Any]]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        source_timeout: Optional[float] = None,
        max_concurrent_sources: Optional[int] = None,
        max_concurrent_fetches: Optional[int] = None,
        min_text_length: Optional[int] = None,
        max_retries: int = 3,
        text_extractor: Optional[ArticleTextExtractor] = None,
    ):
        super().__init__(
            name="NewsCollector",
            description="Fetches candidate articles from news sources",
            source_configs=(
                source_configs
                if source_configs is not None
                else default_sources(settings.include_feed_sources)
            ),
        )
        self.source_timeout = source_timeout or settings.source_timeout
        self.max_concurrent_sources = max_concurrent_sources or settings.max_concurrent_sources
        self.max_concurrent_fetches = max_concurrent_fetches or settings.max_concurrent_fetches
        self.min_text_length = (
            min_text_length if min_text_length is not None else settings.min_text_length
        )
        self.max_retries = max(1, max_retries)
        self.text_extractor = text_extractor or ArticleTextExtractor()

        self._client = http_client
        self._owns_client = http_client is None
        self.last_stats = CollectionStats()

        self.logger.info(
            "NewsCollector initialized",
            num_sources=len(self.source_configs),
            source_timeout=self.source_timeout,
            max_concurrent_sources=self.max_concurrent_sources,
        )

    async def __aenter__(self):
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.source_timeout),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
                headers={"User-Agent": settings.user_agent},
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str) -> str:
        """GET a URL, retrying transport errors with exponential backoff."""
        client = await self._get_client()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                response = await client.get(url)
                response.raise_for_status()
        return response.text

    async def fetch_data(self, source: str, **kwargs) -> dict:
        """
        Fetch the raw listing payload of one configured source.

        Returns:
            Dictionary with source, url, raw_content and error (None on success)
        """
        config = self._config(source)
        try:
            content = await self._get(config.url)
            return {"source": source, "url": config.url, "raw_content": content, "error": None}
        except httpx.HTTPError as e:
            return {"source": source, "url": config.url, "raw_content": None, "error": str(e)}

    def _config(self, source: str) -> SourceConfig:
        return SourceConfig.from_dict(source, self.source_configs[source])

    async def collect_source(self, config: SourceConfig) -> List[Candidate]:
        """Fetch and parse one source. Raises on any failure."""
        adapter = get_adapter(config.adapter)
        payload = await self._get(config.url)
        return adapter(config, payload)

    async def _collect_source_safe(
        self, config: SourceConfig, stats: CollectionStats
    ) -> List[Candidate]:
        """One source under its timeout. Failures yield an empty list."""
        try:
            candidates = await asyncio.wait_for(
                self.collect_source(config), timeout=self.source_timeout
            )
            self.logger.info(
                f"Source {config.key} returned {len(candidates)} candidates",
                source=config.key,
            )
            return candidates
        except asyncio.TimeoutError:
            stats.sources_failed += 1
            self.logger.warning(
                f"Source {config.key} timed out after {self.source_timeout}s",
                source=config.key,
            )
        except Exception as e:
            stats.sources_failed += 1
            self.logger.warning("Source failed", source=config.key, error=str(e))
        return []

    async def fetch_text(self, candidate: Candidate) -> Optional[str]:
        """Retrieve and extract body text for one candidate, None on failure."""
        try:
            html = await self._get(candidate.link)
        except Exception as e:
            self.logger.debug("Text fetch failed", link=candidate.link, error=str(e))
            return None
        return self.text_extractor.extract(html, url=candidate.link)

    async def _with_text(
        self, candidate: Candidate, stats: CollectionStats
    ) -> Optional[Candidate]:
        text = await self.fetch_text(candidate)
        if text is None:
            stats.texts_failed += 1
            return None
        if len(text) < self.min_text_length:
            stats.texts_too_short += 1
            self.logger.debug(
                "Dropping candidate with short text",
                link=candidate.link,
                length=len(text),
            )
            return None
        return candidate.model_copy(update={"raw_text": text})

    async def collect(self, sources: Optional[List[str]] = None) -> List[Candidate]:
        """
        Run one collection pass.

        Args:
            sources: Source keys to fetch (default: all configured)

        Returns:
            De-duplicated candidates with body text, in source order
        """
        start = time.monotonic()
        stats = CollectionStats()
        keys = sources if sources is not None else list(self.source_configs)
        configs = [self._config(key) for key in keys if key in self.source_configs]
        stats.sources_attempted = len(configs)

        batches = await aiometer.run_all(
            [functools.partial(self._collect_source_safe, c, stats) for c in configs],
            max_at_once=self.max_concurrent_sources,
        )
        stats.candidates_found = sum(len(b) for b in batches)

        merged, stats.duplicates_dropped = merge_candidates(batches)

        with_text = await aiometer.run_all(
            [functools.partial(self._with_text, c, stats) for c in merged],
            max_at_once=self.max_concurrent_fetches,
        )
        candidates = [c for c in with_text if c is not None]

        stats.candidates_returned = len(candidates)
        stats.duration_seconds = time.monotonic() - start
        self.last_stats = stats

        self.logger.info("Collection complete", **stats.to_dict())
        return candidates

    async def process(self, input_data: dict) -> dict:
        """
        BaseAgent interface.

        Args:
            input_data: Optional 'sources' list of source keys

        Returns:
            Dict with success, candidates (camelCase dicts) and stats
        """
        candidates = await self.collect(input_data.get("sources"))
        return {
            "success": True,
            "candidates": [c.model_dump(by_alias=True) for c in candidates],
            "count": len(candidates),
            "stats": self.last_stats.to_dict(),
        }

    def get_capabilities(self) -> list[str]:
        return super().get_capabilities() + ["link_deduplication", "text_extraction"]
