"""Tests for NewsCollector using httpx.MockTransport.

Tests cover:
1. Multi-source collection with merge and de-duplication
2. Failing source isolation
3. Per-source timeout
4. Short and failed body text drops
5. Stats and process() interface
"""

import asyncio

import httpx
import pytest

from trust_system.agents.crawlers import NewsCollector, merge_candidates
from trust_system.agents.crawlers.extractors import ArticleTextExtractor
from trust_system.config.news_sources import FEED_SOURCES, NEWS_SOURCES
from trust_system.config.settings import settings
from trust_system.data_management.schemas import Candidate


SOURCES = {
    "alpha": {
        "name": "Alpha",
        "url": "https://alpha.example/",
        "adapter": "html_links",
        "selector": "a.story",
    },
    "beta": {
        "name": "Beta",
        "url": "https://beta.example/",
        "adapter": "html_links",
        "selector": "a.story",
    },
}

ALPHA_LISTING = """
<a class="story" href="/one">Story one</a>
<a class="story" href="https://shared.example/story?utm_source=alpha">Shared story</a>
<a class="story" href="/short">Short story</a>
"""

BETA_LISTING = """
<a class="story" href="https://shared.example/story">Shared story from beta</a>
<a class="story" href="/two">Story two</a>
"""

LONG_TEXT = "word " * 100


class EchoExtractor(ArticleTextExtractor):
    """Returns the page body unchanged."""

    def extract(self, html: str, url: str = "") -> str:
        return html.strip()


def routes(overrides=None):
    table = {
        "https://alpha.example/": (200, ALPHA_LISTING),
        "https://beta.example/": (200, BETA_LISTING),
        "https://alpha.example/one": (200, LONG_TEXT),
        "https://alpha.example/short": (200, "tiny"),
        "https://shared.example/story": (200, LONG_TEXT),
        "https://beta.example/two": (200, LONG_TEXT),
    }
    table.update(overrides or {})

    def handler(request):
        url = str(request.url)
        if url not in table:
            return httpx.Response(404)
        status, body = table[url]
        return httpx.Response(status, text=body)

    return handler


def make_collector(handler, **kwargs):
    kwargs.setdefault("source_timeout", 5.0)
    return NewsCollector(
        source_configs=SOURCES,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        min_text_length=100,
        max_retries=1,
        text_extractor=EchoExtractor(),
        **kwargs,
    )


class TestCollect:
    """Tests for a full collection pass."""

    @pytest.mark.asyncio
    async def test_merges_and_dedupes(self):
        collector = make_collector(routes())

        candidates = await collector.collect()

        links = [c.link for c in candidates]
        assert links == [
            "https://alpha.example/one",
            "https://shared.example/story",
            "https://beta.example/two",
        ]
        shared = candidates[1]
        assert shared.source_name == "Alpha"
        assert all(len(c.raw_text) >= 100 for c in candidates)

        stats = collector.last_stats
        assert stats.sources_attempted == 2
        assert stats.sources_failed == 0
        assert stats.candidates_found == 5
        assert stats.duplicates_dropped == 1
        assert stats.texts_too_short == 1
        assert stats.candidates_returned == 3

    @pytest.mark.asyncio
    async def test_failing_source_isolated(self):
        collector = make_collector(routes({"https://beta.example/": (500, "boom")}))

        candidates = await collector.collect()

        assert [c.link for c in candidates] == [
            "https://alpha.example/one",
            "https://shared.example/story",
        ]
        assert collector.last_stats.sources_failed == 1

    @pytest.mark.asyncio
    async def test_slow_source_times_out(self):
        fast = routes()

        async def handler(request):
            if str(request.url) == "https://beta.example/":
                await asyncio.sleep(1.0)
            return fast(request)

        collector = make_collector(handler, source_timeout=0.1)

        candidates = await collector.collect()

        assert collector.last_stats.sources_failed == 1
        assert all(not c.link.startswith("https://beta.example") for c in candidates)
        assert len(candidates) == 2

    @pytest.mark.asyncio
    async def test_text_fetch_failure_dropped(self):
        collector = make_collector(routes({"https://alpha.example/one": (404, "")}))

        candidates = await collector.collect(sources=["alpha"])

        assert [c.link for c in candidates] == ["https://shared.example/story"]
        assert collector.last_stats.texts_failed == 1

    @pytest.mark.asyncio
    async def test_unknown_source_keys_ignored(self):
        collector = make_collector(routes())

        candidates = await collector.collect(sources=["nope"])

        assert candidates == []
        assert collector.last_stats.sources_attempted == 0

    @pytest.mark.asyncio
    async def test_process_interface(self):
        collector = make_collector(routes())

        result = await collector.process({"sources": ["beta"]})

        assert result["success"] is True
        assert result["count"] == 2
        assert "rawText" in result["candidates"][0]
        assert result["stats"]["sources_attempted"] == 1


class TestFetchData:
    """Tests for the BaseCrawler fetch_data interface."""

    @pytest.mark.asyncio
    async def test_error_reported_not_raised(self):
        collector = make_collector(routes({"https://alpha.example/": (503, "")}))

        result = await collector.fetch_data("alpha")

        assert result["raw_content"] is None
        assert result["error"]


class TestMergeCandidates:
    """Tests for merge_candidates."""

    def test_first_occurrence_wins(self):
        a = Candidate(link="https://x.example/1", title="A", source_name="first")
        b = Candidate(link="https://x.example/1", title="B", source_name="second")
        c = Candidate(link="https://x.example/2", title="C")

        merged, dropped = merge_candidates([[a], [b, c]])

        assert [m.title for m in merged] == ["A", "C"]
        assert dropped == 1


class TestDefaultSources:
    """Tests for the default source set."""

    def test_feeds_excluded_by_default(self):
        collector = NewsCollector()

        assert set(collector.source_configs) == set(NEWS_SOURCES)

    def test_feeds_included_when_enabled(self, monkeypatch):
        monkeypatch.setattr(settings, "include_feed_sources", True)

        collector = NewsCollector()

        assert set(FEED_SOURCES) <= set(collector.source_configs)
        assert set(NEWS_SOURCES) <= set(collector.source_configs)
        assert collector.source_configs["bbc_rss"]["adapter"] == "rss"
