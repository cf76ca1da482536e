"""Source adapters: pure parse functions from a fetched payload to candidates.

An adapter never does I/O. The collector fetches the source URL and hands the
response text to the adapter named in the source config:

    candidates = parse_html_links(config, html)
    candidates = parse_rss(config, feed_xml)

Adapters return candidates with canonical links and empty body text; body
retrieval is a separate step in the collector.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import feedparser
from bs4 import BeautifulSoup

from trust_system.config.news_sources import TRACKING_PARAMS
from trust_system.data_management.schemas import Candidate

DEFAULT_MAX_ITEMS = 20


@dataclass(frozen=True)
class SourceConfig:
    """
    One configured source.

    Attributes:
        key: Config key (e.g. 'bbc')
        name: Display name copied onto candidates
        url: Listing page or feed URL
        adapter: Adapter kind ('html_links' or 'rss')
        selector: CSS selector for article links (html_links)
        title_selector: Optional child selector for the title text (html_links)
        max_items: Cap on candidates contributed per run
    """

    key: str
    name: str
    url: str
    adapter: str = "html_links"
    selector: Optional[str] = None
    title_selector: Optional[str] = None
    max_items: int = DEFAULT_MAX_ITEMS

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "SourceConfig":
        return cls(
            key=key,
            name=data.get("name", key),
            url=data["url"],
            adapter=data.get("adapter", "html_links"),
            selector=data.get("selector"),
            title_selector=data.get("title_selector"),
            max_items=int(data.get("max_items", DEFAULT_MAX_ITEMS)),
        )


def _is_tracking_param(name: str) -> bool:
    lowered = name.lower()
    return any(
        lowered.startswith(p) if p.endswith("_") else lowered == p
        for p in TRACKING_PARAMS
    )


def canonical_link(url: str, base: Optional[str] = None) -> str:
    """
    Canonical form of an article URL, used as its identity for de-duplication.

    Resolves against ``base`` when relative, lower-cases scheme and host, drops
    the fragment and tracking query parameters, and trims a trailing slash.
    """
    absolute = urljoin(base, url.strip()) if base else url.strip()
    parts = urlsplit(absolute)

    query = urlencode(
        [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
         if not _is_tracking_param(k)]
    )
    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")

    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), path, query, "")
    )


def _clean_text(text: str) -> str:
    return " ".join(text.split())


def parse_html_links(config: SourceConfig, html: str) -> List[Candidate]:
    """
    Candidates from anchors matching ``config.selector`` on a listing page.

    Anchors without href or title text are skipped. Links are resolved against
    the source URL. Duplicates within the page keep their first occurrence.
    """
    if not config.selector:
        raise ValueError(f"Source {config.key} has no selector")

    soup = BeautifulSoup(html, "html.parser")
    candidates: List[Candidate] = []
    seen: set[str] = set()

    for anchor in soup.select(config.selector):
        if len(candidates) >= config.max_items:
            break

        href = anchor.get("href")
        if not href:
            continue

        title_node = anchor.select_one(config.title_selector) if config.title_selector else None
        title = _clean_text((title_node or anchor).get_text(" "))
        if not title:
            continue

        link = canonical_link(href, base=config.url)
        if link in seen:
            continue
        seen.add(link)

        candidates.append(Candidate(link=link, title=title, source_name=config.name))

    return candidates


def parse_rss(config: SourceConfig, content: str) -> List[Candidate]:
    """Candidates from the entries of an RSS/Atom feed."""
    parsed = feedparser.parse(content)
    if parsed.bozo and not parsed.entries:
        raise ValueError(f"Unparseable feed for {config.key}: {parsed.get('bozo_exception')}")

    candidates: List[Candidate] = []
    seen: set[str] = set()

    for entry in parsed.entries:
        if len(candidates) >= config.max_items:
            break

        href = entry.get("link")
        title = _clean_text(entry.get("title", ""))
        if not href or not title:
            continue

        link = canonical_link(href, base=config.url)
        if link in seen:
            continue
        seen.add(link)

        candidates.append(Candidate(link=link, title=title, source_name=config.name))

    return candidates


Adapter = Callable[[SourceConfig, str], List[Candidate]]

ADAPTERS: Dict[str, Adapter] = {
    "html_links": parse_html_links,
    "rss": parse_rss,
}


def get_adapter(kind: str) -> Adapter:
    try:
        return ADAPTERS[kind]
    except KeyError:
        raise ValueError(f"Unknown adapter kind: {kind}") from None
