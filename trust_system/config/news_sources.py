"""News source configurations for the collector.

Each entry names the listing page to fetch and the adapter that turns the
fetched payload into candidates. Two adapter kinds are supported:

  html_links: CSS selector over an HTML listing page. ``title_selector`` picks
              a child element for the title text; otherwise the link text is used.
  rss:        RSS/Atom feed parsed with feedparser.

``max_items`` caps how many candidates a single source contributes per run.
"""

from typing import Any, Dict

NEWS_SOURCES: Dict[str, Dict[str, Any]] = {
    "bbc": {
        "name": "BBC",
        "url": "https://www.bbc.com/news",
        "adapter": "html_links",
        "selector": "a[href^='/news']",
        "max_items": 20,
    },
    "reuters": {
        "name": "Reuters",
        "url": "https://www.reuters.com/world/",
        "adapter": "html_links",
        "selector": "a[href^='/world']",
        "max_items": 20,
    },
    "aljazeera": {
        "name": "Al Jazeera",
        "url": "https://www.aljazeera.com/",
        "adapter": "html_links",
        "selector": "a.u-clickable-card__link",
        "title_selector": "h3",
        "max_items": 20,
    },
}

# Feed-based sources, added to the default set when include_feed_sources is on
FEED_SOURCES: Dict[str, Dict[str, Any]] = {
    "bbc_rss": {
        "name": "BBC",
        "url": "http://feeds.bbci.co.uk/news/rss.xml",
        "adapter": "rss",
        "max_items": 20,
    },
    "guardian_rss": {
        "name": "The Guardian",
        "url": "https://www.theguardian.com/world/rss",
        "adapter": "rss",
        "max_items": 20,
    },
}

def default_sources(include_feeds: bool = False) -> Dict[str, Dict[str, Any]]:
    """Source configs the collector uses when none are passed explicitly."""
    if include_feeds:
        return {**NEWS_SOURCES, **FEED_SOURCES}
    return dict(NEWS_SOURCES)


# Query parameters stripped when canonicalizing links
TRACKING_PARAMS = ("utm_", "fbclid", "gclid", "mc_cid", "mc_eid")
