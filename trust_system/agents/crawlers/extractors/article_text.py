"""Article body text extraction.

Tries trafilatura first, then falls back to joining the page's ``<p>``
elements with BeautifulSoup. Output is whitespace-collapsed and capped.
"""

from typing import Optional

import trafilatura
from bs4 import BeautifulSoup
from loguru import logger

MAX_TEXT_LENGTH = 40000


class ArticleTextExtractor:
    """
    Extract readable body text from article HTML.

    Attributes:
        max_length: Character cap applied to the collapsed text
    """

    def __init__(self, max_length: int = MAX_TEXT_LENGTH):
        self.max_length = max_length
        self.logger = logger.bind(component="ArticleTextExtractor")

    def extract(self, html: str, url: str = "") -> str:
        """
        Extract text with fallback chain.

        Args:
            html: Raw HTML content
            url: Source URL for log context

        Returns:
            Collapsed text, possibly empty
        """
        text = self._extract_trafilatura(html, url)
        if not text:
            text = self._extract_paragraphs(html)
            if text:
                self.logger.debug("Text extracted with <p> fallback", url=url, length=len(text))

        return self._collapse(text or "")[: self.max_length]

    def _extract_trafilatura(self, html: str, url: str) -> Optional[str]:
        try:
            return trafilatura.extract(
                html,
                include_comments=False,
                include_tables=False,
                favor_recall=True,
            )
        except Exception as e:
            self.logger.debug("trafilatura failed", url=url, error=str(e))
            return None

    @staticmethod
    def _extract_paragraphs(html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        return " ".join(p.get_text(" ") for p in soup.find_all("p"))

    @staticmethod
    def _collapse(text: str) -> str:
        return " ".join(text.split())
