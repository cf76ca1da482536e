"""Article content extractors."""

from trust_system.agents.crawlers.extractors.article_text import (
    MAX_TEXT_LENGTH,
    ArticleTextExtractor,
)

__all__ = ["ArticleTextExtractor", "MAX_TEXT_LENGTH"]
