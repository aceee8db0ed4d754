"""
Markdown formatting utilities for astronews.
"""
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from astronews.core.models import Actor, ArticleWithDetails, AstroGlyph

# Configure logging
logger = logging.getLogger(__name__)

PLANET_SYMBOLS = {
    "sun": "☉",
    "moon": "☽",
    "mercury": "☿",
    "venus": "♀",
    "mars": "♂",
    "jupiter": "♃",
    "saturn": "♄",
    "uranus": "♅",
    "neptune": "♆",
    "pluto": "♇",
}


class MarkdownFormatter:
    """
    Formats article views and actor profiles into Markdown content.
    """
    def __init__(self, summary_word_limit: int = 60):
        """
        Initialize the MarkdownFormatter.

        Args:
            summary_word_limit: Maximum number of summary words shown in listings
        """
        self.summary_word_limit = summary_word_limit

    def _truncate_words(self, text: str, word_limit: int) -> str:
        words = text.split()
        if len(words) <= word_limit:
            return text
        return ' '.join(words[:word_limit]) + '...'

    def format_glyphs(self, glyphs: List[AstroGlyph]) -> str:
        """
        Render astro glyphs as planet symbols, e.g. "☿Rx ♀ ♂".
        """
        rendered = []
        for glyph in glyphs:
            symbol = PLANET_SYMBOLS.get(glyph.planet.lower(), glyph.planet.title())
            rendered.append(f"{symbol}{glyph.symbol or ''}")
        return ' '.join(rendered)

    def _format_date(self, published_at: datetime) -> str:
        return published_at.strftime("%B %d, %Y")

    def format_article_summary(self, article: ArticleWithDetails) -> str:
        """
        Format one article as a listing entry.

        Args:
            article: The article view to format

        Returns:
            Markdown for the entry
        """
        category = article.category.name if article.category else "Uncategorized"
        lines = [
            f"### {article.title}",
            "",
            f"**Category:** {category}\t**Published:** {self._format_date(article.published_at)}",
        ]
        if article.astro_glyphs:
            lines.append(f"**Transits:** {self.format_glyphs(article.astro_glyphs)}")
        if article.actors:
            lines.append(f"**People:** {', '.join(actor.name for actor in article.actors)}")
        lines.extend(["", self._truncate_words(article.summary, self.summary_word_limit)])
        if article.hashtags:
            lines.extend(["", ' '.join(article.hashtags)])
        lines.extend([
            "",
            f"♥ {article.like_count}  ↗ {article.share_count}  🔖 {article.bookmark_count}",
            "",
        ])
        return '\n'.join(lines)

    def format_article(self, article: ArticleWithDetails) -> str:
        """
        Format a full article page with its astro analysis.

        Args:
            article: The article view to format

        Returns:
            Markdown for the article
        """
        lines = [
            f"# {article.title}",
            "",
            f"*{article.category.name if article.category else 'Uncategorized'} · "
            f"{self._format_date(article.published_at)}*",
            "",
            article.summary,
            "",
            article.content,
            "",
            "## Astro Analysis",
            "",
        ]
        if article.astro_glyphs:
            lines.extend([self.format_glyphs(article.astro_glyphs), ""])
        lines.extend([article.astro_analysis, ""])

        if article.actors:
            lines.extend(["## People in this story", ""])
            lines.extend(f"- {self.format_actor_line(actor)}" for actor in article.actors)
            lines.append("")

        if article.hashtags:
            lines.extend([' '.join(article.hashtags), ""])

        return '\n'.join(lines)

    def format_article_list(self, articles: List[ArticleWithDetails], heading: Optional[str] = None) -> str:
        """
        Format a list of articles, newest first as given.

        Args:
            articles: Article views to format
            heading: Optional section heading

        Returns:
            Markdown for the list
        """
        parts = []
        if heading:
            parts.append(f"## {heading}\n")
        if not articles:
            parts.append("*No articles found.*\n")
        for article in articles:
            parts.append(self.format_article_summary(article))
        logger.debug(f"Formatted {len(articles)} articles")
        return '\n'.join(parts)

    def format_actor_line(self, actor: Actor) -> str:
        signs = [
            f"{label} {sign}" for label, sign in (
                ("☉", actor.sun_sign), ("☽", actor.moon_sign), ("AC", actor.rising_sign)
            ) if sign
        ]
        suffix = f" ({', '.join(signs)})" if signs else ""
        return f"**{actor.name}** [{actor.category}]{suffix}"

    def format_actor_profile(self, actor: Actor, articles: List[ArticleWithDetails],
                             relationships: List[Tuple[Actor, int]]) -> str:
        """
        Format an actor profile with their articles and inferred relationships.

        Args:
            actor: The actor to format
            articles: Articles featuring the actor
            relationships: (Actor, shared article count) pairs

        Returns:
            Markdown for the profile
        """
        lines = [f"# {actor.name}", "", self.format_actor_line(actor), ""]

        if relationships:
            lines.extend(["## Relationships", ""])
            for other, count in relationships:
                lines.append(f"- {other.name}: {count} shared articles")
            lines.append("")

        lines.append(self.format_article_list(articles, heading="Articles"))
        return '\n'.join(lines)
