"""
Text helpers shared by the store and the routes.
"""
import re
import unicodedata
from typing import Iterable, Optional

HASHTAG_PREFIX = '#'


def normalize_hashtag(tag: str) -> str:
    """
    Return the canonical stored form of a hashtag.

    Hashtags are stored with exactly one leading '#' and no surrounding
    whitespace; case is preserved for display.

    Args:
        tag: Raw hashtag, with or without the leading '#'

    Returns:
        The '#'-prefixed hashtag
    """
    tag = tag.strip().lstrip(HASHTAG_PREFIX).strip()
    return f"{HASHTAG_PREFIX}{tag}"


def hashtag_key(tag: str) -> str:
    """Comparison key for hashtags: canonical form, lower-cased."""
    return normalize_hashtag(tag).lower()


def contains_text(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test."""
    if haystack is None:
        return False
    return needle.lower() in haystack.lower()


def any_contains(values: Iterable[str], needle: str) -> bool:
    return any(contains_text(value, needle) for value in values)


def slugify(text: str) -> str:
    """
    Build a URL-safe slug from a display name ("Beyoncé" -> "beyonce").
    """
    text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    text = re.sub(r'[^a-zA-Z0-9\s-]', '', text).strip().lower()
    return re.sub(r'[\s_-]+', '-', text)
