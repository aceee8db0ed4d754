"""
Astro News - celebrity and entertainment news annotated with astrology.

An in-memory content store for articles, categories and actors, with
hashtag and full-text lookups, co-appearance based actor relationships,
user bookmarks and follows, served over a small aiohttp API.
"""

__version__ = "0.1.0"
