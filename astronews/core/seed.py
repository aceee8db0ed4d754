"""
Demo data for the astronews content store.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List
import yaml

from astronews.core.storage import MemStorage

logger = logging.getLogger(__name__)

DEFAULT_SEED = {
    "categories": [
        {"name": "Top", "slug": "top", "color": "hsl(267, 45%, 51%)", "icon": "star"},
        {"name": "Entertainment", "slug": "entertainment", "color": "hsl(35, 91%, 48%)", "icon": "film"},
        {"name": "Celebrity", "slug": "celebrity", "color": "hsl(0, 84%, 60%)", "icon": "users"},
        {"name": "Lifestyle", "slug": "lifestyle", "color": "hsl(325, 78%, 56%)", "icon": "heart"},
        {"name": "World", "slug": "world", "color": "hsl(158, 64%, 52%)", "icon": "globe"},
        {"name": "Tech", "slug": "tech", "color": "hsl(195, 91%, 42%)", "icon": "cpu"},
    ],
    "actors": [
        {
            "name": "Taylor Swift",
            "slug": "taylor-swift",
            "category": "music",
            "sun_sign": "Sagittarius",
            "moon_sign": "Cancer",
            "rising_sign": "Scorpio",
            "profile_image": "https://via.placeholder.com/128",
        },
        {
            "name": "Elon Musk",
            "slug": "elon-musk",
            "category": "tech",
            "sun_sign": "Cancer",
            "moon_sign": "Virgo",
            "rising_sign": "Leo",
            "profile_image": "https://via.placeholder.com/128",
        },
        {
            "name": "Beyoncé",
            "slug": "beyonce",
            "category": "music",
            "sun_sign": "Virgo",
            "moon_sign": "Scorpio",
            "rising_sign": "Libra",
            "profile_image": "https://via.placeholder.com/128",
        },
    ],
    "articles": [
        {
            "title": "Taylor Swift Announces Surprise Album During Mercury Retrograde",
            "summary": "The pop superstar drops hints about her upcoming release, coinciding with powerful astrological transits...",
            "content": "Full article content would go here...",
            "category": "celebrity",
            "astro_analysis": (
                "This announcement comes during a powerful Mercury retrograde period, highlighting themes of "
                "revisiting past work and unexpected revelations. Swift's natal Mercury in Capricorn suggests "
                "this timing is particularly significant for her creative expression."
            ),
            "astro_glyphs": [
                {"planet": "mercury", "color": "hsl(210, 100%, 50%)", "symbol": "Rx"},
                {"planet": "venus", "color": "hsl(45, 100%, 50%)"},
                {"planet": "mars", "color": "hsl(0, 100%, 50%)"},
            ],
            "hashtags": ["#TaylorSwift", "#mercuryretrograde", "#newmusic"],
            "actors": ["taylor-swift"],
            "like_count": 247,
            "share_count": 89,
            "bookmark_count": 156,
            "is_celebrity": True,
        },
        {
            "title": "Elon Musk Launches New Venture Under Powerful Jupiter Transit",
            "summary": "SpaceX founder announces revolutionary project as Jupiter forms beneficial aspects to his natal chart...",
            "content": "Full article content would go here...",
            "category": "tech",
            "astro_analysis": (
                "Musk's announcement coincides with Jupiter transiting his 10th house of career and public image, "
                "suggesting this venture will have significant impact on his legacy and public perception."
            ),
            "astro_glyphs": [
                {"planet": "jupiter", "color": "hsl(35, 100%, 50%)", "symbol": "!"},
                {"planet": "saturn", "color": "hsl(45, 80%, 40%)"},
            ],
            "hashtags": ["#ElonMusk", "#Jupiter", "#innovation"],
            "actors": ["elon-musk"],
            "like_count": 189,
            "share_count": 67,
            "bookmark_count": 92,
            "is_celebrity": True,
        },
        {
            "title": "Global Climate Summit Begins During Powerful Eclipse Season",
            "summary": "World leaders gather as lunar eclipse creates intense transformational energy for environmental policy...",
            "content": "Full article content would go here...",
            "category": "world",
            "astro_analysis": (
                "The lunar eclipse in Scorpio brings intense transformational energy to global environmental "
                "discussions, highlighting the need for deep, systemic changes in how we approach climate policy."
            ),
            "astro_glyphs": [
                {"planet": "moon", "color": "hsl(210, 15%, 40%)", "symbol": "!"},
                {"planet": "sun", "color": "hsl(45, 100%, 60%)"},
                {"planet": "pluto", "color": "hsl(260, 70%, 40%)"},
            ],
            "hashtags": ["#eclipse", "#climate", "#transformation", "#globalchange"],
            "actors": [],
            "like_count": 324,
            "share_count": 143,
            "bookmark_count": 78,
            "is_celebrity": False,
        },
        {
            "title": "Venus in Gemini Brings Social Renaissance to Dating Apps",
            "summary": "Astrologers report surge in romantic connections as Venus enters communicative Gemini, affecting social dynamics...",
            "content": "Full article content would go here...",
            "category": "lifestyle",
            "astro_analysis": (
                "Venus's transit through Gemini encourages communication, curiosity, and intellectual connection "
                "in relationships. This is an ideal time for meeting new people and exploring different forms of "
                "romantic expression."
            ),
            "astro_glyphs": [
                {"planet": "venus", "color": "hsl(325, 100%, 60%)"},
                {"planet": "mercury", "color": "hsl(200, 100%, 50%)"},
            ],
            "hashtags": ["#VenusInGemini", "#dating", "#relationships"],
            "actors": [],
            "like_count": 156,
            "share_count": 45,
            "bookmark_count": 67,
            "is_celebrity": False,
        },
    ],
}


def load_seed_file(path: str) -> Dict[str, List[Dict[str, Any]]]:
    """
    Load seed data from a YAML or JSON file.

    Args:
        path: Path to the seed file

    Returns:
        Seed dictionary with categories, actors and articles lists

    Raises:
        ValueError: If the file format is not supported
    """
    seed_path = Path(path)
    with open(seed_path, 'r', encoding='utf-8') as f:
        if seed_path.suffix.lower() in ['.yaml', '.yml']:
            data = yaml.safe_load(f) or {}
        elif seed_path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported seed file format: {seed_path.suffix}")

    logger.info(f"Loaded seed data from {seed_path}")
    return data


async def seed_storage(storage: MemStorage, data: Dict[str, List[Dict[str, Any]]] = None) -> MemStorage:
    """
    Populate a store with categories, actors and articles.

    Articles name their category by slug ("category") and their actors by
    slug ("actors"); explicit category_id / actor_ids are used as given.
    published_at may be an ISO-8601 string or a YAML date or timestamp.

    Args:
        storage: The store to populate
        data: Seed dictionary, DEFAULT_SEED if omitted

    Returns:
        The populated store
    """
    data = DEFAULT_SEED if data is None else data

    for category in data.get('categories', []):
        await storage.create_category(category)

    for actor in data.get('actors', []):
        await storage.create_actor(actor)

    for entry in data.get('articles', []):
        article = dict(entry)

        category_slug = article.pop('category', None)
        if category_slug is not None:
            category = await storage.get_category_by_slug(category_slug)
            if category is None:
                raise ValueError(f"Seed article '{article.get('title')}' names unknown category '{category_slug}'")
            article['category_id'] = category.id

        actor_slugs = article.pop('actors', None)
        if actor_slugs is not None:
            actor_ids = []
            for slug in actor_slugs:
                actor = await storage.get_actor_by_slug(slug)
                if actor is None:
                    logger.warning(f"Seed article '{article.get('title')}' names unknown actor '{slug}'")
                    continue
                actor_ids.append(actor.id)
            article['actor_ids'] = actor_ids

        await storage.create_article(article)

    logger.info(
        f"Seeded {len(storage.categories)} categories, {len(storage.actors)} actors, "
        f"{len(storage.articles)} articles"
    )
    return storage
