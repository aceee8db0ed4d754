from datetime import datetime, timedelta

import pytest

from astronews.core.seed import seed_storage
from astronews.core.storage import MemStorage

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


def article_payload(category_id, title="Untitled", hours=0, **overrides):
    """Minimal article payload published `hours` after BASE_TIME."""
    payload = {
        "title": title,
        "summary": f"Summary of {title}",
        "content": "Body",
        "category_id": category_id,
        "astro_analysis": "Mercury is doing things.",
        "published_at": BASE_TIME + timedelta(hours=hours),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def storage():
    return MemStorage()


@pytest.fixture
async def seeded(storage):
    return await seed_storage(storage)


@pytest.fixture
async def categories(storage):
    top = await storage.create_category({"name": "Top", "slug": "top", "color": "purple", "icon": "star"})
    tech = await storage.create_category({"name": "Tech", "slug": "tech", "color": "blue", "icon": "cpu"})
    world = await storage.create_category({"name": "World", "slug": "world", "color": "green", "icon": "globe"})
    return {"top": top, "tech": tech, "world": world}


@pytest.fixture
async def actors(storage):
    names = ["Ada", "Bob", "Cyd", "Dee"]
    return [
        await storage.create_actor({"name": name, "category": "music"})
        for name in names
    ]
