from datetime import date, datetime, timezone

import pytest

from astronews.core.models import Article, ArticleWithDetails, AstroGlyph, normalize_timestamp

from conftest import BASE_TIME, article_payload


async def test_getters_return_none_when_missing(storage):
    assert await storage.get_user(1) is None
    assert await storage.get_user_by_username("nobody") is None
    assert await storage.get_category_by_slug("tech") is None
    assert await storage.get_actor_by_id(1) is None
    assert await storage.get_actor_by_slug("ada") is None
    assert await storage.get_article_by_id(1) is None


async def test_ids_are_per_collection_and_never_reused(storage, categories):
    assert [c.id for c in categories.values()] == [1, 2, 3]

    first = await storage.create_actor({"name": "Ada", "category": "tech"})
    assert first.id == 1

    del storage.actors[first.id]
    second = await storage.create_actor({"name": "Bob", "category": "tech"})
    assert second.id == 2


async def test_create_user_and_lookup(storage):
    user = await storage.create_user({"username": "stargazer", "password": "opaque"})

    assert user.id == 1
    assert await storage.get_user(1) == user
    assert await storage.get_user_by_username("stargazer") == user

    with pytest.raises(ValueError):
        await storage.create_user({"username": "stargazer", "password": "other"})


async def test_duplicate_slugs_are_rejected(storage, categories):
    with pytest.raises(ValueError):
        await storage.create_category({"name": "Tech 2", "slug": "tech", "color": "x", "icon": "y"})

    await storage.create_actor({"name": "Ada", "slug": "ada", "category": "tech"})
    with pytest.raises(ValueError):
        await storage.create_actor({"name": "Ada Again", "slug": "ada", "category": "tech"})


async def test_create_actor_fills_slug_and_nulls(storage):
    actor = await storage.create_actor({"name": "Beyoncé", "category": "music", "sun_sign": ""})

    assert actor.slug == "beyonce"
    assert actor.sun_sign is None
    assert actor.moon_sign is None
    assert actor.rising_sign is None
    assert actor.profile_image is None
    assert await storage.get_actor_by_slug("beyonce") == actor


async def test_create_article_applies_defaults(storage, categories):
    payload = {
        "title": "Venus enters Gemini",
        "summary": "Romance gets chatty",
        "content": "Long body",
        "category_id": categories["tech"].id,
        "astro_analysis": "Communication rules.",
    }
    article = await storage.create_article(payload)

    assert isinstance(article, Article)
    assert article.like_count == 0
    assert article.share_count == 0
    assert article.bookmark_count == 0
    assert article.is_celebrity is False
    assert article.hashtags == []
    assert article.actor_ids == []
    assert article.published_at is not None


async def test_create_then_get_round_trip(storage, categories, actors):
    payload = article_payload(
        categories["tech"].id,
        title="Jupiter blesses a launch",
        astro_glyphs=[{"planet": "jupiter", "color": "orange", "symbol": "!"}, {"planet": "saturn", "color": "gold"}],
        hashtags=["#Jupiter", "innovation"],
        actor_ids=[actors[1].id, actors[0].id],
        like_count=5,
        is_celebrity=True,
    )
    created = await storage.create_article(payload)
    view = await storage.get_article_by_id(created.id)

    assert isinstance(view, ArticleWithDetails)
    for key in ("title", "summary", "content", "category_id", "astro_analysis", "published_at",
                "like_count", "is_celebrity"):
        assert getattr(view, key) == payload[key]
    assert view.share_count == 0
    assert view.bookmark_count == 0
    assert view.astro_glyphs == [AstroGlyph("jupiter", "orange", "!"), AstroGlyph("saturn", "gold")]
    assert view.hashtags == ["#Jupiter", "#innovation"]
    assert view.category == categories["tech"]
    assert [a.name for a in view.actors] == ["Bob", "Ada"]


async def test_create_article_rejects_unknown_category(storage):
    with pytest.raises(ValueError):
        await storage.create_article(article_payload(42))


async def test_duplicate_actor_ids_are_collapsed(storage, categories, actors):
    article = await storage.create_article(
        article_payload(categories["tech"].id, actor_ids=[actors[0].id, actors[1].id, actors[0].id])
    )
    assert article.actor_ids == [actors[0].id, actors[1].id]


async def test_dangling_actor_ids_are_dropped_from_views(storage, categories, actors):
    article = await storage.create_article(
        article_payload(categories["tech"].id, actor_ids=[actors[0].id, 99, actors[2].id])
    )
    del storage.actors[actors[2].id]

    view = await storage.get_article_by_id(article.id)

    assert [a.id for a in view.actors] == [actors[0].id]
    assert view.actor_ids == [actors[0].id, 99, actors[2].id]


async def test_dangling_category_fails_fast(storage, categories):
    article = await storage.create_article(article_payload(categories["world"].id))
    del storage.categories[categories["world"].id]

    with pytest.raises(KeyError):
        await storage.get_article_by_id(article.id)


async def test_views_do_not_share_lists_with_stored_article(storage, categories):
    article = await storage.create_article(article_payload(categories["tech"].id, hashtags=["#a"]))
    view = await storage.get_article_by_id(article.id)

    view.hashtags.append("#b")

    assert storage.articles[article.id].hashtags == ["#a"]


async def test_increment_counters(storage, categories):
    article = await storage.create_article(article_payload(categories["tech"].id, like_count=3))

    liked = await storage.increment_like_count(article.id)
    shared = await storage.increment_share_count(article.id)

    assert liked.like_count == 4
    assert shared.share_count == 1
    assert await storage.increment_like_count(999) is None


async def test_to_dict_uses_wire_names(storage, categories, actors):
    article = await storage.create_article(article_payload(
        categories["tech"].id,
        astro_glyphs=[{"planet": "moon", "color": "grey"}],
        actor_ids=[actors[0].id],
    ))
    data = (await storage.get_article_by_id(article.id)).to_dict()

    assert data["categoryId"] == categories["tech"].id
    assert data["publishedAt"] == BASE_TIME.isoformat()
    assert data["astroGlyphs"] == [{"planet": "moon", "color": "grey"}]
    assert data["isCelebrity"] is False
    assert data["category"]["slug"] == "tech"
    assert data["actors"][0]["sunSign"] is None
    assert data["actors"][0]["profileImage"] is None


def test_normalize_timestamp_forms():
    utc = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    local = utc.astimezone().replace(tzinfo=None)

    assert normalize_timestamp(date(2024, 1, 2)) == datetime(2024, 1, 2)
    assert normalize_timestamp("2024-01-02T03:04:05") == datetime(2024, 1, 2, 3, 4, 5)
    assert normalize_timestamp("2024-01-02T03:04:05Z") == local
    assert normalize_timestamp(utc) == local
    assert normalize_timestamp(BASE_TIME) is BASE_TIME


async def test_create_article_rejects_bad_timestamp(storage, categories):
    with pytest.raises(ValueError):
        await storage.create_article(article_payload(categories["tech"].id, published_at="soon"))
    with pytest.raises(ValueError):
        await storage.create_article(article_payload(categories["tech"].id, published_at=12))
