from astronews.core.storage import RELATIONSHIP_THRESHOLD

from conftest import article_payload


async def add_articles(storage, category_id, *actor_groups):
    return [
        await storage.create_article(article_payload(category_id, hours=i, actor_ids=list(group)))
        for i, group in enumerate(actor_groups)
    ]


async def test_threshold_is_two():
    assert RELATIONSHIP_THRESHOLD == 2


async def test_one_shared_article_is_not_a_relationship(storage, categories, actors):
    a, b, c, _ = [actor.id for actor in actors]
    # a and b share two articles, a and c share one
    await add_articles(storage, categories["tech"].id, [a, b, c], [a, b])

    result = await storage.get_actor_relationships(a)

    assert [actor.id for actor in result] == [b]


async def test_ordered_by_shared_article_count(storage, categories, actors):
    a, b, c, d = [actor.id for actor in actors]
    await add_articles(
        storage, categories["tech"].id,
        [a, b], [a, b],
        [a, c], [a, c], [a, c],
        [a, d], [a, d], [a, d], [a, d],
    )

    result = await storage.get_actor_relationship_counts(a)

    assert [(actor.id, count) for actor, count in result] == [(d, 4), (c, 3), (b, 2)]


async def test_ties_follow_first_co_appearance(storage, categories, actors):
    a, b, c, d = [actor.id for actor in actors]
    await add_articles(storage, categories["tech"].id, [a, c], [a, b], [a, b, c], [d, a, d])

    first = await storage.get_actor_relationships(a)
    second = await storage.get_actor_relationships(a)

    assert [actor.id for actor in first] == [c, b]
    assert [actor.id for actor in second] == [c, b]


async def test_relationship_is_symmetric_in_counts(storage, categories, actors):
    a, b, _, _ = [actor.id for actor in actors]
    await add_articles(storage, categories["tech"].id, [a, b], [b, a])

    assert [x.id for x in await storage.get_actor_relationships(a)] == [b]
    assert [x.id for x in await storage.get_actor_relationships(b)] == [a]


async def test_unresolvable_actors_are_dropped(storage, categories, actors):
    a, b, _, _ = [actor.id for actor in actors]
    await add_articles(storage, categories["tech"].id, [a, b, 77], [a, b, 77])

    result = await storage.get_actor_relationships(a)

    assert [actor.id for actor in result] == [b]


async def test_actor_without_articles_has_no_relationships(storage, actors):
    assert await storage.get_actor_relationships(actors[0].id) == []
    assert await storage.get_actor_relationships(999) == []


async def test_concrete_scenario(storage, categories, actors):
    # actor 1 shares articles 5 and 6 with actor 2, only article 5 with actor 3
    tech = categories["tech"].id
    for hour in range(4):
        await storage.create_article(article_payload(tech, hours=hour))
    fifth = await storage.create_article(article_payload(tech, hours=5, actor_ids=[1, 2, 3]))
    sixth = await storage.create_article(article_payload(tech, hours=6, actor_ids=[1, 2]))
    assert (fifth.id, sixth.id) == (5, 6)

    result = await storage.get_actor_relationships(1)

    assert [actor.id for actor in result] == [2]
