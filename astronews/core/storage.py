"""
In-memory content store for astronews.

The store owns every entity collection. Each collection is an id-keyed dict
with its own auto-increment counter; ids are never reused. Operations are
coroutines so a persistent backend can be dropped in behind the same
interface, but none of them ever awaits anything.
"""
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from astronews.core.models import (
    Actor,
    Article,
    ArticleWithDetails,
    AstroGlyph,
    Category,
    Following,
    User,
    UserBookmark,
    UserFollow,
    normalize_timestamp,
)
from astronews.utils.text import any_contains, contains_text, hashtag_key, normalize_hashtag, slugify

# Configure logging
logger = logging.getLogger(__name__)

# Slug that means "every category" when listing articles
ALL_CATEGORY_SLUG = 'top'

# Minimum number of shared articles before two actors count as related
RELATIONSHIP_THRESHOLD = 2

DEFAULT_LIMIT = 20

COLLECTIONS = ('users', 'categories', 'actors', 'articles', 'user_bookmarks', 'user_follows')


class MemStorage:
    """
    In-memory repository for categories, actors, articles, users,
    bookmarks and follows.
    """
    def __init__(self, all_category_slug: str = ALL_CATEGORY_SLUG):
        """
        Initialize an empty store.

        Args:
            all_category_slug: Category slug that disables filtering in get_articles
        """
        self.all_category_slug = all_category_slug
        self.users: Dict[int, User] = {}
        self.categories: Dict[int, Category] = {}
        self.actors: Dict[int, Actor] = {}
        self.articles: Dict[int, Article] = {}
        self.user_bookmarks: Dict[int, UserBookmark] = {}
        self.user_follows: Dict[int, UserFollow] = {}
        self.current_id = {name: 1 for name in COLLECTIONS}

    def _next_id(self, collection: str) -> int:
        next_id = self.current_id[collection]
        self.current_id[collection] += 1
        return next_id

    # User methods

    async def get_user(self, user_id: int) -> Optional[User]:
        """Return the user with this id, or None."""
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Return the user with this username, or None."""
        # Linear scan; collections are small and in memory
        return next((user for user in self.users.values() if user.username == username), None)

    async def create_user(self, payload: Mapping[str, Any]) -> User:
        """
        Create a user.

        Raises:
            ValueError: If the username is already taken
        """
        if await self.get_user_by_username(payload['username']) is not None:
            raise ValueError(f"Username already taken: {payload['username']}")
        user = User(id=self._next_id('users'), **payload)
        self.users[user.id] = user
        logger.debug(f"Created user {user.id} ({user.username})")
        return user

    # Category methods

    async def get_categories(self) -> List[Category]:
        """Return every category in creation order."""
        return list(self.categories.values())

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        """Return the category with this slug, or None. Linear scan."""
        return next((cat for cat in self.categories.values() if cat.slug == slug), None)

    async def create_category(self, payload: Mapping[str, Any]) -> Category:
        """
        Create a category.

        Raises:
            ValueError: If the slug is already in use
        """
        if await self.get_category_by_slug(payload['slug']) is not None:
            raise ValueError(f"Category slug already exists: {payload['slug']}")
        category = Category(id=self._next_id('categories'), **payload)
        self.categories[category.id] = category
        logger.debug(f"Created category {category.id} ({category.slug})")
        return category

    # Actor methods

    async def get_actors(self) -> List[Actor]:
        """Return every actor in creation order."""
        return list(self.actors.values())

    async def get_actor_by_id(self, actor_id: int) -> Optional[Actor]:
        """Return the actor with this id, or None."""
        return self.actors.get(actor_id)

    async def get_actor_by_slug(self, slug: str) -> Optional[Actor]:
        """Return the actor with this slug, or None. Linear scan."""
        return next((actor for actor in self.actors.values() if actor.slug == slug), None)

    async def create_actor(self, payload: Mapping[str, Any]) -> Actor:
        """
        Create an actor. A missing slug is derived from the name; empty
        optional fields are stored as None.

        Args:
            payload: Actor fields without the id

        Returns:
            The stored Actor
        """
        data = dict(payload)
        data['slug'] = data.get('slug') or slugify(data['name'])
        if await self.get_actor_by_slug(data['slug']) is not None:
            raise ValueError(f"Actor slug already exists: {data['slug']}")
        for key in ('sun_sign', 'moon_sign', 'rising_sign', 'profile_image'):
            data[key] = data.get(key) or None

        actor = Actor(id=self._next_id('actors'), **data)
        self.actors[actor.id] = actor
        logger.debug(f"Created actor {actor.id} ({actor.slug})")
        return actor

    # Article methods

    async def create_article(self, payload: Mapping[str, Any]) -> Article:
        """
        Create an article.

        Hashtags are stored in their '#'-prefixed form, duplicate actor ids
        are collapsed, and glyph mappings become AstroGlyph records.

        Args:
            payload: Article fields without the id; published_at is optional and
                may be an ISO-8601 string, a date or an aware datetime

        Returns:
            The stored Article

        Raises:
            ValueError: If category_id does not reference an existing category
                or published_at is not a valid timestamp
        """
        data = dict(payload)
        if data.get('category_id') not in self.categories:
            raise ValueError(f"Unknown category id: {data.get('category_id')}")

        data['astro_glyphs'] = [
            glyph if isinstance(glyph, AstroGlyph) else AstroGlyph(**glyph)
            for glyph in data.get('astro_glyphs', [])
        ]
        data['hashtags'] = [normalize_hashtag(tag) for tag in data.get('hashtags', [])]
        data['actor_ids'] = list(dict.fromkeys(data.get('actor_ids', [])))
        if data.get('published_at') is None:
            data['published_at'] = datetime.now()
        else:
            data['published_at'] = normalize_timestamp(data['published_at'])

        article = Article(id=self._next_id('articles'), **data)
        self.articles[article.id] = article
        logger.debug(f"Created article {article.id}: {article.title}")
        return article

    def _with_details(self, article: Article) -> ArticleWithDetails:
        """
        Join an article with its category and actors.

        Actor ids that no longer resolve are dropped. The category must
        exist; a dangling category_id raises KeyError.
        """
        category = self.categories[article.category_id]
        actors = [actor for actor in map(self.actors.get, article.actor_ids) if actor is not None]
        return ArticleWithDetails(
            id=article.id,
            title=article.title,
            summary=article.summary,
            content=article.content,
            category_id=article.category_id,
            astro_analysis=article.astro_analysis,
            published_at=article.published_at,
            astro_glyphs=list(article.astro_glyphs),
            hashtags=list(article.hashtags),
            actor_ids=list(article.actor_ids),
            like_count=article.like_count,
            share_count=article.share_count,
            bookmark_count=article.bookmark_count,
            is_celebrity=article.is_celebrity,
            category=category,
            actors=actors,
        )

    def _details(self, articles: Iterable[Article]) -> List[ArticleWithDetails]:
        return [self._with_details(article) for article in articles]

    async def get_articles(self, category_slug: Optional[str] = None,
                           limit: int = DEFAULT_LIMIT, offset: int = 0) -> List[ArticleWithDetails]:
        """
        List articles newest first, optionally filtered by category.

        An unknown category slug falls back to the unfiltered list.

        Args:
            category_slug: Category slug; None or the all-category slug means no filter
            limit: Maximum number of articles to return
            offset: Number of articles to skip

        Returns:
            One page of article views
        """
        article_list = list(self.articles.values())

        if category_slug and category_slug != self.all_category_slug:
            category = await self.get_category_by_slug(category_slug)
            if category is not None:
                article_list = [a for a in article_list if a.category_id == category.id]
            else:
                logger.warning(f"Unknown category slug '{category_slug}', returning all articles")

        # sorted() is stable, so equal timestamps keep insertion order
        article_list = sorted(article_list, key=lambda a: a.published_at, reverse=True)
        offset = max(offset, 0)
        limit = max(limit, 0)
        return self._details(article_list[offset:offset + limit])

    async def get_article_by_id(self, article_id: int) -> Optional[ArticleWithDetails]:
        """Return the article joined with its category and actors, or None."""
        article = self.articles.get(article_id)
        if article is None:
            return None
        return self._with_details(article)

    async def search_articles(self, query: str) -> List[ArticleWithDetails]:
        """
        Case-insensitive substring search over title, summary and hashtags.

        Results are in insertion order. Rejecting an empty query is left to
        the caller.
        """
        matches = [
            article for article in self.articles.values()
            if contains_text(article.title, query)
            or contains_text(article.summary, query)
            or any_contains(article.hashtags, query)
        ]
        return self._details(matches)

    async def get_articles_by_hashtag(self, hashtag: str) -> List[ArticleWithDetails]:
        """
        Articles carrying the hashtag, compared case-insensitively in
        canonical form, so "eclipse" and "#Eclipse" match the same articles.
        """
        key = hashtag_key(hashtag)
        matches = [
            article for article in self.articles.values()
            if any(hashtag_key(tag) == key for tag in article.hashtags)
        ]
        return self._details(matches)

    async def get_articles_by_actor(self, actor_id: int) -> List[ArticleWithDetails]:
        """Articles featuring the actor, in insertion order."""
        matches = [article for article in self.articles.values() if actor_id in article.actor_ids]
        return self._details(matches)

    # Engagement counters

    def _bump(self, article_id: int, counter: str, step: int) -> Optional[Article]:
        article = self.articles.get(article_id)
        if article is None:
            return None
        setattr(article, counter, max(0, getattr(article, counter) + step))
        return article

    async def increment_like_count(self, article_id: int) -> Optional[Article]:
        """Add one like. Returns the updated article, or None if it does not exist."""
        return self._bump(article_id, 'like_count', 1)

    async def increment_share_count(self, article_id: int) -> Optional[Article]:
        """Add one share. Returns the updated article, or None if it does not exist."""
        return self._bump(article_id, 'share_count', 1)

    # Relationship inference

    def _co_appearances(self, actor_id: int) -> Counter:
        counts = Counter()
        for article in self.articles.values():
            if actor_id not in article.actor_ids:
                continue
            for other_id in dict.fromkeys(article.actor_ids):
                if other_id != actor_id:
                    counts[other_id] += 1
        return counts

    async def get_actor_relationship_counts(self, actor_id: int) -> List[Tuple[Actor, int]]:
        """
        Actors sharing at least RELATIONSHIP_THRESHOLD articles with the
        given actor, paired with the number of shared articles.

        Ordered by shared-article count, highest first. Ties keep the order
        in which the other actor first co-appeared, so the result is
        deterministic for a given data set.

        Args:
            actor_id: The actor to find relationships for

        Returns:
            List of (Actor, shared article count) tuples
        """
        counts = self._co_appearances(actor_id)
        related = [
            (self.actors[other_id], count)
            for other_id, count in counts.items()
            if count >= RELATIONSHIP_THRESHOLD and other_id in self.actors
        ]
        related.sort(key=lambda pair: pair[1], reverse=True)
        return related

    async def get_actor_relationships(self, actor_id: int) -> List[Actor]:
        """Related actors, ordered as in get_actor_relationship_counts."""
        return [actor for actor, _ in await self.get_actor_relationship_counts(actor_id)]

    # Bookmarks

    def _find_bookmark(self, user_id: int, article_id: int) -> Optional[UserBookmark]:
        return next(
            (b for b in self.user_bookmarks.values() if b.user_id == user_id and b.article_id == article_id),
            None,
        )

    async def bookmark_article(self, payload: Mapping[str, Any]) -> UserBookmark:
        """
        Bookmark an article for a user.

        A (user, article) pair is bookmarked at most once: bookmarking again
        returns the existing record and leaves bookmark_count untouched.
        """
        existing = self._find_bookmark(payload['user_id'], payload['article_id'])
        if existing is not None:
            return existing

        bookmark = UserBookmark(id=self._next_id('user_bookmarks'), **payload)
        self.user_bookmarks[bookmark.id] = bookmark
        self._bump(bookmark.article_id, 'bookmark_count', 1)
        logger.debug(f"User {bookmark.user_id} bookmarked article {bookmark.article_id}")
        return bookmark

    async def remove_bookmark(self, user_id: int, article_id: int) -> None:
        """Delete the bookmark for this pair and decrement bookmark_count. No-op if absent."""
        bookmark = self._find_bookmark(user_id, article_id)
        if bookmark is not None:
            del self.user_bookmarks[bookmark.id]
            self._bump(article_id, 'bookmark_count', -1)

    async def get_user_bookmarks(self, user_id: int) -> List[ArticleWithDetails]:
        """
        Bookmarked articles for a user, in the order they were bookmarked.

        Bookmarks whose article no longer exists are skipped.
        """
        articles = [
            self.articles.get(b.article_id)
            for b in self.user_bookmarks.values()
            if b.user_id == user_id
        ]
        return self._details(article for article in articles if article is not None)

    # Follows

    def _add_follow(self, user_id: int, actor_id: Optional[int], hashtag: Optional[str]) -> UserFollow:
        if (actor_id is None) == (hashtag is None):
            raise ValueError("A follow needs exactly one of actor_id or hashtag")
        follow = UserFollow(
            id=self._next_id('user_follows'),
            user_id=user_id,
            actor_id=actor_id,
            hashtag=normalize_hashtag(hashtag) if hashtag is not None else None,
        )
        self.user_follows[follow.id] = follow
        logger.debug(f"User {user_id} followed {actor_id if actor_id is not None else follow.hashtag}")
        return follow

    async def follow_actor(self, payload: Mapping[str, Any]) -> UserFollow:
        """
        Follow an actor.

        Args:
            payload: user_id and actor_id

        Raises:
            ValueError: If actor_id is missing or the payload also names a hashtag
        """
        if payload.get('hashtag') is not None:
            raise ValueError("follow_actor takes an actor_id, not a hashtag")
        return self._add_follow(payload['user_id'], payload.get('actor_id'), None)

    async def follow_hashtag(self, payload: Mapping[str, Any]) -> UserFollow:
        """
        Follow a hashtag, stored in its canonical '#'-prefixed form.

        Raises:
            ValueError: If hashtag is missing or the payload also names an actor_id
        """
        if payload.get('actor_id') is not None:
            raise ValueError("follow_hashtag takes a hashtag, not an actor_id")
        return self._add_follow(payload['user_id'], None, payload.get('hashtag'))

    async def unfollow(self, user_id: int, actor_id: Optional[int] = None,
                       hashtag: Optional[str] = None) -> None:
        """
        Remove the first follow matching the user and the given actor or
        hashtag. The actor id wins when both are passed.

        Raises:
            ValueError: If neither actor_id nor hashtag is given
        """
        if actor_id is None and hashtag is None:
            raise ValueError("unfollow needs an actor_id or a hashtag")

        key = hashtag_key(hashtag) if actor_id is None else None
        for follow in self.user_follows.values():
            if follow.user_id != user_id:
                continue
            if key is None:
                found = follow.actor_id == actor_id
            else:
                found = follow.hashtag is not None and hashtag_key(follow.hashtag) == key
            if found:
                del self.user_follows[follow.id]
                break

    async def get_user_following(self, user_id: int) -> Following:
        """
        Actors and hashtags the user follows, in follow order.

        Args:
            user_id: The following user

        Returns:
            Following with resolved actors (unknown ids dropped) and hashtags
        """
        follows = [f for f in self.user_follows.values() if f.user_id == user_id]
        actors = [
            self.actors[f.actor_id] for f in follows
            if f.actor_id is not None and f.actor_id in self.actors
        ]
        hashtags = [f.hashtag for f in follows if f.hashtag is not None]
        return Following(actors=actors, hashtags=hashtags)
