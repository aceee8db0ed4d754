"""
HTTP routes for astronews.

The store is injected through create_app() and kept on the application
under STORAGE_KEY; handlers only call store operations.
"""
import functools
import json
import logging
import re
from typing import Any, Awaitable, Callable, Optional

from aiohttp import web

from astronews.config import Config
from astronews.core.storage import DEFAULT_LIMIT, MemStorage

# Configure logging
logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

NUMERIC_ID = re.compile(r'^\d+$')

STORAGE_KEY = web.AppKey('storage', MemStorage)
CONFIG_KEY = web.AppKey('config', Config)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _error(status: int, message: str) -> web.Response:
    return web.json_response({'error': message}, status=status)


def _dump(payload: Any) -> Any:
    if isinstance(payload, list):
        return [_dump(item) for item in payload]
    if hasattr(payload, 'to_dict'):
        return payload.to_dict()
    return payload


def _json(payload: Any, status: int = 200) -> web.Response:
    return web.json_response(_dump(payload), status=status)


class BadRequest(Exception):
    """Raised by handlers for malformed parameters or bodies."""


def handles(action: str) -> Callable[[Handler], Handler]:
    """
    Wrap a handler so failures become JSON error responses.

    ValueError and BadRequest map to 400; anything else is logged and
    mapped to 500 with "Failed to <action>".

    Args:
        action: Short description of what the handler does
    """
    def decorator(handler: Handler) -> Handler:
        @functools.wraps(handler)
        async def wrapper(request: web.Request) -> web.StreamResponse:
            try:
                return await handler(request)
            except web.HTTPException:
                raise
            except (BadRequest, ValueError) as e:
                return _error(400, str(e))
            except Exception:
                logger.exception(f"Failed to {action}: {request.method} {request.path}")
                return _error(500, f"Failed to {action}")
        return wrapper
    return decorator


def _storage(request: web.Request) -> MemStorage:
    return request.app[STORAGE_KEY]


def _path_id(request: web.Request, name: str) -> int:
    value = request.match_info[name]
    if not NUMERIC_ID.match(value):
        raise BadRequest(f"Invalid {name}: {value}")
    return int(value)


def _query_int(request: web.Request, name: str, default: int) -> int:
    """Integer query parameter; missing or non-numeric values give the default."""
    try:
        return int(request.query.get(name, default))
    except (TypeError, ValueError):
        return default


async def _json_body(request: web.Request) -> dict:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise BadRequest("Request body must be JSON")
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def _optional_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)) or not NUMERIC_ID.match(str(value)):
        raise BadRequest(f"Invalid {name}: {value}")
    return int(value)


# Categories

@routes.get('/api/categories')
@handles("fetch categories")
async def list_categories(request: web.Request) -> web.Response:
    return _json(await _storage(request).get_categories())


# Articles

@routes.get('/api/articles')
@handles("fetch articles")
async def list_articles(request: web.Request) -> web.Response:
    pagination = request.app[CONFIG_KEY].get('pagination', {})
    default_limit = pagination.get('default_limit', DEFAULT_LIMIT)
    max_limit = pagination.get('max_limit')

    limit = _query_int(request, 'limit', default_limit)
    if limit <= 0:
        limit = default_limit
    if max_limit:
        limit = min(limit, max_limit)
    offset = max(_query_int(request, 'offset', 0), 0)

    articles = await _storage(request).get_articles(request.query.get('category'), limit, offset)
    return _json(articles)


@routes.get('/api/articles/{id}')
@handles("fetch article")
async def get_article(request: web.Request) -> web.Response:
    article = await _storage(request).get_article_by_id(_path_id(request, 'id'))
    if article is None:
        return _error(404, "Article not found")
    return _json(article)


@routes.post('/api/articles/{id}/like')
@handles("like article")
async def like_article(request: web.Request) -> web.Response:
    article = await _storage(request).increment_like_count(_path_id(request, 'id'))
    if article is None:
        return _error(404, "Article not found")
    return _json({'id': article.id, 'likeCount': article.like_count})


@routes.post('/api/articles/{id}/share')
@handles("share article")
async def share_article(request: web.Request) -> web.Response:
    article = await _storage(request).increment_share_count(_path_id(request, 'id'))
    if article is None:
        return _error(404, "Article not found")
    return _json({'id': article.id, 'shareCount': article.share_count})


@routes.get('/api/search')
@handles("search articles")
async def search_articles(request: web.Request) -> web.Response:
    query = request.query.get('q', '').strip()
    if not query:
        return _error(400, "Search query is required")
    return _json(await _storage(request).search_articles(query))


@routes.get('/api/hashtag/{hashtag}')
@routes.get('/api/hashtags/{hashtag}')
@handles("fetch articles by hashtag")
async def articles_by_hashtag(request: web.Request) -> web.Response:
    return _json(await _storage(request).get_articles_by_hashtag(request.match_info['hashtag']))


# Actors

@routes.get('/api/actors')
@handles("fetch actors")
async def list_actors(request: web.Request) -> web.Response:
    return _json(await _storage(request).get_actors())


@routes.get('/api/actors/{identifier}')
@handles("fetch actor")
async def get_actor(request: web.Request) -> web.Response:
    identifier = request.match_info['identifier']
    storage = _storage(request)
    if NUMERIC_ID.match(identifier):
        actor = await storage.get_actor_by_id(int(identifier))
    else:
        actor = await storage.get_actor_by_slug(identifier)

    if actor is None:
        return _error(404, "Actor not found")
    return _json(actor)


@routes.get('/api/actors/{id}/articles')
@handles("fetch articles by actor")
async def articles_by_actor(request: web.Request) -> web.Response:
    return _json(await _storage(request).get_articles_by_actor(_path_id(request, 'id')))


@routes.get('/api/actors/{id}/relationships')
@handles("fetch actor relationships")
async def actor_relationships(request: web.Request) -> web.Response:
    actor_id = _path_id(request, 'id')
    storage = _storage(request)
    if await storage.get_actor_by_id(actor_id) is None:
        return _error(404, "Actor not found")

    related = await storage.get_actor_relationship_counts(actor_id)
    return _json([dict(actor.to_dict(), sharedArticles=count) for actor, count in related])


# User bookmarks and follows

@routes.get('/api/users/{user_id}/bookmarks')
@handles("fetch bookmarks")
async def list_bookmarks(request: web.Request) -> web.Response:
    return _json(await _storage(request).get_user_bookmarks(_path_id(request, 'user_id')))


@routes.post('/api/users/{user_id}/bookmarks')
@handles("bookmark article")
async def add_bookmark(request: web.Request) -> web.Response:
    user_id = _path_id(request, 'user_id')
    body = await _json_body(request)
    article_id = _optional_int(body.get('articleId'), 'articleId')
    if article_id is None:
        raise BadRequest("articleId is required")

    storage = _storage(request)
    if await storage.get_article_by_id(article_id) is None:
        return _error(404, "Article not found")

    bookmark = await storage.bookmark_article({'user_id': user_id, 'article_id': article_id})
    return _json(bookmark, status=201)


@routes.delete('/api/users/{user_id}/bookmarks/{article_id}')
@handles("remove bookmark")
async def delete_bookmark(request: web.Request) -> web.Response:
    await _storage(request).remove_bookmark(_path_id(request, 'user_id'), _path_id(request, 'article_id'))
    return web.Response(status=204)


@routes.get('/api/users/{user_id}/following')
@handles("fetch following")
async def list_following(request: web.Request) -> web.Response:
    return _json(await _storage(request).get_user_following(_path_id(request, 'user_id')))


@routes.post('/api/users/{user_id}/following')
@handles("follow")
async def add_follow(request: web.Request) -> web.Response:
    user_id = _path_id(request, 'user_id')
    body = await _json_body(request)
    actor_id = _optional_int(body.get('actorId'), 'actorId')
    hashtag = body.get('hashtag')
    storage = _storage(request)

    if actor_id is not None:
        if hashtag is not None:
            raise BadRequest("Follow either actorId or hashtag, not both")
        if await storage.get_actor_by_id(actor_id) is None:
            return _error(404, "Actor not found")
        follow = await storage.follow_actor({'user_id': user_id, 'actor_id': actor_id})
    elif isinstance(hashtag, str) and hashtag.strip('# '):
        follow = await storage.follow_hashtag({'user_id': user_id, 'hashtag': hashtag})
    else:
        raise BadRequest("actorId or hashtag is required")

    return _json(follow, status=201)


@routes.delete('/api/users/{user_id}/following')
@handles("unfollow")
async def remove_follow(request: web.Request) -> web.Response:
    user_id = _path_id(request, 'user_id')
    actor_id = _optional_int(request.query.get('actorId'), 'actorId')
    await _storage(request).unfollow(user_id, actor_id=actor_id, hashtag=request.query.get('hashtag'))
    return web.Response(status=204)


def create_app(storage: MemStorage, config: Optional[Config] = None) -> web.Application:
    """
    Build the aiohttp application around a store.

    Args:
        storage: The content store the handlers read and write
        config: Application configuration, defaults used if omitted

    Returns:
        The configured web.Application
    """
    app = web.Application()
    app[STORAGE_KEY] = storage
    app[CONFIG_KEY] = config if config is not None else Config()
    app.add_routes(routes)
    return app
