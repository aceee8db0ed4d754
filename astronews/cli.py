"""
Command-line interface for astronews.
"""
import sys
import json
import argparse
import logging
import asyncio
from typing import Any, List, Optional

from aiohttp import web
from dotenv import load_dotenv

from astronews.api.routes import create_app
from astronews.config import Config, load_config
from astronews.core.seed import load_seed_file, seed_storage
from astronews.core.storage import MemStorage
from astronews.formatters.markdown import MarkdownFormatter

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config: Config) -> None:
    """
    Configure root logging from the config's logging section.

    Args:
        config: Application configuration
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = config.get('logging.file')
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=str(config.get('logging.level', 'INFO')).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Astro News - celebrity news with astrological annotations")
    parser.add_argument("--config", help="Path to a YAML or JSON config file")
    parser.add_argument("--seed-file", help="Seed the store from this YAML or JSON file")
    parser.add_argument("--no-seed", action="store_true", help="Start with an empty store")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of Markdown")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Interface to bind")
    serve.add_argument("--port", type=int, help="Port to listen on")

    articles = subparsers.add_parser("articles", help="List articles, newest first")
    articles.add_argument("--category", help="Category slug to filter by")
    articles.add_argument("--limit", type=int, default=20, help="Maximum number of articles")
    articles.add_argument("--offset", type=int, default=0, help="Number of articles to skip")

    article = subparsers.add_parser("article", help="Show one article")
    article.add_argument("id", type=int)

    search = subparsers.add_parser("search", help="Search titles, summaries and hashtags")
    search.add_argument("query")

    hashtag = subparsers.add_parser("hashtag", help="Articles carrying a hashtag")
    hashtag.add_argument("tag")

    subparsers.add_parser("categories", help="List categories")
    subparsers.add_parser("actors", help="List actors")

    actor = subparsers.add_parser("actor", help="Show an actor profile with relationships")
    actor.add_argument("identifier", help="Actor id or slug")

    return parser.parse_args(argv)


async def build_storage(config: Config, seed: bool = True, seed_file: Optional[str] = None) -> MemStorage:
    """
    Create a store and seed it according to the config.

    Args:
        config: Application configuration
        seed: Whether to seed at all
        seed_file: Seed file overriding storage.seed_file

    Returns:
        The ready store
    """
    storage = MemStorage(all_category_slug=config.get('storage.all_category_slug', 'top'))
    if not seed or not config.get('storage.seed', True):
        logger.info("Starting with an empty store")
        return storage

    seed_file = seed_file or config.get('storage.seed_file')
    data = load_seed_file(seed_file) if seed_file else None
    await seed_storage(storage, data)
    return storage


def _print_json(payload: Any) -> None:
    if isinstance(payload, list):
        payload = [item.to_dict() if hasattr(item, 'to_dict') else item for item in payload]
    elif hasattr(payload, 'to_dict'):
        payload = payload.to_dict()
    print(json.dumps(payload, indent=2, ensure_ascii=False))


async def serve(storage: MemStorage, config: Config, host: Optional[str], port: Optional[int]) -> None:
    """
    Run the HTTP API until interrupted.
    """
    app = create_app(storage, config)
    runner = web.AppRunner(app)
    await runner.setup()
    host = host or config.get('server.host')
    port = port or config.get('server.port')
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Serving on http://{host}:{port}")
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


async def run_command(args: argparse.Namespace, storage: MemStorage) -> int:
    """
    Run a query subcommand against the store and print the result.

    Returns:
        Process exit code
    """
    formatter = MarkdownFormatter()

    if args.command == "categories":
        categories = await storage.get_categories()
        if args.json:
            _print_json(categories)
        else:
            for category in categories:
                print(f"- {category.name} ({category.slug})")
        return 0

    if args.command == "actors":
        actors = await storage.get_actors()
        if args.json:
            _print_json(actors)
        else:
            for actor in actors:
                print(f"- {formatter.format_actor_line(actor)}")
        return 0

    if args.command == "article":
        article = await storage.get_article_by_id(args.id)
        if article is None:
            logger.error(f"Article {args.id} not found")
            return 1
        if args.json:
            _print_json(article)
        else:
            print(formatter.format_article(article))
        return 0

    if args.command == "actor":
        if args.identifier.isdigit():
            actor = await storage.get_actor_by_id(int(args.identifier))
        else:
            actor = await storage.get_actor_by_slug(args.identifier)
        if actor is None:
            logger.error(f"Actor {args.identifier} not found")
            return 1
        articles = await storage.get_articles_by_actor(actor.id)
        relationships = await storage.get_actor_relationship_counts(actor.id)
        if args.json:
            payload = actor.to_dict()
            payload['articles'] = [a.to_dict() for a in articles]
            payload['relationships'] = [
                dict(other.to_dict(), sharedArticles=count) for other, count in relationships
            ]
            _print_json(payload)
        else:
            print(formatter.format_actor_profile(actor, articles, relationships))
        return 0

    if args.command == "articles":
        articles = await storage.get_articles(args.category, args.limit, args.offset)
        heading = f"Articles: {args.category}" if args.category else "Latest articles"
    elif args.command == "search":
        if not args.query.strip():
            logger.error("Search query is required")
            return 1
        articles = await storage.search_articles(args.query)
        heading = f"Search: {args.query}"
    elif args.command == "hashtag":
        articles = await storage.get_articles_by_hashtag(args.tag)
        heading = f"Hashtag: {args.tag}"
    else:
        logger.error(f"Unknown command: {args.command}")
        return 2

    if args.json:
        _print_json(articles)
    else:
        print(formatter.format_article_list(articles, heading=heading))
    return 0


async def async_main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.
    """
    load_dotenv(override=True)
    args = parse_args(argv)

    config = load_config(args.config)
    setup_logging(config)

    storage = await build_storage(config, seed=not args.no_seed, seed_file=args.seed_file)

    if args.command == "serve":
        await serve(storage, config, args.host, args.port)
        return 0

    return await run_command(args, storage)


def main():
    """
    Entry point for the command-line script.
    """
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"An error occurred: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
