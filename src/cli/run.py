import argparse
import asyncio
import json
import logging
import sys
import time
from typing import Any, List, Optional

from pydantic import BaseModel, ValidationError

from core.schemas import NewsFilter
from ingestion.source_factory import create_adapters_from_config
from services.cache import ArticleCache
from services.config import ConfigError, load_config
from services.logging import setup_logging
from services.news_service import NewsService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trade-news",
        description="Aggregate, classify and query textile trade news",
    )
    parser.add_argument("--config", help="Path to config.yml")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")

    sub = parser.add_subparsers(dest="command", required=True)

    feed = sub.add_parser("feed", help="Filtered news feed")
    feed.add_argument("--pillar")
    feed.add_argument("--category")
    feed.add_argument("--source-type", dest="source_type")
    feed.add_argument("--country")
    feed.add_argument("--city")
    feed.add_argument("--sector")
    feed.add_argument("--search")
    feed.add_argument("--from-date", dest="from_date")
    feed.add_argument("--to-date", dest="to_date")
    feed.add_argument("--days-back", dest="days_back", type=int)
    feed.add_argument("--limit", type=int, default=50)
    feed.add_argument("--offset", type=int, default=0)

    breaking = sub.add_parser("breaking", help="Breaking and high priority news")
    breaking.add_argument("--limit", type=int, default=10)

    search = sub.add_parser("search", help="Free-text search over all cached articles")
    search.add_argument("text")

    social = sub.add_parser("social", help="Top forum/social posts")
    social.add_argument("--limit", type=int, default=10)

    trending = sub.add_parser("trending", help="Trending tags")
    trending.add_argument("--limit", type=int, default=10)

    sub.add_parser("regions", help="Continent/country/city tree")
    sub.add_parser("sectors", help="Sector statistics")
    sub.add_parser("sources", help="Configured sources")
    sub.add_parser("stats", help="Cache statistics")
    sub.add_parser("refresh", help="Force a cache refresh")

    return parser


def _jsonable(value: Any) -> Any:
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


async def dispatch(args: argparse.Namespace, service: NewsService) -> Any:
    command = args.command

    if command == "feed":
        filters = NewsFilter(
            pillar=args.pillar,
            category=args.category,
            source_type=args.source_type,
            country=args.country,
            city=args.city,
            sector=args.sector,
            search=args.search,
            from_date=args.from_date,
            to_date=args.to_date,
            days_back=args.days_back,
            limit=args.limit,
            offset=args.offset,
        )
        return await service.query(filters)
    if command == "breaking":
        return await service.breaking_news(args.limit)
    if command == "search":
        return await service.search(args.text)
    if command == "social":
        return await service.social_posts(args.limit)
    if command == "trending":
        return await service.trending_tags(args.limit)
    if command == "regions":
        return await service.region_tree()
    if command == "sectors":
        return await service.sector_stats()
    if command == "sources":
        return service.sources()
    if command == "stats":
        await service.cache.ensure_fresh()
        return service.stats()
    if command == "refresh":
        return await service.refresh()

    raise ValueError(f"Unknown command: {command}")


async def main(argv: Optional[List[str]] = None) -> int:
    start_time = time.perf_counter()
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or config.LOG_LEVEL)
    logger = logging.getLogger(__name__)

    adapters = create_adapters_from_config(config)
    cache = ArticleCache.from_config(adapters, config.cache)
    service = NewsService(cache, sources=config.sources)

    try:
        result = await dispatch(args, service)
    except ValidationError as e:
        print(f"Invalid filter: {e}", file=sys.stderr)
        return 2

    print(json.dumps(_jsonable(result), indent=2, default=str))

    logger.info(f"Command '{args.command}' finished in {time.perf_counter() - start_time:.2f}s")
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
