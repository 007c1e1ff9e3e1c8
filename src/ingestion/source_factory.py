"""
Source Factory - Creates ingestion adapters from configuration.
"""
import logging
from typing import List, Optional

import httpx

from ingestion.base import SourceAdapter
from ingestion.google_news import GoogleNewsAdapter
from ingestion.hackernews import HackerNewsAdapter
from ingestion.newsapi import NewsAPIAdapter
from ingestion.reddit import RedditAdapter
from ingestion.rss import RSSAdapter
from services.config import Config, HttpConfig, SourceConfig, get_enabled_sources

logger = logging.getLogger(__name__)


def create_source_adapter(
    source_config: SourceConfig,
    *,
    http: Optional[HttpConfig] = None,
    newsapi_key: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SourceAdapter:
    """
    Create a source adapter from configuration.

    Args:
        source_config: Configuration for the source
        http: Shared outbound HTTP settings
        newsapi_key: API key for NewsAPI sources
        transport: Optional httpx transport (tests)

    Returns:
        Configured SourceAdapter instance

    Raises:
        ValueError: If source type is unknown or the source is incomplete
    """
    adapter = source_config.adapter
    kwargs = {"http": http, "transport": transport}

    if adapter != "hackernews" and not source_config.url:
        raise ValueError(f"{adapter} source '{source_config.id}' requires 'url' field")

    if adapter == "rss":
        return RSSAdapter(source_config, **kwargs)

    elif adapter == "google_news":
        return GoogleNewsAdapter(source_config, **kwargs)

    elif adapter == "hackernews":
        return HackerNewsAdapter(source_config, **kwargs)

    elif adapter == "reddit":
        return RedditAdapter(source_config, **kwargs)

    elif adapter == "newsapi":
        return NewsAPIAdapter(source_config, api_key=newsapi_key, **kwargs)

    else:
        raise ValueError(f"Unknown source type: {adapter}")


def create_adapters_from_config(
    config: Config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[SourceAdapter]:
    """
    Create all enabled source adapters from configuration.

    Args:
        config: Loaded configuration with sources
        transport: Optional httpx transport shared by all adapters

    Returns:
        List of configured SourceAdapter instances
    """
    adapters = []

    for source_config in get_enabled_sources(config):
        try:
            adapter = create_source_adapter(
                source_config,
                http=config.http,
                newsapi_key=config.NEWSAPI_KEY,
                transport=transport,
            )
            adapters.append(adapter)
            logger.debug(f"Created {source_config.adapter} adapter: {source_config.id}")
        except ValueError as e:
            logger.error(f"Failed to create adapter for {source_config.id}: {e}")

    logger.info(f"Created {len(adapters)} source adapters")
    return adapters
