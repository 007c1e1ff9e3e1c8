"""
Base classes for Ingestion
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

import httpx
from pydantic import BaseModel

from core.entities import Article
from services.config import HttpConfig, SourceConfig

logger = logging.getLogger(__name__)


class SocialPost(BaseModel):
    """
    Platform-specific post from a forum/social source, converted into an
    Article before it reaches the cache.
    """
    id: str
    platform: Literal["reddit", "hackernews"]
    title: str
    content: str = ""
    url: str
    author: str = ""
    community: Optional[str] = None  # subreddit
    upvotes: int = 0
    comments: int = 0
    published_at: datetime


def from_epoch(value: Any) -> datetime:
    """Unix seconds as an aware UTC datetime. A missing value means now."""
    if value is None or value == "":
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_retries: int = 2,
    retry_delay: float = 1.0,
    **kwargs,
) -> httpx.Response:
    """
    GET with retries on connection errors, timeouts and 5xx responses.
    Other HTTP errors are raised immediately.
    """
    last_exception: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            resp = await client.get(url, **kwargs)
            resp.raise_for_status()
            return resp

        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500:
                raise
            last_exception = e
            logger.warning(
                f"Attempt {attempt}/{max_retries}: {url} returned {e.response.status_code}"
            )

        except httpx.TransportError as e:
            last_exception = e
            logger.warning(
                f"Attempt {attempt}/{max_retries}: {url} failed - {e.__class__.__name__}: {e}"
            )

        if attempt < max_retries:
            await asyncio.sleep(retry_delay * attempt)

    raise last_exception or httpx.TransportError(f"All attempts failed for {url}")


class SourceAdapter(ABC):
    """
    Base interface for all ingestion sources.
    One adapter serves exactly one configured source.
    """

    def __init__(
        self,
        source: SourceConfig,
        http: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.source = source
        self.http = http or HttpConfig()
        self.transport = transport

    @property
    def name(self) -> str:
        return self.source.name

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.http.timeout,
            headers={"User-Agent": self.http.user_agent},
            follow_redirects=True,
            transport=self.transport,
        )

    async def _get(self, client: httpx.AsyncClient, url: str, **kwargs) -> httpx.Response:
        return await fetch_with_retry(
            client,
            url,
            max_retries=self.http.max_retries,
            retry_delay=self.http.retry_delay,
            **kwargs,
        )

    @abstractmethod
    async def _fetch_articles(self) -> List[Article]:
        """Retrieve and normalize items. May raise; fetch() contains failures."""
        raise NotImplementedError

    async def fetch(self) -> List[Article]:
        """
        Fetch canonical articles from this source.
        Must NEVER raise uncaught exceptions.
        """
        try:
            articles = await self._fetch_articles()
        except Exception as e:
            logger.warning(f"[{self.name}] fetch failed: {e.__class__.__name__}: {e}")
            return []

        logger.info(f"[{self.name}] fetched {len(articles)} articles")
        return articles


class SocialAdapter(SourceAdapter):
    """
    Forum/social sources produce SocialPosts first.
    """

    @abstractmethod
    async def _fetch_posts(self) -> List[SocialPost]:
        raise NotImplementedError

    @abstractmethod
    def to_article(self, post: SocialPost) -> Article:
        raise NotImplementedError

    async def fetch_posts(self) -> List[SocialPost]:
        """Raw posts for this source. Never raises."""
        try:
            return await self._fetch_posts()
        except Exception as e:
            logger.warning(f"[{self.name}] post fetch failed: {e.__class__.__name__}: {e}")
            return []

    async def _fetch_articles(self) -> List[Article]:
        return [self.to_article(post) for post in await self._fetch_posts()]
