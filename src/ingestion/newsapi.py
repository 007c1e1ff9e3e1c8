"""
Keyword search against NewsAPI.org (https://newsapi.org/docs)
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from core.entities import Article
from core.schemas import parse_timestamp
from ingestion.base import SourceAdapter
from processing.normalizer import build_article
from services.config import HttpConfig, SourceConfig

logger = logging.getLogger(__name__)

SEARCH_WINDOW_DAYS = 30


class NewsAPIAdapter(SourceAdapter):
    """
    Query-style source: the configured url is the search keyword.
    Disabled when no API key is configured.
    """

    BASE_URL = "https://newsapi.org/v2"

    def __init__(
        self,
        source: SourceConfig,
        api_key: Optional[str],
        http: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(source, http=http, transport=transport)
        self.api_key = api_key

    def _params(self, now: datetime) -> Dict[str, Any]:
        start = now - timedelta(days=SEARCH_WINDOW_DAYS)
        return {
            "q": self.source.url,
            "language": self.source.language,
            "sortBy": "publishedAt",
            "pageSize": self.source.limit,
            "from": start.date().isoformat(),
            "to": now.date().isoformat(),
        }

    def item_to_article(self, item: Dict[str, Any]) -> Article:
        try:
            published_at = parse_timestamp(item.get("publishedAt"))
        except ValueError:
            logger.debug(f"Unparseable publishedAt for '{item.get('title')}'")
            published_at = None

        description = item.get("description") or ""
        body = description or item.get("content") or ""
        return build_article(
            source_id=self.source.id,
            source_name=(item.get("source") or {}).get("name") or self.source.name,
            source_type=self.source.type,
            title=item.get("title", ""),
            body=body,
            summary=description or None,
            url=item.get("url", ""),
            image_url=item.get("urlToImage"),
            published_at=published_at,
            category=self.source.category,
        )

    async def _fetch_articles(self) -> List[Article]:
        if not self.api_key:
            logger.warning(f"[{self.name}] NewsAPI key not configured, skipping")
            return []

        async with self._client() as client:
            resp = await self._get(
                client,
                f"{self.BASE_URL}/everything",
                params=self._params(datetime.now(timezone.utc)),
                headers={"X-Api-Key": self.api_key},
            )
            data = resp.json()

        if data.get("status") != "ok":
            raise ValueError(f"NewsAPI error: {data.get('message', 'unknown')}")

        logger.debug(f"[{self.name}] {data.get('totalResults', 0)} results for '{self.source.url}'")

        return [
            self.item_to_article(item)
            for item in data.get("articles", [])
            if item.get("title") and item["title"] != "[Removed]"
        ]
