"""
Get topic feeds from Google News search
"""
from typing import Any, Optional, Tuple
from urllib.parse import urlencode

from core.entities import Article
from ingestion.rss import RSSAdapter, entry_body, entry_published
from processing.normalizer import build_article

BASE_URL = "https://news.google.com/rss/search"


def search_url(query: str, region: str, language: str = "en") -> str:
    """Google News RSS search URL for a query in one regional edition."""
    params = {
        "q": query,
        "hl": f"{language}-{region}",
        "gl": region,
        "ceid": f"{region}:{language}",
    }
    return f"{BASE_URL}?{urlencode(params)}"


def split_publisher(title: str) -> Tuple[str, Optional[str]]:
    """Google News titles read "Headline - Publisher"."""
    head, sep, tail = title.rpartition(" - ")
    if sep and head and tail:
        return head, tail
    return title, None


class GoogleNewsAdapter(RSSAdapter):
    """
    Query-style source: the configured url is a search query, turned into
    a feed URL for the configured region.
    """

    def feed_url(self) -> str:
        return search_url(self.source.url, self.source.region, self.source.language)

    def score_boost(self) -> int:
        return 0

    def entry_to_article(self, entry: Any) -> Article:
        title, publisher = split_publisher(entry.get("title", ""))
        source_element = entry.get("source") or {}
        source_name = source_element.get("title") or publisher or "Google News"

        return build_article(
            source_id=self.source.id,
            source_name=source_name,
            source_type=self.source.type,
            title=title,
            body=entry_body(entry),
            url=entry.get("link", ""),
            published_at=entry_published(entry),
            category=self.source.category,
            extra_tags=["google-news"],
        )
