"""
Ingest data from Hacker News
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from core.entities import Article, Engagement
from ingestion.base import SocialAdapter, SocialPost, from_epoch
from processing.normalizer import build_article
from processing.prefilter import is_relevant

logger = logging.getLogger(__name__)


class HackerNewsAdapter(SocialAdapter):
    BASE_URL = "https://hacker-news.firebaseio.com/v0"

    async def _fetch_story(self, client: httpx.AsyncClient, sid: int) -> Optional[Dict[str, Any]]:
        try:
            resp = await client.get(f"{self.BASE_URL}/item/{sid}.json")
            if resp.status_code != 200:
                return None
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Skipping story {sid}: {e}")
            return None

        if not data or data.get("type") != "story":
            return None
        return data

    async def _fetch_posts(self) -> List[SocialPost]:
        listing = self.source.url or "topstories"
        limit = self.source.limit

        async with self._client() as client:
            resp = await self._get(client, f"{self.BASE_URL}/{listing}.json")
            story_ids = resp.json()[: limit * 2]

            stories = await asyncio.gather(
                *(self._fetch_story(client, sid) for sid in story_ids)
            )

        posts: List[SocialPost] = []
        for data in stories:
            if data is None:
                continue
            if not is_relevant(data.get("title", ""), data.get("text"), keywords=self.source.keywords):
                continue

            sid = data["id"]
            posts.append(
                SocialPost(
                    id=f"hn-{sid}",
                    platform="hackernews",
                    title=data.get("title", ""),
                    content=data.get("text", "") or "",
                    url=data.get("url") or f"https://news.ycombinator.com/item?id={sid}",
                    author=data.get("by", ""),
                    upvotes=int(data.get("score", 0) or 0),
                    comments=int(data.get("descendants", 0) or 0),
                    published_at=from_epoch(data.get("time")),
                )
            )
            if len(posts) >= limit:
                break

        return posts

    def to_article(self, post: SocialPost) -> Article:
        return build_article(
            source_id=self.source.id,
            source_name=self.source.name,
            source_type=self.source.type,
            title=post.title,
            body=post.content,
            url=post.url,
            published_at=post.published_at,
            category=self.source.category,
            score_boost=post.upvotes // 10,
            engagement=Engagement(views=post.upvotes * 10, comments=post.comments),
        )
