from typing import List

from core.entities import Article, Engagement
from ingestion.base import SocialAdapter, SocialPost, from_epoch
from processing.normalizer import build_article

MAX_CONTENT = 500


class RedditAdapter(SocialAdapter):
    """Hot posts of one subreddit; the configured url is the subreddit name."""

    BASE_URL = "https://www.reddit.com"

    @property
    def subreddit(self) -> str:
        return self.source.url.strip().removeprefix("r/")

    async def _fetch_posts(self) -> List[SocialPost]:
        async with self._client() as client:
            resp = await self._get(
                client,
                f"{self.BASE_URL}/r/{self.subreddit}/hot.json",
                params={"limit": self.source.limit},
            )
            children = (resp.json().get("data") or {}).get("children") or []

        posts: List[SocialPost] = []
        for child in children:
            data = child.get("data") or {}
            if "reddit.com/poll" in (data.get("url") or ""):
                continue

            posts.append(
                SocialPost(
                    id=f"reddit-{data.get('id', '')}",
                    platform="reddit",
                    title=data.get("title", ""),
                    content=(data.get("selftext") or "")[:MAX_CONTENT],
                    url=f"https://reddit.com{data.get('permalink', '')}",
                    author=data.get("author", "") or "",
                    community=data.get("subreddit", self.subreddit),
                    upvotes=int(data.get("score", 0) or 0),
                    comments=int(data.get("num_comments", 0) or 0),
                    published_at=from_epoch(data.get("created_utc")),
                )
            )

        return posts

    def to_article(self, post: SocialPost) -> Article:
        return build_article(
            source_id=self.source.id,
            source_name=f"Reddit r/{post.community or self.subreddit}",
            source_type=self.source.type,
            title=post.title,
            body=post.content,
            url=post.url,
            published_at=post.published_at,
            category=self.source.category,
            extra_tags=[post.community] if post.community else [],
            engagement=Engagement(views=post.upvotes * 5, comments=post.comments),
        )
