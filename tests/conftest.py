import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

from core.entities import Article, Regions
from core.knowledge import pillar_for

NOW = datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeAdapter:
    """Stands in for a SourceAdapter: returns canned articles and counts calls."""

    def __init__(self, name: str, articles: Sequence[Article] = (), error: Optional[Exception] = None, delay: float = 0.0):
        self.name = name
        self.articles = list(articles)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch(self) -> List[Article]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.articles)


def make_article(
    title: str,
    published_at: datetime = NOW,
    *,
    url: Optional[str] = None,
    countries: Sequence[str] = (),
    cities: Sequence[str] = (),
    continents: Sequence[str] = (),
    sectors: Sequence[str] = (),
    tags: Sequence[str] = (),
    category: str = "Industry",
    source_type: str = "newspaper",
    priority: str = "medium",
    summary: str = "",
    body: Optional[str] = None,
) -> Article:
    slug = "-".join(title.lower().split())
    return Article(
        id=f"test-{slug}",
        title=title,
        summary=summary or title,
        body=body,
        url=url if url is not None else f"https://example.com/{slug}",
        source_name="Test Source",
        source_type=source_type,
        category=category,
        pillar=pillar_for(category),
        priority=priority,
        published_at=published_at,
        fetched_at=NOW,
        relevance_score=60,
        read_time_minutes=1,
        regions=Regions(cities=tuple(cities), countries=tuple(countries), continents=tuple(continents)),
        sectors=tuple(sectors),
        tags=tuple(tags),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
