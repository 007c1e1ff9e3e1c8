"""
NewsService - filtered, paginated reads and derived views over the
article cache.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from core.entities import Article, CacheGeneration
from core.schemas import CacheStats, NewsFilter, RegionNode, SectorStat, TrendingTag
from ingestion.base import SocialAdapter, SocialPost
from services.cache import ArticleCache
from services.config import SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_DAYS_BACK = 30
BREAKING_PRIORITIES = ("breaking", "high")

Predicate = Callable[[Article], bool]


def _trend(current: int, previous: Optional[int]) -> str:
    if previous is None or current == previous:
        return "stable"
    return "up" if current > previous else "down"


def sector_counts(articles: Sequence[Article]) -> Counter:
    return Counter(sector for a in articles for sector in a.sectors)


def tag_counts(articles: Sequence[Article]) -> Counter:
    return Counter(tag for a in articles for tag in a.tags)


def build_predicates(filters: NewsFilter, now: datetime) -> List[Predicate]:
    """
    Filter predicates in application order. The date window is always
    present: explicit from/to dates override the default of the last
    days_back (30) days.
    """
    predicates: List[Predicate] = []

    if filters.pillar:
        predicates.append(lambda a: a.pillar == filters.pillar)

    if filters.category:
        predicates.append(lambda a: a.category == filters.category)

    if filters.source_type:
        predicates.append(lambda a: a.source_type == filters.source_type)

    if filters.country:
        country = filters.country
        # Loose match links a city name to the region value
        predicates.append(
            lambda a: country in a.regions.countries
            or any(country in city for city in a.regions.cities)
        )

    if filters.city:
        predicates.append(lambda a: filters.city in a.regions.cities)

    if filters.sector:
        predicates.append(lambda a: filters.sector in a.sectors)

    if filters.search:
        query = filters.search.lower()
        predicates.append(
            lambda a: query in a.title.lower()
            or query in a.summary.lower()
            or any(query in t.lower() for t in a.tags)
        )

    to_date = filters.to_date or now
    if filters.from_date:
        from_date = filters.from_date
    else:
        days_back = filters.days_back if filters.days_back is not None else DEFAULT_DAYS_BACK
        from_date = now - timedelta(days=days_back)
    predicates.append(lambda a: from_date <= a.published_at <= to_date)

    return predicates


class NewsService:
    """
    Read side of the aggregator. Every view is computed on demand from one
    cache generation.
    """

    def __init__(self, cache: ArticleCache, sources: Sequence[SourceConfig] = ()):
        self.cache = cache
        self._sources = list(sources)

    async def _generation(self) -> CacheGeneration:
        return await self.cache.ensure_fresh()

    async def query(self, filters: Optional[NewsFilter] = None) -> List[Article]:
        """Filtered, paginated articles, newest first."""
        filters = filters or NewsFilter()
        generation = await self._generation()

        predicates = build_predicates(filters, self.cache.now())
        matched = [a for a in generation.articles if all(p(a) for p in predicates)]

        return matched[filters.offset: filters.offset + filters.limit]

    async def by_region(self, country: str, limit: int = 50) -> List[Article]:
        return await self.query(NewsFilter(country=country, limit=limit))

    async def by_sector(self, sector: str, limit: int = 50) -> List[Article]:
        return await self.query(NewsFilter(sector=sector, limit=limit))

    async def breaking_news(self, limit: int = 5) -> List[Article]:
        generation = await self._generation()
        return [a for a in generation.articles if a.priority in BREAKING_PRIORITIES][:limit]

    async def search(self, text: str) -> List[Article]:
        """Free-text match over title, body and tags of every cached article."""
        generation = await self._generation()
        q = text.lower()
        return [
            a for a in generation.articles
            if q in a.title.lower()
            or q in (a.body or "").lower()
            or any(q in t.lower() for t in a.tags)
        ]

    async def region_tree(self) -> List[RegionNode]:
        """
        Continent -> country -> city counts. Each article is attributed to
        the first continent, country and city it mentions only.
        """
        generation = await self._generation()

        tree: Dict[str, Dict] = {}
        for article in generation.articles:
            regions = article.regions
            continent = regions.continents[0] if regions.continents else "Global"
            country = regions.countries[0] if regions.countries else "Other"
            city = regions.cities[0] if regions.cities else None

            c_node = tree.setdefault(continent, {"count": 0, "countries": {}})
            c_node["count"] += 1

            co_node = c_node["countries"].setdefault(country, {"count": 0, "cities": Counter()})
            co_node["count"] += 1

            if city:
                co_node["cities"][city] += 1

        return [
            RegionNode(
                id=continent,
                name=continent,
                type="continent",
                article_count=c_data["count"],
                children=[
                    RegionNode(
                        id=country,
                        name=country,
                        type="country",
                        article_count=co_data["count"],
                        children=[
                            RegionNode(id=city, name=city, type="city", article_count=count)
                            for city, count in co_data["cities"].items()
                        ],
                    )
                    for country, co_data in c_data["countries"].items()
                ],
            )
            for continent, c_data in tree.items()
        ]

    async def sector_stats(self) -> List[SectorStat]:
        """Sector counts, with trend against the previous generation."""
        generation = await self._generation()
        counts = sector_counts(generation.articles)
        previous = self.cache.previous
        before = sector_counts(previous.articles) if previous else None

        stats = [
            SectorStat(
                sector=sector,
                count=count,
                trend=_trend(count, before.get(sector, 0) if before is not None else None),
            )
            for sector, count in counts.items()
        ]
        return sorted(stats, key=lambda s: s.count, reverse=True)

    async def trending_tags(self, limit: int = 10) -> List[TrendingTag]:
        generation = await self._generation()
        counts = tag_counts(generation.articles)
        previous = self.cache.previous
        before = tag_counts(previous.articles) if previous else None

        return [
            TrendingTag(
                topic=tag,
                hashtag="#" + "".join(tag.split()),
                count=count,
                trend=_trend(count, before.get(tag, 0) if before is not None else None),
            )
            for tag, count in counts.most_common(limit)
        ]

    async def social_posts(self, limit: int = 10) -> List[SocialPost]:
        """Raw posts from forum/social sources, most upvoted first."""
        social = [a for a in self.cache.adapters if isinstance(a, SocialAdapter)]
        outcomes = await self.cache.fan_out([a.fetch_posts for a in social])

        posts: List[SocialPost] = []
        for adapter, outcome in zip(social, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"[{adapter.name}] no posts: {outcome.__class__.__name__}: {outcome}")
                continue
            posts.extend(outcome)

        posts.sort(key=lambda p: p.upvotes, reverse=True)
        return posts[:limit]

    def sources(self) -> List[SourceConfig]:
        return list(self._sources)

    def stats(self) -> CacheStats:
        generation = self.cache.current
        return CacheStats(
            total_articles=len(generation.articles),
            last_updated=generation.built_at,
        )

    async def refresh(self) -> CacheStats:
        """Manual refresh trigger."""
        logger.info("Manual cache refresh requested")
        await self.cache.refresh()
        return self.stats()
