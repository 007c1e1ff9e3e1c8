from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple

SourceType = Literal["aggregator", "newspaper", "social", "forum"]
Priority = Literal["breaking", "high", "medium", "low"]

PRIORITIES: Tuple[str, ...] = ("breaking", "high", "medium", "low")


@dataclass(frozen=True)
class Regions:
    """
    Geography detected in an article. Each tuple is ordered by first
    detection and holds unique values.
    """
    cities: Tuple[str, ...] = ()
    countries: Tuple[str, ...] = ()
    continents: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Engagement:
    views: int = 0
    comments: int = 0


@dataclass(frozen=True)
class AnalysisResult:
    """
    Output of the content analyzer for one (title, body) pair.
    """
    regions: Regions
    sectors: Tuple[str, ...]
    category: str
    tags: Tuple[str, ...]
    keywords: Tuple[str, ...]
    relevance_score: int


@dataclass(frozen=True)
class Article:
    """
    Canonical representation of a news item, produced fresh on every
    refresh and never mutated afterwards.
    """
    id: str
    title: str
    summary: str
    url: str
    source_name: str
    source_type: str
    category: str
    pillar: str
    priority: str
    published_at: datetime
    fetched_at: datetime
    relevance_score: int
    read_time_minutes: int
    regions: Regions = field(default_factory=Regions)
    sectors: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    body: Optional[str] = None
    image_url: Optional[str] = None
    engagement: Optional[Engagement] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "body": self.body,
            "url": self.url,
            "imageUrl": self.image_url,
            "sourceName": self.source_name,
            "sourceType": self.source_type,
            "category": self.category,
            "contentPillar": self.pillar,
            "sectors": list(self.sectors),
            "priority": self.priority,
            "regions": {
                "cities": list(self.regions.cities),
                "countries": list(self.regions.countries),
                "continents": list(self.regions.continents),
            },
            "tags": list(self.tags),
            "keywords": list(self.keywords),
            "publishedAt": self.published_at.isoformat(),
            "fetchedAt": self.fetched_at.isoformat(),
            "relevanceScore": self.relevance_score,
            "readTimeMinutes": self.read_time_minutes,
            "engagement": (
                {"views": self.engagement.views, "comments": self.engagement.comments}
                if self.engagement else None
            ),
        }


@dataclass(frozen=True)
class CacheGeneration:
    """
    One complete, immutable result set held by the article cache.
    """
    articles: Tuple[Article, ...] = ()
    built_at: Optional[datetime] = None
