"""
Pydantic schemas for query filters and derived views
"""
from datetime import date, datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.entities import SourceType


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ISO-8601 string, date or datetime into an aware UTC datetime.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value).strip().replace("Z", "+00:00")
    return to_utc(datetime.fromisoformat(text))


class NewsFilter(BaseModel):
    """
    Filter parameters accepted by the query service.
    """
    pillar: Optional[str] = None
    category: Optional[str] = None
    source_type: Optional[SourceType] = None
    country: Optional[str] = None
    city: Optional[str] = None
    sector: Optional[str] = None
    search: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    days_back: Optional[int] = Field(default=None, ge=0)
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_timestamp(value)


class RegionNode(BaseModel):
    id: str
    name: str
    type: Literal["continent", "country", "city"]
    article_count: int
    children: List["RegionNode"] = []


class SectorStat(BaseModel):
    sector: str
    count: int
    trend: Literal["up", "down", "stable"]


class TrendingTag(BaseModel):
    topic: str
    hashtag: str
    count: int
    trend: Literal["up", "down", "stable"]


class CacheStats(BaseModel):
    total_articles: int
    last_updated: Optional[datetime]
