"""
Builds canonical Articles from raw item fields and analyzer output
"""
import hashlib
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from core.entities import Article, Engagement
from core.knowledge import pillar_for
from core.scoring import boost, determine_priority, estimate_read_time
from processing.analyzer import analyze

SUMMARY_LENGTH = 200

_TAGS = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"\s+")


def strip_html(text: str) -> str:
    return _SPACES.sub(" ", _TAGS.sub(" ", text or "")).strip()


def article_id(source_id: str, url: str, title: str) -> str:
    """Stable id derived from the item's URL, or its title when there is none."""
    digest = hashlib.sha256((url or title).encode("utf-8")).hexdigest()
    return f"{source_id}-{digest[:12]}"


def summarize(body: str, fallback: str) -> str:
    if not body:
        return fallback
    if len(body) <= SUMMARY_LENGTH:
        return body
    return body[:SUMMARY_LENGTH].rstrip() + "..."


def build_article(
    *,
    source_id: str,
    source_name: str,
    source_type: str,
    title: str,
    body: str,
    url: str,
    published_at: Optional[datetime] = None,
    summary: Optional[str] = None,
    image_url: Optional[str] = None,
    category: Optional[str] = None,
    extra_tags: Iterable[str] = (),
    score_boost: int = 0,
    engagement: Optional[Engagement] = None,
    now: Optional[datetime] = None,
) -> Article:
    """
    Run the analyzer over one raw item and assemble the canonical Article.

    The configured category wins over the detected one. Priority and read
    time use the single canonical rules from core.scoring.
    """
    now = now or datetime.now(timezone.utc)
    title = strip_html(title)
    body = strip_html(body)
    published_at = published_at or now

    analysis = analyze(title, body, existing_tags=extra_tags)
    score = boost(analysis.relevance_score, score_boost)
    resolved_category = category or analysis.category

    return Article(
        id=article_id(source_id, url, title),
        title=title,
        summary=strip_html(summary) if summary else summarize(body, title),
        body=body or None,
        url=url,
        image_url=image_url,
        source_name=source_name,
        source_type=source_type,
        category=resolved_category,
        pillar=pillar_for(resolved_category),
        sectors=analysis.sectors,
        priority=determine_priority(title, score, published_at, now=now),
        regions=analysis.regions,
        tags=analysis.tags,
        keywords=analysis.keywords,
        published_at=published_at,
        fetched_at=now,
        relevance_score=score,
        read_time_minutes=estimate_read_time(body or title),
        engagement=engagement,
    )
