"""
Module to score every article: relevance, priority and read time
"""
import math
from datetime import datetime, timezone
from typing import Optional, Sequence

from core.entities import Regions
from core.knowledge import (
    CORE_SECTORS,
    PRIORITY_COUNTRIES,
    TITLE_IMPORTANCE_TERMS,
    URGENT_TERMS,
)

BASE_SCORE = 50
MAX_SCORE = 100
WORDS_PER_MINUTE = 200


def relevance_score(
    regions: Regions,
    sectors: Sequence[str],
    title: str,
    body: str,
) -> int:
    """
    Heuristic relevance of an article to the textile trade audience.
    Always in [50, 100].
    """
    score = BASE_SCORE

    if regions.cities:
        score += 15
    if regions.countries:
        score += 10

    for country in regions.countries:
        if country in PRIORITY_COUNTRIES:
            score += 5

    score += min(len(sectors) * 5, 20)

    for sector in sectors:
        if sector in CORE_SECTORS:
            score += 3

    title_lower = title.lower()
    for term in TITLE_IMPORTANCE_TERMS:
        if term in title_lower:
            score += 5

    if len(body) > 500:
        score += 5
    if len(body) > 1000:
        score += 5

    return min(score, MAX_SCORE)


def boost(score: int, amount: int) -> int:
    """Add a source-specific boost, keeping the score inside its bounds."""
    return max(BASE_SCORE, min(score + amount, MAX_SCORE))


def determine_priority(
    title: str,
    score: int,
    published_at: datetime,
    now: Optional[datetime] = None,
) -> str:
    """
    Urgency classification combining recency and relevance.
    """
    now = now or datetime.now(timezone.utc)
    hours_old = (now - published_at).total_seconds() / 3600
    title_lower = title.lower()

    if any(term in title_lower for term in URGENT_TERMS) and hours_old < 6:
        return "breaking"

    if score >= 80 and hours_old < 24:
        return "high"

    if score >= 60 or hours_old < 48:
        return "medium"

    return "low"


def estimate_read_time(text: str) -> int:
    """Minutes to read at 200 words per minute, at least one."""
    word_count = len(text.split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))
