"""
Content analyzer.

Derives geography, sectors, category, tags, keywords and a relevance score
from an article's title and body using the static keyword tables. Pure and
deterministic: no I/O and no state between calls.
"""
import re
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from core.entities import AnalysisResult, Regions
from core.knowledge import (
    CATEGORY_PATTERNS,
    CONTINENT_COUNTRIES,
    DEFAULT_CATEGORY,
    HASHTAG_PATTERN,
    REGION_PATTERNS,
    SECTOR_PATTERNS,
    STOPWORDS,
    TAG_PATTERN_GROUPS,
)
from core.scoring import relevance_score

MAX_TAGS = 10
MAX_KEYWORDS = 15
TITLE_MATCH_BONUS = 3

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def detect_regions(text: str) -> Regions:
    cities: List[str] = []
    countries: List[str] = []
    continents: List[str] = []

    for pattern, entry in REGION_PATTERNS:
        if pattern.search(text):
            if entry.city:
                cities.append(entry.city)
            countries.append(entry.country)
            continents.append(entry.continent)

    # Close gaps where a country matched without its continent
    for country in _unique(countries):
        for continent, members in CONTINENT_COUNTRIES.items():
            if country in members:
                continents.append(continent)

    return Regions(
        cities=_unique(cities),
        countries=_unique(countries),
        continents=_unique(continents),
    )


def detect_sectors(text: str) -> Tuple[str, ...]:
    return tuple(
        sector
        for sector, patterns in SECTOR_PATTERNS.items()
        if any(p.search(text) for p in patterns)
    )


def detect_category(text: str, title: str) -> str:
    """
    Highest scoring category; ties go to the earlier category and an
    all-zero score falls back to the default category.
    """
    title_lower = title.lower()
    scores: Dict[str, int] = {}

    for category, patterns in CATEGORY_PATTERNS.items():
        score = 0
        for pattern in patterns:
            occurrences = len(pattern.findall(text))
            if not occurrences:
                continue
            score += occurrences
            if pattern.search(title_lower):
                score += TITLE_MATCH_BONUS
        scores[category] = score

    best_category = DEFAULT_CATEGORY
    best_score = 0
    for category, score in scores.items():
        if score > best_score:
            best_category, best_score = category, score

    return best_category


def extract_tags(text: str, existing_tags: Optional[Iterable[str]] = None) -> Tuple[str, ...]:
    tags: List[str] = [t for t in (existing_tags or []) if t]

    for _group, pattern in TAG_PATTERN_GROUPS:
        for match in pattern.finditer(text):
            tag = _WHITESPACE.sub("-", match.group(0).lower())
            if len(tag) > 2:
                tags.append(tag)

    for match in HASHTAG_PATTERN.finditer(text):
        word = match.group(1)
        if len(word) > 2:
            tags.append(word.lower())

    return _unique(tags)[:MAX_TAGS]


def extract_keywords(text: str) -> Tuple[str, ...]:
    """
    Top keywords by frequency. Counter.most_common keeps first-encountered
    order among equal counts.
    """
    words = [
        w for w in _NON_ALNUM.sub(" ", text.lower()).split()
        if len(w) > 3 and w not in STOPWORDS
    ]
    return tuple(word for word, _count in Counter(words).most_common(MAX_KEYWORDS))


def analyze(
    title: str,
    body: str,
    existing_tags: Optional[Iterable[str]] = None,
) -> AnalysisResult:
    """
    Analyze article content to extract regions, sectors, category, tags,
    keywords and relevance score.
    """
    title = title or ""
    body = body or ""
    text = f"{title} {body}".lower()

    regions = detect_regions(text)
    sectors = detect_sectors(text)

    return AnalysisResult(
        regions=regions,
        sectors=sectors,
        category=detect_category(text, title),
        tags=extract_tags(text, existing_tags),
        keywords=extract_keywords(text),
        relevance_score=relevance_score(regions, sectors, title, body),
    )
