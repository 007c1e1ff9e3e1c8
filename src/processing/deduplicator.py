"""
Cross-source deduplication of freshly fetched articles
"""
import logging
import re
from typing import Iterable, List, Set

from core.entities import Article

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 30

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def fingerprint(title: str) -> str:
    """
    Lowercase title with non-alphanumerics removed, first 30 characters.
    """
    return _NON_ALNUM.sub("", title.lower())[:FINGERPRINT_LENGTH]


def deduplicate(articles: Iterable[Article]) -> List[Article]:
    """
    Keep the first article per title fingerprint. Raw URLs share the same
    seen-set, so a later article pointing at an already-seen URL is dropped too.
    """
    seen: Set[str] = set()
    unique: List[Article] = []
    total = 0

    for article in articles:
        total += 1
        key = fingerprint(article.title)
        if key in seen or (article.url and article.url in seen):
            logger.debug(f"Skipping duplicate: {article.title}")
            continue

        seen.add(key)
        if article.url:
            seen.add(article.url)
        unique.append(article)

    logger.info(f"Dedup: {total} -> {len(unique)} articles")
    return unique
