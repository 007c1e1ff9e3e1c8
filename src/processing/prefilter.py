from typing import Iterable, Optional


def keyword_match(text: str, keywords: Iterable[str]) -> bool:
    text = text.lower()
    return any(k.lower() in text for k in keywords)


def is_relevant(
    title: str,
    content: Optional[str],
    *,
    keywords: Iterable[str],
) -> bool:
    """Basic relevance check for general-purpose forum sources."""
    keywords = list(keywords)
    if not keywords:
        return True
    return keyword_match(f"{title} {content or ''}", keywords)
