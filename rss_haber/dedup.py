from __future__ import annotations

from typing import Iterable, List, Set

from .models import NewsItem


def deduplicate(items: Iterable[NewsItem]) -> List[NewsItem]:
    """
    Remove duplicates by canonical URL.
    Keeps the first occurrence and preserves original order, so callers that
    want the best-ranked copy to survive must sort first.
    """
    seen: Set[str] = set()
    out: List[NewsItem] = []
    for it in items:
        if not it.url or it.url in seen:
            continue
        seen.add(it.url)
        out.append(it)
    return out
