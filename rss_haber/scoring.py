from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from .models import NewsItem
from .text import count_occurrences

GOOGLE_NEWS_FEED_KEY = "google_news"

TITLE_WEIGHT = 10
DESCRIPTION_WEIGHT = 2
SEARCH_ENGINE_BONUS = 5

# (max age, bonus), checked in order
RECENCY_BONUSES = (
    (timedelta(hours=1), 20),
    (timedelta(hours=6), 10),
    (timedelta(hours=24), 5),
)


def recency_bonus(published_at: datetime, now: Optional[datetime] = None) -> int:
    now = now or datetime.now(timezone.utc)
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    age = now - published_at
    for max_age, bonus in RECENCY_BONUSES:
        if age < max_age:
            return bonus
    return 0


def relevance_score(item: NewsItem, keyword: str, now: Optional[datetime] = None) -> float:
    score = TITLE_WEIGHT * count_occurrences(item.title, keyword)
    score += DESCRIPTION_WEIGHT * count_occurrences(item.description, keyword)
    if item.feed_key == GOOGLE_NEWS_FEED_KEY:
        score += SEARCH_ENGINE_BONUS
    score += recency_bonus(item.published_at, now)
    return float(score)


def rank(items: Iterable[NewsItem], keyword: str, now: Optional[datetime] = None) -> List[NewsItem]:
    """Attach relevance scores and sort best first. The sort is stable."""
    now = now or datetime.now(timezone.utc)
    scored = [replace(it, relevance_score=relevance_score(it, keyword, now)) for it in items]
    scored.sort(key=lambda it: it.relevance_score or 0.0, reverse=True)
    return scored
