from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import List, Tuple
from urllib.parse import quote_plus

from .classifier import detect_category
from .dedup import deduplicate
from .exceptions import SourceFetchError
from .fetcher import FeedFetcher
from .logging import get_logger
from .models import NewsItem
from .normalizer import MAX_DESCRIPTION_CHARS, MAX_TITLE_CHARS, resolve_url
from .parser import parse_entry
from .scoring import GOOGLE_NEWS_FEED_KEY
from .text import synonyms_of
from .validator import is_valid_news

logger = get_logger(module="google_news")

GOOGLE_NEWS_SEARCH_URL = "https://news.google.com/rss/search"
DEFAULT_SOURCE_NAME = "Google News"


def split_source(title: str) -> Tuple[str, str]:
    """Google News titles end with " - Publisher"; split that suffix off."""
    parts = title.split(" - ")
    if len(parts) > 1:
        clean = " - ".join(parts[:-1]).strip()
        return (clean or title), (parts[-1].strip() or DEFAULT_SOURCE_NAME)
    return title, DEFAULT_SOURCE_NAME


class GoogleNewsChannel:
    """
    Supplementary search-engine channel: queries the Google News RSS search
    endpoint for a keyword and up to `max_terms - 1` of its synonyms.

    Items carry no registry category, so one is inferred from their text.
    """

    def __init__(
        self,
        fetcher: FeedFetcher,
        *,
        locale: str = "hl=tr&gl=TR&ceid=TR:tr",
        max_items: int = 15,
        max_terms: int = 3,
        term_delay: float = 0.3,
    ) -> None:
        self.fetcher = fetcher
        self.locale = locale
        self.max_items = max_items
        self.max_terms = max_terms
        self.term_delay = term_delay

    def build_url(self, term: str) -> str:
        return f"{GOOGLE_NEWS_SEARCH_URL}?q={quote_plus(term)}&{self.locale}"

    async def search(self, keyword: str) -> List[NewsItem]:
        terms = synonyms_of(keyword)[: self.max_terms]
        logger.info("google_news_search", terms=list(terms))
        now = datetime.now(timezone.utc)
        results: List[NewsItem] = []

        for i, term in enumerate(terms):
            if i and self.term_delay > 0:
                await asyncio.sleep(self.term_delay)
            url = self.build_url(term)
            try:
                entries = await self.fetcher.fetch_feed_entries(url, source_key=GOOGLE_NEWS_FEED_KEY)
            except SourceFetchError as e:
                logger.warning("google_news_failed", term=term, error=str(e))
                continue

            for raw in entries[: self.max_items]:
                entry = parse_entry(raw)
                if not is_valid_news(entry):
                    continue
                item_url = resolve_url(entry["link"], GOOGLE_NEWS_SEARCH_URL)
                if not item_url:
                    continue
                title, source = split_source(entry["title"])
                description = entry["description"][:MAX_DESCRIPTION_CHARS].strip()
                results.append(
                    NewsItem(
                        title=title[:MAX_TITLE_CHARS],
                        description=description,
                        url=item_url,
                        source=source,
                        category=detect_category(title, description),
                        feed_key=GOOGLE_NEWS_FEED_KEY,
                        published_at=entry["published_at"] or now,
                        image_url=resolve_url(entry["image_url"], GOOGLE_NEWS_SEARCH_URL),
                    )
                )

        return deduplicate(results)
