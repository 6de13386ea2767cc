from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .core import NewsAggregator, ProgressCallback
from .logging import get_logger
from .models import NewsItem, SourceFailure, UpsertError, UpsertReport
from .persistence import upsert_all
from .storage import NewsStore

logger = get_logger(module="service")

ALREADY_RUNNING = "scrape already in progress"


@dataclass
class ScrapeReport:
    success: bool = True
    message: Optional[str] = None
    keyword: Optional[str] = None
    total_news: int = 0
    saved_news: int = 0
    duplicates: int = 0
    errors: List[UpsertError] = field(default_factory=list)
    failures: List[SourceFailure] = field(default_factory=list)
    duration_ms: int = 0

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "totalNews": self.total_news,
            "savedNews": self.saved_news,
            "duplicates": self.duplicates,
            "errors": [{"url": e.url, "error": e.message} for e in self.errors],
            "failedSources": len(self.failures),
            "durationMs": self.duration_ms,
        }
        if self.message is not None:
            data["message"] = self.message
        if self.keyword is not None:
            data["keyword"] = self.keyword
        return data


@dataclass
class ScraperStats:
    last_run: Optional[datetime] = None
    total_scraped: int = 0
    total_saved: int = 0


class ScraperService:
    """
    Ties an aggregator to a store: scrape, persist, keep running totals.

    Only one full or keyword scrape runs at a time per service; a second call
    while one is in flight returns an unsuccessful report instead of starting.
    """

    def __init__(self, aggregator: NewsAggregator, store: NewsStore) -> None:
        self.aggregator = aggregator
        self.store = store
        self.is_running = False
        self._stats = ScraperStats()

    def stats(self) -> Dict[str, Any]:
        return {
            "is_running": self.is_running,
            "last_run": self._stats.last_run.isoformat() if self._stats.last_run else None,
            "total_scraped": self._stats.total_scraped,
            "total_saved": self._stats.total_saved,
        }

    async def save_news(self, items: Iterable[NewsItem]) -> UpsertReport:
        items = list(items)
        if not items:
            return UpsertReport()
        return await upsert_all(self.store, items)

    async def scrape_all_and_save(self, on_progress: Optional[ProgressCallback] = None) -> ScrapeReport:
        if self.is_running:
            logger.warning("scrape_rejected", reason=ALREADY_RUNNING)
            return ScrapeReport(success=False, message=ALREADY_RUNNING)
        return await self._run(None, on_progress)

    async def scrape_with_keyword(self, keyword: str, **search_options: Any) -> ScrapeReport:
        """Live search for `keyword` and persist the results. Options go to `live_search`."""
        if self.is_running:
            logger.warning("scrape_rejected", reason=ALREADY_RUNNING, keyword=keyword)
            return ScrapeReport(success=False, message=ALREADY_RUNNING, keyword=keyword)
        return await self._run(keyword, None, search_options)

    async def _run(
        self,
        keyword: Optional[str],
        on_progress: Optional[ProgressCallback],
        search_options: Optional[Dict[str, Any]] = None,
    ) -> ScrapeReport:
        self.is_running = True
        started = time.perf_counter()
        report = ScrapeReport(keyword=keyword)
        try:
            if keyword is None:
                result = await self.aggregator.scrape_all(on_progress)
            else:
                result = await self.aggregator.live_search(keyword, **(search_options or {}))
            report.total_news = result.count
            report.failures = list(result.failures)

            saved = await self.save_news(result.items)
            report.saved_news = saved.inserted_count
            report.duplicates = saved.duplicate_count
            report.errors = list(saved.errors)
        finally:
            self.is_running = False
            report.duration_ms = int((time.perf_counter() - started) * 1000)
            self._stats.last_run = datetime.now(timezone.utc)
            self._stats.total_scraped += report.total_news
            self._stats.total_saved += report.saved_news

        logger.info(
            "scrape_completed",
            keyword=keyword,
            total=report.total_news,
            saved=report.saved_news,
            duplicates=report.duplicates,
            errors=len(report.errors),
            duration_ms=report.duration_ms,
        )
        return report
