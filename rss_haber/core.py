from __future__ import annotations

import asyncio
import contextlib
import random
import time
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional, Sequence

import httpx

from .config import DEFAULT_USER_AGENT, Settings
from .dedup import deduplicate
from .enrichers import ArticleImageEnricher, EnrichOptions, Enricher, enrich_items
from .exceptions import AggregationTimeout, InvalidArgument
from .fetcher import FeedFetcher, FeedResult
from .google_news import GoogleNewsChannel
from .logging import get_logger
from .models import AggregationResult, NewsItem, Progress, SourceDescriptor, SourceFailure
from .registry import SourceRegistry
from .scoring import rank

logger = get_logger(module="core")

MIN_KEYWORD_LENGTH = 2
MAX_KEYWORD_LENGTH = 100
MAX_CATEGORY_LENGTH = 50

Sampler = Callable[[Sequence[SourceDescriptor], int], List[SourceDescriptor]]
ProgressCallback = Callable[[Progress], None]


def random_sampler(seed: Optional[int] = None) -> Sampler:
    """Shuffle and keep at most `k` sources. Pass a seed for reproducible runs."""
    rng = random.Random(seed)

    def _sample(sources: Sequence[SourceDescriptor], k: int) -> List[SourceDescriptor]:
        pool = list(sources)
        rng.shuffle(pool)
        return pool[:k]

    return _sample


def validate_keyword(keyword: object) -> str:
    if not isinstance(keyword, str):
        raise InvalidArgument("keyword must be a string")
    keyword = keyword.strip()
    if len(keyword) < MIN_KEYWORD_LENGTH:
        raise InvalidArgument(f"keyword must be at least {MIN_KEYWORD_LENGTH} characters")
    if len(keyword) > MAX_KEYWORD_LENGTH:
        raise InvalidArgument(f"keyword must be at most {MAX_KEYWORD_LENGTH} characters")
    return keyword


def validate_category(category: object) -> str:
    if not isinstance(category, str) or not category.strip():
        raise InvalidArgument("category must be a non-empty string")
    category = category.strip()
    if len(category) > MAX_CATEGORY_LENGTH:
        raise InvalidArgument(f"category must be at most {MAX_CATEGORY_LENGTH} characters")
    return category


def _validate_limit(limit: object) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidArgument("limit must be a positive integer")
    return limit


def _batches(sources: Sequence[SourceDescriptor], size: int) -> List[Sequence[SourceDescriptor]]:
    return [sources[i:i + size] for i in range(0, len(sources), size)]


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


@dataclass
class AggregatorOptions:
    batch_size: int = 5
    max_source_sample: int = 25
    include_search_engine_news: bool = True
    request_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    google_news_locale: str = "hl=tr&gl=TR&ceid=TR:tr"
    google_news_max_items: int = 15
    google_news_term_delay: float = 0.3
    batch_delay: float = 0.0
    enrich_options: Optional[EnrichOptions] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AggregatorOptions":
        return cls(
            batch_size=settings.batch_size,
            max_source_sample=settings.max_source_sample,
            include_search_engine_news=settings.google_news_enabled,
            request_timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            google_news_locale=settings.google_news_locale,
            google_news_max_items=settings.google_news_max_items,
            google_news_term_delay=settings.google_news_term_delay,
        )


class NewsAggregator:
    """
    High-level API: query the source registry and return canonical NewsItem lists.

    Pipeline: sample sources → fetch in concurrent batches → validate → keyword
    filter → (search-engine channel) → score → sort → deduplicate → truncate.

    The registry, the HTTP client and the source sampler are all injected;
    nothing here reads global state.
    """

    def __init__(
        self,
        registry: Optional[SourceRegistry] = None,
        *,
        options: Optional[AggregatorOptions] = None,
        client: Optional[httpx.AsyncClient] = None,
        sampler: Optional[Sampler] = None,
        seed: Optional[int] = None,
        enricher: Optional[Enricher] = None,
    ) -> None:
        self.registry = registry if registry is not None else SourceRegistry.default()
        self.options = options or AggregatorOptions()
        self.sampler = sampler or random_sampler(seed)
        self.enricher = enricher
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "NewsAggregator":
        if settings.enable_image_enrichment:
            kwargs.setdefault("enricher", ArticleImageEnricher())
        return cls(
            SourceRegistry.load(settings.sources_path),
            options=AggregatorOptions.from_settings(settings),
            **kwargs,
        )

    @contextlib.asynccontextmanager
    async def _open_fetcher(self) -> AsyncIterator[FeedFetcher]:
        fetcher = FeedFetcher(
            client=self._client,
            timeout=self.options.request_timeout,
            user_agent=self.options.user_agent,
        )
        async with fetcher:
            yield fetcher

    def _search_channel(self, fetcher: FeedFetcher) -> GoogleNewsChannel:
        return GoogleNewsChannel(
            fetcher,
            locale=self.options.google_news_locale,
            max_items=self.options.google_news_max_items,
            term_delay=self.options.google_news_term_delay,
        )

    async def _enrich(self, items: List[NewsItem], fetcher: FeedFetcher) -> List[NewsItem]:
        if self.enricher is None or not items:
            return items
        return await enrich_items(items, self.enricher, fetcher.client, options=self.options.enrich_options)

    @staticmethod
    def _collect(results: Sequence[FeedResult], items: List[NewsItem], failures: List[SourceFailure]) -> None:
        for r in results:
            items.extend(r.items)
            if r.failure is not None:
                failures.append(r.failure)

    async def live_search(
        self,
        keyword: str,
        *,
        category: Optional[str] = None,
        limit: int = 100,
        max_source_sample: Optional[int] = None,
        include_search_engine_news: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> AggregationResult:
        """
        Search a random sample of registry sources (plus Google News) for `keyword`.

        Raises InvalidArgument for a keyword shorter than 2 characters, and
        AggregationTimeout when `timeout` seconds pass before completion. Source
        failures never raise; they only shrink the result and are listed in
        `failures`.
        """
        keyword = validate_keyword(keyword)
        if category is not None:
            category = validate_category(category)
        limit = _validate_limit(limit)
        sample_size = _validate_limit(max_source_sample or self.options.max_source_sample)
        include = (
            self.options.include_search_engine_news
            if include_search_engine_news is None
            else include_search_engine_news
        )

        search = self._live_search(keyword, category, limit, sample_size, include)
        if timeout is None:
            return await search
        try:
            return await asyncio.wait_for(search, timeout)
        except asyncio.TimeoutError as e:
            logger.warning("live_search_timeout", keyword=keyword, timeout=timeout)
            raise AggregationTimeout(f"live search for {keyword!r} exceeded {timeout}s") from e

    async def _live_search(
        self,
        keyword: str,
        category: Optional[str],
        limit: int,
        sample_size: int,
        include_search_engine_news: bool,
    ) -> AggregationResult:
        started = time.perf_counter()
        sources = self.sampler(self.registry.by_category(category), sample_size)
        logger.info("live_search_started", keyword=keyword, category=category, sources=len(sources))

        collected: List[NewsItem] = []
        failures: List[SourceFailure] = []

        async with self._open_fetcher() as fetcher:
            search_task: Optional[asyncio.Task] = None
            if include_search_engine_news:
                search_task = asyncio.ensure_future(self._search_channel(fetcher).search(keyword))
            try:
                for batch in _batches(sources, self.options.batch_size):
                    results = await asyncio.gather(*(fetcher.fetch_source(s, keyword) for s in batch))
                    self._collect(results, collected, failures)
                    if len(collected) >= limit:
                        break

                if search_task is not None:
                    try:
                        collected.extend(await search_task)
                    except Exception as e:
                        logger.warning("search_channel_failed", keyword=keyword, error=repr(e))
            finally:
                if search_task is not None and not search_task.done():
                    search_task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await search_task

            items = deduplicate(rank(collected, keyword))[:limit]
            items = await self._enrich(items, fetcher)

        duration_ms = _elapsed_ms(started)
        logger.info(
            "live_search_completed",
            keyword=keyword,
            found=len(items),
            failed_sources=len(failures),
            duration_ms=duration_ms,
        )
        return AggregationResult(
            items=items,
            duration_ms=duration_ms,
            keyword=keyword,
            category=category,
            failures=failures,
        )

    async def scrape_by_category(
        self,
        category: str,
        *,
        limit: int = 50,
        keyword: Optional[str] = None,
    ) -> AggregationResult:
        """All sources of one category, newest first, deduplicated and truncated to `limit`."""
        category = validate_category(category)
        limit = _validate_limit(limit)
        if keyword is not None:
            keyword = validate_keyword(keyword)

        started = time.perf_counter()
        sources = self.registry.by_category(category)
        logger.info("category_scrape_started", category=category, sources=len(sources))

        collected: List[NewsItem] = []
        failures: List[SourceFailure] = []
        async with self._open_fetcher() as fetcher:
            for batch in _batches(sources, self.options.batch_size):
                results = await asyncio.gather(*(fetcher.fetch_source(s, keyword) for s in batch))
                self._collect(results, collected, failures)

            collected.sort(key=lambda it: it.published_at, reverse=True)
            items = deduplicate(collected)[:limit]
            items = await self._enrich(items, fetcher)

        duration_ms = _elapsed_ms(started)
        logger.info("category_scrape_completed", category=category, found=len(items), duration_ms=duration_ms)
        return AggregationResult(
            items=items,
            duration_ms=duration_ms,
            keyword=keyword,
            category=category,
            failures=failures,
        )

    async def scrape_all(self, on_progress: Optional[ProgressCallback] = None) -> AggregationResult:
        """
        Sweep every registry source without a keyword filter.

        `on_progress` is called after each source completes; an exception from it
        is logged and does not stop the sweep.
        """
        started = time.perf_counter()
        sources = list(self.registry)
        total = len(sources)
        done = 0
        logger.info("scrape_all_started", sources=total)

        def _report(result: FeedResult) -> None:
            if on_progress is None:
                return
            try:
                on_progress(Progress(current=done, total=total, source_key=result.descriptor.key,
                                     items_found=len(result.items)))
            except Exception as e:
                logger.warning("progress_callback_failed", error=repr(e))

        async def _one(fetcher: FeedFetcher, source: SourceDescriptor) -> FeedResult:
            nonlocal done
            result = await fetcher.fetch_source(source)
            done += 1
            _report(result)
            return result

        collected: List[NewsItem] = []
        failures: List[SourceFailure] = []
        async with self._open_fetcher() as fetcher:
            for i, batch in enumerate(_batches(sources, self.options.batch_size)):
                if i and self.options.batch_delay > 0:
                    await asyncio.sleep(self.options.batch_delay)
                results = await asyncio.gather(*(_one(fetcher, s) for s in batch))
                self._collect(results, collected, failures)

        items = deduplicate(collected)
        duration_ms = _elapsed_ms(started)
        logger.info(
            "scrape_all_completed",
            found=len(items),
            failed_sources=len(failures),
            duration_ms=duration_ms,
        )
        return AggregationResult(items=items, duration_ms=duration_ms, failures=failures)
