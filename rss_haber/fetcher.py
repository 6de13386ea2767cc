from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .config import DEFAULT_USER_AGENT
from .exceptions import SourceFetchError
from .logging import get_logger
from .models import NewsItem, SourceDescriptor, SourceFailure
from .normalizer import to_news_item
from .parser import parse_entry, parse_feed
from .text import count_occurrences, matches
from .validator import is_valid_news

logger = get_logger(module="fetcher")

DEFAULT_TIMEOUT_S = 15.0
RSS_ACCEPT = "application/rss+xml, application/xml, text/xml, */*"
MIN_DESCRIPTION_MENTIONS = 2


@dataclass
class FeedResult:
    descriptor: SourceDescriptor
    items: List[NewsItem] = field(default_factory=list)
    failure: Optional[SourceFailure] = None


def keyword_accepts(entry: Dict[str, Any], keyword: Optional[str]) -> bool:
    """A title match is enough; the description must mention the keyword at least twice."""
    if not keyword:
        return True
    if matches(entry.get("title"), keyword):
        return True
    return count_occurrences(entry.get("description"), keyword) >= MIN_DESCRIPTION_MENTIONS


class FeedFetcher:
    """
    Fetch RSS/Atom feeds over a shared httpx.AsyncClient and turn their entries
    into canonical NewsItem objects. Parsing runs in a worker thread.

    Pass `client` to reuse an existing client (it is then not closed here),
    otherwise use the fetcher as an async context manager.
    """

    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "FeedFetcher":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        return self._ensure_client()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent, "Accept": RSS_ACCEPT},
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_feed_entries(self, url: str, *, source_key: str = "") -> List[Dict[str, Any]]:
        """
        Fetch a single feed URL and return its raw entries.

        Raises SourceFetchError on network errors, HTTP error statuses, or when the
        document is malformed and yields no entries.
        """
        try:
            response = await self.client.get(
                url,
                headers={"User-Agent": self.user_agent, "Accept": RSS_ACCEPT},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceFetchError(
                f"Failed to fetch feed: {url} ({type(e).__name__}: {e})",
                source_key=source_key,
                url=url,
            ) from e

        feed = await asyncio.to_thread(parse_feed, response.content)
        entries = getattr(feed, "entries", None)
        if not isinstance(entries, list):
            raise SourceFetchError(f"Feed has no entries: {url}", source_key=source_key, url=url)

        if getattr(feed, "bozo", 0):
            exc = getattr(feed, "bozo_exception", None)
            if not entries:
                msg = f"Invalid RSS/Atom feed: {url}"
                if exc:
                    msg += f" ({exc})"
                raise SourceFetchError(msg, source_key=source_key, url=url)
            logger.debug("feed_bozo_tolerated", source_key=source_key, url=url, error=str(exc))
        return entries

    def build_items(
        self,
        entries: List[Dict[str, Any]],
        descriptor: SourceDescriptor,
        keyword: Optional[str] = None,
    ) -> List[NewsItem]:
        now = datetime.now(timezone.utc)
        items: List[NewsItem] = []
        rejected = 0
        for raw in entries:
            entry = parse_entry(raw)
            if not is_valid_news(entry):
                rejected += 1
                continue
            if not keyword_accepts(entry, keyword):
                continue
            try:
                items.append(to_news_item(entry, descriptor, now=now))
            except ValueError:
                rejected += 1
                continue
        if rejected:
            logger.debug("feed_items_rejected", source_key=descriptor.key, rejected=rejected)
        return items

    async def fetch_source(self, descriptor: SourceDescriptor, keyword: Optional[str] = None) -> FeedResult:
        """
        Fetch one registry source. Failures are isolated: the source contributes no
        items and the failure is reported on the result instead of raised.
        """
        try:
            entries = await self.fetch_feed_entries(descriptor.feed_url, source_key=descriptor.key)
            items = await asyncio.to_thread(self.build_items, entries, descriptor, keyword)
        except SourceFetchError as e:
            logger.warning("feed_fetch_failed", source_key=descriptor.key, url=descriptor.feed_url, error=str(e))
            return FeedResult(
                descriptor=descriptor,
                failure=SourceFailure(source_key=descriptor.key, url=descriptor.feed_url, error=str(e)),
            )
        except Exception as e:
            # malformed entries in one feed must not abort the batch
            logger.warning("feed_parse_failed", source_key=descriptor.key, url=descriptor.feed_url, error=repr(e))
            return FeedResult(
                descriptor=descriptor,
                failure=SourceFailure(source_key=descriptor.key, url=descriptor.feed_url, error=repr(e)),
            )
        return FeedResult(descriptor=descriptor, items=items)

    async def fetch_feed(self, descriptor: SourceDescriptor, keyword: Optional[str] = None) -> List[NewsItem]:
        result = await self.fetch_source(descriptor, keyword)
        return result.items
