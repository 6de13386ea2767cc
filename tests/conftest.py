from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Callable, Dict, Iterable, List, Optional

import httpx
import pytest
import pytest_asyncio

from rss_haber.core import AggregatorOptions, NewsAggregator
from rss_haber.models import SourceDescriptor
from rss_haber.registry import SourceRegistry


def _item_xml(item: Dict[str, str]) -> str:
    parts = [f"<title>{item['title']}</title>", f"<link>{item['link']}</link>"]
    if item.get("description"):
        parts.append(f"<description>{item['description']}</description>")
    if item.get("pubDate"):
        parts.append(f"<pubDate>{item['pubDate']}</pubDate>")
    if item.get("image"):
        parts.append(f'<enclosure url="{item["image"]}" type="image/jpeg" length="0"/>')
    return "<item>" + "".join(parts) + "</item>"


def build_rss(items: Iterable[Dict[str, str]], title: str = "Test Feed") -> str:
    body = "".join(_item_xml(it) for it in items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title>"
        f"{body}</channel></rss>"
    )


def ago(**delta) -> str:
    return format_datetime(datetime.now(timezone.utc) - timedelta(**delta))


@pytest.fixture
def rss() -> Callable[..., str]:
    return build_rss


@pytest.fixture
def pub_date() -> Callable[..., str]:
    return ago


def make_registry(*rows) -> SourceRegistry:
    return SourceRegistry(
        SourceDescriptor(key=k, feed_url=u, category=c, source_name=n) for k, u, c, n in rows
    )


@pytest.fixture
def registry_factory() -> Callable[..., SourceRegistry]:
    return make_registry


class FeedServer:
    """Routes requests by full URL to canned responses and records every hit."""

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, url: str, body: str, status: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(status, text=body)

    def fail(self, url: str, exc_type=httpx.ReadTimeout) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc_type("simulated failure", request=request)
        self.routes[url] = _raise

    def default(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    def match(self, request: httpx.Request) -> Callable[[httpx.Request], httpx.Response]:
        url = str(request.url)
        if url in self.routes:
            return self.routes[url]
        for prefix, handler in self.routes.items():
            if url.startswith(prefix):
                return handler
        return self.default

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.match(request)(request)

    def hits(self, prefix: str) -> int:
        return sum(1 for r in self.requests if str(r.url).startswith(prefix))


@pytest.fixture
def feed_server() -> FeedServer:
    return FeedServer()


@pytest_asyncio.fixture
async def http_client(feed_server):
    async with httpx.AsyncClient(transport=httpx.MockTransport(feed_server.handler)) as client:
        yield client


def first_k(sources, k):
    return list(sources)[:k]


@pytest.fixture
def aggregator_factory(http_client) -> Callable[..., NewsAggregator]:
    def _make(registry: SourceRegistry, options: Optional[AggregatorOptions] = None, **kwargs) -> NewsAggregator:
        opts = options or AggregatorOptions(include_search_engine_news=False, google_news_term_delay=0.0)
        return NewsAggregator(registry, options=opts, client=http_client, sampler=first_k, **kwargs)
    return _make
