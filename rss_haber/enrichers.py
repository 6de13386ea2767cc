from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Protocol

import httpx
from bs4 import BeautifulSoup

from .logging import get_logger
from .models import NewsItem
from .normalizer import resolve_url

logger = get_logger(module="enrichers")

_IMAGE_META = (
    ("property", "og:image"),
    ("name", "og:image"),
    ("name", "twitter:image"),
    ("property", "twitter:image"),
)


class Enricher(Protocol):
    async def enrich(self, item: NewsItem, client: httpx.AsyncClient) -> NewsItem:  # pragma: no cover - interface
        ...


@dataclass
class EnrichOptions:
    max_workers: int = 4


class NullEnricher:
    async def enrich(self, item: NewsItem, client: httpx.AsyncClient) -> NewsItem:
        return item


class ArticleImageEnricher:
    """
    Fill `image_url` for items whose feed carried no image by reading the
    article page's og:image / twitter:image meta tag.

    Costs one page fetch per item; off unless `enable_image_enrichment` is set.
    """

    def __init__(self, *, timeout_sec: float = 8.0) -> None:
        self.timeout_sec = timeout_sec

    async def enrich(self, item: NewsItem, client: httpx.AsyncClient) -> NewsItem:
        if item.image_url:
            return item
        response = await client.get(item.url, timeout=self.timeout_sec)
        response.raise_for_status()
        image = find_meta_image(response.text)
        if not image:
            return item
        return replace(item, image_url=resolve_url(image, item.url))


def find_meta_image(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for attr, value in _IMAGE_META:
        tag = soup.find("meta", attrs={attr: value})
        if tag is not None:
            content = str(tag.get("content") or "").strip()
            if content:
                return content
    return None


async def enrich_items(
    items: Iterable[NewsItem],
    enricher: Enricher,
    client: httpx.AsyncClient,
    *,
    options: Optional[EnrichOptions] = None,
) -> List[NewsItem]:
    """
    Run `enricher` over items with at most `max_workers` in flight.

    Order is preserved; any failure keeps the original item.
    """
    opts = options or EnrichOptions()
    sem = asyncio.Semaphore(max(1, int(opts.max_workers or 1)))

    async def _one(item: NewsItem) -> NewsItem:
        async with sem:
            try:
                return await enricher.enrich(item, client)
            except Exception as e:
                logger.debug("enrich_failed", url=item.url, error=str(e))
                return item

    return list(await asyncio.gather(*(_one(it) for it in items)))
