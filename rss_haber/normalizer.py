from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

from .models import NewsItem, SourceDescriptor

MAX_TITLE_CHARS = 300
MAX_DESCRIPTION_CHARS = 500


def _is_absolute_http(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def feed_origin(feed_url: str) -> str:
    parsed = urlparse(feed_url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def resolve_url(url: Optional[str], feed_url: str) -> Optional[str]:
    """
    Make a link absolute. Absolute links are kept as-is, protocol-relative links
    get https, everything else is resolved against the feed's origin.
    Returns None when no http(s) URL can be produced.
    """
    url = (url or "").strip()
    if not url:
        return None
    if _is_absolute_http(url):
        return url
    if url.startswith("//"):
        return "https:" + url
    origin = feed_origin(feed_url)
    if not origin:
        return None
    resolved = urljoin(origin + "/", url)
    return resolved if _is_absolute_http(resolved) else None


def to_news_item(
    entry: Dict[str, Any],
    descriptor: SourceDescriptor,
    *,
    now: Optional[datetime] = None,
) -> NewsItem:
    """
    Convert a parsed entry dict into a NewsItem attributed to `descriptor`.

    Raises ValueError when the entry has no link that resolves to http(s).
    Entries without a usable date are stamped with `now`.
    """
    url = resolve_url(entry.get("link"), descriptor.feed_url)
    if not url:
        raise ValueError("Entry lacks a resolvable http(s) link")

    image_url = entry.get("image_url")
    if image_url:
        image_url = resolve_url(image_url, descriptor.feed_url)

    published_at = entry.get("published_at") or now or datetime.now(timezone.utc)

    return NewsItem(
        title=(entry.get("title") or "").strip()[:MAX_TITLE_CHARS],
        description=(entry.get("description") or "")[:MAX_DESCRIPTION_CHARS].strip(),
        url=url,
        source=descriptor.source_name,
        category=descriptor.category,
        feed_key=descriptor.key,
        published_at=published_at,
        image_url=image_url or None,
    )
