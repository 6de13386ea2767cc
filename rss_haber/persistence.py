from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from .exceptions import DuplicateRecordError
from .logging import get_logger
from .models import NewsItem, UpsertError, UpsertReport
from .storage import NewsStore
from .text import extract_keywords

logger = get_logger(module="persistence")


def record_fields(item: NewsItem, now: datetime) -> Dict[str, Any]:
    """Fields overwritten on every upsert. `created_at` is only set on insert."""
    return {
        "title": item.title,
        "description": item.description,
        "image_url": item.image_url,
        "category": item.category,
        "source": item.source,
        "keywords": extract_keywords(f"{item.title} {item.description}"),
        "published_at": item.published_at,
        "scraped_at": now,
        "is_active": True,
    }


async def upsert_all(
    store: NewsStore,
    items: Iterable[NewsItem],
    *,
    now: Optional[datetime] = None,
) -> UpsertReport:
    """
    Upsert each item keyed by url. Re-running with the same items inserts nothing.

    A unique-key race reported by the store counts as a duplicate; any other
    error is collected in `errors` and the remaining items are still written.
    """
    now = now or datetime.now(timezone.utc)
    report = UpsertReport()

    for item in items:
        try:
            inserted = await store.upsert(item.url, record_fields(item, now), {"created_at": now})
        except DuplicateRecordError:
            report.duplicate_count += 1
            continue
        except Exception as e:
            logger.warning("news_upsert_failed", url=item.url, error=str(e))
            report.errors.append(UpsertError(url=item.url, message=str(e)))
            continue
        if inserted:
            report.inserted_count += 1
        else:
            report.duplicate_count += 1

    logger.info(
        "news_upsert_completed",
        inserted=report.inserted_count,
        duplicates=report.duplicate_count,
        errors=len(report.errors),
    )
    return report
