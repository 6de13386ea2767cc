"""
rss_haber

Turkish news aggregation over a registry of RSS/Atom feeds, with keyword search,
relevance ranking and idempotent persistence.

Core ideas:
- Input: a SourceRegistry of feeds (bundled list or YAML) and a keyword or category
- Process: fetch in batches → parse → validate → keyword filter → classify → score → deduplicate
- Output: AggregationResult holding List[NewsItem]

Example
-------
import asyncio
from rss_haber import NewsAggregator

aggregator = NewsAggregator(seed=42)
result = asyncio.run(aggregator.live_search("dolar", limit=20))

for item in result.items:
    print(item.relevance_score, item.source, item.title)

Log events go through stdlib `logging` (WARNING and up) until the application
calls `rss_haber.configure_logging()` or configures structlog itself.
"""
from .config import Settings, load_settings
from .core import AggregatorOptions, NewsAggregator
from .exceptions import (
    AggregationTimeout,
    DuplicateRecordError,
    InvalidArgument,
    PersistenceError,
    RSSHaberError,
    SourceFetchError,
)
from .logging import configure_logging
from .models import AggregationResult, NewsItem, SourceDescriptor, StoredNewsRecord, UpsertReport
from .persistence import upsert_all
from .registry import SourceRegistry
from .service import ScraperService
from .storage import InMemoryNewsStore, NewsStore, SQLiteNewsStore

__all__ = [
    "AggregationResult",
    "AggregationTimeout",
    "AggregatorOptions",
    "DuplicateRecordError",
    "InMemoryNewsStore",
    "InvalidArgument",
    "NewsAggregator",
    "NewsItem",
    "NewsStore",
    "PersistenceError",
    "RSSHaberError",
    "SQLiteNewsStore",
    "ScraperService",
    "Settings",
    "SourceDescriptor",
    "SourceFetchError",
    "SourceRegistry",
    "StoredNewsRecord",
    "UpsertReport",
    "configure_logging",
    "load_settings",
    "upsert_all",
]
