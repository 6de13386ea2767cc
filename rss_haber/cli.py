"""
Command line entry point for manual scrapes.

Usage:
    rss-haber search dolar [--category Ekonomi] [--limit 20] [--no-google]
    rss-haber category Spor [--limit 50] [--keyword galatasaray]
    rss-haber all [--save] [--db rss_haber.db]
    rss-haber sources
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Settings, load_settings
from .core import NewsAggregator
from .exceptions import RSSHaberError
from .logging import configure_logging, get_logger
from .models import Progress
from .registry import SourceRegistry
from .service import ScraperService
from .storage import SQLiteNewsStore

logger = get_logger(module="cli")

PROGRESS_EVERY = 10


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rss-haber", description="Turkish news RSS aggregator")
    parser.add_argument("--env-file", help="Path to a .env file (default: ./.env)")
    parser.add_argument("--sources", help="YAML source registry overriding the bundled list")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Live keyword search across a sample of sources")
    search.add_argument("keyword")
    search.add_argument("--category")
    search.add_argument("--limit", type=int, default=100)
    search.add_argument("--sample", type=int, help="Number of sources to sample")
    search.add_argument("--timeout", type=float, help="Overall deadline in seconds")
    search.add_argument("--no-google", action="store_true", help="Skip the Google News channel")
    search.add_argument("--save", action="store_true", help="Persist results to the SQLite store")

    category = sub.add_parser("category", help="Newest items from every source of a category")
    category.add_argument("category")
    category.add_argument("--limit", type=int, default=50)
    category.add_argument("--keyword")

    all_ = sub.add_parser("all", help="Sweep every source")
    all_.add_argument("--save", action="store_true", help="Persist results to the SQLite store")

    sub.add_parser("sources", help="Show registry statistics")

    for p in (search, all_):
        p.add_argument("--db", help="SQLite database path (default from settings)")
    return parser.parse_args(argv)


def _print(data: Dict[str, Any]) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _log_progress(progress: Progress) -> None:
    if progress.current % PROGRESS_EVERY == 0 or progress.current == progress.total:
        logger.info("scrape_progress", current=progress.current, total=progress.total)


def _search_options(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "category": args.category,
        "limit": args.limit,
        "max_source_sample": args.sample,
        "include_search_engine_news": False if args.no_google else None,
        "timeout": args.timeout,
    }


async def _run(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    if args.command == "sources":
        registry = SourceRegistry.load(settings.sources_path)
        return {"categories": registry.categories(), **registry.source_stats()}

    aggregator = NewsAggregator.from_settings(settings)

    if args.command == "category":
        result = await aggregator.scrape_by_category(args.category, limit=args.limit, keyword=args.keyword)
        return result.as_dict()

    if getattr(args, "save", False):
        store = SQLiteNewsStore(args.db or settings.database_path)
        try:
            service = ScraperService(aggregator, store)
            if args.command == "search":
                report = await service.scrape_with_keyword(args.keyword, **_search_options(args))
            else:
                report = await service.scrape_all_and_save(_log_progress)
            return {**report.as_dict(), "stats": service.stats()}
        finally:
            store.close()

    if args.command == "search":
        result = await aggregator.live_search(args.keyword, **_search_options(args))
    else:
        result = await aggregator.scrape_all(_log_progress)
    return result.as_dict()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.env_file)
    if args.sources:
        settings.sources_path = Path(args.sources)
    configure_logging(level=settings.log_level, json=settings.log_json)

    try:
        _print(asyncio.run(_run(args, settings)))
    except RSSHaberError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
