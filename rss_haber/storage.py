from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from dataclasses import fields as dataclass_fields
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from .exceptions import DuplicateRecordError, PersistenceError
from .logging import get_logger
from .models import StoredNewsRecord

logger = get_logger(module="storage")

_RECORD_FIELDS = tuple(f.name for f in dataclass_fields(StoredNewsRecord))
_DATE_FIELDS = ("published_at", "scraped_at", "created_at")


class NewsStore(Protocol):
    """
    Keyed document store for StoredNewsRecord, unique on `url`.

    `upsert` sets `fields` on the record for `url` and applies `on_insert` only
    when the record is created. It returns True when a new record was inserted.
    """

    async def find_one(self, url: str) -> Optional[StoredNewsRecord]:  # pragma: no cover - interface
        ...

    async def upsert(self, url: str, fields: Dict[str, Any], on_insert: Dict[str, Any]) -> bool:  # pragma: no cover - interface
        ...


def _check_fields(values: Dict[str, Any]) -> None:
    unknown = set(values) - set(_RECORD_FIELDS)
    if unknown:
        raise PersistenceError(f"Unknown record fields: {sorted(unknown)}")


class InMemoryNewsStore:
    """Dict-backed store, used by tests and dry runs."""

    def __init__(self) -> None:
        self._records: Dict[str, StoredNewsRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> List[StoredNewsRecord]:
        return list(self._records.values())

    async def find_one(self, url: str) -> Optional[StoredNewsRecord]:
        return self._records.get(url)

    async def upsert(self, url: str, fields: Dict[str, Any], on_insert: Dict[str, Any]) -> bool:
        _check_fields(fields)
        _check_fields(on_insert)
        async with self._lock:
            existing = self._records.get(url)
            if existing is None:
                try:
                    self._records[url] = StoredNewsRecord(url=url, **{**on_insert, **fields})
                except TypeError as e:
                    raise PersistenceError(f"Incomplete record for {url}: {e}") from e
                return True
            for name, value in fields.items():
                setattr(existing, name, value)
            return False


_SCHEMA = """
CREATE TABLE IF NOT EXISTS news (
    url TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    source TEXT NOT NULL,
    category TEXT NOT NULL,
    published_at TEXT NOT NULL,
    scraped_at TEXT NOT NULL,
    created_at TEXT NOT NULL,
    image_url TEXT,
    keywords_json TEXT NOT NULL DEFAULT '[]',
    is_active INTEGER NOT NULL DEFAULT 1
)
"""

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_news_published_at ON news (published_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_news_category ON news (category, published_at DESC)",
)


def _to_column(name: str, value: Any):
    if name == "keywords":
        return "keywords_json", json.dumps(list(value or []), ensure_ascii=False)
    if name in _DATE_FIELDS and isinstance(value, datetime):
        return name, value.isoformat()
    if name == "is_active":
        return name, int(bool(value))
    return name, value


def _row_to_record(row: sqlite3.Row) -> StoredNewsRecord:
    return StoredNewsRecord(
        url=row["url"],
        title=row["title"],
        description=row["description"],
        source=row["source"],
        category=row["category"],
        published_at=datetime.fromisoformat(row["published_at"]),
        scraped_at=datetime.fromisoformat(row["scraped_at"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        image_url=row["image_url"],
        keywords=json.loads(row["keywords_json"] or "[]"),
        is_active=bool(row["is_active"]),
    )


class SQLiteNewsStore:
    """
    sqlite3-backed NewsStore. One connection shared behind a lock; blocking calls
    run in a worker thread so the event loop is never held up.
    """

    def __init__(self, path: str = "rss_haber.db") -> None:
        self.path = path
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._create_schema()

    def _create_schema(self) -> None:
        with self._lock:
            self._conn.execute(_SCHEMA)
            for stmt in _INDEXES:
                self._conn.execute(stmt)
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _find_one(self, url: str) -> Optional[StoredNewsRecord]:
        with self._lock:
            row = self._conn.execute("SELECT * FROM news WHERE url = ?", (url,)).fetchone()
        return _row_to_record(row) if row is not None else None

    def _upsert(self, url: str, fields: Dict[str, Any], on_insert: Dict[str, Any]) -> bool:
        _check_fields(fields)
        _check_fields(on_insert)
        insert_cols = dict(_to_column(k, v) for k, v in {**on_insert, **fields}.items())
        insert_cols["url"] = url
        update_cols = dict(_to_column(k, v) for k, v in fields.items())

        cols = ", ".join(insert_cols)
        placeholders = ", ".join(["?"] * len(insert_cols))
        with self._lock:
            try:
                cur = self._conn.execute(
                    f"INSERT INTO news ({cols}) VALUES ({placeholders}) ON CONFLICT(url) DO NOTHING",
                    tuple(insert_cols.values()),
                )
                inserted = cur.rowcount == 1
                if not inserted and update_cols:
                    assignments = ", ".join(f"{c} = ?" for c in update_cols)
                    self._conn.execute(
                        f"UPDATE news SET {assignments} WHERE url = ?",
                        (*update_cols.values(), url),
                    )
                self._conn.commit()
            except sqlite3.IntegrityError as e:
                self._conn.rollback()
                if "UNIQUE" in str(e).upper():
                    raise DuplicateRecordError(f"Duplicate news url: {url}") from e
                raise PersistenceError(f"Invalid record for {url}: {e}") from e
            except sqlite3.Error as e:
                self._conn.rollback()
                raise PersistenceError(f"sqlite upsert failed for {url}: {e}") from e
        return inserted

    def _count(self) -> int:
        with self._lock:
            return int(self._conn.execute("SELECT COUNT(*) FROM news").fetchone()[0])

    async def find_one(self, url: str) -> Optional[StoredNewsRecord]:
        return await asyncio.to_thread(self._find_one, url)

    async def upsert(self, url: str, fields: Dict[str, Any], on_insert: Dict[str, Any]) -> bool:
        return await asyncio.to_thread(self._upsert, url, fields, on_insert)

    async def count(self) -> int:
        return await asyncio.to_thread(self._count)
