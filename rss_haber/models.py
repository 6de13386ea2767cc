from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SourceDescriptor:
    """One feed in the source registry. Defined at startup and never mutated."""
    key: str
    feed_url: str
    category: str
    source_name: str


@dataclass(frozen=True)
class NewsItem:
    """
    Stable public model representing a canonical news item.

    WARNING: Do not change fields lightly. This is the library's contract.
    `url` is always an absolute http(s) URL and is the unique key of the item.
    `relevance_score` is only set by keyword search and is never stored.
    """
    title: str
    description: str
    url: str
    source: str
    category: str
    feed_key: str
    published_at: datetime
    image_url: Optional[str] = None
    relevance_score: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "imageUrl": self.image_url,
            "publishedAt": self.published_at.isoformat(),
            "source": self.source,
            "category": self.category,
            "feedKey": self.feed_key,
        }
        if self.relevance_score is not None:
            data["relevanceScore"] = self.relevance_score
        return data


@dataclass
class StoredNewsRecord:
    """Persisted form of a NewsItem, keyed uniquely by url."""
    url: str
    title: str
    description: str
    source: str
    category: str
    published_at: datetime
    scraped_at: datetime
    created_at: datetime
    image_url: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    is_active: bool = True


@dataclass(frozen=True)
class SourceFailure:
    """Diagnostic entry for a feed that contributed nothing because it failed."""
    source_key: str
    url: str
    error: str


@dataclass(frozen=True)
class Progress:
    current: int
    total: int
    source_key: str
    items_found: int


@dataclass
class AggregationResult:
    items: List[NewsItem]
    duration_ms: int
    success: bool = True
    keyword: Optional[str] = None
    category: Optional[str] = None
    failures: List[SourceFailure] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "items": [it.as_dict() for it in self.items],
            "count": self.count,
            "durationMs": self.duration_ms,
        }
        if self.keyword is not None:
            data["keyword"] = self.keyword
        if self.category is not None:
            data["category"] = self.category
        if self.failures:
            data["failures"] = [
                {"sourceKey": f.source_key, "url": f.url, "error": f.error} for f in self.failures
            ]
        return data


@dataclass(frozen=True)
class UpsertError:
    url: str
    message: str


@dataclass
class UpsertReport:
    inserted_count: int = 0
    duplicate_count: int = 0
    errors: List[UpsertError] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "insertedCount": self.inserted_count,
            "duplicateCount": self.duplicate_count,
            "errors": [{"url": e.url, "error": e.message} for e in self.errors],
        }
