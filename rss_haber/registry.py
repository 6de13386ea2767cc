"""
Source registry: the static list of feeds the aggregator may query.

The registry is plain configuration handed to `NewsAggregator`; it is read-only
after construction and safe to share between concurrent searches.
"""
from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import yaml

from .exceptions import InvalidArgument
from .logging import get_logger
from .models import SourceDescriptor
from .text import fold_text

logger = get_logger(module="registry")

# key, feed url, category, source name
_DEFAULT_FEEDS: Tuple[Tuple[str, str, str, str], ...] = (
    ("ntv_ekonomi", "https://www.ntv.com.tr/ekonomi.rss", "Ekonomi", "NTV"),
    ("cnn_ekonomi", "https://www.cnnturk.com/feed/rss/ekonomi/news", "Ekonomi", "CNN Türk"),
    ("hurriyet_ekonomi", "https://www.hurriyet.com.tr/rss/ekonomi", "Ekonomi", "Hürriyet"),
    ("sozcu_ekonomi", "https://www.sozcu.com.tr/feeds-rss-category-ekonomi", "Ekonomi", "Sözcü"),
    ("haberturk_ekonomi", "https://www.haberturk.com/rss/ekonomi.xml", "Ekonomi", "Habertürk"),
    ("sabah_ekonomi", "https://www.sabah.com.tr/rss/ekonomi.xml", "Ekonomi", "Sabah"),
    ("yenisafak_ekonomi", "https://www.yenisafak.com/rss?xml=ekonomi", "Ekonomi", "Yeni Şafak"),
    ("star_ekonomi", "https://www.star.com.tr/rss/ekonomi.xml", "Ekonomi", "Star"),
    ("dunya_ekonomi", "https://www.dunya.com/rss", "Ekonomi", "Dünya Gazetesi"),
    ("bloomberght", "https://www.bloomberght.com/rss", "Ekonomi", "BloombergHT"),
    ("paraanaliz", "https://www.paraanaliz.com/feed/", "Ekonomi", "Para Analiz"),
    ("bigpara", "https://bigpara.hurriyet.com.tr/rss/", "Ekonomi", "Bigpara"),
    ("investing_tr", "https://tr.investing.com/rss/news.rss", "Ekonomi", "Investing.com TR"),
    ("ntv_gundem", "https://www.ntv.com.tr/turkiye.rss", "Gündem", "NTV"),
    ("cnn_gundem", "https://www.cnnturk.com/feed/rss/turkiye/news", "Gündem", "CNN Türk"),
    ("hurriyet_gundem", "https://www.hurriyet.com.tr/rss/gundem", "Gündem", "Hürriyet"),
    ("sozcu_gundem", "https://www.sozcu.com.tr/feeds-rss-category-gundem", "Gündem", "Sözcü"),
    ("haberturk_gundem", "https://www.haberturk.com/rss/gundem.xml", "Gündem", "Habertürk"),
    ("cumhuriyet", "https://www.cumhuriyet.com.tr/rss/son_dakika.xml", "Gündem", "Cumhuriyet"),
    ("sabah_gundem", "https://www.sabah.com.tr/rss/gundem.xml", "Gündem", "Sabah"),
    ("yenisafak_gundem", "https://www.yenisafak.com/rss?xml=gundem", "Gündem", "Yeni Şafak"),
    ("star_gundem", "https://www.star.com.tr/rss/guncel.xml", "Gündem", "Star"),
    ("t24", "https://t24.com.tr/rss", "Gündem", "T24"),
    ("bianet", "https://bianet.org/rss/bianet", "Gündem", "Bianet"),
    ("ntv_dunya", "https://www.ntv.com.tr/dunya.rss", "Dünya", "NTV"),
    ("cnn_dunya", "https://www.cnnturk.com/feed/rss/dunya/news", "Dünya", "CNN Türk"),
    ("hurriyet_dunya", "https://www.hurriyet.com.tr/rss/dunya", "Dünya", "Hürriyet"),
    ("bbc_turkce", "https://feeds.bbci.co.uk/turkce/rss.xml", "Dünya", "BBC Türkçe"),
    ("dw_turkce", "https://rss.dw.com/xml/rss-tur-all", "Dünya", "DW Türkçe"),
    ("sabah_dunya", "https://www.sabah.com.tr/rss/dunya.xml", "Dünya", "Sabah"),
    ("cnn_spor", "https://www.cnnturk.com/feed/rss/spor/news", "Spor", "CNN Türk"),
    ("hurriyet_spor", "https://www.hurriyet.com.tr/rss/spor", "Spor", "Hürriyet"),
    ("sabah_spor", "https://www.sabah.com.tr/rss/spor.xml", "Spor", "Sabah"),
    ("webtekno", "https://www.webtekno.com/rss.xml", "Teknoloji", "Webtekno"),
    ("shiftdelete", "https://shiftdelete.net/feed", "Teknoloji", "ShiftDelete"),
    ("chip", "https://www.chip.com.tr/rss", "Teknoloji", "Chip Online"),
    ("ntv_teknoloji", "https://www.ntv.com.tr/teknoloji.rss", "Teknoloji", "NTV"),
    ("technopat", "https://www.technopat.net/feed/", "Teknoloji", "Technopat"),
    ("ntv_saglik", "https://www.ntv.com.tr/saglik.rss", "Sağlık", "NTV"),
    ("sabah_saglik", "https://www.sabah.com.tr/rss/saglik.xml", "Sağlık", "Sabah"),
    ("hurriyet_magazin", "https://www.hurriyet.com.tr/rss/magazin", "Magazin", "Hürriyet"),
    ("sozcu_magazin", "https://www.sozcu.com.tr/feeds-rss-category-magazin", "Magazin", "Sözcü"),
    ("ntv_yasam", "https://www.ntv.com.tr/yasam.rss", "Magazin", "NTV"),
    ("sabah_magazin", "https://www.sabah.com.tr/rss/magazin.xml", "Magazin", "Sabah"),
    ("cnn_sondakika", "https://www.cnnturk.com/feed/rss/all/news", "Son Dakika", "CNN Türk"),
    ("ntv_sondakika", "https://www.ntv.com.tr/son-dakika.rss", "Son Dakika", "NTV"),
    ("sabah_sondakika", "https://www.sabah.com.tr/rss/sondakika.xml", "Son Dakika", "Sabah"),
)

DEFAULT_SOURCES: Tuple[SourceDescriptor, ...] = tuple(
    SourceDescriptor(key=k, feed_url=u, category=c, source_name=s) for k, u, c, s in _DEFAULT_FEEDS
)


class SourceRegistry:
    """Ordered, immutable collection of SourceDescriptor keyed by `key`."""

    def __init__(self, sources: Iterable[SourceDescriptor]) -> None:
        by_key: Dict[str, SourceDescriptor] = {}
        for src in sources:
            if src.key in by_key:
                raise InvalidArgument(f"Duplicate source key: {src.key}")
            by_key[src.key] = src
        self._sources: Tuple[SourceDescriptor, ...] = tuple(by_key.values())
        self._by_key = by_key

    @classmethod
    def default(cls) -> "SourceRegistry":
        return cls(DEFAULT_SOURCES)

    @classmethod
    def from_mappings(cls, rows: Sequence[Dict[str, Any]]) -> "SourceRegistry":
        sources: List[SourceDescriptor] = []
        for i, row in enumerate(rows):
            if not isinstance(row, dict):
                raise InvalidArgument(f"Source #{i} must be a mapping")
            key = str(row.get("key") or "").strip()
            url = str(row.get("url") or row.get("feed_url") or "").strip()
            category = str(row.get("category") or "").strip()
            name = str(row.get("source") or row.get("name") or "").strip()
            if not (key and url and category and name):
                raise InvalidArgument(f"Source #{i} needs key, url, category and source")
            sources.append(SourceDescriptor(key=key, feed_url=url, category=category, source_name=name))
        return cls(sources)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "SourceRegistry":
        """
        Load a registry from YAML shaped like::

            sources:
              - {key: ntv_ekonomi, url: https://www.ntv.com.tr/ekonomi.rss, category: Ekonomi, source: NTV}
        """
        cfg_path = Path(path)
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
        rows = data.get("sources") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise InvalidArgument(f"{cfg_path}: root 'sources' must be a list")
        registry = cls.from_mappings(rows)
        logger.info("source_registry_loaded", path=str(cfg_path), sources=len(registry))
        return registry

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> "SourceRegistry":
        return cls.from_yaml(path) if path else cls.default()

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[SourceDescriptor]:
        return iter(self._sources)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Optional[SourceDescriptor]:
        return self._by_key.get(key)

    @property
    def sources(self) -> Tuple[SourceDescriptor, ...]:
        return self._sources

    def by_category(self, category: Optional[str]) -> List[SourceDescriptor]:
        """Sources of one category; matching ignores case and Turkish diacritics."""
        if category is None:
            return list(self._sources)
        wanted = fold_text(category)
        return [s for s in self._sources if fold_text(s.category) == wanted]

    def categories(self) -> List[str]:
        return sorted({s.category for s in self._sources})

    def source_stats(self) -> Dict[str, Any]:
        return {
            "total": len(self._sources),
            "by_category": dict(Counter(s.category for s in self._sources)),
            "by_source": dict(Counter(s.source_name for s in self._sources)),
        }
