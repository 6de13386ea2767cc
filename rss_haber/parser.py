from __future__ import annotations

import calendar
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

import feedparser
from bs4 import BeautifulSoup

from .text import clean_text, normalize_text

TURKISH_MONTHS = {
    "ocak": 1, "şubat": 2, "mart": 3, "nisan": 4, "mayıs": 5, "haziran": 6,
    "temmuz": 7, "ağustos": 8, "eylül": 9, "ekim": 10, "kasım": 11, "aralık": 12,
}

_TR_DATE_RE = re.compile(r"(\d{1,2})\s+(\w+)\s+(\d{4})")
_DOTTED_DATE_RE = re.compile(r"(\d{1,2})[./](\d{1,2})[./](\d{4})")
_RELATIVE_RE = re.compile(r"(\d+)\s*(dakika|saat|gün|hafta)\s*önce")
_RELATIVE_UNITS = {
    "dakika": timedelta(minutes=1),
    "saat": timedelta(hours=1),
    "gün": timedelta(days=1),
    "hafta": timedelta(weeks=1),
}


def _struct_to_datetime(val: Any) -> Optional[datetime]:
    if not isinstance(val, time.struct_time):
        return None
    try:
        # feedparser normalizes *_parsed to UTC
        return datetime.fromtimestamp(calendar.timegm(val), tz=timezone.utc)
    except (OverflowError, ValueError, OSError):
        return None


def parse_date_text(value: str, *, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse date strings feedparser could not: "20 Aralık 2024", "20.12.2024",
    "2 saat önce". Returns a UTC datetime or None.
    """
    text = normalize_text(value)
    if not text:
        return None
    now = now or datetime.now(timezone.utc)

    m = _TR_DATE_RE.search(text)
    if m and m.group(2) in TURKISH_MONTHS:
        try:
            return datetime(int(m.group(3)), TURKISH_MONTHS[m.group(2)], int(m.group(1)), tzinfo=timezone.utc)
        except ValueError:
            return None

    m = _DOTTED_DATE_RE.search(text)
    if m:
        try:
            return datetime(int(m.group(3)), int(m.group(2)), int(m.group(1)), tzinfo=timezone.utc)
        except ValueError:
            return None

    m = _RELATIVE_RE.search(text)
    if m:
        return now - int(m.group(1)) * _RELATIVE_UNITS[m.group(2)]

    return None


def _to_datetime(entry: Dict[str, Any]) -> Optional[datetime]:
    """
    Convert feed entry date fields to timezone-aware UTC datetime.
    Priority: published_parsed -> updated_parsed -> created_parsed -> string fields.
    """
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        dt = _struct_to_datetime(entry.get(key))
        if dt is not None:
            return dt
    for key in ("published", "updated", "created", "pubDate"):
        s = entry.get(key)
        if isinstance(s, str) and s:
            dt = parse_date_text(s)
            if dt is not None:
                return dt
    return None


def html_to_text(value: str | None) -> str:
    if not value:
        return ""
    if "<" not in value:
        return clean_text(value)
    return clean_text(BeautifulSoup(value, "html.parser").get_text(" "))


def _html_fields(entry: Dict[str, Any]) -> Iterable[str]:
    content = entry.get("content")
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and isinstance(block.get("value"), str):
                yield block["value"]
    for key in ("summary", "description"):
        val = entry.get(key)
        if isinstance(val, str):
            yield val


def _first_img_src(html: str) -> Optional[str]:
    if "<img" not in html.lower():
        return None
    img = BeautifulSoup(html, "html.parser").find("img", src=True)
    if img is None:
        return None
    src = str(img.get("src") or "").strip()
    return src or None


def _media_url(entry: Dict[str, Any], key: str) -> Optional[str]:
    media = entry.get(key)
    if not isinstance(media, list):
        return None
    for m in media:
        if isinstance(m, dict):
            url = (m.get("url") or "").strip()
            if url:
                return url
    return None


def _enclosure_url(entry: Dict[str, Any]) -> Optional[str]:
    enclosures = entry.get("enclosures")
    if not isinstance(enclosures, list):
        return None
    for enc in enclosures:
        if not isinstance(enc, dict):
            continue
        mime = (enc.get("type") or "").lower()
        if mime and not mime.startswith("image/"):
            continue
        href = (enc.get("href") or enc.get("url") or "").strip()
        if href:
            return href
    return None


def extract_image_url(entry: Dict[str, Any]) -> Optional[str]:
    """
    Image precedence: media:content -> media:thumbnail -> image enclosure ->
    first <img src> in any embedded HTML field. The result may still be relative.
    """
    for found in (
        _media_url(entry, "media_content"),
        _media_url(entry, "media_thumbnail"),
        _enclosure_url(entry),
    ):
        if found:
            return found
    for html in _html_fields(entry):
        src = _first_img_src(html)
        if src:
            return src
    return None


def parse_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a raw feed entry (from feedparser) to a dict with common fields.
    Fields: title, description, link, published_at (datetime|None), image_url
    """
    title = html_to_text(entry.get("title") or "")
    description = html_to_text(entry.get("summary") or entry.get("description") or "")
    if not description:
        for html in _html_fields(entry):
            description = html_to_text(html)
            if description:
                break
    link = (entry.get("link") or entry.get("feedburner_origlink") or "").strip()

    return {
        "title": title,
        "description": description,
        "link": link,
        "published_at": _to_datetime(entry),
        "image_url": extract_image_url(entry),
    }


def parse_feed(content: bytes | str) -> Any:
    return feedparser.parse(content)
