from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from .text import normalize_text

SPAM_TERMS = ("casino", "bahis", "kumar", "sex", "porno", "xxx")

# Footer, legal, navigation and call-to-action phrases. Checked against the title only.
BOILERPLATE_PHRASES = (
    "tüm hakları saklıdır",
    "all rights reserved",
    "copyright",
    "© 20",
    "gizlilik politikası",
    "kullanım koşulları",
    "çerez politikası",
    "kvkk",
    "kişisel verilerin korunması",
    "iletişim formu",
    "bize ulaşın",
    "reklam ver",
    "künye",
    "hakkımızda",
    "site haritası",
    "abone ol",
    "bülten",
    "newsletter",
    "üye girişi",
    "kayıt ol",
    "şifremi unuttum",
    "ana sayfa",
    "anasayfa",
    "kategoriler",
    "etiketler",
    "arşiv",
    "son haberler",
    "popüler haberler",
    "en çok okunanlar",
    "reklam alanı",
    "sponsorlu içerik",
    "advertorial",
    "bizi takip edin",
    "sosyal medya",
    "facebook'ta paylaş",
    "twitter'da paylaş",
    "devamını oku",
    "daha fazla",
    "tıklayın",
    "click here",
    "read more",
)

SOURCE_NAME_TITLES = frozenset({"ntv", "cnn türk", "hürriyet", "sözcü", "sabah", "habertürk"})

MIN_TITLE_LENGTH = 15
MAX_TITLE_LENGTH = 300
MAX_GARBLED_RATIO = 0.3

_DATE_ONLY_RE = re.compile(
    r"^\d{1,2}\s+(ocak|şubat|mart|nisan|mayıs|haziran|temmuz|ağustos|eylül|ekim|kasım|aralık)\s+\d{4}$",
    re.IGNORECASE,
)
_DISALLOWED_CHAR_RE = re.compile(r"[^\w\s.,!?:;'\"()\-]")


def _contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(p in text for p in phrases)


def _garbled_ratio(title: str) -> float:
    if not title:
        return 0.0
    return len(_DISALLOWED_CHAR_RE.findall(title)) / len(title)


def is_valid_news(item: Mapping[str, Any]) -> bool:
    """
    Decide whether a parsed feed entry looks like a real news headline.

    Pure function of the entry's title and description (`description`, falling
    back to `summary`). Spam anywhere rejects; boilerplate is only checked in the
    title since feed generators often leak navigation text into descriptions.
    """
    title = normalize_text(item.get("title") or "")
    description = normalize_text(item.get("description") or item.get("summary") or "")
    combined = f"{title} {description}"

    if _contains_any(combined, SPAM_TERMS):
        return False

    if len(title) < MIN_TITLE_LENGTH or len(title) > MAX_TITLE_LENGTH:
        return False

    if _contains_any(title, BOILERPLATE_PHRASES):
        return False

    if title.startswith("http") or title.startswith("www."):
        return False

    if _DATE_ONLY_RE.match(title):
        return False

    if title in SOURCE_NAME_TITLES:
        return False

    if _garbled_ratio(title) > MAX_GARBLED_RATIO:
        return False

    return True
