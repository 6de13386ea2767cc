"""
Text normalization and Turkish-aware keyword matching.

Matching approximates Turkish noun-case inflection by trying a fixed set of
suffixes on every synonym instead of running a stemmer.
"""
from __future__ import annotations

import re
from collections import Counter
from functools import lru_cache
from html import unescape
from typing import Dict, List, Pattern, Tuple

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "dolar": ("usd", "amerikan dolari", "dolarin", "dolarda"),
    "euro": ("eur", "avro", "euronun"),
    "enflasyon": ("tufe", "tuik"),
    "faiz": ("politika faizi", "tcmb faizi"),
    "altın": ("altin", "gram altın", "ons altın"),
    "borsa": ("bist", "borsa istanbul"),
    "bitcoin": ("btc",),
}

CASE_SUFFIXES: Tuple[str, ...] = (
    "", "in", "un", "a", "e", "i", "da", "de", "dan", "den", "la", "le", "lar", "ler",
)

_STOP_WORDS = frozenset({
    "ve", "veya", "ile", "için", "de", "da", "den", "dan",
    "bir", "bu", "şu", "o", "ne", "ki", "ama", "fakat",
    "ancak", "gibi", "kadar", "daha", "en", "çok", "az",
    "olan", "olarak", "üzere", "göre", "karşı", "doğru",
    "the", "a", "an", "is", "are", "was", "were", "be",
})

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_DIGITS_RE = re.compile(r"^\d+$")

_ASCII_FOLD = str.maketrans("çğışöüâîû", "cgisouaiu")


def normalize_text(text: str | None) -> str:
    if not text:
        return ""
    # "İ".lower() yields "i" + combining dot
    return text.replace("İ", "i").lower().strip()


def fold_text(text: str | None) -> str:
    """Normalize and strip Turkish diacritics, for comparing labels such as categories."""
    return normalize_text(text).translate(_ASCII_FOLD)


def clean_text(text: str | None) -> str:
    """Unescape HTML entities and collapse whitespace."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", unescape(text)).strip()


def synonyms_of(keyword: str) -> Tuple[str, ...]:
    """
    Return the keyword followed by every synonym group it belongs to.

    Lookup is bidirectional: a variant yields its canonical term and the siblings.
    """
    normalized = normalize_text(keyword)
    out: List[str] = [normalized]
    for canonical, variants in SYNONYMS.items():
        if normalized == canonical or normalized in variants:
            out.append(canonical)
            out.extend(variants)
    return tuple(dict.fromkeys(out))


@lru_cache(maxsize=512)
def _match_patterns(keyword: str) -> Tuple[Pattern[str], ...]:
    patterns = []
    for syn in synonyms_of(keyword):
        if not syn:
            continue
        for suffix in CASE_SUFFIXES:
            patterns.append(re.compile(r"\b" + re.escape(syn + suffix) + r"\b", re.IGNORECASE))
    return tuple(patterns)


@lru_cache(maxsize=512)
def _count_pattern(keyword: str) -> Pattern[str] | None:
    roots = [s for s in synonyms_of(keyword) if s]
    if not roots:
        return None
    # longest first so "amerikan dolari" wins over a shorter root at the same position
    roots.sort(key=len, reverse=True)
    alternation = "|".join(re.escape(r) for r in roots)
    return re.compile(r"\b(?:" + alternation + r")\w*", re.IGNORECASE)


def matches(text: str | None, keyword: str | None) -> bool:
    if not text or not keyword:
        return False
    normalized = normalize_text(text)
    return any(p.search(normalized) for p in _match_patterns(normalize_text(keyword)))


def count_occurrences(text: str | None, keyword: str | None) -> int:
    """Count inflected occurrences of the keyword or any synonym. Used for weighting only."""
    if not text or not keyword:
        return 0
    pattern = _count_pattern(normalize_text(keyword))
    if pattern is None:
        return 0
    return len(pattern.findall(normalize_text(text)))


def extract_keywords(text: str | None, max_keywords: int = 5) -> List[str]:
    """Most frequent content words (longer than 3 chars, not stop words or numbers)."""
    if not text:
        return []
    words = _NON_WORD_RE.sub("", normalize_text(text)).split()
    counts = Counter(
        w for w in words
        if len(w) > 3 and w not in _STOP_WORDS and not _DIGITS_RE.match(w)
    )
    return [w for w, _ in counts.most_common(max_keywords)]
