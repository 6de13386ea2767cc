from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Mapping, Pattern, Sequence, Tuple

from .text import normalize_text

FALLBACK_CATEGORY = "Genel"
MIN_CATEGORY_SCORE = 2
TITLE_HIT_POINTS = 3
DESCRIPTION_HIT_POINTS = 1

CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "Ekonomi": (
        "dolar", "euro", "borsa", "hisse", "faiz", "enflasyon", "tcmb", "merkez bankası",
        "kur", "altın", "bitcoin", "kripto", "bist", "ekonomi", "finans", "yatırım",
        "piyasa", "ihracat", "ithalat", "büyüme", "gsyh", "işsizlik", "bütçe", "vergi", "fiyat",
    ),
    "Spor": (
        "galatasaray", "fenerbahçe", "beşiktaş", "trabzonspor", "süper lig", "maç", "gol",
        "futbol", "basketbol", "voleybol", "şampiyonlar ligi", "uefa", "fifa", "milli takım",
        "transfer", "teknik direktör", "spor", "stadyum", "derbi",
    ),
    "Teknoloji": (
        "iphone", "android", "samsung", "apple", "google", "yapay zeka", "ai", "robot",
        "yazılım", "uygulama", "sosyal medya", "twitter", "instagram", "facebook",
        "teknoloji", "bilgisayar", "telefon", "internet", "5g", "siber",
    ),
    "Sağlık": (
        "sağlık", "hastane", "doktor", "ilaç", "tedavi", "hastalık", "covid", "grip", "aşı",
        "kanser", "ameliyat", "tıp", "hasta",
    ),
    "Magazin": (
        "ünlü", "oyuncu", "şarkıcı", "dizi", "film", "konser", "düğün", "boşanma", "magazin",
        "yıldız", "sanatçı", "moda", "güzellik",
    ),
    "Dünya": (
        "abd", "amerika", "rusya", "çin", "avrupa", "almanya", "fransa", "ingiltere", "savaş",
        "nato", "bm", "birleşmiş milletler", "uluslararası", "dünya", "yurtdışı",
    ),
    "Gündem": (
        "tbmm", "meclis", "bakan", "cumhurbaşkanı", "erdoğan", "hükümet", "muhalefet", "seçim",
        "oy", "parti", "siyaset", "yasa", "kanun",
    ),
    "Son Dakika": ("son dakika", "flaş", "acil", "breaking"),
}


@lru_cache(maxsize=1024)
def _keyword_pattern(keyword: str) -> Pattern[str]:
    # leading boundary only, so inflected forms ("dolardaki") still count
    return re.compile(r"\b" + re.escape(normalize_text(keyword)))


def score_categories(
    title: str,
    description: str = "",
    keywords: Mapping[str, Sequence[str]] = CATEGORY_KEYWORDS,
) -> Dict[str, int]:
    norm_title = normalize_text(title)
    text = normalize_text(f"{title} {description}")
    scores: Dict[str, int] = {}
    for category, words in keywords.items():
        score = 0
        for word in words:
            pattern = _keyword_pattern(word)
            if not pattern.search(text):
                continue
            score += TITLE_HIT_POINTS if pattern.search(norm_title) else DESCRIPTION_HIT_POINTS
        scores[category] = score
    return scores


def detect_category(
    title: str,
    description: str = "",
    keywords: Mapping[str, Sequence[str]] = CATEGORY_KEYWORDS,
) -> str:
    """
    Pick the best-scoring category for free text.

    Title hits are worth 3 points, description-only hits 1 point. Ties keep the
    first category in dictionary order; anything under 2 points is "Genel".
    """
    best_category = FALLBACK_CATEGORY
    best_score = 0
    for category, score in score_categories(title, description, keywords).items():
        if score > best_score:
            best_score = score
            best_category = category
    return best_category if best_score >= MIN_CATEGORY_SCORE else FALLBACK_CATEGORY
