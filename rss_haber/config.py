from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    request_timeout: float = 15.0
    batch_size: int = 5
    max_source_sample: int = 25
    user_agent: str = DEFAULT_USER_AGENT
    google_news_enabled: bool = True
    google_news_locale: str = "hl=tr&gl=TR&ceid=TR:tr"
    google_news_max_items: int = 15
    google_news_term_delay: float = 0.3
    sources_path: Optional[Path] = None
    database_path: str = "rss_haber.db"
    log_level: str = "INFO"
    log_json: bool = True
    enable_image_enrichment: bool = False


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment, after loading `.env` (or `env_file`)."""
    load_dotenv(dotenv_path=env_file)
    sources_path = os.getenv("RSS_HABER_SOURCES_PATH")
    return Settings(
        request_timeout=float(os.getenv("RSS_HABER_REQUEST_TIMEOUT", "15")),
        batch_size=max(1, int(os.getenv("RSS_HABER_BATCH_SIZE", "5"))),
        max_source_sample=max(1, int(os.getenv("RSS_HABER_MAX_SOURCE_SAMPLE", "25"))),
        user_agent=os.getenv("RSS_HABER_USER_AGENT", DEFAULT_USER_AGENT),
        google_news_enabled=_env_bool("RSS_HABER_GOOGLE_NEWS", True),
        google_news_locale=os.getenv("RSS_HABER_GOOGLE_NEWS_LOCALE", "hl=tr&gl=TR&ceid=TR:tr"),
        google_news_max_items=int(os.getenv("RSS_HABER_GOOGLE_NEWS_MAX_ITEMS", "15")),
        google_news_term_delay=float(os.getenv("RSS_HABER_GOOGLE_NEWS_TERM_DELAY", "0.3")),
        sources_path=Path(sources_path) if sources_path else None,
        database_path=os.getenv("RSS_HABER_DATABASE_PATH", "rss_haber.db"),
        log_level=os.getenv("RSS_HABER_LOG_LEVEL", "INFO"),
        log_json=_env_bool("RSS_HABER_LOG_JSON", True),
        enable_image_enrichment=_env_bool("RSS_HABER_IMAGE_ENRICHMENT", False),
    )
