from pathlib import Path

from rss_haber.config import DEFAULT_USER_AGENT, load_settings


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("RSS_HABER_BATCH_SIZE", "RSS_HABER_GOOGLE_NEWS", "RSS_HABER_SOURCES_PATH"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings.batch_size == 5
    assert settings.google_news_enabled is True
    assert settings.sources_path is None
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RSS_HABER_BATCH_SIZE", "0")
    monkeypatch.setenv("RSS_HABER_GOOGLE_NEWS", "false")
    monkeypatch.setenv("RSS_HABER_SOURCES_PATH", "sources.yml")
    monkeypatch.setenv("RSS_HABER_IMAGE_ENRICHMENT", "yes")
    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings.batch_size == 1
    assert settings.google_news_enabled is False
    assert settings.sources_path == Path("sources.yml")
    assert settings.enable_image_enrichment is True


def test_dotenv_file(monkeypatch, tmp_path):
    monkeypatch.delenv("RSS_HABER_DATABASE_PATH", raising=False)
    env = tmp_path / ".env"
    env.write_text("RSS_HABER_DATABASE_PATH=/tmp/haber.db\n", encoding="utf-8")
    settings = load_settings(str(env))
    assert settings.database_path == "/tmp/haber.db"
