from datetime import datetime, timedelta, timezone

import pytest

from rss_haber.exceptions import PersistenceError
from rss_haber.storage import InMemoryNewsStore, SQLiteNewsStore

T0 = datetime(2024, 12, 20, 9, 0, tzinfo=timezone.utc)


def _fields(title: str, scraped_at: datetime):
    return {
        "title": title,
        "description": "Açıklama",
        "image_url": None,
        "category": "Ekonomi",
        "source": "NTV",
        "keywords": ["dolar", "kuru"],
        "published_at": T0,
        "scraped_at": scraped_at,
        "is_active": True,
    }


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryNewsStore()
        return
    s = SQLiteNewsStore(str(tmp_path / "news.db"))
    yield s
    s.close()


@pytest.mark.asyncio
async def test_upsert_inserts_then_updates(store):
    url = "https://x.test/1"
    later = T0 + timedelta(hours=1)

    assert await store.upsert(url, _fields("İlk başlık burada", T0), {"created_at": T0}) is True
    assert await store.upsert(url, _fields("Güncel başlık burada", later), {"created_at": later}) is False

    record = await store.find_one(url)
    assert record.title == "Güncel başlık burada"
    assert record.scraped_at == later
    assert record.created_at == T0
    assert record.keywords == ["dolar", "kuru"]
    assert record.is_active is True


@pytest.mark.asyncio
async def test_find_one_missing(store):
    assert await store.find_one("https://x.test/yok") is None


@pytest.mark.asyncio
async def test_unknown_field_rejected(store):
    with pytest.raises(PersistenceError):
        await store.upsert("https://x.test/1", {"bogus": 1}, {"created_at": T0})


@pytest.mark.asyncio
async def test_sqlite_persists_across_connections(tmp_path):
    path = str(tmp_path / "news.db")
    first = SQLiteNewsStore(path)
    await first.upsert("https://x.test/1", _fields("Kalıcı başlık burada", T0), {"created_at": T0})
    first.close()

    second = SQLiteNewsStore(path)
    try:
        assert await second.count() == 1
        record = await second.find_one("https://x.test/1")
        assert record.published_at == T0
    finally:
        second.close()


@pytest.mark.asyncio
async def test_sqlite_incomplete_record_is_persistence_error(tmp_path):
    store = SQLiteNewsStore(str(tmp_path / "news.db"))
    try:
        with pytest.raises(PersistenceError):
            await store.upsert("https://x.test/1", {"title": "Eksik kayıt"}, {"created_at": T0})
    finally:
        store.close()
