import pytest

from rss_haber.service import ALREADY_RUNNING, ScraperService
from rss_haber.storage import InMemoryNewsStore

A = "https://a.test/rss"
B = "https://b.test/rss"


@pytest.fixture
def two_sources(registry_factory):
    return registry_factory(
        ("a", A, "Ekonomi", "A Haber"),
        ("b", B, "Ekonomi", "B Haber"),
    )


@pytest.mark.asyncio
async def test_scrape_all_and_save(aggregator_factory, two_sources, feed_server, rss, pub_date):
    feed_server.add(A, rss([
        {"title": "Borsa günü düşüşle tamamladı", "link": "https://a.test/1", "pubDate": pub_date(hours=5)},
        {"title": "Altın fiyatları yeniden yükseldi", "link": "https://a.test/2", "pubDate": pub_date(hours=1)},
    ]))
    feed_server.add(B, rss([
        {"title": "Altın fiyatları yeniden yükseldi", "link": "https://a.test/2", "pubDate": pub_date(hours=1)},
    ]))
    store = InMemoryNewsStore()
    service = ScraperService(aggregator_factory(two_sources), store)

    first = await service.scrape_all_and_save()
    second = await service.scrape_all_and_save()

    assert first.success
    assert (first.total_news, first.saved_news, first.duplicates) == (2, 2, 0)
    assert (second.saved_news, second.duplicates) == (0, 2)
    assert len(store) == 2
    stats = service.stats()
    assert stats["total_scraped"] == 4
    assert stats["total_saved"] == 2
    assert stats["last_run"] is not None
    assert stats["is_running"] is False


@pytest.mark.asyncio
async def test_scrape_with_keyword(aggregator_factory, two_sources, feed_server, rss, pub_date):
    feed_server.add(A, rss([
        {"title": "Dolar kuru güne yükselişle başladı", "link": "https://a.test/1", "pubDate": pub_date(hours=1)},
        {"title": "Borsa günü düşüşle tamamladı", "link": "https://a.test/2", "pubDate": pub_date(hours=2)},
    ]))
    store = InMemoryNewsStore()
    service = ScraperService(aggregator_factory(two_sources), store)

    report = await service.scrape_with_keyword("dolar")

    assert report.keyword == "dolar"
    assert report.saved_news == 1
    assert [f.source_key for f in report.failures] == ["b"]
    assert await store.find_one("https://a.test/1") is not None


@pytest.mark.asyncio
async def test_second_concurrent_scrape_is_rejected(aggregator_factory, two_sources, feed_server):
    service = ScraperService(aggregator_factory(two_sources), InMemoryNewsStore())
    service.is_running = True

    report = await service.scrape_all_and_save()
    keyword_report = await service.scrape_with_keyword("dolar")

    assert report.success is False
    assert report.message == ALREADY_RUNNING
    assert keyword_report.success is False
    assert feed_server.requests == []


@pytest.mark.asyncio
async def test_running_flag_reset_after_failure(aggregator_factory, two_sources):
    service = ScraperService(aggregator_factory(two_sources), InMemoryNewsStore())
    with pytest.raises(ValueError):
        await service.scrape_with_keyword("a")
    assert service.is_running is False


@pytest.mark.asyncio
async def test_save_news_empty():
    service = ScraperService(aggregator=None, store=InMemoryNewsStore())
    report = await service.save_news([])
    assert report.inserted_count == 0


@pytest.mark.asyncio
async def test_scrape_with_keyword_forwards_search_options(
    aggregator_factory, two_sources, feed_server, rss, pub_date
):
    feed_server.add(A, rss([
        {"title": "Dolar kuru güne yükselişle başladı", "link": "https://a.test/1", "pubDate": pub_date(hours=1)},
        {"title": "Dolar rekor tazeledi, gözler Merkez'de", "link": "https://a.test/2", "pubDate": pub_date(hours=2)},
    ]))
    feed_server.add(B, rss([
        {"title": "Dolar haftaya düşüşle başladı bugün", "link": "https://b.test/1", "pubDate": pub_date(hours=3)},
    ]))
    store = InMemoryNewsStore()
    service = ScraperService(aggregator_factory(two_sources), store)

    limited = await service.scrape_with_keyword("dolar", limit=1)
    other_category = await service.scrape_with_keyword("dolar", category="Spor")

    assert (limited.total_news, limited.saved_news) == (1, 1)
    assert len(store) == 1
    assert other_category.total_news == 0
    assert len(feed_server.requests) == 2
