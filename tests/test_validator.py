import pytest

from rss_haber.validator import is_valid_news


@pytest.mark.parametrize(
    "title",
    [
        "Merkez Bankası faiz kararını açıkladı",
        "Dolar kuru güne yükselişle başladı",
        "Galatasaray deplasmanda üç puanı aldı",
    ],
)
def test_accepts_real_headlines(title):
    assert is_valid_news({"title": title, "description": "Ayrıntılar haberimizde."})


@pytest.mark.parametrize(
    "title",
    [
        "Tüm hakları saklıdır © 2024",
        "Gizlilik Politikası ve kullanım şartları",
        "Abone ol, gelişmeleri kaçırma hemen",
        "20 Aralık 2024",
        "https://www.ornek.com/haber/123",
        "www.ornek.com haber sayfası burada",
        "Kısa başlık",
        "x" * 301,
        "$$$ %%% &&& @@@ ### ***",
    ],
)
def test_rejects_non_news(title):
    assert not is_valid_news({"title": title, "description": ""})


def test_rejects_spam_in_description():
    item = {"title": "Haftanın en çok konuşulan haberi", "description": "Canlı casino ve bahis fırsatları"}
    assert not is_valid_news(item)


def test_boilerplate_only_checked_in_title():
    item = {
        "title": "Merkez Bankası faiz kararını açıkladı",
        "description": "Karar metni yayımlandı. Devamını oku",
    }
    assert is_valid_news(item)


def test_source_name_only_title_rejected():
    assert not is_valid_news({"title": "Habertürk", "description": ""})


def test_summary_used_when_description_missing():
    item = {"title": "Haftanın en çok konuşulan haberi", "summary": "porno içerik"}
    assert not is_valid_news(item)
