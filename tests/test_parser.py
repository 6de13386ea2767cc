from datetime import datetime, timedelta, timezone

from rss_haber.parser import extract_image_url, html_to_text, parse_date_text, parse_entry, parse_feed

NOW = datetime(2024, 12, 20, 12, 0, tzinfo=timezone.utc)


def test_parse_turkish_month_date():
    assert parse_date_text("20 Aralık 2024") == datetime(2024, 12, 20, tzinfo=timezone.utc)
    assert parse_date_text("5 Mayıs 2023 Cuma") == datetime(2023, 5, 5, tzinfo=timezone.utc)


def test_parse_dotted_date():
    assert parse_date_text("20.12.2024") == datetime(2024, 12, 20, tzinfo=timezone.utc)
    assert parse_date_text("01/02/2024") == datetime(2024, 2, 1, tzinfo=timezone.utc)


def test_parse_relative_date():
    assert parse_date_text("2 saat önce", now=NOW) == NOW - timedelta(hours=2)
    assert parse_date_text("15 dakika önce", now=NOW) == NOW - timedelta(minutes=15)
    assert parse_date_text("3 gün önce", now=NOW) == NOW - timedelta(days=3)


def test_parse_date_text_unparseable():
    assert parse_date_text("dün akşam") is None
    assert parse_date_text("") is None
    assert parse_date_text("31.02.2024") is None


def test_html_to_text():
    assert html_to_text("<p>Merhaba <b>dünya</b></p>") == "Merhaba dünya"
    assert html_to_text("Ali &amp; Veli") == "Ali & Veli"
    assert html_to_text(None) == ""


def test_image_precedence_media_content_first():
    entry = {
        "media_content": [{"url": "https://cdn.example.com/a.jpg"}],
        "media_thumbnail": [{"url": "https://cdn.example.com/b.jpg"}],
        "enclosures": [{"href": "https://cdn.example.com/c.jpg", "type": "image/jpeg"}],
    }
    assert extract_image_url(entry) == "https://cdn.example.com/a.jpg"


def test_image_skips_non_image_enclosure():
    entry = {
        "enclosures": [{"href": "https://cdn.example.com/v.mp4", "type": "video/mp4"}],
        "summary": '<p>Metin <img src="https://cdn.example.com/d.jpg"></p>',
    }
    assert extract_image_url(entry) == "https://cdn.example.com/d.jpg"


def test_image_missing():
    assert extract_image_url({"summary": "Sadece metin"}) is None


def test_parse_entry_from_feed(rss):
    xml = rss([
        {
            "title": "Merkez Bankası faiz kararını açıkladı",
            "link": "https://www.ornek.com/haber/1",
            "description": "<![CDATA[<p>Politika faizi <b>sabit</b> tutuldu.</p>]]>",
            "pubDate": "Fri, 20 Dec 2024 09:30:00 +0000",
            "image": "https://cdn.ornek.com/1.jpg",
        }
    ])
    feed = parse_feed(xml)
    entry = parse_entry(feed.entries[0])

    assert entry["title"] == "Merkez Bankası faiz kararını açıkladı"
    assert entry["description"] == "Politika faizi sabit tutuldu."
    assert entry["link"] == "https://www.ornek.com/haber/1"
    assert entry["published_at"] == datetime(2024, 12, 20, 9, 30, tzinfo=timezone.utc)
    assert entry["image_url"] == "https://cdn.ornek.com/1.jpg"


def test_parse_entry_without_date():
    entry = parse_entry({"title": "Başlık burada yer alıyor", "link": "https://x.com/1"})
    assert entry["published_at"] is None
    assert entry["description"] == ""
