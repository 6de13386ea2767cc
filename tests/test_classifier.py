from rss_haber.classifier import FALLBACK_CATEGORY, detect_category, score_categories


def test_unknown_text_is_general():
    assert detect_category("Bugün hava güzel olacak", "") == FALLBACK_CATEGORY


def test_title_hits_outweigh_description_hits():
    scores = score_categories("Dolar rekor kırdı", "Galatasaray maçı")
    assert scores["Ekonomi"] == 3
    # "galatasaray" and "maç" in the description, one point each
    assert scores["Spor"] == 2


def test_detects_economy_from_title():
    assert detect_category("Dolar ve borsa güne düşüşle başladı") == "Ekonomi"


def test_detects_sport():
    assert detect_category("Fenerbahçe derbide Galatasaray'ı yendi") == "Spor"


def test_single_description_hit_is_not_enough():
    assert detect_category("Yeni gelişme yaşandı", "doktor") == FALLBACK_CATEGORY


def test_tie_keeps_first_category():
    # one title hit each for Ekonomi ("dolar") and Spor ("futbol")
    assert detect_category("Dolar futbol") == "Ekonomi"


def test_custom_keyword_table():
    table = {"Bilim": ("uzay", "nasa")}
    assert detect_category("NASA yeni uzay aracını tanıttı", keywords=table) == "Bilim"
