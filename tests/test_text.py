from rss_haber.text import (
    count_occurrences,
    extract_keywords,
    fold_text,
    matches,
    normalize_text,
    synonyms_of,
)


def test_matches_inflected_keyword():
    assert matches("Dolarin yukselisi durmuyor", "dolar")
    assert not matches("Euro yukseldi", "dolar")


def test_matches_synonym_both_directions():
    assert matches("USD/TRY yeni zirvede", "dolar")
    assert matches("Dolar kuru rekor kırdı", "usd")


def test_matches_requires_word_boundary():
    assert not matches("Sandolarbas köyünde sessizlik", "dolar")


def test_matches_empty_inputs():
    assert not matches("", "dolar")
    assert not matches("Dolar yükseldi", "")
    assert not matches(None, "dolar")


def test_normalize_turkish_dotted_capital_i():
    assert normalize_text("  İSTANBUL ") == "istanbul"


def test_fold_text_strips_diacritics():
    assert fold_text("Gündem") == "gundem"
    assert fold_text("SAĞLIK") == fold_text("saglik")


def test_synonyms_keyword_first_and_unique():
    syns = synonyms_of("Dolar")
    assert syns[0] == "dolar"
    assert "usd" in syns
    assert len(syns) == len(set(syns))


def test_synonyms_unknown_keyword():
    assert synonyms_of("galatasaray") == ("galatasaray",)


def test_count_occurrences_never_double_counts_synonyms():
    # "amerikan dolari" contains "dolar"; it must still count once
    assert count_occurrences("Amerikan dolari yükseldi", "dolar") == 1
    assert count_occurrences("Dolar, dolarda ve USD", "dolar") == 3


def test_count_occurrences_zero_without_match():
    assert count_occurrences("Borsa güne düşüşle başladı", "dolar") == 0


def test_extract_keywords_by_frequency():
    text = "Merkez Bankası faiz kararı. Faiz artışı piyasaları etkiledi, faiz 2024 yılında"
    keywords = extract_keywords(text, max_keywords=3)
    assert keywords[0] == "faiz"
    assert "2024" not in keywords
    assert len(keywords) <= 3


def test_extract_keywords_skips_stop_words_and_short_words():
    assert extract_keywords("için olarak gibi ve ile bir") == []
    assert extract_keywords("") == []
