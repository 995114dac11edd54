"""Term extraction: case-insensitive substring hits, vocabulary order kept."""
from sculpture_guide.core import terms


def test_extract_terms_ignores_case():
    assert terms.extract_terms("I love MICHELANGELO's work", ["Michelangelo"]) == ["Michelangelo"]


def test_extract_terms_keeps_vocabulary_order():
    text = "Rodin and Bernini, but mostly Gian Lorenzo Bernini"
    assert terms.extract_artist_terms(text) == ["Bernini", "Rodin", "Gian Lorenzo Bernini"]


def test_extract_terms_matches_inside_words():
    # No word boundaries: "stone" inside "milestone", "wood" inside "Hollywood".
    assert terms.extract_material_terms("A milestone for Hollywood") == ["stone", "wood"]


def test_extract_terms_no_hits():
    assert terms.extract_sculpture_terms("What's for lunch?") == []
    assert terms.extract_terms("", terms.PERIOD_TERMS) == []


def test_each_catalog_has_its_own_extractor():
    text = "Was the marble Pieta Renaissance or Baroque?"
    assert terms.extract_sculpture_terms(text) == ["Pieta"]
    assert terms.extract_material_terms(text) == ["marble"]
    assert terms.extract_period_terms(text) == ["Renaissance", "Baroque"]
    assert terms.extract_artist_terms(text) == []
