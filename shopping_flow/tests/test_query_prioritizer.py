# shopping_flow/tests/test_query_prioritizer.py
from __future__ import annotations

import pytest

from shopping_flow.enums import TermCategory
from shopping_flow.intent_config import EMPTY_QUERY_EXPANSION
from shopping_flow.query_prioritizer import (
    categorize,
    clean_search_query,
    prioritize_terms,
    refine_query,
    score_terms,
    tokenize,
)


def test_urgent_diabetes_request_puts_health_term_first():
    terms = prioritize_terms("I need something urgently for diabetes")
    assert terms[:2] == ["diabetes", "urgently"]
    assert terms.index("diabetes") < terms.index("need")
    assert terms.index("diabetes") < terms.index("something")


def test_refined_query_starts_with_health_term():
    refined = refine_query("I need something urgently for diabetes")
    assert refined.split()[:2] == ["diabetes", "urgently"]
    assert len(refined.split()) <= 5


@pytest.mark.parametrize("query", ["the gluten-free bread", "gluten-free thing the", "vegan stuff of snacks"])
def test_dietary_term_beats_stop_words_and_generic_nouns(query):
    scored = score_terms(query)
    dietary = next(t for t in scored if t.category == TermCategory.DIETARY)
    for other in scored:
        if other.category in (TermCategory.STOP_WORD, TermCategory.GENERIC):
            assert dietary.score > other.score


def test_misspelled_health_term_counts_as_dietary():
    assert categorize("diabitez") == TermCategory.DIETARY


def test_categorize_lexicon_order():
    assert categorize("organic") == TermCategory.DIETARY
    assert categorize("milk") == TermCategory.PRODUCT
    assert categorize("walmart") == TermCategory.BRAND
    assert categorize("wireless") == TermCategory.ATTRIBUTE
    assert categorize("asap") == TermCategory.URGENCY
    assert categorize("cheap") == TermCategory.QUALITY_PRICE
    assert categorize("the") == TermCategory.STOP_WORD
    assert categorize("zzzz") == TermCategory.GENERIC


def test_tokenize_dedupes_and_strips_punctuation():
    assert tokenize("Milk, milk! BREAD?") == ["milk", "bread"]


def test_digit_bonus_lifts_model_numbers():
    scored = {t.term: t.score for t in score_terms("iphone 15")}
    assert scored["15"] == pytest.approx(2.0)


def test_ties_keep_input_order():
    assert prioritize_terms("milk rice")[:2] == ["milk", "rice"]


def test_refine_query_limits_terms():
    refined = refine_query("organic fresh milk bread eggs cheese butter", limit=3)
    assert len(refined.split()) == 3


def test_refine_query_empty_uses_cleanup():
    assert refine_query("") == EMPTY_QUERY_EXPANSION


@pytest.mark.parametrize(
    "query,expected",
    [
        ("milk", "milk gallon"),
        ("I want to buy some chicken", "chicken breast"),
        ("suggest me something for breakfast", "breakfast cereal oats bread eggs"),
        ("the", EMPTY_QUERY_EXPANSION),
        ("looking for a laptop", "laptop"),
    ],
)
def test_clean_search_query(query, expected):
    assert clean_search_query(query) == expected
