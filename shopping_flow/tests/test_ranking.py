# shopping_flow/tests/test_ranking.py
from __future__ import annotations

import pytest

from shopping_flow.ranking import (
    delivery_priority,
    filter_available,
    heuristic_best_match,
    order_results,
    select_best_match,
    with_price_comparison,
)


class StubLLM:
    def __init__(self, index=None, error: Exception = None):
        self.index = index
        self.error = error
        self.calls = 0

    async def select_best_match_index(self, products, intent):
        self.calls += 1
        if self.error:
            raise self.error
        return self.index


def test_filter_available_drops_out_of_stock(product_factory):
    products = [
        product_factory("A"),
        product_factory("B", in_stock=False),
        product_factory("C", quantity=0),
    ]
    assert [p.id for p in filter_available(products)] == ["A"]


def test_price_comparison_only_fills_missing(product_factory, rng):
    listed = product_factory("A", price=10.0, original_price=12.0, discount=16.0)
    bare = product_factory("B", price=10.0)
    out = with_price_comparison([listed, bare], rng)
    assert out[0] is listed
    assert out[1].original_price == pytest.approx(12.0)
    assert 5 <= out[1].discount <= 34
    assert bare.original_price is None


def test_heuristic_prefers_rating_over_small_price_gap(product_factory):
    products = [
        product_factory("A", rating=4.0, price=5.0),
        product_factory("B", rating=4.8, price=9.0),
    ]
    assert heuristic_best_match(products).id == "B"


def test_heuristic_first_wins_ties(product_factory):
    products = [product_factory("A"), product_factory("B")]
    assert heuristic_best_match(products).id == "A"


async def test_select_best_match_uses_llm_index(product_factory, intent_factory):
    products = [product_factory("A"), product_factory("B")]
    llm = StubLLM(index=1)
    best = await select_best_match(products, intent_factory("milk"), llm)
    assert best.id == "B"
    assert llm.calls == 1


@pytest.mark.parametrize("llm", [StubLLM(error=ValueError("index out of range")), StubLLM(index=9)])
async def test_select_best_match_falls_back_to_heuristic(product_factory, intent_factory, llm):
    products = [product_factory("A", rating=3.0), product_factory("B", rating=4.9)]
    best = await select_best_match(products, intent_factory("milk"), llm)
    assert best.id == "B"


async def test_select_best_match_empty(intent_factory):
    assert await select_best_match([], intent_factory("milk"), StubLLM(index=0)) is None


@pytest.mark.parametrize(
    "estimate,rank",
    [("Today", 1), ("Tomorrow", 2), ("2 days", 3), ("3 days", 4), ("1 week", 5), ("someday", 6)],
)
def test_delivery_priority(estimate, rank):
    assert delivery_priority(estimate) == rank


def test_order_results_sorts_by_delivery_value_rating_price(product_factory):
    products = [
        product_factory("slow", price=5.0, estimated_delivery="1 week"),
        product_factory("pricey", price=80.0, rating=4.9, estimated_delivery="Today"),
        product_factory("cheap", price=8.0, rating=4.1, estimated_delivery="Today"),
        product_factory("cheap_better", price=9.0, rating=4.6, estimated_delivery="Today"),
    ]
    ordered = order_results(products)
    assert [p.id for p in ordered] == ["cheap_better", "cheap", "pricey", "slow"]
    assert ordered[0].is_great_value is True
    assert ordered[2].is_great_value is False
    assert products[0].is_great_value is None
