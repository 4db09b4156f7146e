# shopping_flow/tests/test_candidate_search.py
from __future__ import annotations

import random
from typing import List

import pytest

from shopping_flow.candidate_search import dedupe_products, search_candidates
from shopping_flow.data_fetchers.retail_search import normalize_listing
from shopping_flow.utils.helpers import normalize_name, similarity_ratio

DISTINCT_TITLES = [
    "Horizon Organic Whole Milk",
    "Fairlife Ultra Filtered Milk",
    "Silk Almond Beverage",
    "Oatly Oat Drink Barista",
    "Lactaid Reduced Fat",
    "Darigold Buttermilk Quart",
    "Borden Chocolate Flavored",
    "Shamrock Farms Half and Half",
]


def listing(title: str, price: str = "$3.99", item_id: str = None) -> dict:
    out = {"title": title, "primary_offer": {"offer_price": price}, "rating": 4.4, "reviews_count": 210}
    if item_id:
        out["us_item_id"] = item_id
    return out


class FakeRetail:
    def __init__(self, pages: dict, fail_on: tuple = ()):
        self.pages = pages
        self.fail_on = fail_on
        self.calls: List[str] = []

    async def __call__(self, query: str) -> dict:
        self.calls.append(query)
        if query in self.fail_on:
            raise RuntimeError("upstream down")
        return {"meta": {"query_successful": True}, "results": self.pages.get(query, [])}


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def test_dedupe_keeps_first_of_near_duplicates(product_factory):
    products = [
        product_factory("A", "Great Value Whole Milk Gallon"),
        product_factory("B", "Great Value Whole Milk Gallons"),
        product_factory("C", "Tyson Chicken Breast"),
    ]
    kept = dedupe_products(products)
    assert [p.id for p in kept] == ["A", "C"]


async def test_candidates_never_contain_near_duplicates(cfg, rng, intent_factory):
    titles = DISTINCT_TITLES[:3] + ["Horizon Organic Whole Milks", "Silk Almond Beverages"]
    retail = FakeRetail({"milk": [listing(t) for t in titles]})
    batch = await search_candidates("milk", intent_factory("milk", "milk"), rng=rng, cfg=cfg, retail_search=retail)

    names = [normalize_name(p.name) for p in batch.products]
    for i, a in enumerate(names):
        for b in names[i + 1:]:
            assert similarity_ratio(a, b) <= 0.7
    assert not batch.used_fallback


async def test_queries_use_refined_plus_three_suggestions(cfg, rng, intent_factory):
    async def suggest(query, intent):
        return ["oat milk", "almond milk", "lactose free milk", "goat milk"]

    retail = FakeRetail({"milk": [listing(DISTINCT_TITLES[0])]})
    sleep = RecordingSleep()
    cfg.RETAIL_RATE_LIMIT_DELAY = 0.5

    batch = await search_candidates(
        "milk", intent_factory("milk", "milk"),
        rng=rng, cfg=cfg, retail_search=retail, suggest=suggest, sleep=sleep,
    )
    assert retail.calls == ["milk", "oat milk", "almond milk", "lactose free milk"]
    assert batch.queries == retail.calls
    assert sleep.delays == [0.5, 0.5, 0.5]
    assert batch.suggestions[0] == "oat milk"


async def test_single_source_failure_is_swallowed(cfg, rng, intent_factory):
    async def suggest(query, intent):
        return ["oat milk"]

    retail = FakeRetail({"oat milk": [listing(DISTINCT_TITLES[3])]}, fail_on=("milk",))
    batch = await search_candidates("milk", intent_factory("milk", "milk"), rng=rng, cfg=cfg,
                                    retail_search=retail, suggest=suggest)
    assert [p.name for p in batch.products] == [DISTINCT_TITLES[3]]
    assert not batch.used_fallback


async def test_failing_suggestions_still_search_refined_query(cfg, rng, intent_factory):
    async def suggest(query, intent):
        raise TimeoutError("answer service slow")

    retail = FakeRetail({"milk": [listing(DISTINCT_TITLES[1])]})
    batch = await search_candidates("milk", intent_factory("milk", "milk"), rng=rng, cfg=cfg,
                                    retail_search=retail, suggest=suggest)
    assert retail.calls == ["milk"]
    assert batch.suggestions == []
    assert len(batch.products) == 1


async def test_candidates_capped(cfg, rng, intent_factory):
    retail = FakeRetail({"milk": [listing(t) for t in DISTINCT_TITLES]})
    batch = await search_candidates("milk", intent_factory("milk", "milk"), rng=rng, cfg=cfg, retail_search=retail)
    assert len(batch.products) == 6


async def test_no_services_uses_fallback_catalog(cfg, rng, intent_factory):
    batch = await search_candidates("milk gallon", intent_factory("milk"), rng=rng, cfg=cfg)
    assert batch.used_fallback
    assert [p.id for p in batch.products] == ["MOCK_MILK_1"]
    assert batch.products[0].in_stock


async def test_empty_results_fall_back_to_generic_product(cfg, rng, intent_factory):
    retail = FakeRetail({})
    batch = await search_candidates("zanzibar spice", intent_factory("zanzibar spice", "zanzibar spice"),
                                    rng=rng, cfg=cfg, retail_search=retail)
    assert batch.used_fallback
    assert [p.id for p in batch.products] == ["FALLBACK_1"]
    assert batch.products[0].name == "Best zanzibar spice Option"


async def test_same_seed_same_candidates(cfg, intent_factory):
    pages = {"milk": [listing("Mystery Milk", price="")] + [listing(t) for t in DISTINCT_TITLES[:2]]}
    first = await search_candidates("milk", intent_factory("milk", "milk"), rng=random.Random(7), cfg=cfg,
                                    retail_search=FakeRetail(pages))
    second = await search_candidates("milk", intent_factory("milk", "milk"), rng=random.Random(7), cfg=cfg,
                                     retail_search=FakeRetail(pages))
    assert [p.to_dict() for p in first.products] == [p.to_dict() for p in second.products]


def test_normalize_listing_fills_missing_numbers(rng):
    product = normalize_listing({"title": "Mystery Box"}, rng)
    assert product.id.startswith("WM_")
    assert 10 <= product.price <= 109
    assert 4.0 <= product.rating <= 5.0
    assert product.reviews >= 100
    assert product.brand == "Walmart"


def test_normalize_listing_reads_offer_and_discount(rng):
    item = {
        "us_item_id": "123",
        "title": "Tide Pods",
        "brand": "Tide",
        "rating": 6.2,
        "primary_offer": {"offer_price": "$15.00", "list_price": "$20.00"},
    }
    product = normalize_listing(item, rng)
    assert product.id == "WM_123"
    assert product.price == pytest.approx(15.0)
    assert product.original_price == pytest.approx(20.0)
    assert product.discount == pytest.approx(25.0)
    assert product.rating == pytest.approx(5.0)


def test_normalize_listing_ignores_list_price_below_offer(rng):
    item = {
        "title": "Bounty Paper Towels",
        "rating": -1,
        "primary_offer": {"offer_price": "$12.00", "list_price": "$10.00"},
    }
    product = normalize_listing(item, rng)
    assert product.discount is None
    assert product.original_price is None
    assert product.rating == 0.0
