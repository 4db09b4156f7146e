# shopping_flow/tests/test_intent_resolver.py
from __future__ import annotations

import pytest

from shopping_flow.enums import IntentAction, IntentType
from shopping_flow.intent_resolver import build_intent_response, extract_product, resolve_intent
from shopping_flow.models import Intent


@pytest.mark.parametrize(
    "text,expected",
    [
        ("find organic chicken", IntentType.SEARCH_PRODUCT),
        ("add milk to cart", IntentType.ADD_TO_CART),
        ("price of iphone 15", IntentType.CHECK_PRICE),
        ("checkout", IntentType.PLACE_ORDER),
        ("show my cart", IntentType.VIEW_CART),
        ("hello there", IntentType.GENERAL_QUERY),
    ],
)
def test_resolve_intent_types(text, expected):
    assert resolve_intent(text).type == expected


def test_add_to_cart_keeps_quantity():
    intent = resolve_intent("add 2 chicken breasts to cart")
    assert intent.type == IntentType.ADD_TO_CART
    assert intent.entities.quantity == 2
    assert intent.entities.product == "chicken breasts"
    assert intent.confidence == pytest.approx(0.85)


def test_shopping_vocabulary_falls_back_to_search():
    intent = resolve_intent("chicken for tonight")
    assert intent.type == IntentType.SEARCH_PRODUCT
    assert intent.confidence == pytest.approx(0.6)
    assert intent.entities.product == "chicken for tonight"


def test_general_query_has_no_entities():
    intent = resolve_intent("tell me a joke")
    assert intent.type == IntentType.GENERAL_QUERY
    assert intent.entities.product is None
    assert intent.confidence == pytest.approx(0.4)


@pytest.mark.parametrize("value", [None, 42, ""])
def test_non_text_input_is_general(value):
    assert resolve_intent(value).type == IntentType.GENERAL_QUERY


def test_extract_product_category_hint():
    entities = extract_product("cheap electronics deals")
    assert entities.category == "electronics"
    assert entities.quantity is None


def test_intent_round_trips_through_dict():
    intent = resolve_intent("find 3 apples")
    restored = Intent.from_dict(intent.to_dict())
    assert restored == intent


def test_intent_from_dict_unknown_type_is_general():
    assert Intent.from_dict({"type": "teleport"}).type == IntentType.GENERAL_QUERY


def test_build_intent_response_for_search():
    response = build_intent_response(resolve_intent("find milk"))
    assert response["action"] == IntentAction.TRIGGER_PRODUCT_SEARCH.value
    assert response["message"] == "Searching for milk..."
    assert response["data"]["query"] == "milk"


def test_build_intent_response_defaults_quantity():
    response = build_intent_response(resolve_intent("put bread in basket"))
    assert response["data"] == {"product": "bread", "quantity": 1}
