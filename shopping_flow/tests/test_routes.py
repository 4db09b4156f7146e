# shopping_flow/tests/test_routes.py
from __future__ import annotations

from typing import Any, Dict

import pytest


def payload(res) -> Dict[str, Any]:
    body = res.get_json()
    assert body["success"] is True
    return body["data"]


def test_health(client):
    res = client.get("/rs/health")
    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "healthy"
    assert body["collaborators"] == {"llm": False, "answer": False, "retail": False}
    assert body["fetchers_registered"] is True


def test_unknown_endpoint_is_404(client):
    res = client.get("/rs/nope")
    assert res.status_code == 404
    assert res.get_json()["error"] == "Endpoint not found"


def test_wrong_method_is_json_405(client):
    res = client.get("/rs/cart/optimize")
    assert res.status_code == 405
    assert "error" in res.get_json()


def test_intent_route(client):
    res = client.post("/rs/intent", json={"message": "add 2 apples to cart"})
    assert res.status_code == 200
    data = payload(res)
    assert data["intent"]["type"] == "add_to_cart"
    assert data["response"]["data"] == {"product": "apples", "quantity": 2}


def test_intent_route_requires_message(client):
    res = client.post("/rs/intent", json={"message": "   "})
    assert res.status_code == 400
    assert "error" in res.get_json()


def test_search_with_intent(client):
    res = client.post("/rs/search", json={"intent": {"type": "search_product", "entities": {"product": "milk"}}})
    assert res.status_code == 200
    data = payload(res)
    assert data["products"][0]["id"] == "MOCK_MILK_1"
    assert data["products"][0]["inStock"] is True
    assert data["bestMatch"]["id"] == "MOCK_MILK_1"


def test_search_with_message(client):
    res = client.post("/rs/search", json={"message": "find chicken"})
    assert res.status_code == 200
    assert all(p["id"].startswith("MOCK_CHICKEN") for p in payload(res)["products"])


def test_search_rejects_empty_body(client):
    assert client.post("/rs/search", json={}).status_code == 400


@pytest.mark.parametrize(
    "intent",
    [
        {"entities": ["milk"]},
        {"entities": {"product": "milk", "quantity": "two"}},
        {"entities": {"product": "milk"}, "confidence": "high"},
        {"entities": {"product": 42}},
    ],
)
def test_search_rejects_malformed_intent(client, intent):
    res = client.post("/rs/search", json={"intent": intent})
    assert res.status_code == 400
    assert "error" in res.get_json()


def _delivery_body(**overrides):
    body = {
        "selectedProducts": [{"id": "P1", "name": "Generic Milk", "price": 3.99, "category": "dairy"}],
        "deliveryAddress": {"street": "500 Elm St", "city": "Dallas", "state": "TX", "zipCode": "75201"},
        "userPreferences": {"priorityCost": True},
    }
    body.update(overrides)
    return body


def test_delivery_plan(client):
    res = client.post("/rs/delivery", json=_delivery_body())
    assert res.status_code == 200
    data = payload(res)
    assert data["recommendedDelivery"]["type"] == "standard"
    assert data["optimalWarehouse"]["id"] in ("WH_DFW_001", "WH_HOU_001")
    assert len(data["deliveryOptions"]) == 5
    assert data["isFallback"] is False


def test_delivery_requires_products(client):
    assert client.post("/rs/delivery", json=_delivery_body(selectedProducts=[])).status_code == 400


def test_delivery_requires_address_fields(client):
    res = client.post("/rs/delivery", json=_delivery_body(deliveryAddress={"street": "500 Elm St", "city": "Dallas"}))
    assert res.status_code == 400
    assert "zipCode" in res.get_json()["error"]


def test_delivery_options_preview(client):
    res = client.get("/rs/delivery/options?zipCode=75201&city=Dallas&state=TX")
    assert res.status_code == 200
    data = payload(res)
    assert data["availableWarehouses"] == 2
    assert len(data["deliveryOptions"]) == 5


def test_delivery_options_requires_zip(client):
    assert client.get("/rs/delivery/options").status_code == 400


def test_cart_optimize(client):
    body = {
        "cartItems": [
            {"id": "L1", "quantity": 1,
             "product": {"id": "P1", "name": "Horizon Organic Milk", "price": 4.98, "category": "dairy"}},
        ],
        "userPreferences": {"preferGreatValue": True},
    }
    res = client.post("/rs/cart/optimize", json=body)
    assert res.status_code == 200
    data = payload(res)
    assert data["optimizationId"].startswith("OPT_")
    assert data["recommendedSubstitutions"][0]["substitutionType"] == "rollback"
    assert data["totalSavings"] == 1.7


def test_cart_optimize_requires_items(client):
    assert client.post("/rs/cart/optimize", json={"cartItems": []}).status_code == 400


def test_cart_lines_without_ids_keep_their_own_savings(client):
    milk = {"id": "P1", "name": "Horizon Organic Milk", "price": 4.98, "category": "dairy"}
    body = {"cartItems": [{"quantity": 1, "product": milk}, {"quantity": 3, "product": milk}]}
    res = client.post("/rs/cart/optimize", json=body)
    assert res.status_code == 200
    data = payload(res)
    assert [s["savings"] for s in data["recommendedSubstitutions"]] == [1.7, 5.1]
    assert data["totalSavings"] == 6.8


def test_cart_preview(client):
    res = client.get("/rs/cart/preview?category=bakery")
    assert res.status_code == 200
    data = payload(res)
    assert [g["id"] for g in data["optimizations"]["greatValue"]] == ["GV_002"]
