# shopping_flow/tests/conftest.py
from __future__ import annotations

import os
import random
from datetime import datetime

# Blank upstream keys before the package reads its config
os.environ["APP_ENV"] = "testing"

import pytest

from shopping_flow import create_app
from shopping_flow.config import TestingConfig
from shopping_flow.models import (
    Coordinates,
    DeliveryAddress,
    IntentEntities,
    Intent,
    Product,
    SupplierInfo,
    WarehouseInfo,
)
from shopping_flow.enums import IntentType


@pytest.fixture
def cfg():
    return TestingConfig()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def morning():
    return datetime(2025, 7, 10, 9, 30)


@pytest.fixture
def evening():
    return datetime(2025, 7, 10, 18, 0)


@pytest.fixture
def address():
    return DeliveryAddress(
        street="500 Elm St",
        city="Dallas",
        state="TX",
        zip_code="75201",
        coordinates=Coordinates(32.78, -96.80),
    )


def make_product(pid: str = "P1", name: str = "Organic Whole Milk", price: float = 3.99, *,
                 category: str = "dairy", brand: str = "Horizon", rating: float = 4.5,
                 estimated_delivery: str = "Tomorrow", **overrides) -> Product:
    fields = dict(
        id=pid,
        name=name,
        description=f"{name} description",
        price=price,
        brand=brand,
        category=category,
        image="",
        rating=rating,
        reviews=120,
        in_stock=True,
        quantity=25,
        warehouse=WarehouseInfo("Dallas, TX", 10.0, estimated_delivery),
        supplier=SupplierInfo("SUP_1", f"{brand} Supplier", 0.95),
    )
    fields.update(overrides)
    return Product(**fields)


def make_intent(product: str = None, original_query: str = "", category: str = None) -> Intent:
    return Intent(
        type=IntentType.SEARCH_PRODUCT,
        entities=IntentEntities(product=product, category=category),
        confidence=0.85,
        original_query=original_query,
        english_query=original_query,
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def intent_factory():
    return make_intent


@pytest.fixture(scope="session")
def app():
    application = create_app(TestingConfig())
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
