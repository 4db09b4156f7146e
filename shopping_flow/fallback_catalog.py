"""
Fallback Catalog
────────────────
Versioned keyword → product table used when the retail-search service is
unconfigured or returns nothing. Keys are matched as substrings of the
query in table order; the first key found wins. Fields the table does not
pin down (rating, reviews, stock, warehouse) are drawn from the injected
`random.Random` so results are reproducible under a fixed seed.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import Product, SupplierInfo, WarehouseInfo
from .scoring_config import (
    DELIVERY_ESTIMATE_WEIGHTS,
    DELIVERY_ESTIMATES,
    FALLBACK_DISCOUNT_RANGE,
    FALLBACK_ORIGINAL_PRICE_FACTOR,
    FILL_RELIABILITY_RANGE,
    GENERIC_FALLBACK_RELIABILITY,
)
from .utils.helpers import random_token

log = logging.getLogger(__name__)

CATALOG_VERSION = "2025.07"

DEFAULT_IMAGE = "https://images.unsplash.com/photo-1441986300917-64674bd600d8?w=400&h=400&fit=crop&crop=center&q=95"
FULFILMENT_CITIES = ["Dallas, TX", "Austin, TX", "Houston, TX", "San Antonio, TX"]


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    description: str
    price: float
    brand: str
    category: str


def _img(photo: str) -> str:
    return f"https://images.unsplash.com/{photo}?w=400&h=400&fit=crop&crop=center&q=95"


# (key, image, entries); order is the match order
FALLBACK_TABLE: List[Tuple[str, str, List[CatalogEntry]]] = [
    ("apple", _img("photo-1560806887-1e4cd0b6cbd6"), [
        CatalogEntry("Fresh Gala Apples 3lb Bag", "Sweet and crisp Gala apples, perfect for snacking", 4.99, "Fresh", "food"),
        CatalogEntry("Honeycrisp Apples 2lb Bag", "Premium Honeycrisp apples, known for their sweet-tart flavor", 6.99, "Fresh", "food"),
        CatalogEntry("Organic Red Delicious Apples", "Certified organic red delicious apples, 3lb bag", 7.99, "Organic", "food"),
    ]),
    ("chicken", _img("photo-1604503468506-a8da13d82791"), [
        CatalogEntry("Tyson Fresh Chicken Breast", "Fresh, all-natural chicken breast, perfect for grilling", 8.99, "Tyson", "food"),
        CatalogEntry("Perdue Chicken Thighs", "Juicy chicken thighs, great for roasting", 6.99, "Perdue", "food"),
    ]),
    ("coffee", DEFAULT_IMAGE, [
        CatalogEntry("Keurig K-Classic Coffee Maker", "Single serve K-Cup pod coffee maker with multiple brew sizes", 79.99, "Keurig", "appliances"),
        CatalogEntry("Mr. Coffee 12-Cup Coffee Maker", "Programmable drip coffee maker with auto shut-off", 49.99, "Mr. Coffee", "appliances"),
        CatalogEntry("Ninja Specialty Coffee Maker", "Single-serve and carafe coffee maker with built-in frother", 169.99, "Ninja", "appliances"),
    ]),
    ("groceries", DEFAULT_IMAGE, [
        CatalogEntry("Great Value Whole Wheat Bread", "Fresh whole wheat bread loaf, perfect for sandwiches", 2.48, "Great Value", "food"),
        CatalogEntry("Bananas (per lb)", "Fresh bananas, rich in potassium and natural energy", 0.68, "Fresh", "food"),
        CatalogEntry("Great Value 2% Milk Gallon", "Fresh 2% reduced fat milk, 1 gallon", 3.48, "Great Value", "food"),
        CatalogEntry("Large Eggs (18 count)", "Grade A large eggs, great source of protein", 4.97, "Great Value", "food"),
    ]),
    ("iphone", _img("photo-1592750475338-74b7b21085ab"), [
        CatalogEntry("iPhone 15 Pro 128GB", "Latest iPhone with Pro camera system and A17 Pro chip", 999.99, "Apple", "electronics"),
        CatalogEntry("iPhone 15 256GB", "iPhone 15 with enhanced camera and all-day battery", 899.99, "Apple", "electronics"),
    ]),
    ("laptop", _img("photo-1496181133206-80ce9b88a853"), [
        CatalogEntry("HP Pavilion Gaming Laptop", "Gaming laptop with RTX graphics and fast processor", 699.99, "HP", "electronics"),
        CatalogEntry("ASUS VivoBook 15", "Lightweight laptop perfect for work and study", 549.99, "ASUS", "electronics"),
    ]),
    ("milk", _img("photo-1563636619-e9143da7973b"), [
        CatalogEntry("Great Value 2% Milk Gallon", "Fresh 2% reduced fat milk, 1 gallon", 3.99, "Great Value", "food"),
    ]),
    ("dinner", _img("photo-1546069901-ba9599a7e63c"), [
        CatalogEntry("Jasmine White Rice 20lb", "Premium jasmine rice, perfect base for any dinner", 18.99, "Great Value", "food"),
        CatalogEntry("Barilla Whole Wheat Pasta", "Nutritious whole wheat pasta, various shapes available", 3.49, "Barilla", "food"),
        CatalogEntry("Fresh Mixed Vegetables", "Fresh seasonal vegetables for healthy dinner prep", 4.99, "Fresh", "food"),
        CatalogEntry("Whole Wheat Bread Loaf", "Nutritious whole wheat bread, perfect for any meal", 2.99, "Sara Lee", "food"),
    ]),
    ("vegetables", _img("photo-1540420773420-3366772f4999"), [
        CatalogEntry("Fresh Broccoli Crowns", "Fresh broccoli crowns, rich in vitamins", 2.99, "Fresh", "food"),
        CatalogEntry("Organic Spinach Bunch", "Organic fresh spinach, perfect for salads or cooking", 3.49, "Organic", "food"),
    ]),
    ("rice", _img("photo-1586201375761-83865001e31c"), [
        CatalogEntry("Basmati Rice 10lb", "Premium basmati rice with authentic aroma", 12.99, "Royal", "food"),
        CatalogEntry("Brown Rice 5lb", "Nutritious brown rice, high in fiber", 8.99, "Uncle Ben's", "food"),
    ]),
    ("pasta", _img("photo-1621996346565-e3dbc353d2e5"), [
        CatalogEntry("Penne Pasta", "Classic penne pasta for versatile cooking", 1.99, "Barilla", "food"),
    ]),
]


def pick_delivery_estimate(rng: random.Random) -> str:
    """Weighted draw over the delivery estimates (Today/Tomorrow most likely)."""
    value = rng.random()
    cumulative = 0.0
    for text, weight in zip(DELIVERY_ESTIMATES, DELIVERY_ESTIMATE_WEIGHTS):
        cumulative += weight
        if value <= cumulative:
            return text
    return DELIVERY_ESTIMATES[0]


def pick_fulfilment_city(rng: random.Random) -> str:
    return rng.choice(FULFILMENT_CITIES)


class FallbackCatalog:
    def __init__(self, table: Optional[List[Tuple[str, str, List[CatalogEntry]]]] = None,
                 version: str = CATALOG_VERSION):
        self.table = table if table is not None else FALLBACK_TABLE
        self.version = version

    def match_key(self, query: str) -> Optional[str]:
        lowered = (query or "").lower()
        for key, _, _ in self.table:
            if key in lowered:
                return key
        return None

    def lookup(self, queries: Sequence[str], rng: random.Random,
               category: Optional[str] = None) -> List[Product]:
        """Products for the first query that hits a table key; otherwise one generic product echoing the query."""
        for query in queries:
            key = self.match_key(query)
            if key is None:
                continue
            _, image, entries = next(row for row in self.table if row[0] == key)
            log.info(f"📦 FALLBACK_CATALOG_HIT | version={self.version} | key={key} | query='{query}' | count={len(entries)}")
            return [self._product(key, image, i, entry, rng) for i, entry in enumerate(entries)]

        echo = next((q for q in queries if q), "")
        log.info(f"📦 FALLBACK_CATALOG_GENERIC | version={self.version} | query='{echo}'")
        return [self._generic(echo, rng, category)]

    def _product(self, key: str, image: str, index: int, entry: CatalogEntry,
                 rng: random.Random) -> Product:
        return Product(
            id=f"MOCK_{key.upper()}_{index + 1}",
            name=entry.name,
            description=entry.description,
            price=entry.price,
            original_price=round(entry.price * FALLBACK_ORIGINAL_PRICE_FACTOR, 2),
            discount=float(rng.randint(*FALLBACK_DISCOUNT_RANGE)),
            brand=entry.brand,
            category=entry.category,
            image=image,
            rating=round(4.0 + rng.random(), 1),
            reviews=rng.randint(100, 1099),
            in_stock=True,
            quantity=rng.randint(20, 119),
            warehouse=WarehouseInfo(
                location=pick_fulfilment_city(rng),
                distance=float(rng.randint(5, 34)),
                estimated_delivery=pick_delivery_estimate(rng),
            ),
            supplier=SupplierInfo(
                id=f"SUP_{random_token(rng)}",
                name=f"{entry.brand} Supplier",
                reliability=round(rng.uniform(*FILL_RELIABILITY_RANGE), 3),
            ),
        )

    def _generic(self, query: str, rng: random.Random, category: Optional[str]) -> Product:
        price = float(rng.randint(20, 119))
        return Product(
            id="FALLBACK_1",
            name=f"Best {query} Option",
            description=f"High-quality {query} product available at Walmart",
            price=price,
            original_price=round(price * FALLBACK_ORIGINAL_PRICE_FACTOR, 2),
            discount=15.0,
            brand="Great Value",
            category=category or "general",
            image=DEFAULT_IMAGE,
            rating=round(4.0 + rng.random(), 1),
            reviews=rng.randint(50, 549),
            in_stock=True,
            quantity=rng.randint(10, 59),
            warehouse=WarehouseInfo(
                location=pick_fulfilment_city(rng),
                distance=float(rng.randint(5, 44)),
                estimated_delivery=pick_delivery_estimate(rng),
            ),
            supplier=SupplierInfo(
                id=f"SUP_{random_token(rng)}",
                name="Walmart Supplier",
                reliability=GENERIC_FALLBACK_RELIABILITY,
            ),
        )


_default_catalog: Optional[FallbackCatalog] = None


def get_fallback_catalog() -> FallbackCatalog:
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = FallbackCatalog()
    return _default_catalog
