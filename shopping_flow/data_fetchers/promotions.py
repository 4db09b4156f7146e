# shopping_flow/data_fetchers/promotions.py
"""
Promotion catalogs for the cart substitution engine:
rollbacks (temporary price cuts), Great Value store-brand equivalents,
and category bundles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from ..enums import CollaboratorFunction, QualityTier
from ..models import BundleTemplate, GreatValueProduct, RollbackProduct
from . import register_fetcher

log = logging.getLogger(__name__)

def rollback_products(today: datetime) -> List[RollbackProduct]:
    """Rollback rows; each runs a fixed number of days from `today`."""
    return [
        RollbackProduct(
            id="RB_001",
            name="Great Value Organic Pasta Sauce",
            price=1.98,
            original_price=2.98,
            rollback_price=1.98,
            savings=1.00,
            savings_percentage=33.6,
            category="pantry",
            brand="Great Value",
            image="/pasta-sauce.jpg",
            rating=4.3,
            in_stock=True,
            rollback_end_date=today + timedelta(days=5),
            alternative_for="pasta_sauce",
        ),
        RollbackProduct(
            id="RB_002",
            name="Rollback Organic Milk 2%",
            price=3.28,
            original_price=4.48,
            rollback_price=3.28,
            savings=1.20,
            savings_percentage=26.8,
            category="dairy",
            brand="Great Value",
            image="/milk.jpg",
            rating=4.5,
            in_stock=True,
            rollback_end_date=today + timedelta(days=2),
            alternative_for="milk",
        ),
    ]


GREAT_VALUE_PRODUCTS: List[GreatValueProduct] = [
    GreatValueProduct(
        id="GV_001",
        name="Great Value 2% Reduced Fat Milk",
        price=2.78,
        equivalent_brand="Horizon Organic Milk",
        equivalent_price=4.98,
        savings=2.20,
        savings_percentage=44.2,
        quality_rating=QualityTier.SAME.value,
        category="dairy",
        image="/gv-milk.jpg",
        rating=4.4,
        reviews=2847,
        in_stock=True,
    ),
    GreatValueProduct(
        id="GV_002",
        name="Great Value Whole Wheat Bread",
        price=1.28,
        equivalent_brand="Pepperidge Farm Bread",
        equivalent_price=3.48,
        savings=2.20,
        savings_percentage=63.2,
        quality_rating=QualityTier.GOOD.value,
        category="bakery",
        image="/gv-bread.jpg",
        rating=4.1,
        reviews=1534,
        in_stock=True,
    ),
]

BUNDLE_TEMPLATES: List[BundleTemplate] = [
    BundleTemplate("BUNDLE_001", "Breakfast Essentials Bundle", ["dairy", "bakery", "pantry"], 2, 0.15),
    BundleTemplate("BUNDLE_002", "Pantry Staples Bundle", ["pantry", "condiments"], 3, 0.20),
]


@dataclass
class PromotionCatalog:
    rollbacks: List[RollbackProduct] = field(default_factory=list)
    great_value: List[GreatValueProduct] = field(default_factory=list)
    bundles: List[BundleTemplate] = field(default_factory=list)

    def for_category(self, category: Optional[str]) -> "PromotionCatalog":
        if not category:
            return self
        cat = category.lower()
        return PromotionCatalog(
            rollbacks=[r for r in self.rollbacks if r.category == cat or r.alternative_for == cat],
            great_value=[g for g in self.great_value if g.category == cat],
            bundles=[b for b in self.bundles if cat in b.categories],
        )

    def running(self, now: datetime) -> "PromotionCatalog":
        """Drop rollbacks whose end date has passed."""
        return PromotionCatalog(
            rollbacks=[r for r in self.rollbacks if r.rollback_end_date > now],
            great_value=self.great_value,
            bundles=self.bundles,
        )


def promotion_catalog() -> PromotionCatalog:
    """Active promotions; only in-stock rows are offered."""
    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    catalog = PromotionCatalog(
        rollbacks=[r for r in rollback_products(today) if r.in_stock],
        great_value=[g for g in GREAT_VALUE_PRODUCTS if g.in_stock],
        bundles=list(BUNDLE_TEMPLATES),
    )
    log.debug(
        f"🏷️ PROMOTIONS_LOADED | rollbacks={len(catalog.rollbacks)} | "
        f"great_value={len(catalog.great_value)} | bundles={len(catalog.bundles)}"
    )
    return catalog


register_fetcher(CollaboratorFunction.PROMOTIONS, promotion_catalog)
