# shopping_flow/cart_optimizer.py
"""
Cart Substitution Engine
────────────────────────
cart lines ──► rollback opportunities (per line, best first)
           ──► great-value equivalents (lines without a rollback)
           ──► bundle deals (category coverage)
           ──► substitutions (rollback beats great value) ──► totals + scores

Bundles are reported in `bundleDeals`; the single highest-savings one is
surfaced as `appliedBundle`. Bundle savings do not enter the optimized
total, which only subtracts substitution savings.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .data_fetchers import get_fetcher
from .data_fetchers.promotions import PromotionCatalog
from .enums import CollaboratorFunction, QualityTier, SavingsPriority, SubstitutionType
from .models import (
    BundleOpportunity,
    CartItem,
    CartOptimization,
    CartPreferences,
    GreatValueProduct,
    GreatValueRecommendation,
    Product,
    ProductSubstitution,
    RollbackOpportunity,
    RollbackProduct,
    SupplierInfo,
    WarehouseInfo,
)
from .scoring_config import (
    CART_NAME_SIMILARITY,
    GREAT_VALUE_CONFIDENCE,
    GREAT_VALUE_CONFIDENCE_PREFERRED,
    HEALTHY_KEYWORDS,
    NUTRITION_BASELINE,
    NUTRITION_KEYWORD_BONUS,
    ROLLBACK_CONFIDENCE,
    SAVINGS_PRIORITY_HIGH,
    SAVINGS_PRIORITY_MEDIUM,
    SCORE_CEILING,
    SUSTAINABILITY_BASELINE,
    SUSTAINABILITY_GREAT_VALUE_BONUS,
    SUSTAINABILITY_ORGANIC_BONUS,
)
from .utils.helpers import letters_only, normalize_name, similarity_ratio
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

STAGE = "cart_optimization"

STORE_BRAND = "Great Value"

QUALITY_DESCRIPTIONS: Dict[str, str] = {
    QualityTier.SAME.value: "Same quality as name brand",
    QualityTier.BETTER.value: "Better quality than name brand",
    QualityTier.GOOD.value: "Good quality alternative",
}
DEFAULT_QUALITY_DESCRIPTION = "Quality alternative"


# ─────────────────────────────────────────────────────────────
# Matching helpers
# ─────────────────────────────────────────────────────────────
def is_similar_product(name_a: str, name_b: str) -> bool:
    a, b = letters_only(name_a), letters_only(name_b)
    if a and b and (a in b or b in a):
        return True
    return similarity_ratio(normalize_name(name_a), normalize_name(name_b)) > CART_NAME_SIMILARITY


def savings_priority(savings: float) -> SavingsPriority:
    if savings > SAVINGS_PRIORITY_HIGH:
        return SavingsPriority.HIGH
    if savings > SAVINGS_PRIORITY_MEDIUM:
        return SavingsPriority.MEDIUM
    return SavingsPriority.LOW


def time_left(end: datetime, now: datetime) -> str:
    remaining = end - now
    if remaining.days > 1:
        return f"{remaining.days} days left"
    if remaining.days == 1:
        return "1 day left"
    hours = remaining.seconds // 3600 if remaining.days == 0 else 0
    if hours > 0:
        return f"{hours} hours left"
    return "Ending soon"


def line_total(item: CartItem) -> float:
    return item.product.price * item.quantity


def reported_total(cart_items: List[CartItem]) -> float:
    """Cart total for the fallback result; a line that cannot be priced counts as zero."""
    total = 0.0
    for item in cart_items:
        try:
            total += float(item.product.price or 0) * int(item.quantity or 0)
        except (AttributeError, TypeError, ValueError) as exc:
            log.warning(f"⚠️ CART_LINE_UNPRICED | line={getattr(item, 'id', None)} | error={exc}")
    return round(total, 2)


# ─────────────────────────────────────────────────────────────
# Opportunities
# ─────────────────────────────────────────────────────────────
def rollback_opportunities(item: CartItem, rollbacks: List[RollbackProduct],
                           now: datetime) -> List[RollbackOpportunity]:
    """Running rollbacks matching one cart line with positive savings, best first."""
    product = item.product
    category = product.category.lower()
    found = []
    for rb in rollbacks:
        if rb.rollback_end_date <= now:
            continue
        matches = (
            rb.category == category
            or rb.alternative_for == category
            or is_similar_product(product.name, rb.name)
        )
        if not matches:
            continue
        savings = round((product.price - rb.rollback_price) * item.quantity, 2)
        if savings <= 0:
            continue
        found.append(RollbackOpportunity(
            product=rb,
            replaces_product_id=product.id,
            savings=savings,
            priority=savings_priority(savings),
            time_left=time_left(rb.rollback_end_date, now),
        ))
    return sorted(found, key=lambda o: -o.savings)


def great_value_recommendations(item: CartItem, great_value: List[GreatValueProduct],
                                preferences: CartPreferences) -> List[GreatValueRecommendation]:
    product = item.product
    if preferences.prefer_name_brands and product.brand == STORE_BRAND:
        return []

    category = product.category.lower()
    found = []
    for gv in great_value:
        if not (gv.category == category or is_similar_product(product.name, gv.name)):
            continue
        savings = round((product.price - gv.price) * item.quantity, 2)
        if savings <= 0:
            continue
        found.append(GreatValueRecommendation(
            product=gv,
            replaces_product_id=product.id,
            savings=savings,
            quality_comparison=QUALITY_DESCRIPTIONS.get(gv.quality_rating, DEFAULT_QUALITY_DESCRIPTION),
            priority=savings_priority(savings),
        ))
    return sorted(found, key=lambda r: -r.savings)


def bundle_deals(cart: List[CartItem], bundles) -> List[BundleOpportunity]:
    deals = []
    for bundle in bundles:
        lines = [i for i in cart if i.product.category.lower() in bundle.categories]
        if len(lines) < bundle.min_items:
            continue
        original = round(sum(line_total(i) for i in lines), 2)
        bundle_price = round(original * (1 - bundle.discount), 2)
        deals.append(BundleOpportunity(
            id=bundle.id,
            name=bundle.name,
            products=[i.product for i in lines],
            bundle_price=bundle_price,
            original_price=original,
            savings=round(original - bundle_price, 2),
            applicable_items=[i.id for i in lines],
        ))
    return deals


# ─────────────────────────────────────────────────────────────
# Suggested products
# ─────────────────────────────────────────────────────────────
def rollback_as_product(rb: RollbackProduct) -> Product:
    return Product(
        id=rb.id,
        name=rb.name,
        description=f"Rollback price - save {rb.savings_percentage:.1f}%",
        price=rb.rollback_price,
        brand=rb.brand,
        category=rb.category,
        image=rb.image,
        rating=rb.rating,
        reviews=100,
        in_stock=rb.in_stock,
        quantity=50,
        warehouse=WarehouseInfo("Multiple locations", 5, "Tomorrow"),
        supplier=SupplierInfo("WALMART_ROLLBACK", "Walmart Rollback", 1.0),
        original_price=rb.original_price,
    )


def great_value_as_product(gv: GreatValueProduct) -> Product:
    return Product(
        id=gv.id,
        name=gv.name,
        description=f"Great Value alternative - save {gv.savings_percentage:.1f}%",
        price=gv.price,
        brand=STORE_BRAND,
        category=gv.category,
        image=gv.image,
        rating=gv.rating,
        reviews=gv.reviews,
        in_stock=gv.in_stock,
        quantity=100,
        warehouse=WarehouseInfo("Multiple locations", 5, "Tomorrow"),
        supplier=SupplierInfo("WALMART_GV", "Walmart Great Value", 1.0),
        original_price=gv.equivalent_price,
    )


def build_substitutions(cart: List[CartItem],
                        rollbacks: List[List[RollbackOpportunity]],
                        great_value: List[List[GreatValueRecommendation]],
                        preferences: CartPreferences) -> List[ProductSubstitution]:
    """One substitution per line at most; opportunity lists are aligned with `cart` by position."""
    gv_confidence = GREAT_VALUE_CONFIDENCE_PREFERRED if preferences.prefer_great_value else GREAT_VALUE_CONFIDENCE
    subs = []
    for item, line_rollbacks, line_great_value in zip(cart, rollbacks, great_value):
        if line_rollbacks:
            best = line_rollbacks[0]
            subs.append(ProductSubstitution(
                original_product=item.product,
                suggested_product=rollback_as_product(best.product),
                substitution_type=SubstitutionType.ROLLBACK,
                reason=f"Save ${best.savings:.2f} with rollback price",
                savings=best.savings,
                confidence=ROLLBACK_CONFIDENCE,
            ))
        elif line_great_value:
            best = line_great_value[0]
            subs.append(ProductSubstitution(
                original_product=item.product,
                suggested_product=great_value_as_product(best.product),
                substitution_type=SubstitutionType.GREAT_VALUE,
                reason=f"Save ${best.savings:.2f} with Great Value alternative",
                savings=best.savings,
                confidence=gv_confidence,
            ))
    return subs


# ─────────────────────────────────────────────────────────────
# Scores
# ─────────────────────────────────────────────────────────────
def sustainability_score(cart: List[CartItem], substitutions: List[ProductSubstitution]) -> float:
    score = SUSTAINABILITY_BASELINE
    score += SUSTAINABILITY_GREAT_VALUE_BONUS * sum(
        1 for s in substitutions if s.substitution_type == SubstitutionType.GREAT_VALUE
    )
    score += SUSTAINABILITY_ORGANIC_BONUS * sum(1 for i in cart if "organic" in i.product.name.lower())
    return min(SCORE_CEILING, score)


def nutrition_score(cart: List[CartItem]) -> float:
    score = NUTRITION_BASELINE
    for item in cart:
        name = item.product.name.lower()
        score += NUTRITION_KEYWORD_BONUS * sum(1 for kw in HEALTHY_KEYWORDS if kw in name)
    return min(SCORE_CEILING, score)


# ─────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────
def optimize_cart(
    cart_items: List[CartItem],
    preferences: Optional[CartPreferences] = None,
    *,
    catalog: Optional[PromotionCatalog] = None,
    now: Optional[datetime] = None,
) -> CartOptimization:
    """Cheaper and greener substitutions for `cart_items`; never raises."""
    preferences = preferences or CartPreferences()
    now = now or datetime.now()
    cart_items = list(cart_items or [])

    plog.stage_start(STAGE, lines=len(cart_items))
    try:
        original_total = round(sum(line_total(i) for i in cart_items), 2)
        catalog = catalog or get_fetcher(CollaboratorFunction.PROMOTIONS)()

        # per line, by position: two lines may share an id
        rollbacks = [rollback_opportunities(i, catalog.rollbacks, now) for i in cart_items]
        great_value = [
            [] if line_rollbacks else great_value_recommendations(i, catalog.great_value, preferences)
            for i, line_rollbacks in zip(cart_items, rollbacks)
        ]
        bundles = bundle_deals(cart_items, catalog.bundles)
        applied = max(bundles, key=lambda b: b.savings) if bundles else None
        subs = build_substitutions(cart_items, rollbacks, great_value, preferences)

        total_savings = round(sum(s.savings for s in subs), 2)
        optimized = round(max(0.0, original_total - total_savings), 2)
        percentage = round(total_savings / original_total * 100, 2) if original_total > 0 else 0.0

        plog.counts(
            STAGE,
            rollbacks=sum(len(line) for line in rollbacks),
            great_value=sum(len(line) for line in great_value),
            bundles=len(bundles),
            substitutions=len(subs),
        )
        result = CartOptimization(
            original_cart=list(cart_items),
            recommended_substitutions=subs,
            rollback_opportunities=[o for line in rollbacks for o in line],
            great_value_recommendations=[r for line in great_value for r in line],
            bundle_deals=bundles,
            total_original_price=original_total,
            total_optimized_price=optimized,
            total_savings=total_savings,
            savings_percentage=percentage,
            sustainability_score=sustainability_score(cart_items, subs),
            nutrition_score=nutrition_score(cart_items),
            applied_bundle=applied,
        )
        plog.stage_complete(STAGE, savings=total_savings, optimized=optimized)
        return result
    except Exception as exc:
        log.error(f"❌ CART_OPTIMIZATION_ERROR | lines={len(cart_items)} | error={exc}", exc_info=True)
        plog.fallback_used(STAGE, "optimization_failed", error=str(exc))
        original_total = reported_total(cart_items)
        return CartOptimization(
            original_cart=list(cart_items),
            recommended_substitutions=[],
            rollback_opportunities=[],
            great_value_recommendations=[],
            bundle_deals=[],
            total_original_price=original_total,
            total_optimized_price=original_total,
            total_savings=0.0,
            savings_percentage=0.0,
            sustainability_score=SUSTAINABILITY_BASELINE,
            nutrition_score=NUTRITION_BASELINE,
            is_fallback=True,
        )


def optimization_preview(category: Optional[str] = None,
                         catalog_provider: Optional[Callable[[], PromotionCatalog]] = None,
                         now: Optional[datetime] = None) -> dict:
    """Running promotions, optionally narrowed to one category."""
    provider = catalog_provider or get_fetcher(CollaboratorFunction.PROMOTIONS)
    catalog = provider().running(now or datetime.now()).for_category(category)
    log.info(
        f"🏷️ CART_PREVIEW | category={category or 'all'} | rollbacks={len(catalog.rollbacks)} | "
        f"great_value={len(catalog.great_value)} | bundles={len(catalog.bundles)}"
    )
    return {
        "available": True,
        "optimizations": {
            "rollbacks": [r.to_dict() for r in catalog.rollbacks],
            "greatValue": [g.to_dict() for g in catalog.great_value],
            "bundles": [
                {"id": b.id, "name": b.name, "categories": b.categories,
                 "minItems": b.min_items, "discount": b.discount}
                for b in catalog.bundles
            ],
        },
    }
