# shopping_flow/ranking.py
"""
Best-Match Ranker
─────────────────
filter_available ──► with_price_comparison ──► select_best_match ──► order_results

Every function returns new `Product` copies; inputs are never mutated.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import List, Optional

from .llm_service import LLMService
from .models import Intent, Product
from .scoring_config import (
    BEST_MATCH_PRICE_DIVISOR,
    DELIVERY_PRIORITY,
    DELIVERY_PRIORITY_UNKNOWN,
    GREAT_VALUE_MAX_PRICE,
    GREAT_VALUE_MIN_DISCOUNT,
    PRICE_COMPARISON_DISCOUNT_RANGE,
    PRICE_COMPARISON_FACTOR,
)
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

STAGE = "best_match"


def filter_available(products: List[Product]) -> List[Product]:
    return [p for p in products if p.in_stock and p.quantity > 0]


def with_price_comparison(products: List[Product], rng: random.Random) -> List[Product]:
    """Give products without a list price a derived one so the great-value rule has a discount to read."""
    out = []
    for p in products:
        if p.original_price is not None:
            out.append(p)
            continue
        out.append(replace(
            p,
            original_price=round(p.price * PRICE_COMPARISON_FACTOR, 2),
            discount=float(rng.randint(*PRICE_COMPARISON_DISCOUNT_RANGE)),
        ))
    return out


def local_match_score(product: Product) -> float:
    return product.rating * (1 - product.price / BEST_MATCH_PRICE_DIVISOR)


def heuristic_best_match(products: List[Product]) -> Optional[Product]:
    if not products:
        return None
    # max() keeps the first of equal scores
    return max(products, key=local_match_score)


async def select_best_match(products: List[Product], intent: Intent,
                            llm: Optional[LLMService] = None) -> Optional[Product]:
    """Model-chosen best match, or the local heuristic on any failure."""
    if not products:
        return None
    if llm is None:
        plog.stage_decision(STAGE, "heuristic", reason="llm_disabled")
        return heuristic_best_match(products)

    try:
        index = await llm.select_best_match_index(products, intent)
        plog.stage_decision(STAGE, "llm", index=index)
        return products[index]
    except Exception as exc:
        plog.fallback_used(STAGE, "llm_failed", error=str(exc))
        return heuristic_best_match(products)


def delivery_priority(estimate: str) -> int:
    text = (estimate or "").lower()
    for marker, rank in DELIVERY_PRIORITY:
        if marker in text:
            return rank
    return DELIVERY_PRIORITY_UNKNOWN


def is_great_value(product: Product) -> bool:
    return (product.discount or 0) > GREAT_VALUE_MIN_DISCOUNT or product.price < GREAT_VALUE_MAX_PRICE


def order_results(products: List[Product]) -> List[Product]:
    """Fastest delivery first, then great value, then rating desc, then price asc."""
    flagged = [replace(p, is_great_value=is_great_value(p)) for p in products]
    return sorted(
        flagged,
        key=lambda p: (
            delivery_priority(p.warehouse.estimated_delivery),
            0 if p.is_great_value else 1,
            -p.rating,
            p.price,
        ),
    )
