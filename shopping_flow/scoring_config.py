# shopping_flow/scoring_config.py
"""
Pipeline Scoring Configuration
──────────────────────────────
Every weight, threshold and price constant the pipeline stages use.
Stage modules import from here so tuning never touches control flow.
"""

from typing import Dict, List, Tuple

from .enums import DeliveryType, TermCategory

# ─────────────────────────────────
# INTENT RESOLVER
# ─────────────────────────────────
INTENT_MATCH_CONFIDENCE: float = 0.85
INTENT_VOCABULARY_CONFIDENCE: float = 0.6
INTENT_GENERAL_CONFIDENCE: float = 0.4

# ─────────────────────────────────
# QUERY PRIORITIZER
# ─────────────────────────────────
TERM_WEIGHTS: Dict[TermCategory, float] = {
    TermCategory.DIETARY: 5.0,
    TermCategory.PRODUCT: 4.5,
    TermCategory.BRAND: 4.0,
    TermCategory.ATTRIBUTE: 3.5,
    TermCategory.URGENCY: 3.0,
    TermCategory.QUALITY_PRICE: 2.5,
    TermCategory.STOP_WORD: 0.1,
    TermCategory.GENERIC: 1.0,
}

# (min length exclusive, bonus)
LENGTH_BONUSES: List[Tuple[int, float]] = [(4, 0.5), (7, 0.5)]
DIGIT_BONUS: float = 1.0
FUZZY_HEALTH_THRESHOLD: float = 0.7
REFINED_QUERY_LIMIT: int = 5

# ─────────────────────────────────
# CANDIDATE SEARCH
# ─────────────────────────────────
DEDUP_SIMILARITY_THRESHOLD: float = 0.7
MAX_CANDIDATES: int = 6

# Fill-ins for listings that omit a field: (low, high) inclusive for ints
FILL_PRICE_RANGE: Tuple[int, int] = (10, 109)
FILL_RATING_BASE: float = 4.0
FILL_REVIEWS_RANGE: Tuple[int, int] = (100, 1099)
FILL_QUANTITY_RANGE: Tuple[int, int] = (10, 109)
FILL_DISTANCE_RANGE: Tuple[int, int] = (5, 54)
FILL_RELIABILITY_RANGE: Tuple[float, float] = (0.85, 1.0)

FALLBACK_ORIGINAL_PRICE_FACTOR: float = 1.2
FALLBACK_DISCOUNT_RANGE: Tuple[int, int] = (10, 34)
GENERIC_FALLBACK_RELIABILITY: float = 0.9

# ─────────────────────────────────
# BEST-MATCH RANKER
# ─────────────────────────────────
BEST_MATCH_PRICE_DIVISOR: float = 1000.0
GREAT_VALUE_MIN_DISCOUNT: float = 20.0
GREAT_VALUE_MAX_PRICE: float = 50.0

PRICE_COMPARISON_FACTOR: float = 1.2
PRICE_COMPARISON_DISCOUNT_RANGE: Tuple[int, int] = (5, 34)

# Ordered (substring, rank); unknown estimates rank last
DELIVERY_PRIORITY: List[Tuple[str, int]] = [
    ("today", 1),
    ("tomorrow", 2),
    ("2 days", 3),
    ("3 days", 4),
    ("1 week", 5),
]
DELIVERY_PRIORITY_UNKNOWN: int = 6

# Weighted choice used when a listing has no delivery estimate
DELIVERY_ESTIMATES: List[str] = ["Today", "Tomorrow", "2 days", "3 days", "1 week"]
DELIVERY_ESTIMATE_WEIGHTS: List[float] = [0.3, 0.3, 0.2, 0.15, 0.05]

# ─────────────────────────────────
# WAREHOUSE & DELIVERY SELECTOR
# ─────────────────────────────────
WAREHOUSE_BASE_SCORE: float = 100.0
WAREHOUSE_DISTANCE_PENALTY: float = 2.0
WAREHOUSE_STOCK_PENALTY: float = 30.0
WAREHOUSE_METHOD_BONUS: float = 5.0
WAREHOUSE_CAPACITY_BONUS: float = 2.0   # per 1000 units
WAREHOUSE_CAPACITY_UNIT: float = 1000.0

MINUTES_PER_MILE: float = 2.5
ROUTE_HEADING_SHARE: float = 0.7

SAME_DAY_MAX_DISTANCE: float = 15.0
SAME_DAY_CUTOFF: str = "16:00"
EXPRESS_MAX_DISTANCE: float = 10.0

DELIVERY_COSTS: Dict[DeliveryType, float] = {
    DeliveryType.SAME_DAY: 9.99,
    DeliveryType.NEXT_DAY: 7.99,
    DeliveryType.TWO_DAY: 4.99,
    DeliveryType.STANDARD: 0.0,
    DeliveryType.EXPRESS: 19.99,
}

# Lower is faster
DELIVERY_SPEED_RANK: Dict[DeliveryType, int] = {
    DeliveryType.EXPRESS: 0,
    DeliveryType.SAME_DAY: 1,
    DeliveryType.NEXT_DAY: 2,
    DeliveryType.TWO_DAY: 3,
    DeliveryType.STANDARD: 4,
}

SUSTAINABILITY_ADJUSTMENT: Dict[DeliveryType, float] = {
    DeliveryType.EXPRESS: -20.0,
    DeliveryType.SAME_DAY: -15.0,
    DeliveryType.NEXT_DAY: -5.0,
    DeliveryType.TWO_DAY: 0.0,
    DeliveryType.STANDARD: 5.0,
}
SUSTAINABILITY_DISTANCE_PENALTY: float = 2.0

SLOT_DAYS: int = 7
PREMIUM_SLOT_COST: float = 4.99
# (suffix, label, availability threshold, premium)
DELIVERY_SLOT_TEMPLATES: List[Tuple[str, str, float, bool]] = [
    ("AM", "8:00 AM - 12:00 PM", 0.3, False),
    ("PM", "1:00 PM - 5:00 PM", 0.2, False),
    ("EVE", "6:00 PM - 9:00 PM", 0.4, True),
]

FALLBACK_WAREHOUSE_DISTANCE: float = 10.0
FALLBACK_SUSTAINABILITY: float = 75.0
FALLBACK_DELIVERY_DAYS: int = 4

# ─────────────────────────────────
# CART SUBSTITUTION ENGINE
# ─────────────────────────────────
CART_NAME_SIMILARITY: float = 0.6
SAVINGS_PRIORITY_HIGH: float = 2.0
SAVINGS_PRIORITY_MEDIUM: float = 1.0

ROLLBACK_CONFIDENCE: float = 0.9
GREAT_VALUE_CONFIDENCE_PREFERRED: float = 0.8
GREAT_VALUE_CONFIDENCE: float = 0.7

SUSTAINABILITY_BASELINE: float = 70.0
SUSTAINABILITY_GREAT_VALUE_BONUS: float = 5.0
SUSTAINABILITY_ORGANIC_BONUS: float = 3.0
NUTRITION_BASELINE: float = 60.0
NUTRITION_KEYWORD_BONUS: float = 5.0
HEALTHY_KEYWORDS: List[str] = ["whole grain", "organic", "low sodium", "no sugar"]

SCORE_CEILING: float = 100.0

__all__ = [
    "INTENT_MATCH_CONFIDENCE",
    "INTENT_VOCABULARY_CONFIDENCE",
    "INTENT_GENERAL_CONFIDENCE",
    "TERM_WEIGHTS",
    "LENGTH_BONUSES",
    "DIGIT_BONUS",
    "FUZZY_HEALTH_THRESHOLD",
    "REFINED_QUERY_LIMIT",
    "DEDUP_SIMILARITY_THRESHOLD",
    "MAX_CANDIDATES",
    "BEST_MATCH_PRICE_DIVISOR",
    "DELIVERY_PRIORITY",
    "DELIVERY_COSTS",
    "DELIVERY_SPEED_RANK",
    "SUSTAINABILITY_ADJUSTMENT",
    "CART_NAME_SIMILARITY",
    "HEALTHY_KEYWORDS",
]
