# shopping_flow/enums.py
from enum import Enum


class IntentType(str, Enum):
    SEARCH_PRODUCT = "search_product"
    ADD_TO_CART = "add_to_cart"
    CHECK_PRICE = "check_price"
    PLACE_ORDER = "place_order"
    VIEW_CART = "view_cart"
    GENERAL_QUERY = "general_query"


class IntentAction(str, Enum):
    """Next UI action triggered by a resolved intent"""
    TRIGGER_PRODUCT_SEARCH = "TRIGGER_PRODUCT_SEARCH"
    ADD_TO_CART = "ADD_TO_CART"
    CHECK_PRICE = "CHECK_PRICE"
    PLACE_ORDER = "PLACE_ORDER"
    VIEW_CART = "VIEW_CART"
    GENERAL_ASSISTANCE = "GENERAL_ASSISTANCE"


class TermCategory(str, Enum):
    """Query Prioritizer rule buckets, highest weight first"""
    DIETARY = "dietary"
    PRODUCT = "product"
    BRAND = "brand"
    ATTRIBUTE = "attribute"
    URGENCY = "urgency"
    QUALITY_PRICE = "quality_price"
    STOP_WORD = "stop_word"
    GENERIC = "generic"


class DeliveryType(str, Enum):
    SAME_DAY = "same_day"
    NEXT_DAY = "next_day"
    TWO_DAY = "two_day"
    STANDARD = "standard"
    EXPRESS = "express"


class SubstitutionType(str, Enum):
    ROLLBACK = "rollback"
    GREAT_VALUE = "great_value"
    BETTER_PRICE = "better_price"
    SAME_BRAND_VARIANT = "same_brand_variant"


class SavingsPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class QualityTier(str, Enum):
    """Store-brand quality relative to the name brand it replaces"""
    SAME = "same"
    BETTER = "better"
    GOOD = "good"


class CollaboratorFunction(str, Enum):
    # External collaborators reached through data_fetchers
    RETAIL_SEARCH = "retail_search"
    PRODUCT_SUGGESTIONS = "product_suggestions"
    NEARBY_WAREHOUSES = "nearby_warehouses"
    PROMOTIONS = "promotions"
