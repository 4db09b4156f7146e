"""
Centralized configuration for intent patterns and query vocabularies.

This module serves as the single source of truth for:
- Intent regex table (ordered, most specific first)
- Shopping vocabulary and category hints
- Query Prioritizer lexicons and the health-term misspelling table
- Search-query cleanup rules used for the Fallback Catalog key
"""

import re
from typing import Dict, FrozenSet, List, Pattern, Tuple

from .enums import IntentAction, IntentType, TermCategory


# ─────────────────────────────────────────────────────────────
# Intent patterns (first match wins; table order matters)
# ─────────────────────────────────────────────────────────────
INTENT_PATTERNS: List[Tuple[IntentType, Pattern[str]]] = [
    # quantity form first so "add 2 chicken to cart" keeps its number
    (IntentType.ADD_TO_CART, re.compile(r"(?:add)\s+(\d+)\s+(.+?)\s+(?:to|in|into)\s+(?:cart|basket)", re.I)),
    (IntentType.ADD_TO_CART, re.compile(r"(?:add|put)\s+(.+?)\s+(?:to|in|into)\s+(?:cart|basket)", re.I)),

    (IntentType.CHECK_PRICE, re.compile(r"(?:price|cost|how much)\s+(?:of|for|is)\s+(.+)", re.I)),
    (IntentType.CHECK_PRICE, re.compile(r"(?:what(?:'s| is) the price of)\s+(.+)", re.I)),
    (IntentType.CHECK_PRICE, re.compile(r"(.+?)\s+(?:price|cost)(?:\?)?$", re.I)),

    (IntentType.PLACE_ORDER, re.compile(r"(?:place|make|submit)\s+(?:order|purchase)", re.I)),
    (IntentType.PLACE_ORDER, re.compile(r"(?:checkout|proceed to payment)", re.I)),
    (IntentType.PLACE_ORDER, re.compile(r"(?:confirm|finalize)\s+(?:order|purchase)", re.I)),

    (IntentType.VIEW_CART, re.compile(r"(?:show|view|check)\s+(?:my\s+)?(?:cart|basket)", re.I)),
    (IntentType.VIEW_CART, re.compile(r"(?:what(?:'s| is) in my cart)", re.I)),
    (IntentType.VIEW_CART, re.compile(r"(?:cart|basket)\s+(?:items|contents)", re.I)),

    (IntentType.SEARCH_PRODUCT, re.compile(r"(?:find|search|show|get|need|want|looking for)\s+(.+)", re.I)),
    (IntentType.SEARCH_PRODUCT, re.compile(r"(?:do you have|is there)\s+(.+)", re.I)),
    (IntentType.SEARCH_PRODUCT, re.compile(r"(?:buy|purchase)\s+(.+)", re.I)),
]

QUANTITY_PRODUCT_PATTERN: Pattern[str] = re.compile(r"(\d+)\s+(.+)")

CATEGORY_HINTS: List[str] = ["food", "electronics", "clothing", "home", "beauty", "sports", "books"]

SHOPPING_VOCABULARY: List[str] = [
    "buy", "purchase", "order", "cart", "price", "cost", "shop", "store",
    "product", "item", "chicken", "food", "clothes", "electronics",
    "delivery", "shipping", "available", "stock", "discount", "offer",
]

INTENT_ACTIONS: Dict[IntentType, IntentAction] = {
    IntentType.SEARCH_PRODUCT: IntentAction.TRIGGER_PRODUCT_SEARCH,
    IntentType.ADD_TO_CART: IntentAction.ADD_TO_CART,
    IntentType.CHECK_PRICE: IntentAction.CHECK_PRICE,
    IntentType.PLACE_ORDER: IntentAction.PLACE_ORDER,
    IntentType.VIEW_CART: IntentAction.VIEW_CART,
    IntentType.GENERAL_QUERY: IntentAction.GENERAL_ASSISTANCE,
}

# ─────────────────────────────────────────────────────────────
# Query Prioritizer lexicons
# ─────────────────────────────────────────────────────────────
DIETARY_TERMS: FrozenSet[str] = frozenset({
    "diabetes", "diabetic", "diabities", "diabet", "sugar-free", "low-sugar", "no-sugar",
    "gluten-free", "dairy-free", "lactose-free", "nut-free", "allergen-free",
    "organic", "keto", "vegan", "vegetarian", "kosher", "halal",
    "low-fat", "fat-free", "low-sodium", "diet",
})

PRODUCT_NOUNS: FrozenSet[str] = frozenset({
    "laptop", "computer", "phone", "iphone", "samsung", "apple", "nike", "adidas",
    "milk", "bread", "rice", "pasta", "chicken", "beef", "eggs", "cheese", "butter",
    "shampoo", "soap", "toothpaste", "detergent", "paper", "towel", "tissue",
    "shirt", "pants", "shoes", "jacket", "dress", "socks", "underwear",
    "tv", "television", "monitor", "speaker", "headphones", "camera",
    "book", "magazine", "toy", "game", "console", "xbox", "playstation",
    "medicine", "vitamin", "supplement", "bandage", "thermometer",
    "car", "auto", "tire", "oil", "battery", "parts", "tools", "wrench",
})

BRAND_NAMES: FrozenSet[str] = frozenset({
    "walmart", "great-value", "equate", "marketside", "mainstays",
    "coca-cola", "pepsi", "nestle", "kraft", "general-mills", "kellogg",
    "samsung", "apple", "lg", "sony", "hp", "dell", "lenovo", "asus",
    "nike", "adidas", "levi", "gap", "target", "amazon", "microsoft",
})

PRODUCT_ATTRIBUTES: FrozenSet[str] = frozenset({
    "organic", "natural", "fresh", "frozen", "canned", "bottled", "dried",
    "large", "small", "medium", "extra", "mini", "jumbo", "family", "single",
    "red", "blue", "green", "black", "white", "pink", "yellow", "purple",
    "cotton", "wool", "silk", "leather", "plastic", "metal", "wood", "glass",
    "wireless", "bluetooth", "digital", "smart", "electric", "manual",
    "premium", "deluxe", "basic", "standard", "professional", "industrial",
})

URGENCY_TERMS: FrozenSet[str] = frozenset({
    "urgent", "urgently", "asap", "immediate", "immediately", "today", "tomorrow",
    "fast", "quick", "rush", "same-day", "next-day", "express", "priority", "overnight",
})

QUALITY_PRICE_TERMS: FrozenSet[str] = frozenset({
    "cheap", "expensive", "budget", "affordable", "discount", "sale", "deal",
    "quality", "premium", "luxury", "high-end", "top-rated", "best",
    "new", "latest", "updated", "modern", "classic", "vintage",
})

STOP_WORDS: FrozenSet[str] = frozenset({
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves", "you", "your", "yours",
    "he", "him", "his", "himself", "she", "her", "hers", "herself", "it", "its", "itself",
    "they", "them", "their", "theirs", "themselves", "what", "which", "who", "whom",
    "this", "that", "these", "those", "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "having", "do", "does", "did", "doing", "a", "an", "the", "and", "but",
    "if", "or", "because", "as", "until", "while", "of", "at", "by", "for", "with", "about",
    "against", "between", "into", "through", "during", "before", "after", "above",
    "below", "to", "from", "up", "down", "in", "out", "on", "off", "over", "under", "again",
    "further", "then", "once", "so", "such", "something", "someone", "somewhere",
})

# Evaluated top to bottom; the first lexicon containing the token decides its category
TERM_LEXICONS: List[Tuple[TermCategory, FrozenSet[str]]] = [
    (TermCategory.DIETARY, DIETARY_TERMS),
    (TermCategory.PRODUCT, PRODUCT_NOUNS),
    (TermCategory.BRAND, BRAND_NAMES),
    (TermCategory.ATTRIBUTE, PRODUCT_ATTRIBUTES),
    (TermCategory.URGENCY, URGENCY_TERMS),
    (TermCategory.QUALITY_PRICE, QUALITY_PRICE_TERMS),
    (TermCategory.STOP_WORD, STOP_WORDS),
]

# Known misspellings of health terms, matched by similarity ratio
HEALTH_TERM_VARIATIONS: Dict[str, List[str]] = {
    "diabetes": ["diabities", "diabites", "diabitis", "diabeted", "diabete"],
    "diabetic": ["diabitic", "diabetik", "diabetic"],
    "gluten": ["glutten", "gluten", "glutin"],
    "organic": ["orgnic", "organik", "organc", "organi"],
    "vegan": ["vegan", "veagan", "vegen", "veegn"],
    "vegetarian": ["vegeterian", "vegetarian", "vegatarian", "vegaterian"],
}

# ─────────────────────────────────────────────────────────────
# Search-query cleanup (Fallback Catalog key)
# ─────────────────────────────────────────────────────────────
QUERY_FILLERS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^(i want to|i need to|i'm looking for|looking for|find|search for|buy)", re.I), ""),
    (re.compile(r"(to have|to eat|to drink|to use|to buy|to purchase)", re.I), ""),
    (re.compile(r"\b(some|any|a|an|the)\b", re.I), ""),
    (re.compile(r"suggest me.*things?", re.I), ""),
    (re.compile(r"something for.*breakfast", re.I), "breakfast"),
]
_WHITESPACE = re.compile(r"\s+")

# Ordered (word contained in the cleaned query, neutral search phrase); first hit wins
QUERY_REWRITES: List[Tuple[str, str]] = [
    ("apple", "fresh apples"),
    ("chicken", "chicken breast"),
    ("milk", "milk gallon"),
    ("breakfast", "breakfast cereal oats bread eggs"),
    ("dinner", "dinner food vegetables rice pasta bread"),
    ("lunch", "lunch food sandwich vegetables bread"),
]
EMPTY_QUERY_EXPANSION: str = "breakfast cereal oats bread eggs"


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()

# Suggestions offered when the answer service is unavailable
DEFAULT_SUGGESTIONS: List[str] = [
    "organic chicken breast",
    "fresh milk gallon",
    "iPhone 15 deals",
    "men's clothing",
]
NO_RESULTS_SUGGESTION: str = 'Try searching for "chicken", "iPhone", or "milk"'
