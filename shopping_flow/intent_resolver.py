"""
Intent Resolver
───────────────
Maps a free-text shopping request onto a typed `Intent`.

Classification is a pure regex pass over `INTENT_PATTERNS` (first match
wins). Requests that match no pattern but still mention shopping
vocabulary are treated as product searches with lower confidence;
everything else is a general query.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from .enums import IntentType
from .intent_config import (
    CATEGORY_HINTS,
    INTENT_ACTIONS,
    INTENT_PATTERNS,
    QUANTITY_PRODUCT_PATTERN,
    SHOPPING_VOCABULARY,
)
from .models import Intent, IntentEntities
from .scoring_config import (
    INTENT_GENERAL_CONFIDENCE,
    INTENT_MATCH_CONFIDENCE,
    INTENT_VOCABULARY_CONFIDENCE,
)

log = logging.getLogger(__name__)


def extract_product(text: str) -> IntentEntities:
    """Split a leading quantity off the product text, or sniff a category hint."""
    text = text or ""
    m = QUANTITY_PRODUCT_PATTERN.search(text)
    if m:
        return IntentEntities(product=m.group(2).strip(), quantity=int(m.group(1)))

    lowered = text.lower()
    category = next((c for c in CATEGORY_HINTS if c in lowered), None)
    return IntentEntities(product=text.strip(), category=category)


def is_shopping_related(text: str) -> bool:
    lowered = (text or "").lower()
    return any(word in lowered for word in SHOPPING_VOCABULARY)


def resolve_intent(text: Any) -> Intent:
    """Classify `text`. Never raises; non-string input is treated as empty."""
    if not isinstance(text, str):
        text = ""

    for intent_type, pattern in INTENT_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue

        groups = m.groups()
        if intent_type == IntentType.ADD_TO_CART and len(groups) == 2:
            entities = IntentEntities(product=groups[1].strip(), quantity=int(groups[0]))
        elif intent_type in (IntentType.SEARCH_PRODUCT, IntentType.CHECK_PRICE, IntentType.ADD_TO_CART):
            entities = extract_product(groups[0] if groups and groups[0] else text)
        else:
            entities = IntentEntities()

        log.info(f"🧭 INTENT_MATCHED | type={intent_type.value} | product={entities.product} | qty={entities.quantity}")
        return Intent(
            type=intent_type,
            entities=entities,
            confidence=INTENT_MATCH_CONFIDENCE,
            original_query=text,
            english_query=text,
        )

    if is_shopping_related(text):
        log.info(f"🧭 INTENT_VOCABULARY | type=search_product | text='{text[:60]}'")
        return Intent(
            type=IntentType.SEARCH_PRODUCT,
            entities=extract_product(text),
            confidence=INTENT_VOCABULARY_CONFIDENCE,
            original_query=text,
            english_query=text,
        )

    log.info(f"🧭 INTENT_GENERAL | text='{text[:60]}'")
    return Intent(
        type=IntentType.GENERAL_QUERY,
        entities=IntentEntities(),
        confidence=INTENT_GENERAL_CONFIDENCE,
        original_query=text,
        english_query=text,
    )


def build_intent_response(intent: Intent) -> Dict[str, Any]:
    """Next UI action for a resolved intent: {message, action, data}."""
    action = INTENT_ACTIONS.get(intent.type, INTENT_ACTIONS[IntentType.GENERAL_QUERY])
    ent = intent.entities

    if intent.type == IntentType.SEARCH_PRODUCT:
        return {
            "message": f"Searching for {ent.product}...",
            "action": action.value,
            "data": {"query": ent.product, "category": ent.category, "quantity": ent.quantity},
        }
    if intent.type == IntentType.ADD_TO_CART:
        qty = ent.quantity or 1
        return {
            "message": f"Adding {qty} {ent.product} to cart...",
            "action": action.value,
            "data": {"product": ent.product, "quantity": qty},
        }
    if intent.type == IntentType.CHECK_PRICE:
        return {
            "message": f"Checking price for {ent.product}...",
            "action": action.value,
            "data": {"product": ent.product},
        }
    if intent.type == IntentType.PLACE_ORDER:
        return {"message": "Proceeding to checkout...", "action": action.value, "data": {}}
    if intent.type == IntentType.VIEW_CART:
        return {"message": "Showing your cart items...", "action": action.value, "data": {}}

    return {"message": "How can I help you with shopping today?", "action": action.value, "data": {}}
