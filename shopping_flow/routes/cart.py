# shopping_flow/routes/cart.py
"""
POST /rs/cart/optimize  {cartItems, userPreferences?} → CartOptimization + optimizationId
GET  /rs/cart/preview   ?category= → active promotions
"""

from __future__ import annotations

import logging
import random
import time

from flask import Blueprint, request

from ..cart_optimizer import optimization_preview, optimize_cart
from ..models import CartItem, CartPreferences
from ..utils.helpers import random_token
from . import bad_request, json_body, ok

log = logging.getLogger(__name__)
bp = Blueprint("cart", __name__)


@bp.post("/cart/optimize")
def optimize():
    data = json_body()
    raw_items = data.get("cartItems")
    if not isinstance(raw_items, list) or not raw_items:
        return bad_request("cartItems must be a non-empty list.")

    try:
        items = [CartItem.from_dict(i) for i in raw_items]
    except (TypeError, ValueError, AttributeError) as exc:
        return bad_request(f"Invalid cart item: {exc}")

    preferences = CartPreferences.from_dict(data.get("userPreferences"))
    result = optimize_cart(items, preferences)
    optimization_id = f"OPT_{int(time.time() * 1000)}_{random_token(random.Random())}"
    log.info(
        f"🛒 CART_REQUEST | id={optimization_id} | lines={len(items)} | "
        f"savings={result.total_savings} | fallback={result.is_fallback}"
    )
    return ok({**result.to_dict(), "optimizationId": optimization_id})


@bp.get("/cart/preview")
def preview():
    category = request.args.get("category", "").strip() or None
    return ok(optimization_preview(category))
