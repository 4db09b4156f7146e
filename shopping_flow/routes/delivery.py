# shopping_flow/routes/delivery.py
"""
POST /rs/delivery          {selectedProducts, deliveryAddress, userPreferences?} → DeliveryPlan
GET  /rs/delivery/options  ?zipCode&city&state → preview for an address
"""

from __future__ import annotations

import logging

from flask import Blueprint, request

from ..delivery_optimizer import get_delivery_options_for_address, optimize_delivery
from ..models import DeliveryAddress, DeliveryPreferences, Product
from . import bad_request, json_body, ok

log = logging.getLogger(__name__)
bp = Blueprint("delivery", __name__)


@bp.post("/delivery")
def plan_delivery():
    data = json_body()
    raw_products = data.get("selectedProducts")
    raw_address = data.get("deliveryAddress")

    if not isinstance(raw_products, list) or not raw_products:
        return bad_request("selectedProducts must be a non-empty list.")
    if not isinstance(raw_address, dict):
        return bad_request("deliveryAddress is required.")

    address = DeliveryAddress.from_dict(raw_address)
    required = (("street", address.street), ("city", address.city), ("zipCode", address.zip_code))
    missing = [name for name, value in required if not value.strip()]
    if missing:
        return bad_request(f"deliveryAddress is missing: {', '.join(missing)}")

    try:
        products = [Product.from_dict(p) for p in raw_products]
    except (TypeError, ValueError, AttributeError) as exc:
        return bad_request(f"Invalid product in selectedProducts: {exc}")

    preferences = DeliveryPreferences.from_dict(data.get("userPreferences"))
    plan = optimize_delivery(products, address, preferences)
    log.info(
        f"🚚 DELIVERY_REQUEST | products={len(products)} | zip={address.zip_code} | "
        f"method={plan.recommended_delivery.type.value} | fallback={plan.is_fallback}"
    )
    return ok(plan.to_dict())


@bp.get("/delivery/options")
def delivery_options_preview():
    zip_code = request.args.get("zipCode", "").strip()
    if not zip_code:
        return bad_request("zipCode query parameter is required.")

    address = DeliveryAddress(
        street="123 Main St",
        city=request.args.get("city", ""),
        state=request.args.get("state", ""),
        zip_code=zip_code,
    )
    return ok(get_delivery_options_for_address(address))
