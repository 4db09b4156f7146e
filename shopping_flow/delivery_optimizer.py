# shopping_flow/delivery_optimizer.py
"""
Warehouse & Delivery Selector
─────────────────────────────
nearby warehouses ──► score (distance, stock, methods, capacity) ──► route + slots
                  ──► delivery options (all five, flagged) ──► recommended method
                  ──► last-mile tracking ──► cost + sustainability

The clock (`now`) and randomness source (`rng`) are injectable so cutoff,
ETA and slot availability are reproducible. Any failure returns the fixed
fallback plan.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, time, timedelta
from typing import Callable, List, Optional

from .data_fetchers import get_fetcher
from .data_fetchers.warehouses import DEFAULT_LAST_MILE_PARTNER, fallback_warehouse
from .enums import CollaboratorFunction, DeliveryType
from .models import (
    Coordinates,
    DeliveryAddress,
    DeliveryMethod,
    DeliveryPlan,
    DeliveryPreferences,
    DeliveryRoute,
    DeliverySlot,
    LastMileCoordination,
    Product,
    RouteStep,
    Warehouse,
)
from .scoring_config import (
    DELIVERY_COSTS,
    DELIVERY_SLOT_TEMPLATES,
    DELIVERY_SPEED_RANK,
    EXPRESS_MAX_DISTANCE,
    FALLBACK_DELIVERY_DAYS,
    FALLBACK_SUSTAINABILITY,
    FALLBACK_WAREHOUSE_DISTANCE,
    MINUTES_PER_MILE,
    PREMIUM_SLOT_COST,
    ROUTE_HEADING_SHARE,
    SAME_DAY_CUTOFF,
    SAME_DAY_MAX_DISTANCE,
    SCORE_CEILING,
    SLOT_DAYS,
    SUSTAINABILITY_ADJUSTMENT,
    SUSTAINABILITY_DISTANCE_PENALTY,
    WAREHOUSE_BASE_SCORE,
    WAREHOUSE_CAPACITY_BONUS,
    WAREHOUSE_CAPACITY_UNIT,
    WAREHOUSE_DISTANCE_PENALTY,
    WAREHOUSE_METHOD_BONUS,
    WAREHOUSE_STOCK_PENALTY,
)
from .utils.helpers import random_token
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

STAGE = "delivery"

DEFAULT_SERVICE_AREA = 25

WarehouseProvider = Callable[[DeliveryAddress, random.Random], List[Warehouse]]

COMPASS = ["north", "northeast", "east", "southeast", "south", "southwest", "west", "northwest"]

# (type, id, display name, estimated time)
DELIVERY_OPTION_TEMPLATES = [
    (DeliveryType.SAME_DAY, "same_day", "Same Day Delivery", "2-4 hours"),
    (DeliveryType.NEXT_DAY, "next_day", "Next Day Delivery", "By tomorrow 8 PM"),
    (DeliveryType.TWO_DAY, "two_day", "Two Day Delivery", "2 business days"),
    (DeliveryType.STANDARD, "standard", "Standard Delivery", "3-5 business days"),
    (DeliveryType.EXPRESS, "express", "Express Delivery", "1-2 hours"),
]


# ─────────────────────────────────────────────────────────────
# Warehouse scoring
# ─────────────────────────────────────────────────────────────
def stock_insufficient(warehouse: Warehouse, requested_units: int) -> bool:
    return warehouse.current_stock <= 0 or warehouse.current_stock < requested_units


def score_warehouse(warehouse: Warehouse, requested_units: int) -> float:
    score = WAREHOUSE_BASE_SCORE
    score -= WAREHOUSE_DISTANCE_PENALTY * warehouse.distance
    if stock_insufficient(warehouse, requested_units):
        score -= WAREHOUSE_STOCK_PENALTY
    score += WAREHOUSE_METHOD_BONUS * len(warehouse.delivery_methods)
    score += WAREHOUSE_CAPACITY_BONUS * (warehouse.capacity / WAREHOUSE_CAPACITY_UNIT)
    return max(0.0, score)


def select_warehouse(warehouses: List[Warehouse], requested_units: int) -> Warehouse:
    if not warehouses:
        raise ValueError("no warehouses available")
    # max() keeps the first of equal scores
    return max(warehouses, key=lambda w: score_warehouse(w, requested_units))


# ─────────────────────────────────────────────────────────────
# Route
# ─────────────────────────────────────────────────────────────
def format_travel_time(distance: float) -> str:
    minutes = round(distance * MINUTES_PER_MILE)
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60}m"


def heading(origin: Coordinates, destination: Optional[Coordinates], rng: random.Random) -> str:
    if destination is None:
        return rng.choice(COMPASS)
    bearing = math.degrees(math.atan2(destination.lng - origin.lng, destination.lat - origin.lat)) % 360
    return COMPASS[int((bearing + 22.5) // 45) % 8]


def delivery_slots(now: datetime, rng: random.Random) -> List[DeliverySlot]:
    slots = []
    for day in range(SLOT_DAYS):
        date = (now + timedelta(days=day)).date().isoformat()
        for suffix, label, threshold, premium in DELIVERY_SLOT_TEMPLATES:
            slots.append(DeliverySlot(
                id=f"SLOT_{day}_{suffix}",
                date=date,
                time_slot=label,
                available=rng.random() > threshold,
                premium=premium,
                cost=PREMIUM_SLOT_COST if premium else 0.0,
            ))
    return slots


def plan_route(warehouse: Warehouse, address: DeliveryAddress, now: datetime,
               rng: random.Random) -> DeliveryRoute:
    distance = warehouse.distance
    origin = warehouse.location.coordinates
    heading_distance = round(distance * ROUTE_HEADING_SHARE, 2)
    arrival = address.coordinates or Coordinates(origin.lat + 0.02, origin.lng + 0.02)

    steps = [
        RouteStep(f"Start from {warehouse.name}", 0.0, "0 min", origin),
        RouteStep(
            f"Head {heading(origin, address.coordinates, rng)}",
            heading_distance,
            format_travel_time(heading_distance),
            Coordinates(origin.lat + 0.01, origin.lng + 0.01),
        ),
        RouteStep(f"Arrive at {address.street}", distance, format_travel_time(distance), arrival),
    ]
    return DeliveryRoute(
        id=f"ROUTE_{int(now.timestamp() * 1000)}",
        warehouse_id=warehouse.id,
        delivery_address=address,
        estimated_distance=distance,
        estimated_time=format_travel_time(distance),
        steps=steps,
        last_mile_partner=(warehouse.last_mile_partners or [DEFAULT_LAST_MILE_PARTNER])[0],
        delivery_slots=delivery_slots(now, rng),
    )


# ─────────────────────────────────────────────────────────────
# Delivery options
# ─────────────────────────────────────────────────────────────
def before_cutoff(now: datetime, cutoff: str = SAME_DAY_CUTOFF) -> bool:
    hours, minutes = (int(part) for part in cutoff.split(":"))
    return now.time() < time(hours, minutes)


def delivery_options(warehouse: Warehouse, now: datetime) -> List[DeliveryMethod]:
    """All five methods; `available` is False when a distance or cutoff constraint fails."""
    availability = {
        DeliveryType.SAME_DAY: warehouse.distance <= SAME_DAY_MAX_DISTANCE and before_cutoff(now),
        DeliveryType.NEXT_DAY: True,
        DeliveryType.TWO_DAY: True,
        DeliveryType.STANDARD: True,
        DeliveryType.EXPRESS: (
            warehouse.distance <= EXPRESS_MAX_DISTANCE
            and DeliveryType.EXPRESS.value in warehouse.delivery_methods
        ),
    }
    return [
        DeliveryMethod(
            id=method_id,
            name=name,
            type=dtype,
            estimated_time=estimated,
            cost=DELIVERY_COSTS[dtype],
            available=availability[dtype],
            cutoff_time=SAME_DAY_CUTOFF if dtype == DeliveryType.SAME_DAY else None,
        )
        for dtype, method_id, name, estimated in DELIVERY_OPTION_TEMPLATES
    ]


def select_recommended(options: List[DeliveryMethod],
                       preferences: Optional[DeliveryPreferences] = None) -> DeliveryMethod:
    available = [o for o in options if o.available]
    if not available:
        raise ValueError("no delivery method available")

    def first_of(dtype: DeliveryType) -> DeliveryMethod:
        return next((o for o in available if o.type == dtype), available[0])

    if preferences is None:
        return first_of(DeliveryType.NEXT_DAY)
    if preferences.priority_speed:
        return min(available, key=lambda o: DELIVERY_SPEED_RANK[o.type])
    if preferences.priority_cost:
        return min(available, key=lambda o: o.cost)
    if preferences.environmentally_friendly:
        return first_of(DeliveryType.STANDARD)
    return first_of(DeliveryType.NEXT_DAY)


# ─────────────────────────────────────────────────────────────
# Last mile, cost, sustainability
# ─────────────────────────────────────────────────────────────
def estimated_delivery(method: DeliveryMethod, now: datetime) -> datetime:
    evening = dict(hour=20, minute=0, second=0, microsecond=0)
    if method.type == DeliveryType.EXPRESS:
        return now + timedelta(hours=2)
    if method.type == DeliveryType.SAME_DAY:
        return now + timedelta(hours=4)
    if method.type == DeliveryType.NEXT_DAY:
        return (now + timedelta(days=1)).replace(**evening)
    if method.type == DeliveryType.TWO_DAY:
        return (now + timedelta(days=2)).replace(**evening)
    return (now + timedelta(days=4)).replace(**evening)


def tracking_id(now: datetime, rng: random.Random) -> str:
    return f"WM{int(now.timestamp() * 1000)}{random_token(rng)}"


def sustainability_score(distance: float, method: DeliveryMethod) -> float:
    score = 100 - SUSTAINABILITY_DISTANCE_PENALTY * distance + SUSTAINABILITY_ADJUSTMENT.get(method.type, 0.0)
    return round(max(0.0, min(SCORE_CEILING, score)), 2)


def products_total(products: List[Product]) -> float:
    return round(sum(p.price for p in products), 2)


def reported_total(products: List[Product]) -> float:
    """Products total for the fallback plan; an unpriced product counts as zero."""
    total = 0.0
    for p in products:
        try:
            total += float(getattr(p, "price", 0) or 0)
        except (TypeError, ValueError) as exc:
            log.warning(f"⚠️ DELIVERY_PRODUCT_UNPRICED | product={getattr(p, 'id', None)} | error={exc}")
    return round(total, 2)


# ─────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────
def optimize_delivery(
    products: List[Product],
    address: DeliveryAddress,
    preferences: Optional[DeliveryPreferences] = None,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    warehouse_provider: Optional[WarehouseProvider] = None,
) -> DeliveryPlan:
    """Pick warehouse and delivery method for `products`; never raises."""
    rng = rng or random.Random()
    now = now or datetime.now()
    provider = warehouse_provider or get_fetcher(CollaboratorFunction.NEARBY_WAREHOUSES)
    products = list(products or [])

    try:
        plog.stage_start(STAGE, products=len(products), city=address.city)
        # one unit requested per selected product
        requested_units = len(products)
        warehouse = select_warehouse(provider(address, rng), requested_units)
        plog.stage_decision(STAGE, "warehouse", warehouse=warehouse.id, distance=warehouse.distance)

        route = plan_route(warehouse, address, now, rng)
        options = delivery_options(warehouse, now)
        recommended = select_recommended(options, preferences)
        plog.stage_decision(STAGE, "delivery_method", method=recommended.type.value, cost=recommended.cost)

        last_mile = LastMileCoordination(
            partner=route.last_mile_partner,
            tracking_id=tracking_id(now, rng),
            estimated_delivery=estimated_delivery(recommended, now),
            real_time_updates=True,
        )
        plan = DeliveryPlan(
            selected_products=list(products),
            optimal_warehouse=warehouse,
            delivery_route=route,
            delivery_options=options,
            recommended_delivery=recommended,
            last_mile_coordination=last_mile,
            total_delivery_cost=round(products_total(products) + recommended.cost, 2),
            total_estimated_time=recommended.estimated_time,
            sustainability_score=sustainability_score(route.estimated_distance, recommended),
        )
        plog.stage_complete(STAGE, total=plan.total_delivery_cost, sustainability=plan.sustainability_score)
        return plan
    except Exception as exc:
        log.error(
            f"❌ DELIVERY_OPTIMIZATION_ERROR | city={getattr(address, 'city', None)} | error={exc}", exc_info=True
        )
        plog.fallback_used(STAGE, "optimization_failed", error=str(exc))
        return fallback_plan(products, address, now)


def fallback_plan(products: List[Product], address: DeliveryAddress, now: datetime) -> DeliveryPlan:
    warehouse = fallback_warehouse(address)
    method = DeliveryMethod(
        id="standard_fallback",
        name="Standard Delivery",
        type=DeliveryType.STANDARD,
        estimated_time="3-5 business days",
        cost=0.0,
        available=True,
    )
    route = DeliveryRoute(
        id="ROUTE_FALLBACK",
        warehouse_id=warehouse.id,
        delivery_address=address,
        estimated_distance=FALLBACK_WAREHOUSE_DISTANCE,
        estimated_time=format_travel_time(FALLBACK_WAREHOUSE_DISTANCE),
        steps=[],
        last_mile_partner=DEFAULT_LAST_MILE_PARTNER,
        delivery_slots=[],
    )
    return DeliveryPlan(
        selected_products=list(products),
        optimal_warehouse=warehouse,
        delivery_route=route,
        delivery_options=[method],
        recommended_delivery=method,
        last_mile_coordination=LastMileCoordination(
            partner=DEFAULT_LAST_MILE_PARTNER,
            tracking_id="WM_FALLBACK_001",
            estimated_delivery=now + timedelta(days=FALLBACK_DELIVERY_DAYS),
            real_time_updates=False,
        ),
        total_delivery_cost=reported_total(products),
        total_estimated_time=method.estimated_time,
        sustainability_score=FALLBACK_SUSTAINABILITY,
        is_fallback=True,
    )


def get_delivery_options_for_address(
    address: DeliveryAddress,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    warehouse_provider: Optional[WarehouseProvider] = None,
) -> dict:
    """Preview: warehouse count, options of the best-scored warehouse, its service radius. Never raises."""
    rng = rng or random.Random()
    now = now or datetime.now()
    provider = warehouse_provider or get_fetcher(CollaboratorFunction.NEARBY_WAREHOUSES)
    empty = {"availableWarehouses": 0, "deliveryOptions": [], "serviceArea": DEFAULT_SERVICE_AREA}

    try:
        warehouses = provider(address, rng)
        if not warehouses:
            log.info(f"🏢 DELIVERY_OPTIONS_NONE | zip={address.zip_code}")
            return empty
        best = select_warehouse(warehouses, requested_units=0)
        options = delivery_options(best, now)
    except Exception as exc:
        log.error(
            f"❌ DELIVERY_OPTIONS_ERROR | zip={getattr(address, 'zip_code', None)} | error={exc}", exc_info=True
        )
        plog.fallback_used(STAGE, "options_preview_failed", error=str(exc))
        return empty

    log.info(
        f"🚚 DELIVERY_OPTIONS | zip={address.zip_code} | warehouse={best.id} | "
        f"available={sum(1 for o in options if o.available)}"
    )
    return {
        "availableWarehouses": len(warehouses),
        "deliveryOptions": [o.to_dict() for o in options],
        "serviceArea": best.delivery_radius,
    }
