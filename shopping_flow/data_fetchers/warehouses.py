# shopping_flow/data_fetchers/warehouses.py
"""
Nearby-warehouse provider.

Static two-site table for the Texas fulfilment network; distances to the
delivery address are drawn from the caller's `random.Random` until a
geocoding collaborator is wired in.
"""

from __future__ import annotations

import logging
import random
from typing import List

from ..enums import CollaboratorFunction, DeliveryType
from ..models import Coordinates, DeliveryAddress, OperationalHours, Warehouse, WarehouseLocation
from ..scoring_config import FALLBACK_WAREHOUSE_DISTANCE
from . import register_fetcher

log = logging.getLogger(__name__)

DEFAULT_LAST_MILE_PARTNER = "Walmart Delivery"


def nearby_warehouses(address: DeliveryAddress, rng: random.Random) -> List[Warehouse]:
    warehouses = [
        Warehouse(
            id="WH_DFW_001",
            name="Walmart Fulfillment Center - Dallas",
            location=WarehouseLocation(
                address="2150 Logistics Dr", city="Dallas", state="TX", zip="75236",
                coordinates=Coordinates(32.7767, -96.7970),
            ),
            distance=round(rng.random() * 20 + 5, 2),
            capacity=50000,
            current_stock=45000,
            delivery_radius=50,
            operational_hours=OperationalHours("06:00", "22:00"),
            delivery_methods=[DeliveryType.SAME_DAY.value, DeliveryType.NEXT_DAY.value],
            last_mile_partners=["UPS", "FedEx", DEFAULT_LAST_MILE_PARTNER],
        ),
        Warehouse(
            id="WH_HOU_001",
            name="Walmart Fulfillment Center - Houston",
            location=WarehouseLocation(
                address="5555 Northwest Fwy", city="Houston", state="TX", zip="77092",
                coordinates=Coordinates(29.7604, -95.3698),
            ),
            distance=round(rng.random() * 30 + 10, 2),
            capacity=60000,
            current_stock=55000,
            delivery_radius=60,
            operational_hours=OperationalHours("05:00", "23:00"),
            delivery_methods=[DeliveryType.NEXT_DAY.value, DeliveryType.STANDARD.value],
            last_mile_partners=["UPS", DEFAULT_LAST_MILE_PARTNER],
        ),
    ]
    log.info(f"🏢 WAREHOUSES_NEARBY | zip={address.zip_code} | count={len(warehouses)}")
    return warehouses


def fallback_warehouse(address: DeliveryAddress) -> Warehouse:
    """Nearest-store stand-in used by the fixed fallback delivery plan."""
    return Warehouse(
        id="WH_FALLBACK",
        name="Nearest Walmart Store",
        location=WarehouseLocation(
            address="123 Main St", city=address.city, state=address.state, zip=address.zip_code,
            coordinates=Coordinates(0.0, 0.0),
        ),
        distance=FALLBACK_WAREHOUSE_DISTANCE,
        capacity=1000,
        current_stock=800,
        delivery_radius=25,
        operational_hours=OperationalHours("08:00", "20:00"),
        delivery_methods=[DeliveryType.STANDARD.value],
        last_mile_partners=[DEFAULT_LAST_MILE_PARTNER],
    )


register_fetcher(CollaboratorFunction.NEARBY_WAREHOUSES, nearby_warehouses)
