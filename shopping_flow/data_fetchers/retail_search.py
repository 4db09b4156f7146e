# shopping_flow/data_fetchers/retail_search.py
"""
Retail Product-Search Fetcher
─────────────────────────────
• One GET per query against the SerpAPI Walmart engine
• Explicit timeout; every failure degrades to an empty result with an error in meta
• `normalize_listing` turns a raw organic result into a `Product`,
  filling unknown fields from the caller's `random.Random`
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from functools import partial
from typing import Any, Dict, Optional, Tuple

import requests

from ..config import BaseConfig, get_config
from ..enums import CollaboratorFunction
from ..fallback_catalog import DEFAULT_IMAGE, pick_delivery_estimate, pick_fulfilment_city
from ..models import Product, SupplierInfo, WarehouseInfo
from ..scoring_config import (
    FILL_DISTANCE_RANGE,
    FILL_PRICE_RANGE,
    FILL_QUANTITY_RANGE,
    FILL_RATING_BASE,
    FILL_RELIABILITY_RANGE,
    FILL_REVIEWS_RANGE,
)
from ..utils.helpers import extract_price, random_token, to_float
from . import register_fetcher

log = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; ShoppingFlowSearch/1.0)"


def _empty(error: str, took_ms: int = 0) -> Dict[str, Any]:
    return {"meta": {"returned": 0, "took_ms": took_ms, "query_successful": False, "error": error}, "results": []}


class RetailSearchFetcher:
    """SerpAPI Walmart engine client."""

    def __init__(self, api_key: str = None, base_url: str = None, engine: str = None,
                 timeout: float = None, num_results: int = None, cfg: BaseConfig = None):
        cfg = cfg or get_config()
        self.api_key = api_key if api_key is not None else cfg.SERPAPI_KEY
        self.base_url = base_url or cfg.RETAIL_SEARCH_URL
        self.engine = engine or cfg.RETAIL_ENGINE
        self.timeout = timeout if timeout is not None else cfg.RETAIL_TIMEOUT_SECONDS
        self.num_results = num_results or cfg.RETAIL_RESULTS_PER_QUERY
        self.headers = {"User-Agent": USER_AGENT}

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def search(self, query: str) -> Dict[str, Any]:
        if not self.enabled:
            return _empty("not_configured")

        params = {
            "engine": self.engine,
            "query": query,
            "api_key": self.api_key,
            "num": str(self.num_results),
        }
        started = time.perf_counter()
        try:
            log.info(f"🛒 RETAIL_SEARCH | query='{query}' | engine={self.engine}")
            response = requests.get(self.base_url, params=params, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json() or {}
            took_ms = int((time.perf_counter() - started) * 1000)
            results = data.get("organic_results") or []
            if not isinstance(results, list):
                return _empty("malformed_response", took_ms)
            log.info(f"✅ RETAIL_SEARCH_OK | query='{query}' | returned={len(results)} | took_ms={took_ms}")
            return {
                "meta": {"returned": len(results), "took_ms": took_ms, "query_successful": True},
                "results": results,
            }
        except requests.exceptions.Timeout:
            log.warning(f"⏱️ RETAIL_SEARCH_TIMEOUT | query='{query}' | timeout={self.timeout}s")
            return _empty("timeout")
        except requests.exceptions.RequestException as e:
            log.warning(f"❌ RETAIL_SEARCH_FAILED | query='{query}' | error={e}")
            return _empty(str(e))
        except ValueError as e:
            log.warning(f"❌ RETAIL_SEARCH_BAD_JSON | query='{query}' | error={e}")
            return _empty("malformed_response")


def normalize_listing(item: Dict[str, Any], rng: random.Random) -> Product:
    """Map one organic result onto a Product; missing numbers come from `rng`."""
    offer = item.get("primary_offer") or {}
    price = extract_price(offer.get("offer_price"))
    list_price = extract_price(offer.get("list_price")) if offer.get("list_price") else None
    if price <= 0:
        price = float(rng.randint(*FILL_PRICE_RANGE))

    # a list price at or below the offer is not a markdown
    if not list_price or list_price <= price:
        list_price = None
    discount = float(round((list_price - price) / list_price * 100)) if list_price else None

    item_id = item.get("us_item_id") or random_token(rng).lower()
    rating = to_float(item.get("rating"))
    reviews = item.get("reviews_count") or item.get("reviews")
    brand = item.get("brand") or "Walmart"

    return Product(
        id=f"WM_{item_id}",
        name=item.get("title") or "Unknown Product",
        description=item.get("snippet") or "Product description not available",
        price=price,
        original_price=list_price or None,
        discount=discount,
        brand=brand,
        category=item.get("category") or "general",
        image=item.get("thumbnail") or DEFAULT_IMAGE,
        rating=max(0.0, min(5.0, rating)) if rating is not None else round(FILL_RATING_BASE + rng.random(), 1),
        reviews=int(reviews) if isinstance(reviews, (int, float)) else rng.randint(*FILL_REVIEWS_RANGE),
        in_stock=True,
        quantity=rng.randint(*FILL_QUANTITY_RANGE),
        warehouse=WarehouseInfo(
            location=pick_fulfilment_city(rng),
            distance=float(rng.randint(*FILL_DISTANCE_RANGE)),
            estimated_delivery=pick_delivery_estimate(rng),
        ),
        supplier=SupplierInfo(
            id=f"SUP_{random_token(rng)}",
            name=item.get("brand") or "Walmart Supplier",
            reliability=round(rng.uniform(*FILL_RELIABILITY_RANGE), 3),
        ),
    )


# One fetcher per distinct retail settings
_retail_fetchers: Dict[Tuple[Any, ...], RetailSearchFetcher] = {}


def get_retail_fetcher(cfg: Optional[BaseConfig] = None) -> RetailSearchFetcher:
    """Fetcher built from `cfg` (the APP_ENV config when omitted), cached per settings."""
    cfg = cfg or get_config()
    key = (
        cfg.SERPAPI_KEY, cfg.RETAIL_SEARCH_URL, cfg.RETAIL_ENGINE,
        cfg.RETAIL_TIMEOUT_SECONDS, cfg.RETAIL_RESULTS_PER_QUERY,
    )
    if key not in _retail_fetchers:
        _retail_fetchers[key] = RetailSearchFetcher(cfg=cfg)
    return _retail_fetchers[key]


async def retail_search_handler(query: str, cfg: Optional[BaseConfig] = None) -> Dict[str, Any]:
    fetcher = get_retail_fetcher(cfg)
    # Run in thread to avoid blocking
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(fetcher.search, query))


register_fetcher(CollaboratorFunction.RETAIL_SEARCH, retail_search_handler)
