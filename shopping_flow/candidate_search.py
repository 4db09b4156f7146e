# shopping_flow/candidate_search.py
"""
Candidate Search & Dedup
────────────────────────
refined query ──► answer service (suggestions)
              ──► retail search per {refined query} ∪ first N suggestions
              ──► normalize ──► dedup by name similarity
              ──► empty? Fallback Catalog ──► cap

A failing source is logged and skipped; this stage never raises.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Awaitable, Callable, List, Optional

from .config import BaseConfig, get_config
from .data_fetchers import get_fetcher
from .data_fetchers.retail_search import normalize_listing
from .enums import CollaboratorFunction
from .fallback_catalog import FallbackCatalog, get_fallback_catalog
from .models import Intent, Product
from .query_prioritizer import clean_search_query
from .scoring_config import DEDUP_SIMILARITY_THRESHOLD
from .utils.helpers import normalize_name, similarity_ratio, unique
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

STAGE = "candidate_search"

RetailSearch = Callable[[str], Awaitable[dict]]
Suggest = Callable[[str, Intent], Awaitable[List[str]]]


@dataclass
class CandidateBatch:
    products: List[Product]
    suggestions: List[str] = field(default_factory=list)
    queries: List[str] = field(default_factory=list)
    used_fallback: bool = False


def dedupe_products(products: List[Product], threshold: float = DEDUP_SIMILARITY_THRESHOLD) -> List[Product]:
    """Keep the first-seen product of every group whose lower-cased names are more similar than `threshold`."""
    kept: List[Product] = []
    kept_names: List[str] = []
    for product in products:
        name = normalize_name(product.name)
        if any(similarity_ratio(existing, name) > threshold for existing in kept_names):
            continue
        kept.append(product)
        kept_names.append(name)
    return kept


async def _fetch_suggestions(suggest: Optional[Suggest], query: str, intent: Intent) -> List[str]:
    if suggest is None:
        return []
    try:
        suggestions = await suggest(query, intent)
        return [s for s in (suggestions or []) if isinstance(s, str) and s.strip()]
    except Exception as exc:
        plog.upstream_call("answer_service", "suggest", status="failed", error=str(exc))
        return []


async def _fetch_listings(retail_search: RetailSearch, queries: List[str], rng: random.Random,
                          delay: float, sleep: Callable[[float], Awaitable[Any]]) -> List[Product]:
    products: List[Product] = []
    for i, query in enumerate(queries):
        if i > 0 and delay > 0:
            await sleep(delay)
        try:
            plog.upstream_call("retail_search", "search", query=query)
            data = await retail_search(query)
        except Exception as exc:
            plog.upstream_call("retail_search", "search", status="failed", query=query, error=str(exc))
            continue

        items = (data or {}).get("results") or []
        if not items:
            log.info(f"ℹ️ RETAIL_NO_RESULTS | query='{query}' | error={(data or {}).get('meta', {}).get('error')}")
            continue
        for item in items:
            try:
                products.append(normalize_listing(item, rng))
            except (AttributeError, TypeError, ValueError) as exc:
                log.warning(f"⚠️ LISTING_SKIPPED | query='{query}' | error={exc}")
    return products


async def search_candidates(
    refined_query: str,
    intent: Intent,
    *,
    rng: Optional[random.Random] = None,
    cfg: Optional[BaseConfig] = None,
    retail_search: Optional[RetailSearch] = None,
    suggest: Optional[Suggest] = None,
    catalog: Optional[FallbackCatalog] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> CandidateBatch:
    """Deduplicated, capped candidate list for `refined_query`; never raises."""
    cfg = cfg or get_config()
    rng = rng or random.Random()
    catalog = catalog or get_fallback_catalog()
    if suggest is None and cfg.answer_enabled:
        suggest = partial(get_fetcher(CollaboratorFunction.PRODUCT_SUGGESTIONS), cfg=cfg)
    if retail_search is None and cfg.retail_enabled:
        retail_search = partial(get_fetcher(CollaboratorFunction.RETAIL_SEARCH), cfg=cfg)

    plog.stage_start(STAGE, query=refined_query)
    suggestions: List[str] = []
    queries: List[str] = []
    products: List[Product] = []

    try:
        suggestions = await _fetch_suggestions(suggest, refined_query, intent)
        if retail_search is not None:
            queries = unique([q for q in [refined_query] + suggestions[: cfg.RETAIL_MAX_SUGGESTION_QUERIES] if q])
            raw = await _fetch_listings(retail_search, queries, rng, cfg.RETAIL_RATE_LIMIT_DELAY, sleep)
            products = dedupe_products(raw)
            plog.counts(STAGE, queries=len(queries), raw=len(raw), unique=len(products))
    except Exception as exc:
        log.error(f"❌ CANDIDATE_SEARCH_ERROR | query='{refined_query}' | error={exc}", exc_info=True)
        products = []

    used_fallback = False
    if not products:
        used_fallback = True
        cleaned = clean_search_query(intent.entities.product or intent.original_query)
        reason = "no_retail_service" if retail_search is None else "no_results"
        plog.fallback_used(STAGE, reason, cleaned=cleaned)
        products = dedupe_products(
            catalog.lookup([refined_query, cleaned], rng, category=intent.entities.category)
        )

    products = products[: cfg.MAX_CANDIDATES]
    plog.stage_complete(STAGE, returned=len(products), fallback=used_fallback)
    return CandidateBatch(
        products=products,
        suggestions=suggestions,
        queries=queries,
        used_fallback=used_fallback,
    )
