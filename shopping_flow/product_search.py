# shopping_flow/product_search.py
"""
Product search orchestration: Intent → refined query → candidates →
availability → price comparison → best match → ordered SearchResult.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Optional

from .candidate_search import RetailSearch, Suggest, search_candidates
from .config import BaseConfig, get_config
from .fallback_catalog import FallbackCatalog
from .intent_config import DEFAULT_SUGGESTIONS, NO_RESULTS_SUGGESTION
from .llm_service import LLMService, get_llm_service
from .models import Intent, SearchResult
from .query_prioritizer import clean_search_query, refine_query
from .ranking import filter_available, order_results, select_best_match, with_price_comparison
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

STAGE = "product_search"


def build_refined_query(intent: Intent, limit: int) -> str:
    if (intent.original_query or "").strip():
        return refine_query(intent.original_query, limit=limit)
    return clean_search_query(intent.entities.product or "")


async def search(
    intent: Intent,
    *,
    rng: Optional[random.Random] = None,
    cfg: Optional[BaseConfig] = None,
    llm: Optional[LLMService] = None,
    retail_search: Optional[RetailSearch] = None,
    suggest: Optional[Suggest] = None,
    catalog: Optional[FallbackCatalog] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> SearchResult:
    """Run the search stages for `intent`. Never raises; an unexpected error yields an empty result."""
    cfg = cfg or get_config()
    rng = rng or random.Random()
    llm = llm if llm is not None else get_llm_service(cfg)
    started = time.perf_counter()
    query = intent.entities.product or intent.original_query

    plog.stage_start(STAGE, intent=intent.type.value, query=query)
    try:
        refined = build_refined_query(intent, cfg.REFINED_QUERY_TERMS)
        if llm is not None and cfg.USE_LLM_QUERY_ENHANCEMENT:
            try:
                refined = await llm.enhance_query(refined, intent)
            except Exception as exc:
                plog.fallback_used(STAGE, "query_enhancement_failed", error=str(exc))

        batch = await search_candidates(
            refined, intent,
            rng=rng, cfg=cfg, retail_search=retail_search, suggest=suggest,
            catalog=catalog, sleep=sleep,
        )

        available = filter_available(batch.products)
        priced = with_price_comparison(available, rng)
        best = await select_best_match(priced, intent, llm if cfg.USE_LLM_BEST_MATCH else None)
        ordered = order_results(priced)
        best_match = next((p for p in ordered if best is not None and p.id == best.id), None)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        plog.stage_complete(
            STAGE, elapsed_ms=elapsed_ms, returned=len(ordered),
            best=best_match.id if best_match else None, fallback=batch.used_fallback,
        )
        return SearchResult(
            products=ordered,
            query=query,
            refined_query=refined,
            suggestions=batch.suggestions or DEFAULT_SUGGESTIONS[:4],
            total_results=len(ordered),
            search_time=elapsed_ms,
            best_match=best_match,
            used_fallback=batch.used_fallback,
        )
    except Exception as exc:
        plog.error_occurred(STAGE, type(exc).__name__, str(exc))
        log.error(f"❌ PRODUCT_SEARCH_ERROR | query='{query}' | error={exc}", exc_info=True)
        return SearchResult(
            products=[],
            query=intent.original_query,
            refined_query="",
            suggestions=[NO_RESULTS_SUGGESTION],
            total_results=0,
            search_time=0,
            best_match=None,
            used_fallback=True,
        )
