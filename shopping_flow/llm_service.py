# shopping_flow/llm_service.py
"""
LLM service for the shopping flow
─────────────────────────────────
Two narrow jobs for the text-completion service:
- pick the best-match index among ranked candidates
- (optional) enhance a product search query

Callers own the fallback: every method here raises on transport or
parse failure, and `get_llm_service()` returns None when no key is set.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import anthropic

from .config import BaseConfig, get_config
from .models import Intent, Product
from .utils.helpers import extract_json_block, first_int

log = logging.getLogger(__name__)

SELECT_BEST_MATCH_TOOL = {
    "name": "select_best_match",
    "description": "Select the single best product for the shopper from the indexed list.",
    "input_schema": {
        "type": "object",
        "properties": {
            "index": {"type": "integer", "description": "Zero-based index of the chosen product"},
            "reason": {"type": "string"},
        },
        "required": ["index"],
    },
}

ENHANCE_QUERY_TOOL = {
    "name": "enhance_search_query",
    "description": "Rewrite a shopper's request as concise e-commerce search terms.",
    "input_schema": {
        "type": "object",
        "properties": {"query": {"type": "string"}},
        "required": ["query"],
    },
}

BEST_MATCH_PROMPT = """You are a Walmart product selection assistant. Select the BEST product match based on:
1. User intent and preferences
2. Price value and savings
3. Product quality and ratings
4. Delivery speed and availability
5. Brand reputation

Return the index number (0-{last}) of the best product."""

_WS = re.compile(r"\s+")


def pick_tool(resp: Any, name: str):  # noqa: ANN401
    for c in resp.content:
        if getattr(c, "type", None) == "tool_use" and getattr(c, "name", None) == name:
            return c
    return None


def response_text(resp: Any) -> str:
    return " ".join(
        getattr(c, "text", "") for c in resp.content if getattr(c, "type", None) == "text"
    ).strip()


def product_rows(products: List[Product]) -> str:
    """Indexed candidate rows for the selection prompt."""
    rows = []
    for i, p in enumerate(products):
        discount = f"{p.discount:g}%" if p.discount is not None else "n/a"
        rows.append(
            f"{i}. {p.name} - ${p.price:.2f}\n"
            f"   Brand: {p.brand} | Rating: {p.rating} ({p.reviews} reviews)\n"
            f"   Discount: {discount} | Stock: {p.quantity}\n"
            f"   Delivery: {p.warehouse.estimated_delivery}"
        )
    return "\n".join(rows)


class LLMService:
    """Service class for all text-completion interactions."""

    def __init__(self, api_key: str = None, model: str = None, timeout: float = None,
                 cfg: BaseConfig = None) -> None:
        cfg = cfg or get_config()
        api_key = api_key if api_key is not None else cfg.ANTHROPIC_API_KEY
        if not api_key:
            raise RuntimeError("Missing ANTHROPIC_API_KEY. Set it in environment or .env file.")
        self.model = model or cfg.LLM_MODEL
        self.temperature = cfg.LLM_TEMPERATURE
        self.max_tokens = cfg.LLM_MAX_TOKENS
        self.anthropic = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout if timeout is not None else cfg.LLM_TIMEOUT_SECONDS,
        )

    async def select_best_match_index(self, products: List[Product], intent: Intent) -> int:
        """Index chosen by the model; raises ValueError when no usable index comes back."""
        payload = {
            "user_query": intent.original_query,
            "intent": intent.type.value,
            "looking_for": intent.entities.product or "general products",
            "quantity_needed": intent.entities.quantity or 1,
        }
        prompt = (
            BEST_MATCH_PROMPT.format(last=len(products) - 1)
            + "\n\n" + json.dumps(payload, ensure_ascii=False)
            + "\n\nAvailable Products:\n" + product_rows(products)
        )
        resp = await self.anthropic.messages.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            tools=[SELECT_BEST_MATCH_TOOL],
            tool_choice={"type": "tool", "name": "select_best_match"},
            temperature=0,
            max_tokens=self.max_tokens,
        )

        tool_use = pick_tool(resp, "select_best_match")
        raw = (tool_use.input or {}).get("index") if tool_use else None
        if raw is None:
            # second chance: {"index": n} or a bare integer in plain text
            text = response_text(resp)
            raw = extract_json_block(text).get("index")
            if raw is None:
                raw = first_int(text)
        if raw is None:
            raise ValueError("no index in best-match response")

        index = int(raw)
        if not 0 <= index < len(products):
            raise ValueError(f"best-match index {index} out of range 0..{len(products) - 1}")
        log.info(f"🤖 LLM_BEST_MATCH | index={index} | candidates={len(products)}")
        return index

    async def enhance_query(self, query: str, intent: Intent) -> str:
        resp = await self.anthropic.messages.create(
            model=self.model,
            messages=[{
                "role": "user",
                "content": (
                    "Enhance product search queries for better e-commerce results. "
                    "Return only the enhanced search terms.\n"
                    f'Original: "{query}" Intent: {intent.type.value} '
                    f"Category: {intent.entities.category or 'any'}"
                ),
            }],
            tools=[ENHANCE_QUERY_TOOL],
            tool_choice={"type": "tool", "name": "enhance_search_query"},
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        tool_use = pick_tool(resp, "enhance_search_query")
        enhanced = ((tool_use.input or {}).get("query") if tool_use else None) or response_text(resp)
        enhanced = _WS.sub(" ", enhanced or "").strip()
        log.info(f"🤖 LLM_QUERY_ENHANCED | query='{query}' | enhanced='{enhanced}'")
        return enhanced or query


_llm_services: Dict[Tuple[Any, ...], LLMService] = {}


def get_llm_service(cfg: Optional[BaseConfig] = None) -> Optional[LLMService]:
    """One client per distinct LLM settings in `cfg`; None when the service is not configured."""
    cfg = cfg or get_config()
    if not cfg.llm_enabled:
        return None
    key = (cfg.ANTHROPIC_API_KEY, cfg.LLM_MODEL, cfg.LLM_TIMEOUT_SECONDS, cfg.LLM_TEMPERATURE, cfg.LLM_MAX_TOKENS)
    if key not in _llm_services:
        _llm_services[key] = LLMService(cfg=cfg)
    return _llm_services[key]
