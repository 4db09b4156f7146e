# shopping_flow/data_fetchers/answer_service.py
"""
Answer/suggestion service client (OpenAI-compatible chat completions).
Asks for 3-5 concrete product names for a refined query; any failure
yields an empty list.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..config import BaseConfig, get_config
from ..enums import CollaboratorFunction
from ..models import Intent
from . import register_fetcher

log = logging.getLogger(__name__)

SUGGESTION_SYSTEM_PROMPT = """You are a Walmart shopping assistant. Based on the user's query, suggest 3-5 specific product names that would be available at Walmart.

IMPORTANT: Be dietary neutral and inclusive. For generic food requests, suggest diverse options that accommodate different dietary preferences. Do NOT make assumptions about dietary preferences.

DELIVERY PRIORITY: If the user mentions urgency (fast, quick, urgent, asap, immediate, today, tomorrow), prioritize products that are commonly available for same-day or next-day delivery.

Return only a comma-separated list of specific product names, no explanations."""


def parse_suggestions(content: str, limit: int) -> List[str]:
    return [p.strip() for p in (content or "").split(",") if p.strip()][:limit]


class AnswerServiceClient:
    def __init__(self, api_key: str = None, url: str = None, model: str = None,
                 timeout: float = None, max_suggestions: int = None, cfg: BaseConfig = None):
        cfg = cfg or get_config()
        self.api_key = api_key if api_key is not None else cfg.ANSWER_API_KEY
        self.url = url or cfg.ANSWER_API_URL
        self.model = model or cfg.ANSWER_MODEL
        self.timeout = timeout if timeout is not None else cfg.ANSWER_TIMEOUT_SECONDS
        self.max_suggestions = max_suggestions or cfg.ANSWER_MAX_SUGGESTIONS

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _payload(self, query: str, intent: Intent) -> Dict[str, Any]:
        user_prompt = (
            f'User query: "{query}"\n'
            f"Intent: {intent.type.value}\n"
            f"Category: {intent.entities.category or 'any'}\n\n"
            "Suggest specific products:"
        )
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SUGGESTION_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.3,
            "max_tokens": 150,
        }

    def suggest(self, query: str, intent: Intent) -> List[str]:
        if not self.enabled:
            log.info("⚠️ ANSWER_SERVICE_DISABLED | reason=no_api_key")
            return []

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            resp = requests.post(self.url, json=self._payload(query, intent), headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json() or {}
            content = (((data.get("choices") or [{}])[0].get("message") or {}).get("content") or "").strip()
            suggestions = parse_suggestions(content, self.max_suggestions)
            log.info(f"🧠 ANSWER_SUGGESTIONS | query='{query}' | count={len(suggestions)}")
            return suggestions
        except requests.exceptions.Timeout:
            log.warning(f"⏱️ ANSWER_SERVICE_TIMEOUT | query='{query}' | timeout={self.timeout}s")
            return []
        except (requests.exceptions.RequestException, ValueError, AttributeError, IndexError) as e:
            log.warning(f"❌ ANSWER_SERVICE_FAILED | query='{query}' | error={e}")
            return []


_answer_clients: Dict[Tuple[Any, ...], AnswerServiceClient] = {}


def get_answer_client(cfg: Optional[BaseConfig] = None) -> AnswerServiceClient:
    cfg = cfg or get_config()
    key = (cfg.ANSWER_API_KEY, cfg.ANSWER_API_URL, cfg.ANSWER_MODEL, cfg.ANSWER_TIMEOUT_SECONDS, cfg.ANSWER_MAX_SUGGESTIONS)
    if key not in _answer_clients:
        _answer_clients[key] = AnswerServiceClient(cfg=cfg)
    return _answer_clients[key]


async def product_suggestions_handler(query: str, intent: Intent, cfg: Optional[BaseConfig] = None) -> List[str]:
    client = get_answer_client(cfg)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(client.suggest, query, intent))


register_fetcher(CollaboratorFunction.PRODUCT_SUGGESTIONS, product_suggestions_handler)
