# shopping_flow/routes/search.py
"""
POST /rs/search  {intent} | {message} → SearchResult

A bare `message` is resolved to an Intent first; the search stage itself
never errors, so only request validation produces a 400.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app

from ..intent_resolver import resolve_intent
from ..models import Intent
from ..product_search import search
from . import bad_request, json_body, ok

log = logging.getLogger(__name__)
bp = Blueprint("search", __name__)


@bp.post("/search")
async def product_search():
    data = json_body()
    raw_intent = data.get("intent")
    message = data.get("message")

    if isinstance(raw_intent, dict):
        try:
            intent = Intent.from_dict(raw_intent)
        except (TypeError, ValueError, AttributeError) as exc:
            return bad_request(f"Invalid intent: {exc}")
    elif isinstance(message, str) and message.strip():
        intent = resolve_intent(message.strip())
    else:
        return bad_request("Provide an 'intent' object or a non-empty 'message'.")

    target = intent.entities.product or intent.original_query
    if not isinstance(target, str) or not target.strip():
        return bad_request("Intent has no product or original query to search for.")

    log.info(f"🔍 SEARCH_REQUEST | type={intent.type.value} | product='{intent.entities.product}'")
    result = await search(intent, cfg=current_app.extensions["cfg"])
    return ok(result.to_dict())
