# shopping_flow/routes/intent.py
"""
POST /rs/intent  {message} → {intent, response}
"""

from __future__ import annotations

import logging

from flask import Blueprint

from ..intent_resolver import build_intent_response, resolve_intent
from . import bad_request, json_body, ok

log = logging.getLogger(__name__)
bp = Blueprint("intent", __name__)


@bp.post("/intent")
def classify_intent():
    data = json_body()
    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        return bad_request("Missing or invalid 'message' field. Expected a non-empty string.")

    intent = resolve_intent(message.strip())
    log.info(f"🧭 INTENT_REQUEST | type={intent.type.value} | confidence={intent.confidence}")
    return ok({
        "intent": intent.to_dict(),
        "response": build_intent_response(intent),
    })
