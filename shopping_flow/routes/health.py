# shopping_flow/routes/health.py
"""
Liveness probe plus which upstream collaborators are configured.
Always 200: missing keys only mean the pipeline runs on its fallbacks.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify

from ..data_fetchers import verify_registry

log = logging.getLogger(__name__)
bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check() -> tuple[Dict[str, Any], int]:
    cfg = current_app.extensions["cfg"]
    return jsonify({
        "status": "healthy",
        "service": "shopping-flow",
        "version": getattr(current_app, "version", "unknown"),
        "collaborators": {
            "llm": cfg.llm_enabled,
            "answer": cfg.answer_enabled,
            "retail": cfg.retail_enabled,
        },
        "fetchers_registered": verify_registry(),
    }), 200
