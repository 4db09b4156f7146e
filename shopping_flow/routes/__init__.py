# shopping_flow/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `shopping_flow/routes/<name>.py`
with the variable name **bp** and it will be discovered &
registered when `register_routes(app)` is called.

The app factory stores the active config in `app.extensions["cfg"]`
so route modules can read it via `current_app`.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Flask, jsonify, request

log = logging.getLogger(__name__)


def register_routes(app: Flask, url_prefix: str = "/rs") -> List[str]:
    registered = []
    for _, name, _ in pkgutil.iter_modules(__path__):
        try:
            module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        except Exception as exc:
            log.error(f"REGISTER_ROUTES_ERROR | module={name} | error={exc}", exc_info=True)
            raise RuntimeError(f"Failed to register routes from {name}: {exc}") from exc
        bp: Optional[Blueprint] = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp, url_prefix=url_prefix)
            registered.append(bp.name)
    return registered


# ─────────────────────────────────────────────────────────────
# Shared request/response helpers
# ─────────────────────────────────────────────────────────────
def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def bad_request(message: str) -> Tuple[Any, int]:
    log.warning(f"⚠️ BAD_REQUEST | path={request.path} | error={message}")
    return jsonify({"error": message}), 400
