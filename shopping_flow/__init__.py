"""
Shopping Flow
=============

Thin HTTP layer over the decision pipeline:
- intent_resolver.py (free text → Intent)
- product_search.py (Intent → ranked SearchResult)
- delivery_optimizer.py (products + address → DeliveryPlan)
- cart_optimizer.py (cart lines → CartOptimization)

Everything is served under /rs.
"""

from __future__ import annotations

import logging
from typing import List

from flask import Flask, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import BaseConfig, get_config
from .utils.helpers import iso_now

log = logging.getLogger(__name__)

__version__ = "0.1.0"

API_PREFIX = "/rs"


def _allowed_origins(cfg: BaseConfig) -> List[str]:
    origins = [o.strip() for o in cfg.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
    return origins or ["*"]


def _error_payload(message: str, **extra) -> dict:
    return {"error": message, "timestamp": iso_now(), **extra}


def create_app(cfg: BaseConfig = None) -> Flask:
    """
    Build the Flask app. `cfg` defaults to the class APP_ENV selects;
    tests pass TestingConfig() so no collaborator is ever reached.
    """
    cfg = cfg or get_config()

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=cfg.SECRET_KEY,
        TESTING=bool(getattr(cfg, "TESTING", False)),
    )
    app.json.sort_keys = cfg.JSON_SORT_KEYS
    app.extensions["cfg"] = cfg

    CORS(
        app,
        resources={rf"{API_PREFIX}/*": {
            "origins": _allowed_origins(cfg),
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # Blueprints
    # ────────────────────────────────────────────────────────
    from .routes import register_routes

    blueprints = register_routes(app, url_prefix=API_PREFIX)
    log.info(f"🧭 ROUTES_READY | prefix={API_PREFIX} | blueprints={','.join(blueprints)}")

    # ────────────────────────────────────────────────────────
    # JSON errors
    # ────────────────────────────────────────────────────────
    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        if error.code == 404:
            return _error_payload("Endpoint not found", path=request.path), 404
        return _error_payload(error.description or error.name), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        log.error(f"💥 UNHANDLED | path={request.path} | error={error}", exc_info=True)
        return _error_payload(
            "Internal server error",
            details=str(error) if app.debug else "Contact support",
        ), 500

    app.version = __version__
    log.info(
        f"✅ APP_READY | version={__version__} | config={type(cfg).__name__} | "
        f"llm={cfg.llm_enabled} | answer={cfg.answer_enabled} | retail={cfg.retail_enabled}"
    )
    return app
