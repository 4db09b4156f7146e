#!/usr/bin/env python3
"""
Shopping Flow server.

    python run.py            # local dev server, refuses to boot a keyless production env
    gunicorn run:app         # WSGI import

Logging handlers are installed once per process whichever way the module is loaded.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, NamedTuple

from dotenv import load_dotenv
from flask import g, request

load_dotenv()

from shopping_flow import create_app
from shopping_flow.config import BaseConfig, get_config
from shopping_flow.logging_setup import setup_logging
from shopping_flow.utils.smart_logger import LogLevel, configure_logging, resolve_log_level

log = logging.getLogger("shopping_flow.server")

_logging_ready = False


def init_logging() -> LogLevel:
    global _logging_ready

    level = resolve_log_level()
    if _logging_ready:
        return level

    setup_logging()
    configure_logging(
        level=level,
        format_string="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        silence_external=True,
    )
    _logging_ready = True
    return level


# ────────────────────────────────────────────────────────
# Collaborator check
# ────────────────────────────────────────────────────────

def collaborator_report(cfg: BaseConfig) -> Dict[str, bool]:
    """Which upstream stages run live; the rest fall back locally."""
    return {
        "best_match": cfg.llm_enabled,
        "suggestions": cfg.answer_enabled,
        "retail_search": cfg.retail_enabled,
    }


def check_collaborators(cfg: BaseConfig, strict: bool) -> Dict[str, bool]:
    report = collaborator_report(cfg)
    offline = [stage for stage, live in report.items() if not live]
    for stage in offline:
        log.warning(f"⚠️ COLLABORATOR_OFFLINE | stage={stage} | mode=fallback")

    if strict and offline and len(offline) == len(report) and not getattr(cfg, "DEBUG", False):
        raise SystemExit("No upstream keys configured for a non-debug environment")
    return report


# ────────────────────────────────────────────────────────
# App
# ────────────────────────────────────────────────────────

def create_application(strict_env: bool = False):
    init_logging()
    cfg = get_config()
    check_collaborators(cfg, strict=strict_env)

    app = create_app(cfg)
    app.logger.handlers.clear()
    app.logger.propagate = True

    @app.before_request
    def _start_timer():
        g.started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        elapsed_ms = (time.perf_counter() - g.get("started", time.perf_counter())) * 1000
        log.info(
            f"📨 REQUEST | {request.method} {request.path} | "
            f"status={response.status_code} | ms={elapsed_ms:.1f}"
        )
        return response

    return app


# ────────────────────────────────────────────────────────
# Dev server
# ────────────────────────────────────────────────────────

class ServerSettings(NamedTuple):
    host: str
    port: int
    debug: bool


def server_settings(cfg: BaseConfig) -> ServerSettings:
    debug = bool(getattr(cfg, "DEBUG", False))
    override = os.getenv("FLASK_DEBUG", "").lower()
    if override:
        debug = override in ("1", "true", "yes", "on")
    return ServerSettings(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8080")),
        debug=debug,
    )


def main() -> None:
    level = init_logging()
    application = create_application(strict_env=True)
    cfg = application.extensions["cfg"]
    settings = server_settings(cfg)

    live = collaborator_report(cfg)
    print(f"Shopping Flow {application.version} ({type(cfg).__name__})")
    print(f"  listening   http://{settings.host}:{settings.port}/rs")
    print(f"  debug       {settings.debug}")
    print(f"  log level   {level.name}")
    print("  upstreams   " + ", ".join(f"{k}={'live' if v else 'fallback'}" for k, v in live.items()))

    try:
        application.run(
            host=settings.host,
            port=settings.port,
            debug=settings.debug,
            use_reloader=False,
            threaded=True,
        )
    except KeyboardInterrupt:
        print("\nstopped")


app = create_application(strict_env=False)

if __name__ == "__main__":
    main()
