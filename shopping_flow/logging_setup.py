import logging
import os
import sys


def setup_logging():
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root.addHandler(sh)

    logging.captureWarnings(True)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    for name in (
        "shopping_flow",                      # whole package
        "shopping_flow.candidate_search",     # upstream fan-out and fallbacks
        "shopping_flow.routes",               # request handling
        "gunicorn.error",
        "gunicorn.access",
    ):
        logging.getLogger(name).setLevel(level)
    return level
