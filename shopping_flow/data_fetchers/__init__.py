# shopping_flow/data_fetchers/__init__.py
"""
Collaborator registry.
Every external or catalog-backed source the pipeline reads from is looked
up here by `CollaboratorFunction`, so tests can swap a single source.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from ..enums import CollaboratorFunction

log = logging.getLogger(__name__)

# Registry for all collaborators
_REGISTRY: Dict[CollaboratorFunction, Callable[..., Any]] = {}


def register_fetcher(
    function: CollaboratorFunction,
    handler: Callable[..., Any],
) -> None:
    """Register a fetcher function with its handler"""
    _REGISTRY[function] = handler


def get_fetcher(function: CollaboratorFunction) -> Callable[..., Any]:
    """Get the handler for a specific function"""
    if function not in _REGISTRY:
        raise ValueError(f"No fetcher registered for {function}")
    return _REGISTRY[function]


# Import the implementations (this registers the handlers)
from . import answer_service, promotions, retail_search, warehouses  # noqa: E402, F401


def verify_registry() -> bool:
    """Ensure all collaborator functions have handlers"""
    missing = [func for func in CollaboratorFunction if func not in _REGISTRY]
    if missing:
        log.warning(f"⚠️ FETCHER_REGISTRY | missing={[m.value for m in missing]}")
        return False
    log.debug(f"✅ FETCHER_REGISTRY | registered={len(CollaboratorFunction)}")
    return True


# Run verification on import
verify_registry()

__all__ = ["register_fetcher", "get_fetcher", "verify_registry"]
