"""
Utility helpers
"""

from __future__ import annotations

import json
import re
import string
from datetime import datetime
from typing import Any, Dict, List, Optional

_JSON_BLOCK = re.compile(r"\{.*\}", re.S)
_PRICE_CHARS = re.compile(r"[^0-9.]")
_FIRST_INT = re.compile(r"-?\d+")
_NON_LETTERS = re.compile(r"[^a-z]")
_ALNUM = string.ascii_uppercase + string.digits


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert/delete/substitute all cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def similarity_ratio(a: str, b: str) -> float:
    """(len(longer) - distance) / len(longer); two empty strings are identical."""
    longer = a if len(a) > len(b) else b
    if not longer:
        return 1.0
    return (len(longer) - levenshtein_distance(a, b)) / len(longer)


def normalize_name(name: str) -> str:
    return (name or "").strip().lower()


def letters_only(name: str) -> str:
    return _NON_LETTERS.sub("", (name or "").lower())


def extract_price(value: Any) -> float:
    """'$1,299.00' → 1299.0; anything unparseable → 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = _PRICE_CHARS.sub("", value)
        try:
            return float(cleaned)
        except ValueError:
            return 0.0
    return 0.0


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def first_int(text: str) -> Optional[int]:
    m = _FIRST_INT.search(text or "")
    return int(m.group()) if m else None


def extract_json_block(text: str) -> Dict[str, Any]:
    m = _JSON_BLOCK.search(text)
    if not m:
        return {}
    try:
        return json.loads(m.group())
    except json.JSONDecodeError:
        return {}


def random_token(rng, length: int = 9) -> str:
    return "".join(rng.choice(_ALNUM) for _ in range(length))


def iso_now() -> str:
    return datetime.now().isoformat()


def unique(seq: List[Any]) -> List[Any]:
    seen: set[Any] = set()
    out: List[Any] = []
    for x in seq:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out
