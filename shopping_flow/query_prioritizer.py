"""
Query Prioritizer
─────────────────
Weights the words of a shopping request so the most specific terms
(dietary needs, product nouns, brands) lead the refined search string.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import List

from .enums import TermCategory
from .intent_config import (
    EMPTY_QUERY_EXPANSION,
    HEALTH_TERM_VARIATIONS,
    QUERY_FILLERS,
    QUERY_REWRITES,
    TERM_LEXICONS,
    collapse_whitespace,
)
from .scoring_config import (
    DIGIT_BONUS,
    FUZZY_HEALTH_THRESHOLD,
    LENGTH_BONUSES,
    REFINED_QUERY_LIMIT,
    TERM_WEIGHTS,
)
from .utils.helpers import similarity_ratio

log = logging.getLogger(__name__)

_EDGE_PUNCTUATION = string.punctuation + "“”‘’"


@dataclass
class TermScore:
    term: str
    category: TermCategory
    score: float
    position: int


def tokenize(query: str) -> List[str]:
    """Lower-case, whitespace split, edge punctuation stripped, first occurrence kept."""
    seen = set()
    tokens: List[str] = []
    for raw in (query or "").lower().split():
        token = raw.strip(_EDGE_PUNCTUATION)
        if not token or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens


def is_similar_to_health_term(word: str) -> bool:
    return any(
        similarity_ratio(word, variation) > FUZZY_HEALTH_THRESHOLD
        for variations in HEALTH_TERM_VARIATIONS.values()
        for variation in variations
    )


def categorize(term: str) -> TermCategory:
    for category, lexicon in TERM_LEXICONS:
        if term in lexicon:
            return category
        # misspelled health terms still count as dietary
        if category == TermCategory.DIETARY and is_similar_to_health_term(term):
            return category
    return TermCategory.GENERIC


def score_term(term: str, category: TermCategory) -> float:
    score = TERM_WEIGHTS[category]
    for min_len, bonus in LENGTH_BONUSES:
        if len(term) > min_len:
            score += bonus
    if any(ch.isdigit() for ch in term):
        score += DIGIT_BONUS
    return score


def score_terms(query: str) -> List[TermScore]:
    scored = []
    for position, term in enumerate(tokenize(query)):
        category = categorize(term)
        scored.append(TermScore(term, category, score_term(term, category), position))
    # sorted() is stable, ties keep their original order
    return sorted(scored, key=lambda t: -t.score)


def prioritize_terms(query: str) -> List[str]:
    """Distinct terms of `query`, highest priority first."""
    return [t.term for t in score_terms(query)]


def refine_query(query: str, limit: int = REFINED_QUERY_LIMIT) -> str:
    """Top `limit` prioritized terms joined by spaces; cleaned query when nothing survives."""
    terms = prioritize_terms(query)
    refined = " ".join(terms[:limit])
    if not refined:
        refined = clean_search_query(query)
    log.info(f"🔤 QUERY_REFINED | query='{(query or '')[:60]}' | refined='{refined}' | terms={len(terms)}")
    return refined


def clean_search_query(query: str) -> str:
    """Strip filler phrases and articles, then map known staples and meals onto neutral search phrases."""
    cleaned = (query or "").lower()
    for pattern, replacement in QUERY_FILLERS:
        cleaned = pattern.sub(replacement, cleaned)
    cleaned = collapse_whitespace(cleaned)

    if not cleaned:
        return EMPTY_QUERY_EXPANSION

    for word, rewrite in QUERY_REWRITES:
        if word in cleaned:
            return rewrite
    return cleaned
