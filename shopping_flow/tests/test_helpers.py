# shopping_flow/tests/test_helpers.py
from __future__ import annotations

import logging
import random

import pytest

from shopping_flow.config import DevelopmentConfig, TestingConfig, get_config
from shopping_flow.utils.helpers import (
    extract_json_block,
    extract_price,
    letters_only,
    levenshtein_distance,
    random_token,
    similarity_ratio,
    unique,
)
from shopping_flow.utils.smart_logger import LogLevel, configure_logging, get_pipeline_logger, resolve_log_level


@pytest.mark.parametrize("a,b,dist", [("kitten", "sitting", 3), ("", "abc", 3), ("milk", "milk", 0)])
def test_levenshtein(a, b, dist):
    assert levenshtein_distance(a, b) == dist


def test_similarity_ratio_uses_longer_length():
    assert similarity_ratio("milk", "milks") == pytest.approx(0.8)
    assert similarity_ratio("", "") == 1.0


@pytest.mark.parametrize("raw,price", [("$1,299.00", 1299.0), (4.5, 4.5), ("n/a", 0.0), (None, 0.0)])
def test_extract_price(raw, price):
    assert extract_price(raw) == pytest.approx(price)


def test_letters_only():
    assert letters_only("Milk 2% (1 Gal)") == "milkgal"


def test_extract_json_block():
    assert extract_json_block('I pick {"index": 2} because of price') == {"index": 2}
    assert extract_json_block("index 2") == {}
    assert extract_json_block("{not json}") == {}


def test_random_token_is_seeded():
    assert random_token(random.Random(3)) == random_token(random.Random(3))
    assert len(random_token(random.Random(3))) == 9


def test_unique_preserves_order():
    assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_testing_config_selected_from_env():
    cfg = get_config()
    assert isinstance(cfg, TestingConfig)
    assert not cfg.llm_enabled and not cfg.retail_enabled and not cfg.answer_enabled


def test_development_config_defaults():
    cfg = DevelopmentConfig()
    assert cfg.MAX_CANDIDATES == 6
    assert cfg.RETAIL_TIMEOUT_SECONDS == 10


def test_resolve_log_level(monkeypatch):
    monkeypatch.setenv("PIPELINE_LOG_LEVEL", "debug")
    assert resolve_log_level() == LogLevel.DEBUG
    assert resolve_log_level("bogus") == LogLevel.STANDARD


def test_configure_logging_silences_external_libraries():
    silenced = configure_logging(LogLevel.STANDARD)
    assert "anthropic" in silenced
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_pipeline_logger_fallback_is_logged(caplog):
    plog = get_pipeline_logger("shopping_flow.tests.plog", LogLevel.MINIMAL)
    with caplog.at_level(logging.INFO, logger="shopping_flow.tests.plog"):
        plog.stage_start("search", query="milk")
        plog.stage_decision("search", "heuristic")
        plog.fallback_used("search", "no_results")
    messages = [r.getMessage() for r in caplog.records]
    assert any("STAGE_START" in m and "query=milk" in m for m in messages)
    assert not any("DECISION" in m for m in messages)
    assert any("no_results" in m for m in messages)
