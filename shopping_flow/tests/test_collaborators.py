# shopping_flow/tests/test_collaborators.py
from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests

from shopping_flow.candidate_search import search_candidates
from shopping_flow.config import TestingConfig
from shopping_flow.data_fetchers import get_fetcher
from shopping_flow.data_fetchers.answer_service import AnswerServiceClient, get_answer_client, parse_suggestions
from shopping_flow.data_fetchers.retail_search import RetailSearchFetcher, get_retail_fetcher
from shopping_flow.enums import CollaboratorFunction
from shopping_flow.llm_service import LLMService, get_llm_service


class FakeResponse:
    def __init__(self, data=None, status: int = 200):
        self.data = data
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f"{self.status} error")

    def json(self):
        if isinstance(self.data, Exception):
            raise self.data
        return self.data


# ─────────────────────────────────────────────────────────────
# Retail search
# ─────────────────────────────────────────────────────────────
def test_retail_search_disabled_without_key():
    fetcher = RetailSearchFetcher(api_key="")
    out = fetcher.search("milk")
    assert out["results"] == []
    assert out["meta"]["error"] == "not_configured"


def test_retail_search_passes_timeout_and_query(monkeypatch):
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(params=params, timeout=timeout)
        return FakeResponse({"organic_results": [{"title": "Milk"}]})

    monkeypatch.setattr(requests, "get", fake_get)
    out = RetailSearchFetcher(api_key="k", timeout=10).search("milk")
    assert out["meta"]["query_successful"] is True
    assert out["results"] == [{"title": "Milk"}]
    assert seen["timeout"] == 10
    assert seen["params"]["query"] == "milk"


@pytest.mark.parametrize(
    "behaviour,error",
    [
        (requests.exceptions.Timeout(), "timeout"),
        (FakeResponse(ValueError("not json")), "malformed_response"),
        (FakeResponse({"organic_results": "oops"}), "malformed_response"),
    ],
)
def test_retail_search_failures_degrade_to_empty(monkeypatch, behaviour, error):
    def fake_get(*args, **kwargs):
        if isinstance(behaviour, Exception):
            raise behaviour
        return behaviour

    monkeypatch.setattr(requests, "get", fake_get)
    out = RetailSearchFetcher(api_key="k").search("milk")
    assert out["results"] == []
    assert out["meta"]["error"] == error


# ─────────────────────────────────────────────────────────────
# Answer service
# ─────────────────────────────────────────────────────────────
def test_parse_suggestions_limits_and_trims():
    assert parse_suggestions(" oat milk, almond milk ,, soy milk", 2) == ["oat milk", "almond milk"]


def test_answer_client_reads_completion(monkeypatch, intent_factory):
    def fake_post(url, json=None, headers=None, timeout=None):
        assert headers["Authorization"] == "Bearer k"
        return FakeResponse({"choices": [{"message": {"content": "Fairlife Milk, Horizon Milk"}}]})

    monkeypatch.setattr(requests, "post", fake_post)
    client = AnswerServiceClient(api_key="k", url="https://answers.test/chat", max_suggestions=5)
    assert client.suggest("milk", intent_factory("milk")) == ["Fairlife Milk", "Horizon Milk"]


def test_answer_client_failure_is_empty(monkeypatch, intent_factory):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(requests, "post", fake_post)
    client = AnswerServiceClient(api_key="k", url="https://answers.test/chat")
    assert client.suggest("milk", intent_factory("milk")) == []


def test_answer_client_disabled(intent_factory):
    assert AnswerServiceClient(api_key="").suggest("milk", intent_factory("milk")) == []


# ─────────────────────────────────────────────────────────────
# Text-completion service
# ─────────────────────────────────────────────────────────────
class FakeMessages:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(content=self.content)


def llm_with(content) -> LLMService:
    service = LLMService(api_key="test-key", model="test-model", timeout=1)
    service.anthropic = SimpleNamespace(messages=FakeMessages(content))
    return service


async def test_best_match_reads_tool_call(product_factory, intent_factory):
    service = llm_with([SimpleNamespace(type="tool_use", name="select_best_match", input={"index": 1})])
    products = [product_factory("A"), product_factory("B")]
    assert await service.select_best_match_index(products, intent_factory("milk")) == 1
    sent = service.anthropic.messages.kwargs
    assert sent["tool_choice"] == {"type": "tool", "name": "select_best_match"}


async def test_best_match_parses_plain_text(product_factory, intent_factory):
    service = llm_with([SimpleNamespace(type="text", text="The best is 0 because it is cheapest")])
    assert await service.select_best_match_index([product_factory("A")], intent_factory("milk")) == 0


@pytest.mark.parametrize(
    "content",
    [
        [SimpleNamespace(type="text", text="no idea")],
        [SimpleNamespace(type="tool_use", name="select_best_match", input={"index": 7})],
    ],
)
async def test_best_match_rejects_unusable_answers(product_factory, intent_factory, content):
    with pytest.raises(ValueError):
        await llm_with(content).select_best_match_index([product_factory("A")], intent_factory("milk"))


async def test_enhance_query_falls_back_to_input(intent_factory):
    service = llm_with([SimpleNamespace(type="text", text="   ")])
    assert await service.enhance_query("milk gallon", intent_factory("milk")) == "milk gallon"


def test_llm_disabled_in_testing():
    assert get_llm_service() is None
    with pytest.raises(RuntimeError):
        LLMService(api_key="")


def test_every_collaborator_registered():
    for function in CollaboratorFunction:
        assert callable(get_fetcher(function))


# ─────────────────────────────────────────────────────────────
# Explicit configuration
# ─────────────────────────────────────────────────────────────
def keyed_config() -> TestingConfig:
    cfg = TestingConfig()
    cfg.SERPAPI_KEY = "explicit-key"
    cfg.RETAIL_TIMEOUT_SECONDS = 2.0
    cfg.ANSWER_API_KEY = "answer-key"
    cfg.ANSWER_TIMEOUT_SECONDS = 3.0
    cfg.ANTHROPIC_API_KEY = "llm-key"
    cfg.LLM_MODEL = "explicit-model"
    return cfg


def test_clients_are_built_from_callers_config():
    cfg = keyed_config()

    retail = get_retail_fetcher(cfg)
    assert (retail.api_key, retail.timeout) == ("explicit-key", 2.0)
    assert get_retail_fetcher(cfg) is retail
    assert get_retail_fetcher().api_key == ""

    answer = get_answer_client(cfg)
    assert (answer.api_key, answer.timeout) == ("answer-key", 3.0)

    llm = get_llm_service(cfg)
    assert llm is not None
    assert llm.model == "explicit-model"


async def test_candidate_search_reaches_retail_with_callers_settings(monkeypatch, intent_factory):
    cfg = keyed_config()
    cfg.ANSWER_API_KEY = ""
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(api_key=params["api_key"], timeout=timeout)
        return FakeResponse({"organic_results": [{"title": "Horizon Organic Whole Milk"}]})

    monkeypatch.setattr(requests, "get", fake_get)
    batch = await search_candidates("milk", intent_factory("milk", "milk"), cfg=cfg)

    assert seen == {"api_key": "explicit-key", "timeout": 2.0}
    assert not batch.used_fallback
    assert batch.products[0].name == "Horizon Organic Whole Milk"
