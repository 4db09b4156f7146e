"""
Configuration for the shopping flow pipeline.
Every collaborator is optional: an empty key means "use the local fallback path".
"""
from __future__ import annotations

import logging
import os

log = logging.getLogger(__name__)


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    JSON_SORT_KEYS: bool = False
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "")

    # Text-completion service (best-match selection, query enhancement)
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "claude-3-5-sonnet-20241022")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "200"))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "15"))

    # Answer/suggestion service (OpenAI-compatible chat completions)
    ANSWER_API_KEY: str = os.getenv("PERPLEXITY_API_KEY") or os.getenv("ANSWER_API_KEY", "")
    ANSWER_API_URL: str = os.getenv("ANSWER_API_URL", "https://api.perplexity.ai/chat/completions")
    ANSWER_MODEL: str = os.getenv("ANSWER_MODEL", "sonar-pro")
    ANSWER_TIMEOUT_SECONDS: float = float(os.getenv("ANSWER_TIMEOUT_SECONDS", "10"))
    ANSWER_MAX_SUGGESTIONS: int = int(os.getenv("ANSWER_MAX_SUGGESTIONS", "5"))

    # Retail product-search service
    SERPAPI_KEY: str = os.getenv("SERPAPI_KEY", "")
    RETAIL_SEARCH_URL: str = os.getenv("RETAIL_SEARCH_URL", "https://serpapi.com/search")
    RETAIL_ENGINE: str = os.getenv("RETAIL_ENGINE", "walmart")
    RETAIL_TIMEOUT_SECONDS: float = float(os.getenv("RETAIL_TIMEOUT_SECONDS", "10"))
    RETAIL_RESULTS_PER_QUERY: int = int(os.getenv("RETAIL_RESULTS_PER_QUERY", "5"))
    RETAIL_RATE_LIMIT_DELAY: float = float(os.getenv("RETAIL_RATE_LIMIT_DELAY", "0.5"))
    RETAIL_MAX_SUGGESTION_QUERIES: int = int(os.getenv("RETAIL_MAX_SUGGESTION_QUERIES", "3"))

    # Pipeline
    MAX_CANDIDATES: int = int(os.getenv("MAX_CANDIDATES", "6"))
    REFINED_QUERY_TERMS: int = int(os.getenv("REFINED_QUERY_TERMS", "5"))
    USE_LLM_BEST_MATCH: bool = _flag("USE_LLM_BEST_MATCH", "true")
    USE_LLM_QUERY_ENHANCEMENT: bool = _flag("USE_LLM_QUERY_ENHANCEMENT", "false")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def llm_enabled(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)

    @property
    def answer_enabled(self) -> bool:
        return bool(self.ANSWER_API_KEY)

    @property
    def retail_enabled(self) -> bool:
        return bool(self.SERPAPI_KEY)


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False


class TestingConfig(BaseConfig):
    TESTING: bool = True
    # Tests never reach real collaborators unless they opt in explicitly
    ANTHROPIC_API_KEY: str = ""
    ANSWER_API_KEY: str = ""
    SERPAPI_KEY: str = ""
    RETAIL_RATE_LIMIT_DELAY: float = 0.0


def get_config() -> BaseConfig:
    """Get configuration instance directly - no complex manager."""
    env = os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development")).lower()
    mapping = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = mapping.get(env, DevelopmentConfig)
    cfg = config_class()

    if not hasattr(get_config, "_logged_startup"):
        log.info(f"⚙️ CONFIG_STARTUP | env={env} | config_class={config_class.__name__}")
        log.info(
            f"🤖 LLM_CONFIG | enabled={cfg.llm_enabled} | model={cfg.LLM_MODEL} | "
            f"timeout={cfg.LLM_TIMEOUT_SECONDS}s"
        )
        log.info(f"💡 ANSWER_CONFIG | enabled={cfg.answer_enabled} | model={cfg.ANSWER_MODEL}")
        log.info(
            f"🛒 RETAIL_CONFIG | enabled={cfg.retail_enabled} | engine={cfg.RETAIL_ENGINE} | "
            f"timeout={cfg.RETAIL_TIMEOUT_SECONDS}s | delay={cfg.RETAIL_RATE_LIMIT_DELAY}s"
        )
        get_config._logged_startup = True

    return cfg
