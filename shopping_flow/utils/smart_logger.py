# shopping_flow/utils/smart_logger.py
"""
Smart, modular logging for the shopping flow pipeline.
Provides clean, stage-scoped logs with configurable verbosity levels.
"""

import logging
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    MINIMAL = 1      # Only stage start/finish and fallbacks
    STANDARD = 2     # Key decisions (chosen warehouse, best match, ...)
    DETAILED = 3     # Include counts and timing
    DEBUG = 4        # Everything including upstream calls


class PipelineLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level
        self._stage_runs: Dict[str, str] = {}

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    def _clean_log(self, level: str, emoji: str, category: str, message: str, **kwargs):
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items() if v is not None])
        if details:
            full_message = f"{emoji} {category} | {message} | {details}"
        else:
            full_message = f"{emoji} {category} | {message}"
        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # STAGE EVENTS
    # ═══════════════════════════════════════════════════════════

    def stage_start(self, stage: str, summary: str = "", **details: Any):
        if not self._should_log(LogLevel.MINIMAL):
            return
        run_id = f"{stage[:8]}_{datetime.now().strftime('%H%M%S%f')[:-3]}"
        self._stage_runs[stage] = run_id
        self._clean_log("info", "🚀", "STAGE_START", f"{stage} {summary}".strip(), run=run_id, **details)

    def stage_decision(self, stage: str, decision: str, reason: Optional[str] = None, **details: Any):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🎯", "DECISION", decision,
                        run=self._stage_runs.get(stage, "unknown"), reason=reason, **details)

    def stage_complete(self, stage: str, elapsed_ms: Optional[int] = None, **details: Any):
        if not self._should_log(LogLevel.MINIMAL):
            return
        run_id = self._stage_runs.pop(stage, "unknown")
        self._clean_log("info", "✅", "STAGE_DONE", stage, run=run_id, elapsed_ms=elapsed_ms, **details)

    def fallback_used(self, stage: str, reason: str, **details: Any):
        """Fallbacks are always visible; they mean degraded quality."""
        self._clean_log("warning", "🔄", "FALLBACK", stage,
                        run=self._stage_runs.get(stage, "unknown"), reason=reason, **details)

    def upstream_call(self, service: str, operation: str, status: str = "started", **details: Any):
        if status == "failed":
            self._clean_log("warning", "❌", "UPSTREAM", f"{service}.{operation}", status=status, **details)
            return
        if not self._should_log(LogLevel.DEBUG):
            return
        emoji = "📡" if status == "started" else "✅"
        self._clean_log("debug", emoji, "UPSTREAM", f"{service}.{operation}", status=status, **details)

    def counts(self, stage: str, **counts: int):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("debug", "📊", "COUNTS", stage, run=self._stage_runs.get(stage, "unknown"), **counts)

    def error_occurred(self, stage: str, error_type: str, error_msg: Optional[str] = None):
        self._clean_log("error", "❌", "ERROR", f"{error_type} in {stage}",
                        run=self._stage_runs.get(stage, "unknown"), msg=error_msg)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, PipelineLogger] = {}


def resolve_log_level(raw: Optional[str] = None) -> LogLevel:
    name = (raw or os.getenv("PIPELINE_LOG_LEVEL", "STANDARD")).upper()
    return LogLevel[name] if name in LogLevel.__members__ else LogLevel.STANDARD


def get_pipeline_logger(module_name: str, level: LogLevel = None) -> PipelineLogger:
    """Get or create a pipeline logger for a module"""
    if module_name not in _loggers:
        _loggers[module_name] = PipelineLogger(module_name, level or resolve_log_level())
    if level:
        _loggers[module_name].set_level(level)
    return _loggers[module_name]


def configure_logging(level: LogLevel = LogLevel.STANDARD,
                      format_string: str = None,
                      silence_external: bool = True) -> List[str]:
    """Configure the entire logging system; returns the silenced logger names."""
    if not format_string:
        format_string = "%(asctime)s | %(message)s"

    logging.basicConfig(
        level=logging.DEBUG if level == LogLevel.DEBUG else logging.INFO,
        format=format_string,
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    silenced: List[str] = []
    if silence_external:
        for name in ("httpcore", "httpx", "anthropic", "werkzeug", "urllib3"):
            logging.getLogger(name).setLevel(logging.WARNING)
            silenced.append(name)

    for pipeline_logger in _loggers.values():
        pipeline_logger.set_level(level)
    return silenced
