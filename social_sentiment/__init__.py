from __future__ import annotations

from .aggregate import AggregateResult, Distribution, TimePoint, aggregate
from .classify import classify
from .config import config_sha256, load_config, parse_config, resolve_runtime_secrets
from .config_schema import AppConfig
from .errors import ConfigError, FetchError, ScoreError, ValidationError
from .keywords import KeywordCount, extract_top_keywords
from .post import Post, SentimentResult
from .workflow import AnalysisSession, AnalysisState, Phase

__all__ = [
    "AggregateResult",
    "AnalysisSession",
    "AnalysisState",
    "AppConfig",
    "ConfigError",
    "Distribution",
    "FetchError",
    "KeywordCount",
    "Phase",
    "Post",
    "ScoreError",
    "SentimentResult",
    "TimePoint",
    "ValidationError",
    "aggregate",
    "classify",
    "config_sha256",
    "extract_top_keywords",
    "load_config",
    "parse_config",
    "resolve_runtime_secrets",
]
